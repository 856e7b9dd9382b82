# todos/todo_models.py

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any

from .errors import ContractViolation


@dataclass(slots=True, frozen=True)
class Task:
    """
    One to-do record as returned by the remote store.

    Only `id` and `name` are known; everything else the store returns is kept
    verbatim in `fields` and sent back on update.
    """

    id: str
    name: str = ""
    fields: dict[str, Any] = field(default_factory=dict)

    # `fields` is a dict, so records compare by value but are not hashable.
    __hash__ = None  # type: ignore[assignment]

    @classmethod
    def from_entry(cls, entry: Mapping[str, Any]) -> Task:
        """Build a Task from a wire entry: {"entry_id": ..., "data": {...}}."""
        data = entry.get("data")
        payload = dict(data) if isinstance(data, Mapping) else {}
        # entry_id is server-assigned and wins over any "id" stored in the payload.
        payload.pop("id", None)
        entry_id = entry.get("entry_id")
        return cls(
            id="" if entry_id is None else str(entry_id),
            name=_as_name(payload.pop("name", "")),
            fields=payload,
        )

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> Task:
        payload = dict(raw)
        raw_id = payload.pop("id", None)
        return cls(
            id="" if raw_id is None else str(raw_id),
            name=_as_name(payload.pop("name", "")),
            fields=payload,
        )

    def to_payload(self) -> dict[str, Any]:
        """Fields as stored remotely (everything except `id`). An empty name is left out."""
        if not self.name:
            return dict(self.fields)
        return {"name": self.name, **self.fields}

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, **self.to_payload()}

    def with_name(self, name: str) -> Task:
        return replace(self, name=name, fields=dict(self.fields))


def _as_name(raw: Any) -> str:
    if raw is None:
        return ""
    return raw if isinstance(raw, str) else str(raw)


TaskRef = str | Task | Mapping[str, Any]


def resolve_task_id(ref: TaskRef) -> str:
    """Accept a bare id, a Task or a mapping with "id"; raise ContractViolation otherwise."""
    if isinstance(ref, str):
        task_id = ref
    elif isinstance(ref, Task):
        task_id = ref.id
    elif isinstance(ref, Mapping):
        raw = ref.get("id")
        task_id = "" if raw is None else str(raw)
    else:
        task_id = ""

    if not task_id:
        raise ContractViolation("todo.id is required")
    return task_id


class FailureKind(StrEnum):
    TRANSPORT = "transport"  # no response from the store
    STORE = "store"  # non-200 response
    CONTRACT = "contract"  # rejected locally, no request was sent


@dataclass(slots=True, frozen=True)
class WriteResult:
    """
    Outcome of a write (create/update/delete).

    Truthiness is `ok`, so `if await store.create(...)` keeps working for
    callers that only care about success.
    """

    ok: bool
    failure: FailureKind | None = None
    reason: str | None = None
    status_code: int | None = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, status_code: int = 200) -> WriteResult:
        return cls(ok=True, status_code=status_code)

    @classmethod
    def transport_failure(cls, reason: str) -> WriteResult:
        return cls(ok=False, failure=FailureKind.TRANSPORT, reason=reason)

    @classmethod
    def store_failure(cls, status_code: int, body: str) -> WriteResult:
        return cls(
            ok=False,
            failure=FailureKind.STORE,
            reason=body or f"HTTP {status_code}",
            status_code=status_code,
        )

    @classmethod
    def contract_violation(cls, reason: str) -> WriteResult:
        return cls(ok=False, failure=FailureKind.CONTRACT, reason=reason)


@dataclass(slots=True, frozen=True)
class DeleteOutcome:
    task_id: str
    result: WriteResult


@dataclass(slots=True, frozen=True)
class DeleteAllReport:
    """
    Result of deleting the whole collection.

    `ok` only reflects whether the listing succeeded; individual delete
    failures are reported in `outcomes` and do not flip it. Use
    `all_deleted` for the strict aggregate.
    """

    listed: bool
    outcomes: tuple[DeleteOutcome, ...] = ()

    @property
    def ok(self) -> bool:
        return self.listed

    @property
    def all_deleted(self) -> bool:
        return self.listed and all(o.result.ok for o in self.outcomes)

    @property
    def failed(self) -> tuple[DeleteOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.result.ok)

    def __bool__(self) -> bool:
        return self.ok
