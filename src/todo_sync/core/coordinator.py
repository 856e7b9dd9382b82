# src/todo_sync/core/coordinator.py

from __future__ import annotations

"""
Task state coordinator.

Owns the in-memory view of the todo collection that the presentation layer
renders, and keeps it in sync with the remote store:
- refresh replaces the whole collection,
- create/update always refetch afterwards (the store assigns ids),
- delete filters the id out locally when the store confirms it.

The `loading` flag is informational (an in-flight counter), not a lock:
overlapping operations all run. Overlapping refreshes are reconciled by
RefreshOrdering.
"""

import contextlib
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from ..todos.errors import ContractViolation, TodoStoreError
from ..todos.todo_models import DeleteAllReport, Task, TaskRef, WriteResult, resolve_task_id
from .ports import SnapshotListener, TodoRepo
from .state import RefreshOrdering, TodoSnapshot

logger = logging.getLogger(__name__)

FETCH_ERROR = "Failed to fetch todos."
CREATE_ERROR = "Failed to create todo."
UPDATE_ERROR = "Failed to update todo."
DELETE_ERROR = "Failed to delete todo."


class TodoCoordinator:
    def __init__(
        self,
        repo: TodoRepo,
        *,
        refresh_ordering: RefreshOrdering | str = RefreshOrdering.ISSUANCE,
        surface_write_errors: bool = False,
    ) -> None:
        self._repo = repo
        self._ordering = RefreshOrdering(refresh_ordering)
        # Off by default: create/update/delete failures stay out of the error slot.
        self._surface_write_errors = surface_write_errors

        self._todos: tuple[Task, ...] = ()
        self._error: str | None = None
        self._in_flight = 0

        # Refresh generations: last issued / newest applied.
        self._issued = 0
        self._applied = 0

        self._listeners: list[SnapshotListener] = []
        self._closed = False

    # ---- observation ----

    @property
    def snapshot(self) -> TodoSnapshot:
        return TodoSnapshot(todos=self._todos, loading=self._in_flight > 0, error=self._error)

    @property
    def todos(self) -> tuple[Task, ...]:
        return self._todos

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def refresh_ordering(self) -> RefreshOrdering:
        return self._ordering

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a listener for new snapshots. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe

    # ---- lifecycle ----

    async def start(self) -> TodoCoordinator:
        """Initial load. Failures end up in `error`, not as exceptions."""
        await self.refresh_todos()
        return self

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._listeners.clear()

        aclose = getattr(self._repo, "aclose", None)
        if aclose is not None:
            await aclose()
        logger.info("TodoCoordinator closed.")

    async def __aenter__(self) -> TodoCoordinator:
        return await self.start()

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ---- operations ----

    async def refresh_todos(self) -> None:
        self._ensure_open()
        with self._busy():
            await self._fetch()

    async def create_todo(self, fields: Mapping[str, Any]) -> WriteResult:
        self._ensure_open()
        with self._busy():
            result = await self._repo.create(fields)
            # Refetch even on failure; the result is only used for reporting.
            await self._fetch()
            if not result:
                self._write_failed(CREATE_ERROR, "create", result)
        return result

    async def update_todo(self, task: Task | Mapping[str, Any]) -> WriteResult:
        self._ensure_open()
        with self._busy():
            try:
                result = await self._repo.update(task)
            except ContractViolation as err:
                logger.exception("Update todo failed")
                self._error = UPDATE_ERROR
                return WriteResult.contract_violation(str(err))

            await self._fetch()
            if not result:
                self._write_failed(UPDATE_ERROR, "update", result)
        return result

    async def delete_todo(self, ref: TaskRef) -> WriteResult:
        self._ensure_open()
        with self._busy():
            try:
                task_id = resolve_task_id(ref)
                result = await self._repo.delete(task_id)
            except ContractViolation as err:
                logger.exception("Delete todo failed")
                return WriteResult.contract_violation(str(err))

            if result:
                self._todos = tuple(t for t in self._todos if t.id != task_id)
            else:
                self._write_failed(DELETE_ERROR, "delete", result)
        return result

    async def delete_all_todos(self) -> DeleteAllReport:
        self._ensure_open()
        with self._busy():
            report = await self._repo.delete_all()
            await self._fetch()
            if not report.all_deleted and self._surface_write_errors:
                self._error = DELETE_ERROR
        if report.failed:
            logger.warning("delete_all left %d item(s) behind", len(report.failed))
        return report

    # ---- internals ----

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("TodoCoordinator is closed")

    @contextlib.contextmanager
    def _busy(self) -> Iterator[None]:
        self._in_flight += 1
        self._notify()
        try:
            yield
        finally:
            self._in_flight -= 1
            self._notify()

    async def _fetch(self) -> None:
        self._issued += 1
        generation = self._issued

        try:
            todos = await self._repo.list()
        except TodoStoreError:
            logger.exception("Fetch todos failed (generation=%d)", generation)
            if self._accept(generation):
                # Keep the previous collection; only the error changes.
                self._error = FETCH_ERROR
            return

        if not self._accept(generation):
            logger.debug(
                "Discarding stale refresh result (generation=%d, applied=%d)", generation, self._applied
            )
            return

        self._todos = _unique_by_id(todos)
        self._error = None

    def _accept(self, generation: int) -> bool:
        if self._ordering is RefreshOrdering.ISSUANCE and generation < self._applied:
            return False
        self._applied = max(self._applied, generation)
        return True

    def _write_failed(self, message: str, op: str, result: WriteResult) -> None:
        logger.warning(
            "%s todo failed kind=%s status=%s reason=%s",
            op,
            result.failure,
            result.status_code,
            result.reason,
        )
        if self._surface_write_errors:
            self._error = message

    def _notify(self) -> None:
        snap = self.snapshot
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("Snapshot listener failed")


def _unique_by_id(todos: Iterable[Task]) -> tuple[Task, ...]:
    seen: set[str] = set()
    out: list[Task] = []
    for task in todos:
        if not task.id:
            logger.warning("Dropping todo without id: %r", task)
            continue
        if task.id in seen:
            logger.warning("Dropping duplicate todo id=%s", task.id)
            continue
        seen.add(task.id)
        out.append(task)
    return tuple(out)
