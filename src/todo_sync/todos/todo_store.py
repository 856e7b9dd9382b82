# src/todo_sync/todos/todo_store.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from .errors import ContractViolation, StoreError, TodoStoreError, TransportError
from .todo_models import DeleteAllReport, DeleteOutcome, Task, TaskRef, WriteResult, resolve_task_id

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "todos"
DEFAULT_TIMEOUT_SECONDS = 5.0

_JSON_HEADERS = {"Content-Type": "application/json; charset=UTF-8"}


class RemoteTodoStore:
    """
    CRUD client for one table of the generic-table REST backend.

    Wire layout (all paths are relative to base_url):
    - GET    /{key}/data/{table}/all?format=json
    - POST   /{key}/data/store                 {"table_name": table, "data": {...}}
    - PUT    /{key}/data/{table}/update/{id}   {"data": {...}}
    - DELETE /{key}/data/{table}/delete/{id}

    Any status other than 200 is a failure.

    Error policy:
    - list() raises TransportError / StoreError
    - writes never raise for remote failures; they return a WriteResult
    - update()/delete() raise ContractViolation when no id is given, before any request
    """

    def __init__(
        self,
        base_url: str,
        contract_key: str,
        *,
        table: str = DEFAULT_TABLE,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        base = (base_url or "").strip().rstrip("/")
        key = (contract_key or "").strip()
        if not base:
            raise ValueError("base_url is required")
        if not key:
            raise ValueError("contract_key is required")
        if not table:
            raise ValueError("table is required")

        self._key = key
        self._table = table
        self._client = httpx.AsyncClient(base_url=base, timeout=timeout, transport=transport)
        logger.info("RemoteTodoStore ready base=%s table=%s", base, table)

    @property
    def table(self) -> str:
        return self._table

    @property
    def base_url(self) -> str:
        return str(self._client.base_url)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RemoteTodoStore:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ---- paths ----

    def _table_path(self, *parts: str) -> str:
        tail = "/".join(quote(p, safe="") for p in parts)
        return f"/{self._key}/data/{quote(self._table, safe='')}/{tail}"

    def _store_path(self) -> str:
        return f"/{self._key}/data/store"

    # ---- operations ----

    async def list(self) -> list[Task]:
        try:
            resp = await self._client.get(self._table_path("all"), params={"format": "json"})
        except httpx.RequestError as err:
            logger.error("list error table=%s: %r", self._table, err)
            raise TransportError(str(err) or err.__class__.__name__) from err

        if resp.status_code != 200:
            logger.warning("list failed table=%s status=%s body=%s", self._table, resp.status_code, resp.text)
            raise StoreError(resp.status_code, resp.text)

        try:
            decoded = resp.json()
        except ValueError as err:
            logger.warning("list returned a non-JSON body table=%s", self._table)
            raise StoreError(resp.status_code, resp.text) from err

        raw = decoded.get("data") if isinstance(decoded, dict) else None
        if raw is None:
            raw = []
        if not isinstance(raw, list):
            raise StoreError(resp.status_code, f"unexpected 'data' payload: {type(raw).__name__}")

        todos: list[Task] = []
        for entry in raw:
            if not isinstance(entry, Mapping):
                logger.warning("Skipping malformed entry table=%s entry=%r", self._table, entry)
                continue
            todos.append(Task.from_entry(entry))

        logger.info("list ok table=%s count=%d", self._table, len(todos))
        return todos

    async def create(self, fields: Mapping[str, Any]) -> WriteResult:
        # The store assigns ids; never send one on create.
        data = {k: v for k, v in fields.items() if k != "id"}
        body = {"table_name": self._table, "data": data}
        return await self._write("create", "POST", self._store_path(), body)

    async def update(self, task: Task | Mapping[str, Any]) -> WriteResult:
        if isinstance(task, str):
            raise ContractViolation("update needs a record with fields, not a bare id")
        task_id = resolve_task_id(task)
        if isinstance(task, Task):
            data = task.to_payload()
        else:
            data = {k: v for k, v in task.items() if k != "id"}

        return await self._write("update", "PUT", self._table_path("update", task_id), {"data": data})

    async def delete(self, ref: TaskRef) -> WriteResult:
        task_id = resolve_task_id(ref)
        return await self._write("delete", "DELETE", self._table_path("delete", task_id), None)

    async def delete_all(self) -> DeleteAllReport:
        """
        Delete every entry, one request at a time, in listed order.

        Per-item failures are recorded, not raised; only a failed listing
        makes the report not ok.
        """
        try:
            todos = await self.list()
        except TodoStoreError:
            logger.exception("delete_all: listing failed table=%s", self._table)
            return DeleteAllReport(listed=False)

        outcomes: list[DeleteOutcome] = []
        for task in todos:
            if not task.id:
                logger.warning("delete_all: entry without id table=%s name=%r", self._table, task.name)
                outcomes.append(DeleteOutcome(task_id="", result=WriteResult.contract_violation("todo.id is required")))
                continue
            outcomes.append(DeleteOutcome(task_id=task.id, result=await self.delete(task.id)))

        report = DeleteAllReport(listed=True, outcomes=tuple(outcomes))
        logger.info(
            "delete_all done table=%s deleted=%d failed=%d",
            self._table,
            len(outcomes) - len(report.failed),
            len(report.failed),
        )
        return report

    async def _write(self, op: str, method: str, path: str, body: dict[str, Any] | None) -> WriteResult:
        try:
            resp = await self._client.request(method, path, json=body, headers=_JSON_HEADERS)
        except httpx.RequestError as err:
            logger.error("%s error table=%s: %r", op, self._table, err)
            return WriteResult.transport_failure(str(err) or err.__class__.__name__)

        if resp.status_code == 200:
            logger.info("%s ok table=%s", op, self._table)
            return WriteResult.success(resp.status_code)

        logger.warning("%s failed table=%s status=%s body=%s", op, self._table, resp.status_code, resp.text)
        return WriteResult.store_failure(resp.status_code, resp.text)
