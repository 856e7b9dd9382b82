# src/todo_sync/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The coordinator depends on these Protocols instead of the HTTP client,
which keeps the remote store swappable and makes testing easier.
"""

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..todos.todo_models import DeleteAllReport, Task, WriteResult
    from .state import TodoSnapshot


class TodoRepo(Protocol):
    """Remote todo collection (see todos.todo_store.RemoteTodoStore)."""

    async def list(self) -> list[Task]: ...
    async def create(self, fields: Mapping[str, Any]) -> WriteResult: ...
    async def update(self, task: Task | Mapping[str, Any]) -> WriteResult: ...
    async def delete(self, ref: str | Task | Mapping[str, Any]) -> WriteResult: ...
    async def delete_all(self) -> DeleteAllReport: ...


SnapshotListener = Callable[["TodoSnapshot"], None]
# Called with every new snapshot; return value is ignored.
