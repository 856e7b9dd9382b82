# src/todo_sync/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from ..todos.todo_models import Task

if TYPE_CHECKING:
    from .coordinator import TodoCoordinator


class RefreshOrdering(StrEnum):
    """
    How overlapping refreshes are reconciled.

    ISSUANCE: the most recently *started* refresh wins (generation counter).
    COMPLETION: whichever refresh *finishes* last wins.
    """

    ISSUANCE = "issuance"
    COMPLETION = "completion"

    @classmethod
    def parse(cls, raw: str | None, default: RefreshOrdering | None = None) -> RefreshOrdering:
        fallback = default or cls.ISSUANCE
        if not raw:
            return fallback
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return fallback


@dataclass(slots=True, frozen=True)
class TodoSnapshot:
    """What the presentation layer renders: tasks in server order, loading flag, error."""

    todos: tuple[Task, ...] = ()
    loading: bool = False
    error: str | None = None

    def find(self, task_id: str) -> Task | None:
        for task in self.todos:
            if task.id == task_id:
                return task
        return None


@dataclass
class AppState:
    # Settings are stored for commands that report configuration (/status).
    settings: object

    coordinator: TodoCoordinator
