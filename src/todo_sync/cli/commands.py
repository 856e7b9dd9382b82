# src/todo_sync/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import cast

from ..core.state import AppState, TodoSnapshot
from ..todos.todo_models import Task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._raw: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        raw_args: bool = False,
    ) -> None:
        """
        raw_args=True hands the handler the rest of the line as a single
        argument, whitespace kept as typed (for free-text names).
        """
        aliases = aliases or []
        keys = [name.lower(), *(alias.lower() for alias in aliases)]
        for key in keys:
            self._handlers[key] = handler
            if raw_args:
                self._raw.add(key)
        self._help[keys[0]] = help_text

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split(maxsplit=1)
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        tail = parts[1] if len(parts) > 1 else ""
        if name in self._raw:
            args = [tail] if tail.strip() else []
        else:
            args = tail.split()
        logger.debug("Command /%s args=%s", name, args)

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def format_todos(snapshot: TodoSnapshot) -> str:
    lines: list[str] = []
    if not snapshot.todos:
        lines.append("No todos yet. Type a name (or /add <name>) to create one.")
    else:
        lines.append(f"Todos ({len(snapshot.todos)}):")
        for i, task in enumerate(snapshot.todos, start=1):
            lines.append(f"  {i}. {task.name}  [id={task.id}]")
    if snapshot.loading:
        lines.append("(loading...)")
    if snapshot.error:
        lines.append(f"Error: {snapshot.error}")
    return "\n".join(lines)


def resolve_item(snapshot: TodoSnapshot, token: str) -> Task | None:
    """Find a todo by its 1-based position in the list, or by id."""
    if token.isdigit():
        pos = int(token)
        if 1 <= pos <= len(snapshot.todos):
            return snapshot.todos[pos - 1]
    return snapshot.find(token)


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_list(state: AppState, args: list[str]) -> str:
    return format_todos(state.coordinator.snapshot)


async def cmd_refresh(state: AppState, args: list[str]) -> str:
    await state.coordinator.refresh_todos()
    return format_todos(state.coordinator.snapshot)


async def add_todo(state: AppState, text: str) -> str:
    """Create a todo named `text` (trimmed, inner whitespace kept as typed)."""
    name = text.strip()
    if not name:
        return "Usage: /add <name>"

    result = await state.coordinator.create_todo({"name": name})
    head = f"Added: {name}" if result else f"Could not add '{name}'."
    return f"{head}\n{format_todos(state.coordinator.snapshot)}"


async def cmd_add(state: AppState, args: list[str]) -> str:
    return await add_todo(state, args[0] if args else "")


async def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <n|id> <new name>
    Keeps every other field of the record.
    """
    parts = args[0].split(maxsplit=1) if args else []
    if len(parts) < 2:
        return "Usage: /edit <n|id> <new name>"

    task = resolve_item(state.coordinator.snapshot, parts[0])
    if task is None:
        return f"No such todo: {parts[0]}"

    name = parts[1].strip()
    if not name:
        return "Usage: /edit <n|id> <new name>"

    result = await state.coordinator.update_todo(task.with_name(name))
    head = f"Renamed to: {name}" if result else f"Could not update '{task.name}'."
    return f"{head}\n{format_todos(state.coordinator.snapshot)}"


async def cmd_del(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /del <n|id>"

    task = resolve_item(state.coordinator.snapshot, args[0])
    if task is None:
        return f"No such todo: {args[0]}"

    result = await state.coordinator.delete_todo(task.id)
    head = f"Deleted: {task.name}" if result else f"Could not delete '{task.name}'."
    return f"{head}\n{format_todos(state.coordinator.snapshot)}"


async def cmd_clear(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /clear -> delete every todo in the remote table (one by one).
    """
    if emit:
        with contextlib.suppress(Exception):
            emit("Deleting all todos...")

    report = await state.coordinator.delete_all_todos()
    if not report.listed:
        return "Could not list todos; nothing was deleted."

    total = len(report.outcomes)
    failed = report.failed
    lines = [f"Deleted {total - len(failed)}/{total} todo(s)."]
    for outcome in failed:
        lines.append(f"  failed id={outcome.task_id}: {outcome.result.reason}")
    lines.append(format_todos(state.coordinator.snapshot))
    return "\n".join(lines)


async def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    coordinator = state.coordinator
    return (
        "Status:\n"
        f"  Store: {getattr(settings, 'store_base_url', '?')}\n"
        f"  Table: {getattr(settings, 'store_table', '?')}\n"
        f"  Refresh ordering: {coordinator.refresh_ordering.value}\n"
        f"  Todos loaded: {len(coordinator.todos)}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show the current todos.", aliases=["ls"])
registry.register("refresh", cmd_refresh, help_text="Reload todos from the remote store.")
registry.register("add", cmd_add, help_text="Create a todo: /add <name>.", raw_args=True)
registry.register("edit", cmd_edit, help_text="Rename a todo: /edit <n|id> <new name>.", raw_args=True)
registry.register("del", cmd_del, help_text="Delete a todo: /del <n|id>.", aliases=["rm"])
registry.register("clear", cmd_clear, help_text="Delete all todos.")
registry.register("status", cmd_status, help_text="Show store endpoint and sync policy.")
