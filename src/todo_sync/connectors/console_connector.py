# src/todo_sync/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import add_todo, format_todos
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


async def _read_line(prompt: str) -> str:
    # input() blocks; keep the event loop free for in-flight requests.
    return await asyncio.to_thread(input, prompt)


async def handle_line(state: AppState, line: str) -> str | None:
    """
    One console line -> reply text.

    "/..." goes to the command registry; any other non-empty text creates a todo.
    """
    text = line.strip()
    if not text:
        return None

    def emit(message: str) -> None:
        print(f"[{_ts_local()}] {message}", flush=True)

    if text.startswith("/"):
        return await command_registry.handle(state, text, emit=emit)

    return await add_todo(state, text)


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Type a todo to add it. Use /help for commands. Use /exit to quit.\n")
    _print_ts(format_todos(state.coordinator.snapshot))

    while True:
        try:
            user_input = (await _read_line(">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = await handle_line(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is not None:
            _print_ts(reply)

    logger.info("Console connector finished.")
