# src/todo_sync/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, runs the initial refresh, then hands
the terminal to the console connector. The coordinator is closed on exit.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import Settings, get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(settings: Settings) -> int:
    try:
        state = create_initial_state(settings=settings)
    except ValueError as e:
        logger.error("Cannot start: %s (set TODO_STORE_CONTRACT_KEY / TODO_STORE_BASE_URL).", e)
        return 2

    coordinator = state.coordinator
    try:
        await coordinator.start()
        if coordinator.error:
            logger.warning("Initial load failed: %s", coordinator.error)
        await run_console_loop(state)
    finally:
        await coordinator.close()
    return 0


def main() -> int:
    settings = get_settings()

    log_file = setup_logging(
        log_dir=settings.data_dir,
        app_name=settings.app_name,
        console_level=settings.log_level,
    )

    logger.info("Starting %s (log file: %s)...", settings.app_name, log_file)

    try:
        code = asyncio.run(_run(settings))
    except KeyboardInterrupt:
        code = 130

    logger.info("Bye.")
    return code


if __name__ == "__main__":
    raise SystemExit(main())
