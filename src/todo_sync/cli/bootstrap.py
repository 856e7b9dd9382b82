# src/todo_sync/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the remote store client into the coordinator and both into AppState.
"""

from __future__ import annotations

import logging

import httpx

from ..config import Settings, get_settings
from ..core.coordinator import TodoCoordinator
from ..core.state import AppState
from ..todos.todo_store import RemoteTodoStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().

    Raises ValueError when the store endpoint or contract key is not configured.
    The coordinator is NOT started here; call `await state.coordinator.start()`.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = RemoteTodoStore(
        settings.store_base_url,
        settings.store_contract_key,
        table=settings.store_table,
        timeout=settings.http_timeout_seconds,
        transport=transport,
    )
    coordinator = TodoCoordinator(
        store,
        refresh_ordering=settings.refresh_ordering,
        surface_write_errors=settings.surface_write_errors,
    )
    logger.debug(
        "State wired (ordering=%s surface_write_errors=%s)",
        settings.refresh_ordering.value,
        settings.surface_write_errors,
    )
    return AppState(settings=settings, coordinator=coordinator)
