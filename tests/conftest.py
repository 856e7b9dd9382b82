# tests/conftest.py

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio

from todo_sync.config import Settings
from todo_sync.core.state import RefreshOrdering
from todo_sync.todos.todo_store import RemoteTodoStore

from .fakes import FakeRemoteStore

BASE_URL = "https://store.test"


@pytest.fixture()
def remote() -> FakeRemoteStore:
    return FakeRemoteStore(key="test-key", table="todos")


@pytest_asyncio.fixture()
async def store(remote: FakeRemoteStore) -> AsyncIterator[RemoteTodoStore]:
    """Real HTTP client wired to the in-memory backend."""
    client = RemoteTodoStore(BASE_URL, remote.key, table=remote.table, transport=remote.transport())
    yield client
    await client.aclose()


@pytest.fixture()
def settings(tmp_path: Path, remote: FakeRemoteStore) -> Settings:
    """
    Explicit settings object for composition-root tests.

    Built directly rather than from the environment, to keep unit tests
    isolated and deterministic.
    """
    return Settings(
        app_name="todo-sync-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        store_base_url=BASE_URL,
        store_contract_key=remote.key,
        store_table=remote.table,
        http_timeout_seconds=1.0,
        refresh_ordering=RefreshOrdering.ISSUANCE,
        surface_write_errors=False,
    )
