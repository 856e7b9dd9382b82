# tests/test_commands.py

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import replace

import pytest
import pytest_asyncio

from todo_sync.cli.bootstrap import create_initial_state
from todo_sync.cli.commands import CommandRegistry
from todo_sync.config import Settings
from todo_sync.connectors.console_connector import handle_line
from todo_sync.core.state import AppState

from .fakes import FakeRemoteStore


@pytest_asyncio.fixture()
async def state(settings: Settings, remote: FakeRemoteStore) -> AsyncIterator[AppState]:
    app_state = create_initial_state(settings=settings, transport=remote.transport())
    yield app_state
    await app_state.coordinator.close()


@pytest.mark.asyncio
async def test_command_registry_routes_2_and_3_params(state: AppState) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    async def h2(state, args):
        called["h2"] += 1
        return "h2"

    async def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    assert await reg.handle(state, "/a x") == "h2"
    assert await reg.handle(state, "/b y", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert await reg.handle(state, "hello") is None
    assert "Unknown command" in (await reg.handle(state, "/nope") or "")


@pytest.mark.asyncio
async def test_plain_text_adds_a_trimmed_todo(state: AppState, remote: FakeRemoteStore) -> None:
    await state.coordinator.start()

    reply = await handle_line(state, "   Buy milk   ")

    assert reply is not None and "Added: Buy milk" in reply
    assert [d["name"] for d in remote.entries.values()] == ["Buy milk"]
    assert [t.name for t in state.coordinator.todos] == ["Buy milk"]


@pytest.mark.asyncio
async def test_names_keep_inner_whitespace(state: AppState, remote: FakeRemoteStore) -> None:
    await state.coordinator.start()

    await handle_line(state, "  Buy    two\tmilks  ")
    await handle_line(state, "/add   Call  mom ")

    assert [d["name"] for d in remote.entries.values()] == ["Buy    two\tmilks", "Call  mom"]

    await handle_line(state, "/edit 2   Call   dad\t ")

    assert [t.name for t in state.coordinator.todos] == ["Buy    two\tmilks", "Call   dad"]


@pytest.mark.asyncio
async def test_blank_input_is_ignored(state: AppState, remote: FakeRemoteStore) -> None:
    assert await handle_line(state, "   ") is None
    assert "Usage" in (await handle_line(state, "/add    ") or "")
    assert remote.calls("POST") == []


@pytest.mark.asyncio
async def test_edit_by_position_keeps_other_fields(state: AppState, remote: FakeRemoteStore) -> None:
    entry_id = remote.seed(name="Old", done=True)
    await state.coordinator.start()

    reply = await handle_line(state, "/edit 1 New name")

    assert reply is not None and "Renamed to: New name" in reply
    assert remote.entries[entry_id] == {"name": "New name", "done": True}


@pytest.mark.asyncio
async def test_delete_by_id_and_unknown_item(state: AppState, remote: FakeRemoteStore) -> None:
    keep = remote.seed(name="keep")
    drop = remote.seed(name="drop")
    await state.coordinator.start()

    assert "No such todo" in (await handle_line(state, "/del 9") or "")

    reply = await handle_line(state, f"/rm {drop}")

    assert reply is not None and "Deleted: drop" in reply
    assert list(remote.entries) == [keep]
    assert [t.id for t in state.coordinator.todos] == [keep]


@pytest.mark.asyncio
async def test_clear_reports_items_left_behind(state: AppState, remote: FakeRemoteStore) -> None:
    remote.seed(name="A")
    stuck = remote.seed(name="B")
    remote.fail_ids.add(stuck)
    await state.coordinator.start()

    reply = await handle_line(state, "/clear") or ""

    assert "Deleted 1/2" in reply
    assert f"failed id={stuck}" in reply
    assert [t.id for t in state.coordinator.todos] == [stuck]


@pytest.mark.asyncio
async def test_list_shows_error_after_failed_load(state: AppState, remote: FakeRemoteStore) -> None:
    remote.fail["list"] = 500
    await state.coordinator.start()

    reply = await handle_line(state, "/ls") or ""

    assert "Error: Failed to fetch todos." in reply


@pytest.mark.asyncio
async def test_status_reports_endpoint_and_policy(state: AppState) -> None:
    reply = await handle_line(state, "/status") or ""

    assert "https://store.test" in reply
    assert "issuance" in reply


def test_bootstrap_requires_contract_key(settings: Settings) -> None:
    with pytest.raises(ValueError):
        create_initial_state(settings=replace(settings, store_contract_key=""))
