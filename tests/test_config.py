# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from todo_sync.config import DEFAULT_BASE_URL, Settings
from todo_sync.core.state import RefreshOrdering

_VARS = (
    "TODO_APP_NAME",
    "TODO_LOG_LEVEL",
    "TODO_DATA_DIR",
    "TODO_STORE_BASE_URL",
    "TODO_STORE_CONTRACT_KEY",
    "TODO_STORE_TABLE",
    "TODO_HTTP_TIMEOUT_SECONDS",
    "TODO_REFRESH_ORDERING",
    "TODO_SURFACE_WRITE_ERRORS",
)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env: pytest.MonkeyPatch) -> None:
    s = Settings.from_env()

    assert s.app_name == "todo-sync"
    assert s.log_level == "INFO"
    assert s.store_base_url == DEFAULT_BASE_URL
    assert s.store_contract_key == ""
    assert s.store_table == "todos"
    assert s.http_timeout_seconds == 5.0
    assert s.refresh_ordering is RefreshOrdering.ISSUANCE
    assert s.surface_write_errors is False


def test_overrides(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    clean_env.setenv("TODO_STORE_CONTRACT_KEY", " abc-123 ")
    clean_env.setenv("TODO_STORE_TABLE", "chores")
    clean_env.setenv("TODO_HTTP_TIMEOUT_SECONDS", "12.5")
    clean_env.setenv("TODO_REFRESH_ORDERING", "Completion")
    clean_env.setenv("TODO_SURFACE_WRITE_ERRORS", "yes")
    clean_env.setenv("TODO_DATA_DIR", str(tmp_path))
    clean_env.setenv("TODO_LOG_LEVEL", "debug")

    s = Settings.from_env()

    assert s.store_contract_key == "abc-123"
    assert s.store_table == "chores"
    assert s.http_timeout_seconds == 12.5
    assert s.refresh_ordering is RefreshOrdering.COMPLETION
    assert s.surface_write_errors is True
    assert s.data_dir == tmp_path
    assert s.log_level == "DEBUG"


def test_invalid_values_fall_back_to_defaults(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("TODO_HTTP_TIMEOUT_SECONDS", "soon")
    clean_env.setenv("TODO_REFRESH_ORDERING", "random")

    s = Settings.from_env()

    assert s.http_timeout_seconds == 5.0
    assert s.refresh_ordering is RefreshOrdering.ISSUANCE
