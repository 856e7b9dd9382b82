# src/todo_sync/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time: the contract key is only checked when
  the remote store client is built.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .core.state import RefreshOrdering

ENV_PREFIX = "TODO"

DEFAULT_BASE_URL = "https://unidb.openlab.uninorte.edu.co"
DEFAULT_TABLE = "todos"
DEFAULT_TIMEOUT_SECONDS = 5.0


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Remote store ----
    store_base_url: str
    store_contract_key: str
    store_table: str
    http_timeout_seconds: float

    # ---- Synchronization policy ----
    refresh_ordering: RefreshOrdering
    surface_write_errors: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "todo-sync").strip() or "todo-sync"
        log_level = _env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO"
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/todo-sync"))

        store_base_url = _env(_k("STORE_BASE_URL"), DEFAULT_BASE_URL).strip() or DEFAULT_BASE_URL
        store_contract_key = _env(_k("STORE_CONTRACT_KEY"), "").strip()
        store_table = _env(_k("STORE_TABLE"), DEFAULT_TABLE).strip() or DEFAULT_TABLE
        http_timeout_seconds = _env_float(_k("HTTP_TIMEOUT_SECONDS"), DEFAULT_TIMEOUT_SECONDS)

        refresh_ordering = RefreshOrdering.parse(os.getenv(_k("REFRESH_ORDERING")))
        surface_write_errors = _env_bool(_k("SURFACE_WRITE_ERRORS"), False)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            store_base_url=store_base_url,
            store_contract_key=store_contract_key,
            store_table=store_table,
            http_timeout_seconds=http_timeout_seconds,
            refresh_ordering=refresh_ordering,
            surface_write_errors=surface_write_errors,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
