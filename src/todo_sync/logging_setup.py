# src/todo_sync/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Console thresholds for our own loggers, longest prefix wins.
# The store logs every request at INFO; the console already prints the
# resulting todo list, so only its problems are shown there.
_CONSOLE_MIN_LEVEL: dict[str, int] = {
    "todo_sync": logging.DEBUG,
    "todo_sync.todos.todo_store": logging.WARNING,
}

# Library loggers that are chatty at DEBUG/INFO even in the file.
_LIBRARY_LEVELS: dict[str, int] = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "asyncio": logging.WARNING,
}


def _min_level_for(name: str) -> int | None:
    best: str | None = None
    for prefix in _CONSOLE_MIN_LEVEL:
        if name == prefix or name.startswith(prefix + "."):
            if best is None or len(prefix) > len(best):
                best = prefix
    return None if best is None else _CONSOLE_MIN_LEVEL[best]


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the interactive console readable: todo_sync records pass by the
    table above, everything else (py.warnings, libraries) only at ERROR+.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        min_level = _min_level_for(record.name)
        if min_level is None:
            return record.levelno >= logging.ERROR
        return record.levelno >= min_level


def _level(value: int | str) -> int:
    if isinstance(value, int):
        return value
    resolved = logging.getLevelName(value.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    *,
    log_dir: str | Path = ".local/todo-sync",
    app_name: str = "todo-sync",
    console_level: int | str = logging.INFO,
    file_level: int | str = logging.DEBUG,
) -> Path:
    """
    Configure the root logger once, before the first record:
    a filtered stderr handler and a full file log at <log_dir>/<app_name>.log.

    Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{app_name}.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(_level(console_level))
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(_level(file_level))
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    for name, level in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(level)

    # warnings.warn(...) -> 'py.warnings'
    logging.captureWarnings(True)

    return log_file
