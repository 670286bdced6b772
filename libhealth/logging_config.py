"""Logging setup for Library Health.

`setup_logging` runs once per process, from the CLI command that needs it:
a rotating `libhealth.log` in the data directory that records everything,
plus a rich console handler filtered to the configured `[server] log_level`.
Library modules only ever call `get_logger`.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme


LOG_FILENAME = "libhealth.log"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

# Per-request chatter from the web stack
QUIET_LOGGERS = ("uvicorn.access", "httpx")

_installed: List[logging.Handler] = []
_previous_root_level: Optional[int] = None


def resolve_level(name: str) -> int:
    """Map a level name like ``"debug"`` to its number; raises ValueError if unknown."""
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name!r}")
    return level


def _file_handler(log_file: Path) -> logging.Handler:
    handler = RotatingFileHandler(
        log_file,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(levelname)-8s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    return handler


def _console_handler(level: int) -> logging.Handler:
    # Issue severities share the level colours: Info cyan, Warning yellow, Error red
    console = Console(theme=Theme({
        "logging.level.info": "bold cyan",
        "logging.level.warning": "bold yellow",
        "logging.level.error": "bold red",
    }))
    handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=False,
    )
    handler.setLevel(level)
    return handler


def setup_logging(log_dir: Path, log_level: str = "INFO") -> Optional[Path]:
    """Attach the file and console handlers to the root logger.

    Args:
        log_dir: Directory for ``libhealth.log`` (the configured data dir)
        log_level: Console level name; the file always records DEBUG

    Returns:
        Path of the log file, or None when logging was already set up
    """
    global _previous_root_level

    if _installed:
        return None

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILENAME

    root = logging.getLogger()
    _previous_root_level = root.level
    root.setLevel(logging.DEBUG)
    for handler in (_file_handler(log_file), _console_handler(resolve_level(log_level))):
        root.addHandler(handler)
        _installed.append(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file


def reset_logging() -> None:
    """Detach and close the handlers installed by `setup_logging`."""
    global _previous_root_level

    root = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()
    if _previous_root_level is not None:
        root.setLevel(_previous_root_level)
        _previous_root_level = None


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
