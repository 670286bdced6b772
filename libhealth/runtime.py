"""Process-wide scanner and result store.

The HTTP layer and the CLI share one scanner so the single-scan guard
covers every entry point.
"""

from __future__ import annotations

import threading
from typing import Optional

from .catalog import FileCatalog
from .config import HealthConfig, get_config
from .scanner import LibraryScanner
from .store import ResultStore

_store: Optional[ResultStore] = None
_scanner: Optional[LibraryScanner] = None
# Reentrant: get_scanner builds the store while holding it
_lock = threading.RLock()


def build_scanner(config: HealthConfig, store: ResultStore) -> LibraryScanner:
    """Wire a scanner over the configured file catalog.

    No subtitle provider is bundled; hosts that have one pass it to
    `LibraryScanner` themselves.
    """
    return LibraryScanner(
        catalog=FileCatalog(config.catalog_path),
        store=store,
        settings=config.scanner,
        subtitle_settings=config.subtitles,
    )


def get_store() -> ResultStore:
    global _store
    if _store is None:
        with _lock:
            if _store is None:
                _store = ResultStore(get_config().results_path)
    return _store


def get_scanner() -> LibraryScanner:
    global _scanner
    if _scanner is None:
        with _lock:
            if _scanner is None:
                _scanner = build_scanner(get_config(), get_store())
    return _scanner


def reset_runtime() -> None:
    """Drop the cached scanner and store (useful for tests)."""
    global _store, _scanner
    with _lock:
        _store = None
        _scanner = None
