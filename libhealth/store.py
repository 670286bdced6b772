"""Persistence of scan results.

Results are kept as one JSON document (a list of `ScanResult`, one per
library). Every operation holds a single lock across the whole
read-modify-write cycle, and writes go to a temp file that is then renamed
over the document so a crash never leaves it truncated.
"""

from __future__ import annotations

import os
import tempfile
import threading
import uuid
from pathlib import Path
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from .logging_config import get_logger
from .models import ScanResult

logger = get_logger(__name__)

_RESULTS_ADAPTER = TypeAdapter(List[ScanResult])


def _validate_results_path(path: Path) -> Path:
    path = Path(path).expanduser()
    if not path.name:
        raise ValueError(f"Invalid results file path: {str(path)!r}")
    return path.resolve()


class ResultStore:
    """Keyed store of the latest `ScanResult` per library.

    The store is the only writer of its document file.
    """

    def __init__(self, path: Path):
        self.path = _validate_results_path(path)
        self.data_dir = self.path.parent
        self._lock = threading.Lock()

        if not self.data_dir.exists():
            self.data_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {self.data_dir}")

    def save(self, result: ScanResult) -> None:
        """Insert `result`, replacing any stored result for the same library."""
        with self._lock:
            results = self._load()
            results = [r for r in results if r.library_id != result.library_id]
            results.append(result)
            self._write(results)
        logger.debug(f"Saved scan result {result.id} for library {result.library_id}")

    def get_all(self) -> List[ScanResult]:
        with self._lock:
            return self._load()

    def get(self, library_id: uuid.UUID) -> Optional[ScanResult]:
        with self._lock:
            for result in self._load():
                if result.library_id == library_id:
                    return result
        return None

    def delete(self, library_id: uuid.UUID) -> bool:
        """Remove the result for `library_id`. Returns False if there was none."""
        with self._lock:
            results = self._load()
            remaining = [r for r in results if r.library_id != library_id]
            if len(remaining) == len(results):
                return False
            self._write(remaining)
        logger.info(f"Deleted scan result for library {library_id}")
        return True

    # --- Internal (callers hold self._lock) ---

    def _load(self) -> List[ScanResult]:
        """Read the document. Unreadable or corrupt data counts as an empty store."""
        if not self.path.exists():
            return []

        try:
            raw = self.path.read_bytes()
            return _RESULTS_ADAPTER.validate_json(raw)
        except ValidationError as exc:
            logger.error(f"Failed to parse scan results from {self.path}: {exc}")
            return []
        except OSError as exc:
            logger.error(f"Failed to read scan results file {self.path}: {exc}")
            return []

    def _write(self, results: List[ScanResult]) -> None:
        payload = _RESULTS_ADAPTER.dump_json(results, by_alias=True, indent=2)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.data_dir
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.error(f"Failed to save scan results to {self.path}: {exc}")
            tmp_path.unlink(missing_ok=True)
            raise
