"""Library health scanner.

Runs one scan at a time across the whole process:

- guard: reject if a scan is running, scanning is disabled, or the library
  is unknown
- enumerate movies, series and episodes under the library
- classify each item and collect the issues
- persist the finished result (never a partial one)

The in-progress flag is always released when a scan ends, whatever the outcome.
"""

from __future__ import annotations

import threading
import uuid
from typing import List, NamedTuple, Optional

from .catalog import CatalogProvider
from .classifier import evaluate
from .config import ScannerConfig, SubtitleConfig
from .errors import (
    ItemNotFoundError,
    LibraryNotFoundError,
    NotAVideoError,
    ScanAlreadyInProgressError,
    ScanCancelledError,
    ScanningDisabledError,
    SubtitlesUnavailableError,
)
from .logging_config import get_logger
from .models import (
    HealthIssue,
    Item,
    ItemKind,
    Library,
    ScanResult,
    ScanStatus,
    SubtitleDownloadResult,
    utc_now,
)
from .store import ResultStore
from .subtitles import SubtitleProvider, select_forced_subtitle

logger = get_logger(__name__)


SCANNED_KINDS = (ItemKind.MOVIE, ItemKind.SERIES, ItemKind.EPISODE)
UNKNOWN_NAME = "Unknown"


class _ScanState(NamedTuple):
    is_scanning: bool
    library_id: Optional[uuid.UUID]


_IDLE = _ScanState(False, None)


class LibraryScanner:
    """Scans catalog libraries for metadata gaps and stores the results.

    `settings` is read at the start of every scan, so replacing it changes
    the checks used by the next scan.
    """

    def __init__(
        self,
        catalog: CatalogProvider,
        store: ResultStore,
        settings: Optional[ScannerConfig] = None,
        subtitles: Optional[SubtitleProvider] = None,
        subtitle_settings: Optional[SubtitleConfig] = None,
    ):
        self.catalog = catalog
        self.store = store
        self.settings = settings or ScannerConfig()
        self.subtitles = subtitles
        self.subtitle_settings = subtitle_settings or SubtitleConfig()

        # Writers swap _state under _lock; readers just read the reference.
        self._lock = threading.Lock()
        self._state = _IDLE
        self._cancel_requested = threading.Event()

    # --- Status ---

    @property
    def is_scanning(self) -> bool:
        return self._state.is_scanning

    @property
    def current_library_id(self) -> Optional[uuid.UUID]:
        return self._state.library_id

    def status(self) -> ScanStatus:
        state = self._state
        return ScanStatus(is_scanning=state.is_scanning, current_library_id=state.library_id)

    # --- Libraries ---

    def get_libraries(self) -> List[Library]:
        return self.catalog.list_libraries()

    # --- Scanning ---

    def request_cancel(self) -> bool:
        """Ask the running scan to stop before its next item.

        Returns False when no scan is running.
        """
        with self._lock:
            state = self._state
            if not state.is_scanning:
                return False
            self._cancel_requested.set()
        logger.info(f"Cancellation requested for scan of library {state.library_id}")
        return True

    def _acquire(self, library_id: uuid.UUID) -> Library:
        """Check-and-set the in-progress flag. Rejections leave it untouched."""
        with self._lock:
            if self._state.is_scanning:
                raise ScanAlreadyInProgressError()

            if not self.settings.enabled:
                raise ScanningDisabledError()

            library = next(
                (lib for lib in self.catalog.list_libraries() if lib.id == library_id),
                None,
            )
            if library is None:
                raise LibraryNotFoundError(library_id)

            self._cancel_requested.clear()
            self._state = _ScanState(True, library_id)
            return library

    def _release(self) -> None:
        with self._lock:
            self._state = _IDLE
            self._cancel_requested.clear()

    def _cancelled(self, cancel_event: Optional[threading.Event]) -> bool:
        if self._cancel_requested.is_set():
            return True
        return cancel_event is not None and cancel_event.is_set()

    def start_scan(
        self,
        library_id: uuid.UUID,
        cancel_event: Optional[threading.Event] = None,
    ) -> ScanResult:
        """Scan one library and persist the result.

        :param library_id: Library to scan.
        :param cancel_event: Optional caller-owned signal, checked before each item.
        :return: The completed, persisted result.
        :raises ScanAlreadyInProgressError: another scan is running.
        :raises ScanningDisabledError: scanning is turned off in configuration.
        :raises LibraryNotFoundError: the catalog has no such library.
        :raises ScanCancelledError: cancellation was requested mid-scan.
        """
        library = self._acquire(library_id)
        settings = self.settings

        try:
            library_name = library.name or UNKNOWN_NAME
            logger.info(f"Starting health scan for library: {library_name}")

            result = ScanResult(
                id=uuid.uuid4(),
                library_id=library_id,
                library_name=library_name,
                started_at=utc_now(),
            )

            items = self.catalog.list_items(library_id, SCANNED_KINDS, recursive=True)
            result.total_items = len(items)
            logger.debug(f"Found {len(items)} items to scan in library {library_name}")

            for item in items:
                if self._cancelled(cancel_event):
                    raise ScanCancelledError(library_id)
                self._check_item(item, library_name, result, settings)

            result.completed_at = utc_now()
            result.issues_found = len(result.issues)

            self.store.save(result)

            logger.info(
                f"Completed health scan for library {library_name}: "
                f"{result.total_items} items, {result.issues_found} issues"
            )
            return result
        except ScanCancelledError:
            logger.info(f"Health scan for library {library.name} cancelled; nothing saved")
            raise
        finally:
            self._release()

    def _check_item(
        self,
        item: Item,
        library_name: str,
        result: ScanResult,
        settings: ScannerConfig,
    ) -> None:
        item_name = item.name or UNKNOWN_NAME
        for finding in evaluate(item, settings):
            result.issues.append(
                HealthIssue(
                    id=uuid.uuid4(),
                    item_id=item.id,
                    item_name=item_name,
                    library_name=library_name,
                    type=finding.type,
                    severity=finding.severity,
                    detected_at=utc_now(),
                )
            )
            logger.debug(
                f"Found issue: {finding.type.value} for item {item_name} in {library_name}"
            )

    # --- Subtitles ---

    def acquire_subtitles(self, item_id: uuid.UUID) -> SubtitleDownloadResult:
        """Download the best forced/foreign-parts subtitle for a video item.

        Not finding a forced subtitle, or the provider failing, is reported in
        the returned result rather than raised.
        """
        if self.subtitles is None:
            raise SubtitlesUnavailableError()

        item = self.catalog.get_item(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        if not item.is_video:
            raise NotAVideoError(item.name)

        language = self.subtitle_settings.language
        logger.info(f"Searching for forced subtitles ({language}) for: {item.name}")

        try:
            candidates = self.subtitles.search(
                item, language, best_match_only=True, automated=True
            )
            chosen = select_forced_subtitle(candidates)
            if chosen is None:
                logger.info(f"No forced subtitles found for: {item.name}")
                return SubtitleDownloadResult(success=False, message="No forced subtitles found.")

            logger.info(f"Downloading subtitle: {chosen.name} for {item.name}")
            if not self.subtitles.download(item, chosen.id):
                raise RuntimeError(f"Provider could not download '{chosen.name}'")
        except Exception as exc:
            logger.error(f"Failed to download subtitles for {item.name}: {exc}")
            return SubtitleDownloadResult(success=False, message=f"Error: {exc}")

        logger.info(f"Successfully downloaded subtitles for: {item.name}")
        return SubtitleDownloadResult(success=True, message=f"Downloaded: {chosen.name}")
