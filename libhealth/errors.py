"""Exceptions raised by the scanner and its collaborators."""

from __future__ import annotations


class HealthCheckError(Exception):
    """Base class for every expected failure in Library Health."""


class ScanAlreadyInProgressError(HealthCheckError):
    def __init__(self) -> None:
        super().__init__("A scan is already in progress.")


class ScanningDisabledError(HealthCheckError):
    def __init__(self) -> None:
        super().__init__("Scanning is disabled in configuration.")


class LibraryNotFoundError(HealthCheckError):
    def __init__(self, library_id) -> None:
        super().__init__(f"Library with ID {library_id} not found.")
        self.library_id = library_id


class ItemNotFoundError(HealthCheckError):
    def __init__(self, item_id) -> None:
        super().__init__(f"Item with ID {item_id} not found.")
        self.item_id = item_id


class NotAVideoError(HealthCheckError):
    def __init__(self, item_name: str) -> None:
        super().__init__(f"Item '{item_name}' is not a video.")


class SubtitlesUnavailableError(HealthCheckError):
    def __init__(self) -> None:
        super().__init__("No subtitle provider is configured.")


class ScanCancelledError(HealthCheckError):
    """The running scan stopped at an item boundary on request; nothing was saved."""

    def __init__(self, library_id) -> None:
        super().__init__(f"Scan of library {library_id} was cancelled.")
        self.library_id = library_id


class CatalogError(HealthCheckError):
    """The catalog document could not be read or parsed."""
