"""FastAPI router for library health: libraries, scans, results and subtitles."""

from __future__ import annotations

import logging
import uuid
from typing import List

from fastapi import APIRouter, HTTPException, Response
from pydantic import ConfigDict

from libhealth import runtime
from libhealth.errors import (
    CatalogError,
    ItemNotFoundError,
    LibraryNotFoundError,
    NotAVideoError,
    ScanAlreadyInProgressError,
    ScanCancelledError,
    ScanningDisabledError,
    SubtitlesUnavailableError,
)
from libhealth.models import CamelModel, ScanResult, ScanStatus, SubtitleDownloadResult

from .validation import parse_id

logger = logging.getLogger("libhealth.api")

router = APIRouter(tags=["library-health"])


class LibraryInfo(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    collection_type: str


def _library_id(raw: str) -> uuid.UUID:
    try:
        return parse_id(raw, "libraryId")
    except ValueError as exc:
        logger.warning(f"Invalid library ID {raw!r}: {exc}")
        raise HTTPException(status_code=400, detail="Invalid library ID format.")


def _catalog_unavailable(exc: Exception) -> HTTPException:
    logger.error(f"Catalog unavailable: {exc}")
    return HTTPException(status_code=503, detail=str(exc))


def _item_id(raw: str) -> uuid.UUID:
    try:
        return parse_id(raw, "itemId")
    except ValueError as exc:
        logger.warning(f"Invalid item ID {raw!r}: {exc}")
        raise HTTPException(status_code=400, detail="Invalid item ID format.")


@router.get("/Libraries", response_model=List[LibraryInfo])
def get_libraries():
    """List every library the catalog knows about."""
    logger.info("API request: GetLibraries")
    try:
        libraries = runtime.get_scanner().get_libraries()
    except (CatalogError, FileNotFoundError) as exc:
        raise _catalog_unavailable(exc)

    return [
        LibraryInfo(
            id=str(lib.id),
            name=lib.name or "Unknown",
            collection_type=lib.collection_type or "unknown",
        )
        for lib in libraries
    ]


@router.get("/Results", response_model=List[ScanResult])
def get_all_results():
    logger.info("API request: GetAllResults")
    return runtime.get_store().get_all()


@router.get("/Results/{library_id}", response_model=ScanResult)
def get_library_result(library_id: str):
    validated = _library_id(library_id)
    logger.info(f"API request: GetLibraryResult for {validated}")

    result = runtime.get_store().get(validated)
    if result is None:
        raise HTTPException(status_code=404, detail="No scan result for this library")
    return result


@router.delete("/Results/{library_id}", status_code=204)
def delete_result(library_id: str) -> Response:
    validated = _library_id(library_id)
    logger.info(f"API request: DeleteResult for {validated}")

    if not runtime.get_store().delete(validated):
        raise HTTPException(status_code=404, detail="No scan result for this library")
    return Response(status_code=204)


@router.post("/Scan/Cancel", status_code=202)
def cancel_scan() -> Response:
    """Signal the running scan to stop before its next item."""
    logger.info("API request: CancelScan")
    if not runtime.get_scanner().request_cancel():
        raise HTTPException(status_code=409, detail="No scan is in progress.")
    return Response(status_code=202)


@router.post("/Scan/{library_id}", response_model=ScanResult)
def start_scan(library_id: str):
    """Run a scan to completion and return its result."""
    validated = _library_id(library_id)

    scanner = runtime.get_scanner()
    if scanner.is_scanning:
        raise HTTPException(status_code=409, detail="A scan is already in progress.")

    logger.info(f"API request: StartScan for {validated}")
    try:
        return scanner.start_scan(validated)
    except LibraryNotFoundError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except (ScanAlreadyInProgressError, ScanningDisabledError, ScanCancelledError) as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except (CatalogError, FileNotFoundError) as exc:
        raise _catalog_unavailable(exc)


@router.get("/Status", response_model=ScanStatus)
def get_status():
    logger.debug("API request: GetStatus")
    return runtime.get_scanner().status()


@router.post("/Subtitles/{item_id}", response_model=SubtitleDownloadResult)
def download_subtitles(item_id: str):
    """Fetch forced subtitles for one video item."""
    validated = _item_id(item_id)
    logger.info(f"API request: DownloadSubtitles for {validated}")

    try:
        return runtime.get_scanner().acquire_subtitles(validated)
    except ItemNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except NotAVideoError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except SubtitlesUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    except (CatalogError, FileNotFoundError) as exc:
        raise _catalog_unavailable(exc)
