"""Pydantic models for Library Health.

Every model serializes with camelCase keys; the same shape is used for the
persisted results document and for API responses.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IssueSeverity(str, Enum):
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"


class IssueType(str, Enum):
    MISSING_POSTER = "MissingPoster"
    MISSING_OVERVIEW = "MissingOverview"
    MISSING_YEAR = "MissingYear"
    MISSING_GENRE = "MissingGenre"
    MISSING_SUBTITLES = "MissingSubtitles"


class ItemKind(str, Enum):
    MOVIE = "Movie"
    SERIES = "Series"
    SEASON = "Season"
    EPISODE = "Episode"
    VIDEO = "Video"
    AUDIO = "Audio"
    FOLDER = "Folder"
    # Any kind not listed above, e.g. BoxSet or Photo
    OTHER = "Other"


VIDEO_KINDS = frozenset({ItemKind.MOVIE, ItemKind.EPISODE, ItemKind.VIDEO})
_KIND_VALUES = frozenset(kind.value for kind in ItemKind)


class ImageKind(str, Enum):
    PRIMARY = "Primary"
    BACKDROP = "Backdrop"
    LOGO = "Logo"
    THUMB = "Thumb"


class StreamKind(str, Enum):
    VIDEO = "Video"
    AUDIO = "Audio"
    SUBTITLE = "Subtitle"


# --- Catalog views (read-only snapshots handed out by a catalog provider) ---

class Library(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    name: str
    collection_type: Optional[str] = None


class Item(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    name: str
    kind: ItemKind
    production_year: Optional[int] = None
    overview: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    images: List[ImageKind] = Field(default_factory=list)
    streams: List[StreamKind] = Field(default_factory=list)

    @field_validator("kind", mode="before")
    @classmethod
    def _unknown_kind_is_other(cls, value):
        if isinstance(value, str) and value not in _KIND_VALUES:
            return ItemKind.OTHER
        return value

    @property
    def is_video(self) -> bool:
        return self.kind in VIDEO_KINDS

    @property
    def has_primary_image(self) -> bool:
        return ImageKind.PRIMARY in self.images

    @property
    def has_subtitles(self) -> bool:
        return StreamKind.SUBTITLE in self.streams


class SubtitleCandidate(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: Optional[str] = None
    rating: Optional[float] = None


# --- Scan results ---

class HealthIssue(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    item_id: uuid.UUID
    item_name: str = ""
    library_name: str = ""
    type: IssueType
    severity: IssueSeverity
    detected_at: datetime = Field(default_factory=utc_now)


class ScanResult(CamelModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    library_id: uuid.UUID
    library_name: str = ""
    started_at: datetime = Field(default_factory=utc_now)
    completed_at: Optional[datetime] = None
    total_items: int = 0
    issues_found: int = 0
    issues: List[HealthIssue] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.completed_at is not None


class ScanStatus(CamelModel):
    is_scanning: bool = False
    current_library_id: Optional[uuid.UUID] = None


class SubtitleDownloadResult(CamelModel):
    success: bool
    message: str
