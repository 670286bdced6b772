"""Catalog providers.

The scanner only needs three things from a media catalog: the libraries,
the items under one library, and a single item by id. `CatalogProvider`
describes that surface; `FileCatalog` implements it over a JSON snapshot
exported from a media server.

Catalog document layout::

    {
      "libraries": [
        {
          "id": "...", "name": "Movies", "collectionType": "movies",
          "items": [
            {"id": "...", "name": "...", "kind": "Series", "children": [...]}
          ]
        }
      ]
    }
"""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Collection, Iterator, List, Optional, Protocol

from pydantic import Field, ValidationError

from .errors import CatalogError
from .logging_config import get_logger
from .models import CamelModel, Item, ItemKind, Library

logger = get_logger(__name__)


class CatalogProvider(Protocol):
    def list_libraries(self) -> List[Library]:
        ...

    def list_items(
        self,
        library_id: uuid.UUID,
        kinds: Collection[ItemKind],
        recursive: bool = True,
    ) -> List[Item]:
        ...

    def get_item(self, item_id: uuid.UUID) -> Optional[Item]:
        ...


class CatalogEntry(Item):
    """An item as stored in the catalog document, with nested children."""

    children: List["CatalogEntry"] = Field(default_factory=list)

    def to_item(self) -> Item:
        return Item.model_validate(self.model_dump(exclude={"children"}))


CatalogEntry.model_rebuild()


class CatalogLibrary(Library):
    items: List[CatalogEntry] = Field(default_factory=list)

    def to_library(self) -> Library:
        return Library.model_validate(self.model_dump(exclude={"items"}))


class CatalogDocument(CamelModel):
    libraries: List[CatalogLibrary] = Field(default_factory=list)


def _walk(entries: List[CatalogEntry], recursive: bool) -> Iterator[CatalogEntry]:
    """Yield entries depth-first, parents before their children."""
    for entry in entries:
        yield entry
        if recursive and entry.children:
            yield from _walk(entry.children, recursive)


class FileCatalog:
    """Catalog provider reading a JSON snapshot.

    The file is re-read on every call so edits are picked up without a restart.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> CatalogDocument:
        if not self.path.exists():
            raise FileNotFoundError(f"Catalog file not found: {self.path}")
        try:
            return CatalogDocument.model_validate_json(self.path.read_bytes())
        except ValidationError as exc:
            logger.error(f"Invalid catalog document {self.path}: {exc}")
            raise CatalogError(f"Invalid catalog document: {self.path}") from exc

    def list_libraries(self) -> List[Library]:
        return [lib.to_library() for lib in self._load().libraries]

    def list_items(
        self,
        library_id: uuid.UUID,
        kinds: Collection[ItemKind],
        recursive: bool = True,
    ) -> List[Item]:
        document = self._load()
        library = next((lib for lib in document.libraries if lib.id == library_id), None)
        if library is None:
            return []

        wanted = set(kinds)
        return [
            entry.to_item()
            for entry in _walk(library.items, recursive)
            if not wanted or entry.kind in wanted
        ]

    def get_item(self, item_id: uuid.UUID) -> Optional[Item]:
        for library in self._load().libraries:
            for entry in _walk(library.items, recursive=True):
                if entry.id == item_id:
                    return entry.to_item()
        return None
