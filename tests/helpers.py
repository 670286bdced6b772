"""In-memory catalog and subtitle providers for tests."""

from __future__ import annotations

import threading
import uuid
from typing import Dict, List, Optional

from libhealth.models import (
    ImageKind,
    Item,
    ItemKind,
    Library,
    StreamKind,
    SubtitleCandidate,
)


def make_item(**overrides) -> Item:
    """Build an item with every checked field populated."""
    fields = dict(
        id=uuid.uuid4(),
        name="Complete Movie",
        kind=ItemKind.MOVIE,
        production_year=1999,
        overview="A film with all of its metadata.",
        genres=["Drama"],
        images=[ImageKind.PRIMARY],
        streams=[StreamKind.VIDEO, StreamKind.AUDIO, StreamKind.SUBTITLE],
    )
    fields.update(overrides)
    return Item(**fields)


class FakeCatalog:
    def __init__(self, libraries: Optional[Dict[Library, List[Item]]] = None):
        self.libraries = dict(libraries or {})
        self.list_items_calls = 0

    def add_library(self, name: str, items: List[Item], library_id=None) -> Library:
        library = Library(id=library_id or uuid.uuid4(), name=name, collection_type="movies")
        self.libraries[library] = list(items)
        return library

    def list_libraries(self) -> List[Library]:
        return list(self.libraries)

    def list_items(self, library_id, kinds, recursive=True) -> List[Item]:
        self.list_items_calls += 1
        for library, items in self.libraries.items():
            if library.id == library_id:
                return [item for item in items if item.kind in set(kinds)]
        return []

    def get_item(self, item_id) -> Optional[Item]:
        for items in self.libraries.values():
            for item in items:
                if item.id == item_id:
                    return item
        return None


class BlockingCatalog(FakeCatalog):
    """Catalog whose item listing waits until `release` is set."""

    def __init__(self, libraries=None):
        super().__init__(libraries)
        self.entered = threading.Event()
        self.release = threading.Event()

    def list_items(self, library_id, kinds, recursive=True) -> List[Item]:
        self.entered.set()
        self.release.wait(timeout=5)
        return super().list_items(library_id, kinds, recursive)


class FailingCatalog(FakeCatalog):
    def list_items(self, library_id, kinds, recursive=True) -> List[Item]:
        raise RuntimeError("catalog unavailable")


class FakeSubtitles:
    def __init__(self, candidates=None, download_ok=True, error: Optional[Exception] = None):
        self.candidates = [
            c if isinstance(c, SubtitleCandidate) else SubtitleCandidate(**c)
            for c in (candidates or [])
        ]
        self.download_ok = download_ok
        self.error = error
        self.searches = []
        self.downloads = []

    def search(self, item, language, best_match_only, automated):
        self.searches.append((item.id, language, best_match_only, automated))
        return list(self.candidates)

    def download(self, item, candidate_id):
        if self.error is not None:
            raise self.error
        self.downloads.append((item.id, candidate_id))
        return self.download_ok
