"""Tests for forced subtitle selection and acquisition."""

import threading

import pytest

from libhealth.config import SubtitleConfig
from libhealth.errors import ItemNotFoundError, NotAVideoError, SubtitlesUnavailableError
from libhealth.models import ItemKind, SubtitleCandidate
from libhealth.scanner import LibraryScanner
from libhealth.store import ResultStore
from libhealth.subtitles import is_forced, select_forced_subtitle

from helpers import BlockingCatalog, FakeCatalog, FakeSubtitles, make_item

SCENARIO_CANDIDATES = [
    {"id": "1", "name": "English", "rating": 5},
    {"id": "2", "name": "Forced English", "rating": 3},
    {"id": "3", "name": "Foreign parts", "rating": 4},
]


def _candidates(raw):
    return [SubtitleCandidate(**c) for c in raw]


def test_selection_picks_best_rated_forced_candidate():
    chosen = select_forced_subtitle(_candidates(SCENARIO_CANDIDATES))
    assert chosen.name == "Foreign parts"


def test_selection_tie_keeps_first():
    chosen = select_forced_subtitle(
        _candidates([
            {"id": "a", "name": "English FORCED", "rating": 4},
            {"id": "b", "name": "foreign only", "rating": 4},
        ])
    )
    assert chosen.id == "a"


def test_selection_treats_missing_rating_as_zero():
    chosen = select_forced_subtitle(
        _candidates([
            {"id": "a", "name": "Forced", "rating": None},
            {"id": "b", "name": "Forced SDH", "rating": 0.5},
        ])
    )
    assert chosen.id == "b"


def test_selection_without_forced_candidates():
    assert select_forced_subtitle(_candidates([{"id": "1", "name": "English", "rating": 9}])) is None
    assert select_forced_subtitle([]) is None


@pytest.mark.parametrize("name, expected", [
    ("Forced", True),
    ("english.FOREIGN.srt", True),
    ("English SDH", False),
    (None, False),
])
def test_is_forced(name, expected):
    assert is_forced(SubtitleCandidate(id="x", name=name)) is expected


@pytest.fixture
def store(tmp_path):
    return ResultStore(tmp_path / "scan_results.json")


def _scanner(store, item, subtitles, catalog=None):
    catalog = catalog or FakeCatalog()
    catalog.add_library("Movies", [item])
    return LibraryScanner(catalog, store, subtitles=subtitles)


def test_acquire_downloads_chosen_candidate(store):
    item = make_item(name="Movie X")
    provider = FakeSubtitles(SCENARIO_CANDIDATES)
    scanner = _scanner(store, item, provider)

    result = scanner.acquire_subtitles(item.id)

    assert result.success is True
    assert result.message == "Downloaded: Foreign parts"
    assert provider.searches == [(item.id, "eng", True, True)]
    assert provider.downloads == [(item.id, "3")]


def test_acquire_uses_configured_language(store):
    item = make_item()
    provider = FakeSubtitles(SCENARIO_CANDIDATES)
    scanner = _scanner(store, item, provider)
    scanner.subtitle_settings = SubtitleConfig(language="ger")

    scanner.acquire_subtitles(item.id)
    assert provider.searches[0][1] == "ger"


def test_acquire_without_match_reports_failure(store):
    item = make_item()
    provider = FakeSubtitles([{"id": "1", "name": "English", "rating": 5}])
    scanner = _scanner(store, item, provider)

    result = scanner.acquire_subtitles(item.id)

    assert result.success is False
    assert result.message == "No forced subtitles found."
    assert provider.downloads == []


def test_acquire_download_error_reports_failure(store):
    item = make_item()
    provider = FakeSubtitles(SCENARIO_CANDIDATES, error=ConnectionError("provider offline"))
    scanner = _scanner(store, item, provider)

    result = scanner.acquire_subtitles(item.id)

    assert result.success is False
    assert result.message == "Error: provider offline"


def test_acquire_download_refused_reports_failure(store):
    item = make_item()
    provider = FakeSubtitles(SCENARIO_CANDIDATES, download_ok=False)
    scanner = _scanner(store, item, provider)

    result = scanner.acquire_subtitles(item.id)

    assert result.success is False
    assert result.message.startswith("Error:")
    assert "Foreign parts" in result.message


def test_acquire_rejects_non_video(store):
    series = make_item(kind=ItemKind.SERIES)
    scanner = _scanner(store, series, FakeSubtitles(SCENARIO_CANDIDATES))

    with pytest.raises(NotAVideoError):
        scanner.acquire_subtitles(series.id)


def test_acquire_unknown_item(store):
    scanner = _scanner(store, make_item(), FakeSubtitles())
    with pytest.raises(ItemNotFoundError):
        scanner.acquire_subtitles(make_item().id)


def test_acquire_without_provider(store):
    item = make_item()
    scanner = _scanner(store, item, None)
    with pytest.raises(SubtitlesUnavailableError):
        scanner.acquire_subtitles(item.id)


def test_acquire_runs_during_a_scan(store):
    """Subtitle acquisition ignores the scan flag."""
    catalog = BlockingCatalog()
    item = make_item()
    scanner = _scanner(store, item, FakeSubtitles(SCENARIO_CANDIDATES), catalog=catalog)
    library = scanner.get_libraries()[0]

    worker = threading.Thread(target=scanner.start_scan, args=(library.id,))
    worker.start()
    assert catalog.entered.wait(timeout=5)

    assert scanner.is_scanning
    assert scanner.acquire_subtitles(item.id).success is True

    catalog.release.set()
    worker.join(timeout=5)
    assert not scanner.is_scanning
