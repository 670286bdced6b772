"""Subtitle provider interface and forced-subtitle selection."""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from .models import Item, SubtitleCandidate

FORCED_MARKERS = ("forced", "foreign")


class SubtitleProvider(Protocol):
    def search(
        self,
        item: Item,
        language: str,
        best_match_only: bool,
        automated: bool,
    ) -> List[SubtitleCandidate]:
        ...

    def download(self, item: Item, candidate_id: str) -> bool:
        """Fetch and attach the subtitle. Returns False (or raises) on failure."""
        ...


def is_forced(candidate: SubtitleCandidate) -> bool:
    """True if the candidate's name marks it as a forced / foreign-parts track."""
    name = (candidate.name or "").casefold()
    return any(marker in name for marker in FORCED_MARKERS)


def select_forced_subtitle(
    candidates: Sequence[SubtitleCandidate],
) -> Optional[SubtitleCandidate]:
    """Pick the best-rated forced candidate; the earliest one wins a tie."""
    best: Optional[SubtitleCandidate] = None
    for candidate in candidates:
        if not is_forced(candidate):
            continue
        if best is None or (candidate.rating or 0) > (best.rating or 0):
            best = candidate
    return best
