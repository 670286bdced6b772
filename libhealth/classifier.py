"""Metadata completeness rules.

`evaluate` is pure: it looks at one catalog item and the enabled checks and
returns the findings in a fixed rule order. The scanner turns findings into
`HealthIssue` records.
"""

from __future__ import annotations

from typing import Callable, List, NamedTuple, Tuple

from .config import ScannerConfig
from .models import IssueSeverity, IssueType, Item


class Finding(NamedTuple):
    type: IssueType
    severity: IssueSeverity


SEVERITIES = {
    IssueType.MISSING_POSTER: IssueSeverity.WARNING,
    IssueType.MISSING_OVERVIEW: IssueSeverity.INFO,
    IssueType.MISSING_YEAR: IssueSeverity.WARNING,
    IssueType.MISSING_GENRE: IssueSeverity.INFO,
    IssueType.MISSING_SUBTITLES: IssueSeverity.INFO,
}


def _missing_poster(item: Item) -> bool:
    return not item.has_primary_image


def _missing_overview(item: Item) -> bool:
    return not (item.overview or "").strip()


def _missing_year(item: Item) -> bool:
    return item.production_year is None


def _missing_genre(item: Item) -> bool:
    return not item.genres


def _missing_subtitles(item: Item) -> bool:
    # Only video items carry embedded streams worth checking
    return item.is_video and not item.has_subtitles


# (issue type, config toggle, predicate) in evaluation order
RULES: Tuple[Tuple[IssueType, str, Callable[[Item], bool]], ...] = (
    (IssueType.MISSING_POSTER, "check_missing_poster", _missing_poster),
    (IssueType.MISSING_OVERVIEW, "check_missing_overview", _missing_overview),
    (IssueType.MISSING_YEAR, "check_missing_year", _missing_year),
    (IssueType.MISSING_GENRE, "check_missing_genre", _missing_genre),
    (IssueType.MISSING_SUBTITLES, "check_missing_subtitles", _missing_subtitles),
)


def evaluate(item: Item, checks: ScannerConfig) -> List[Finding]:
    """Return every enabled rule that flags `item`, in rule order."""
    findings: List[Finding] = []
    for issue_type, toggle, predicate in RULES:
        if getattr(checks, toggle) and predicate(item):
            findings.append(Finding(issue_type, SEVERITIES[issue_type]))
    return findings
