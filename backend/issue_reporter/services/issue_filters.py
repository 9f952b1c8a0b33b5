"""
In-memory filtering, searching and sorting of issue collections.

Everything here is pure: the same inputs (including ``now``) always produce
the same output sequence, and the input sequence is never mutated.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from issue_reporter.schemas.issues import IssueRead

ALL = "all"

# Trailing windows in days, keyed by every accepted spelling.
_DAY_WINDOWS = {
    "7": 7,
    "30": 30,
    "90": 90,
    "365": 365,
    "week": 7,
    "month": 30,
    "year": 365,
}

DATE_RANGES = (ALL, "today", *_DAY_WINDOWS)


class SortOrder(str, enum.Enum):
    NEWEST = "newest"
    OLDEST = "oldest"


@dataclass(frozen=True)
class IssueFilters:
    """Criteria for narrowing an issue list; ``"all"`` disables a filter."""

    status: str = ALL
    issue_type: str = ALL
    date_range: str = ALL
    search: Optional[str] = None


def cutoff_for(date_range: str, now: datetime) -> Optional[datetime]:
    """
    Resolve a date range name to the earliest ``created_at`` it admits.

    Returns None for ``"all"``. ``"today"`` means midnight of ``now`` in
    ``now``'s own timezone.

    Raises:
        ValueError: If the range name is unknown
    """
    if date_range == ALL:
        return None
    if date_range == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    days = _DAY_WINDOWS.get(date_range)
    if days is None:
        raise ValueError(f"Unknown date range: {date_range}")
    return now - timedelta(days=days)


def _matches_search(issue: IssueRead, needle: str) -> bool:
    haystacks = [issue.description, str(issue.id), issue.issue_type.value]
    if issue.location_address:
        haystacks.append(issue.location_address)
    return any(needle in value.casefold() for value in haystacks)


def _enum_value(value) -> str:
    return value.value if isinstance(value, enum.Enum) else str(value)


def filter_issues(
    issues: Iterable[IssueRead],
    filters: IssueFilters,
    now: datetime,
) -> List[IssueRead]:
    """Return the issues satisfying every active filter, in input order."""
    status = _enum_value(filters.status)
    issue_type = _enum_value(filters.issue_type)
    cutoff = cutoff_for(filters.date_range, now)
    needle = (filters.search or "").strip().casefold()

    result = []
    for issue in issues:
        if status != ALL and issue.status.value != status:
            continue
        if issue_type != ALL and issue.issue_type.value != issue_type:
            continue
        if cutoff is not None and issue.created_at < cutoff:
            continue
        if needle and not _matches_search(issue, needle):
            continue
        result.append(issue)
    return result


def sort_issues(issues: Iterable[IssueRead], order: SortOrder) -> List[IssueRead]:
    """Stable sort by ``created_at``; equal timestamps keep their input order."""
    return sorted(
        issues,
        key=lambda issue: issue.created_at,
        reverse=SortOrder(order) is SortOrder.NEWEST,
    )


def apply_filters(
    issues: Sequence[IssueRead],
    filters: IssueFilters,
    order: SortOrder,
    now: datetime,
) -> List[IssueRead]:
    """Filter then sort an issue collection."""
    return sort_issues(filter_issues(issues, filters, now), order)
