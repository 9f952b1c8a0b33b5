"""
Shared request dependencies for issue endpoints.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import HTTPException, Query, status

from issue_reporter.models.issues import IssueStatus, IssueType
from issue_reporter.services.issue_filters import (
    ALL,
    DATE_RANGES,
    IssueFilters,
    SortOrder,
)
from issue_reporter.utils.clock import utcnow


def _invalid(field: str, value: str, allowed) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Invalid {field} '{value}'. Must be one of: {sorted(allowed)}",
    )


def issue_filters(
    status_filter: str = Query(ALL, alias="status"),
    issue_type: str = Query(ALL),
    date_range: str = Query(ALL),
    q: Optional[str] = Query(None, max_length=200, description="Free-text search"),
) -> IssueFilters:
    """Parse list query parameters into ``IssueFilters``."""
    statuses = {ALL, *(s.value for s in IssueStatus)}
    if status_filter not in statuses:
        raise _invalid("status", status_filter, statuses)

    types = {ALL, *(t.value for t in IssueType)}
    if issue_type not in types:
        raise _invalid("issue_type", issue_type, types)

    if date_range not in DATE_RANGES:
        raise _invalid("date_range", date_range, DATE_RANGES)

    return IssueFilters(
        status=status_filter,
        issue_type=issue_type,
        date_range=date_range,
        search=q,
    )


def sort_order(sort: SortOrder = Query(SortOrder.NEWEST)) -> SortOrder:
    return sort


def evaluation_time() -> datetime:
    """The instant relative to which date windows are evaluated."""
    return utcnow()


def parse_issue_id(raw: str) -> UUID:
    """Issue ids that are not UUIDs cannot name an issue, so they are a 404."""
    try:
        return UUID(raw)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Issue not found")
