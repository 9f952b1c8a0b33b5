"""
Issue reporting, listing and triage endpoints.
"""
from datetime import datetime
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from issue_reporter.api.v1.dependencies import (
    evaluation_time,
    issue_filters,
    parse_issue_id,
    sort_order,
)
from issue_reporter.core.access import Action, AccessDeniedError, Principal, View
from issue_reporter.core.config import settings
from issue_reporter.core.database import get_db
from issue_reporter.core.security import require_action, require_view
from issue_reporter.schemas.issues import (
    GeoPoint,
    IssueCreate,
    IssueList,
    IssueNotesUpdate,
    IssueRead,
    IssueStatusUpdate,
    IssueSummary,
    IssueUpdateResult,
)
from issue_reporter.services.issue_filters import IssueFilters, SortOrder, apply_filters
from issue_reporter.services.issue_stats import geographic_points, summarize
from issue_reporter.services.issue_store import IssueNotFoundError, IssueStore

router = APIRouter()
users_router = APIRouter()


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Issue not found")


def _listing(issues, filters: IssueFilters, order: SortOrder, now: datetime) -> IssueList:
    all_issues = [IssueRead.model_validate(issue) for issue in issues]
    shown = apply_filters(all_issues, filters, order, now)
    return IssueList(issues=shown, showing=len(shown), total=len(all_issues))


@router.post("/", response_model=IssueRead, status_code=status.HTTP_201_CREATED)
async def create_issue(
    payload: IssueCreate,
    principal: Principal = Depends(require_action(Action.CREATE_ISSUE)),
    db: AsyncSession = Depends(get_db),
):
    """Report a new issue. It starts out ``pending`` and belongs to the caller."""
    issue = await IssueStore(db).create_issue(principal.user_id, payload)
    return issue


@router.get("/", response_model=IssueList)
async def list_issues(
    filters: IssueFilters = Depends(issue_filters),
    order: SortOrder = Depends(sort_order),
    now: datetime = Depends(evaluation_time),
    _: Principal = Depends(require_view(View.PUBLIC_DASHBOARD)),
    db: AsyncSession = Depends(get_db),
):
    """Public issue list with status, type, date-range and text filters."""
    issues = await IssueStore(db).list_issues()
    return _listing(issues, filters, order, now)


@router.get("/stats", response_model=IssueSummary)
async def get_issue_stats(
    now: datetime = Depends(evaluation_time),
    _: Principal = Depends(require_view(View.PUBLIC_DASHBOARD)),
    db: AsyncSession = Depends(get_db),
):
    """Summary cards for the public dashboard."""
    issues = [IssueRead.model_validate(i) for i in await IssueStore(db).list_issues()]
    return summarize(issues, now, settings.RECENT_ACTIVITY_DAYS)


@router.get("/map", response_model=List[GeoPoint])
async def get_issue_map(
    filters: IssueFilters = Depends(issue_filters),
    now: datetime = Depends(evaluation_time),
    _: Principal = Depends(require_view(View.ISSUE_MAP)),
    db: AsyncSession = Depends(get_db),
):
    """Map markers for the issues matching the current filters."""
    listing = _listing(await IssueStore(db).list_issues(), filters, SortOrder.NEWEST, now)
    return geographic_points(listing.issues)


@router.get("/mine", response_model=IssueList)
async def list_my_issues(
    filters: IssueFilters = Depends(issue_filters),
    order: SortOrder = Depends(sort_order),
    now: datetime = Depends(evaluation_time),
    principal: Principal = Depends(require_view(View.MY_COMPLAINTS)),
    db: AsyncSession = Depends(get_db),
):
    """The caller's own reports ("my complaints")."""
    issues = await IssueStore(db).list_user_issues(principal.user_id)
    return _listing(issues, filters, order, now)


@router.get("/{issue_id}", response_model=IssueRead)
async def get_issue(
    issue_id: str,
    _: Principal = Depends(require_action(Action.VIEW_ISSUES)),
    db: AsyncSession = Depends(get_db),
):
    """Get issue by ID."""
    try:
        return await IssueStore(db).get_issue(parse_issue_id(issue_id))
    except IssueNotFoundError:
        raise _not_found()


@router.put("/{issue_id}/status", response_model=IssueUpdateResult)
async def update_issue_status(
    issue_id: str,
    payload: IssueStatusUpdate,
    _: Principal = Depends(require_action(Action.UPDATE_STATUS)),
    db: AsyncSession = Depends(get_db),
):
    """
    Set an issue's status (admin only).

    Any status may follow any other. Re-sending the current status changes
    nothing and returns ``changed: false``.
    """
    try:
        issue, changed = await IssueStore(db).update_status(
            parse_issue_id(issue_id), payload.status
        )
    except IssueNotFoundError:
        raise _not_found()
    return IssueUpdateResult(issue=IssueRead.model_validate(issue), changed=changed)


@router.put("/{issue_id}/admin-notes", response_model=IssueUpdateResult)
async def update_issue_admin_notes(
    issue_id: str,
    payload: IssueNotesUpdate,
    _: Principal = Depends(require_action(Action.UPDATE_NOTES)),
    db: AsyncSession = Depends(get_db),
):
    """Replace an issue's admin notes (admin only)."""
    try:
        issue, changed = await IssueStore(db).update_admin_notes(
            parse_issue_id(issue_id), payload.admin_notes
        )
    except IssueNotFoundError:
        raise _not_found()
    return IssueUpdateResult(issue=IssueRead.model_validate(issue), changed=changed)


@users_router.get("/{user_id}/issues", response_model=IssueList)
async def list_user_issues(
    user_id: UUID,
    filters: IssueFilters = Depends(issue_filters),
    order: SortOrder = Depends(sort_order),
    now: datetime = Depends(evaluation_time),
    principal: Principal = Depends(require_action(Action.VIEW_OWN_ISSUES)),
    db: AsyncSession = Depends(get_db),
):
    """Issues reported by a given user; citizens may only list their own."""
    if principal.user_id != user_id and not principal.is_admin:
        raise AccessDeniedError(principal, "another user's issues")
    issues = await IssueStore(db).list_user_issues(user_id)
    return _listing(issues, filters, order, now)
