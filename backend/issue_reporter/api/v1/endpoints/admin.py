"""
Admin dashboard, analytics and export endpoints.

Every route checks the caller's role on entry; hiding navigation in the
client is not relied on.
"""
from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from issue_reporter.api.v1.dependencies import (
    evaluation_time,
    issue_filters,
    parse_issue_id,
    sort_order,
)
from issue_reporter.core.access import Action, Principal, View
from issue_reporter.core.config import settings
from issue_reporter.core.database import get_db
from issue_reporter.core.security import require_action, require_view
from issue_reporter.schemas.issues import (
    AdminDashboard,
    AdminIssueDetail,
    AnalyticsReport,
    IssueList,
    IssueRead,
    ReporterInfo,
)
from issue_reporter.services import export
from issue_reporter.services.accounts import AccountService
from issue_reporter.services.issue_filters import (
    IssueFilters,
    SortOrder,
    apply_filters,
    filter_issues,
)
from issue_reporter.services.issue_stats import (
    analyze,
    department_breakdown,
    geographic_points,
    monthly_reports,
    summarize,
)
from issue_reporter.services.issue_store import IssueNotFoundError, IssueStore

router = APIRouter()

AnalyticsPeriod = Literal["7", "30", "90", "365", "all"]


async def _all_issues(db: AsyncSession) -> list[IssueRead]:
    return [IssueRead.model_validate(i) for i in await IssueStore(db).list_issues()]


def _download(content: str, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/dashboard", response_model=AdminDashboard)
async def admin_dashboard(
    filters: IssueFilters = Depends(issue_filters),
    order: SortOrder = Depends(sort_order),
    now: datetime = Depends(evaluation_time),
    _: Principal = Depends(require_view(View.ADMIN_DASHBOARD)),
    db: AsyncSession = Depends(get_db),
):
    """Summary counts over all issues plus the filtered triage list."""
    issues = await _all_issues(db)
    shown = apply_filters(issues, filters, order, now)
    return AdminDashboard(
        stats=summarize(issues, now, settings.RECENT_ACTIVITY_DAYS),
        issues=IssueList(issues=shown, showing=len(shown), total=len(issues)),
    )


@router.get("/issues/{issue_id}", response_model=AdminIssueDetail)
async def admin_issue_detail(
    issue_id: str,
    _: Principal = Depends(require_view(View.ADMIN_ISSUE_DETAIL)),
    db: AsyncSession = Depends(get_db),
):
    """Issue triage page: the issue plus who reported it."""
    try:
        issue = await IssueStore(db).get_issue(parse_issue_id(issue_id))
    except IssueNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Issue not found")
    reporter = await AccountService(db).get_by_id(issue.user_id)
    return AdminIssueDetail(
        issue=IssueRead.model_validate(issue),
        reporter=ReporterInfo.model_validate(reporter) if reporter else None,
    )


@router.get("/analytics", response_model=AnalyticsReport)
async def admin_analytics(
    period: AnalyticsPeriod = Query("all"),
    now: datetime = Depends(evaluation_time),
    _: Principal = Depends(require_view(View.ANALYTICS)),
    db: AsyncSession = Depends(get_db),
):
    """
    Analytics for issues created within ``period`` days (or all time).

    Includes status counts, resolution metrics, per-type and per-priority
    breakdowns, department performance, monthly reports and map points.
    """
    issues = filter_issues(await _all_issues(db), IssueFilters(date_range=period), now)
    return AnalyticsReport(
        period=period,
        generated_at=now,
        stats=analyze(issues, now, settings.RECENT_ACTIVITY_DAYS),
        departments=department_breakdown(issues),
        monthly=monthly_reports(issues),
        geographic=geographic_points(issues),
    )


@router.get("/analytics/report.csv")
async def admin_analytics_csv(
    period: AnalyticsPeriod = Query("all"),
    now: datetime = Depends(evaluation_time),
    _: Principal = Depends(require_action(Action.VIEW_ANALYTICS)),
    db: AsyncSession = Depends(get_db),
):
    """Monthly analytics report as a CSV download."""
    issues = filter_issues(await _all_issues(db), IssueFilters(date_range=period), now)
    content = export.monthly_reports_to_csv(monthly_reports(issues))
    return _download(
        content, "text/csv", export.export_filename("analytics-report", "csv", now)
    )


@router.get("/export")
async def export_issues(
    format: Literal["json", "csv"] = Query("json"),
    now: datetime = Depends(evaluation_time),
    _: Principal = Depends(require_action(Action.EXPORT_DATA)),
    db: AsyncSession = Depends(get_db),
):
    """Download every issue as JSON or CSV."""
    issues = await _all_issues(db)
    if format == "csv":
        content, media_type = export.issues_to_csv(issues), "text/csv"
    else:
        content, media_type = export.issues_to_json(issues), "application/json"
    return _download(
        content, media_type, export.export_filename("issues-export", format, now)
    )
