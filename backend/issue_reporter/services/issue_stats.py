"""
Aggregate statistics and analytics reports over issue collections.

All functions are pure: they depend only on the issues passed in and, where
relevant, the evaluation instant ``now``.
"""
from __future__ import annotations

import math
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Sequence

from issue_reporter.models.issues import IssuePriority, IssueStatus, IssueType
from issue_reporter.schemas.issues import (
    DepartmentStats,
    GeoPoint,
    IssueAnalytics,
    IssueRead,
    IssueSummary,
    MonthlyReport,
)

SECONDS_PER_DAY = 60 * 60 * 24
RECENT_ACTIVITY_DAYS = 7
DEFAULT_PRIORITY = IssuePriority.MEDIUM
GENERAL_SERVICES = "General Services"

# Reported departments and their flat cost per assigned issue.
DEPARTMENT_COSTS: Dict[str, float] = {
    "Road Maintenance": 150,
    "Sanitation": 75,
    "Utilities": 200,
    "Public Safety": 100,
    "Parks & Recreation": 125,
}

DEPARTMENT_BY_TYPE: Dict[IssueType, str] = {
    IssueType.POTHOLE: "Road Maintenance",
    IssueType.GARBAGE: "Sanitation",
    IssueType.STREETLIGHT: "Utilities",
    IssueType.WATER_LEAK: "Utilities",
    IssueType.BROKEN_SIDEWALK: "Road Maintenance",
    IssueType.TRAFFIC_SIGNAL: "Public Safety",
    IssueType.STREET_SIGN: "Public Safety",
    IssueType.DRAINAGE: "Utilities",
    IssueType.TREE_MAINTENANCE: "Parks & Recreation",
    IssueType.GRAFFITI: "Public Safety",
    IssueType.NOISE_COMPLAINT: "Public Safety",
    IssueType.PARKING_VIOLATION: "Public Safety",
    IssueType.OTHER: GENERAL_SERVICES,
}

DEFAULT_ISSUE_COST = 100.0

ISSUE_COSTS: Dict[IssueType, float] = {
    IssueType.POTHOLE: 150,
    IssueType.GARBAGE: 75,
    IssueType.STREETLIGHT: 200,
    IssueType.WATER_LEAK: 300,
    IssueType.BROKEN_SIDEWALK: 100,
    IssueType.TRAFFIC_SIGNAL: 150,
    IssueType.STREET_SIGN: 100,
    IssueType.DRAINAGE: 250,
    IssueType.TREE_MAINTENANCE: 125,
    IssueType.GRAFFITI: 50,
    IssueType.NOISE_COMPLAINT: 25,
    IssueType.PARKING_VIOLATION: 25,
    IssueType.OTHER: 100,
}


def percentage(part: int, whole: int) -> int:
    """Integer percentage rounded half-up; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return math.floor(part / whole * 100 + 0.5)


def resolution_days(issue: IssueRead) -> float:
    """Days between creation and the last update of an issue."""
    return (issue.updated_at - issue.created_at).total_seconds() / SECONDS_PER_DAY


def average_resolution_days(issues: Iterable[IssueRead]) -> float:
    """Mean resolution time in days over resolved issues; 0 when there are none."""
    durations = [
        resolution_days(issue)
        for issue in issues
        if issue.status == IssueStatus.RESOLVED
    ]
    if not durations:
        return 0.0
    return sum(durations) / len(durations)


def summarize(
    issues: Sequence[IssueRead],
    now: datetime,
    recent_days: int = RECENT_ACTIVITY_DAYS,
) -> IssueSummary:
    """Counts by status, resolution rate and recent activity."""
    counts = Counter(issue.status for issue in issues)
    total = len(issues)
    resolved = counts[IssueStatus.RESOLVED]
    recent_cutoff = now - timedelta(days=recent_days)

    return IssueSummary(
        total=total,
        pending=counts[IssueStatus.PENDING],
        in_progress=counts[IssueStatus.IN_PROGRESS],
        resolved=resolved,
        resolution_rate=percentage(resolved, total),
        recent_activity=sum(1 for issue in issues if issue.created_at >= recent_cutoff),
    )


def analyze(
    issues: Sequence[IssueRead],
    now: datetime,
    recent_days: int = RECENT_ACTIVITY_DAYS,
) -> IssueAnalytics:
    """Summary plus average resolution time and per-category breakdowns."""
    by_type: Dict[str, int] = {}
    by_priority: Dict[str, int] = {}
    for issue in issues:
        type_key = issue.issue_type.value
        priority_key = (issue.priority or DEFAULT_PRIORITY).value
        by_type[type_key] = by_type.get(type_key, 0) + 1
        by_priority[priority_key] = by_priority.get(priority_key, 0) + 1

    summary = summarize(issues, now, recent_days)
    return IssueAnalytics(
        **summary.model_dump(),
        avg_resolution_time=average_resolution_days(issues),
        by_type=by_type,
        by_priority=by_priority,
    )


def department_for(issue_type: IssueType) -> str:
    return DEPARTMENT_BY_TYPE.get(issue_type, GENERAL_SERVICES)


def department_breakdown(issues: Sequence[IssueRead]) -> List[DepartmentStats]:
    """Per-department workload, performance and cost."""
    rows = []
    for name, cost_per_issue in DEPARTMENT_COSTS.items():
        assigned = [i for i in issues if department_for(i.issue_type) == name]
        resolved = sum(1 for i in assigned if i.status == IssueStatus.RESOLVED)
        rows.append(
            DepartmentStats(
                name=name,
                issues_assigned=len(assigned),
                avg_resolution_time=average_resolution_days(assigned),
                resolution_rate=(resolved / len(assigned) * 100) if assigned else 0.0,
                cost=len(assigned) * cost_per_issue,
            )
        )
    return rows


def monthly_reports(issues: Sequence[IssueRead]) -> List[MonthlyReport]:
    """Month-by-month volume, resolution and cost, oldest month first."""
    by_month: Dict[str, List[IssueRead]] = {}
    for issue in issues:
        by_month.setdefault(issue.created_at.strftime("%Y-%m"), []).append(issue)

    reports = []
    for month in sorted(by_month):
        month_issues = by_month[month]
        reports.append(
            MonthlyReport(
                month=month,
                total_issues=len(month_issues),
                resolved_issues=sum(
                    1 for i in month_issues if i.status == IssueStatus.RESOLVED
                ),
                avg_resolution_time=average_resolution_days(month_issues),
                total_cost=sum(
                    ISSUE_COSTS.get(i.issue_type, DEFAULT_ISSUE_COST) for i in month_issues
                ),
            )
        )
    return reports


def geographic_points(issues: Sequence[IssueRead]) -> List[GeoPoint]:
    """Map markers for the given issues."""
    return [
        GeoPoint(
            id=issue.id,
            latitude=issue.latitude,
            longitude=issue.longitude,
            issue_type=issue.issue_type,
            status=issue.status,
            priority=issue.priority or DEFAULT_PRIORITY,
        )
        for issue in issues
    ]
