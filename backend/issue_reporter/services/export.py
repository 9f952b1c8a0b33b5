"""
Serialisation of issue collections and analytics reports for download.
"""
from __future__ import annotations

import csv
import io
import json
from datetime import datetime
from typing import List, Sequence

from issue_reporter.schemas.issues import IssueRead, MonthlyReport

ISSUE_CSV_FIELDS = [
    "id",
    "user_id",
    "issue_type",
    "description",
    "photo_url",
    "latitude",
    "longitude",
    "location_address",
    "priority",
    "status",
    "admin_notes",
    "created_at",
    "updated_at",
]

MONTHLY_CSV_HEADER = [
    "Month",
    "Total Issues",
    "Resolved Issues",
    "Avg Resolution Time (days)",
    "Total Cost",
]


def export_filename(prefix: str, extension: str, now: datetime) -> str:
    """e.g. ``issues-export-2025-02-16.json``."""
    return f"{prefix}-{now.date().isoformat()}.{extension}"


def issues_to_json(issues: Sequence[IssueRead]) -> str:
    """Pretty-printed JSON array of issues."""
    payload = [issue.model_dump(mode="json") for issue in issues]
    return json.dumps(payload, indent=2)


def issues_to_csv(issues: Sequence[IssueRead]) -> str:
    """CSV rendering of issues, one row per issue, empty cells for nulls."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=ISSUE_CSV_FIELDS, lineterminator="\n")
    writer.writeheader()
    for issue in issues:
        row = issue.model_dump(mode="json")
        writer.writerow({field: "" if row[field] is None else row[field] for field in ISSUE_CSV_FIELDS})
    return buffer.getvalue()


def monthly_reports_to_csv(reports: List[MonthlyReport]) -> str:
    """CSV of the monthly analytics report; header only when there is no data."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(MONTHLY_CSV_HEADER)
    for report in reports:
        writer.writerow(
            [
                report.month,
                report.total_issues,
                report.resolved_issues,
                f"{report.avg_resolution_time:.2f}",
                f"{report.total_cost:g}",
            ]
        )
    return buffer.getvalue()
