"""
Pydantic schemas for issue reports, status updates and statistics.

``IssueRead`` is the canonical in-memory representation of an issue. The
filter engine and statistics aggregator operate on sequences of it, so its
timestamps are always normalised to timezone-aware UTC regardless of what the
database driver returns.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from issue_reporter.models.issues import IssuePriority, IssueStatus, IssueType
from issue_reporter.utils.clock import as_utc


class IssueCreate(BaseModel):
    """Citizen report submission. The reporter is taken from the session."""

    model_config = ConfigDict(extra="forbid")

    issue_type: IssueType
    description: str = Field(..., max_length=5000)
    photo_url: Optional[str] = None
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    location_address: Optional[str] = Field(None, max_length=512)
    priority: Optional[IssuePriority] = None
    status: IssueStatus = IssueStatus.PENDING

    @field_validator("status")
    @classmethod
    def status_is_pending(cls, v: IssueStatus) -> IssueStatus:
        if v is not IssueStatus.PENDING:
            raise ValueError("New issues always start as pending")
        return v

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Description is required")
        return v

    @field_validator("photo_url", "location_address")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class IssueRead(BaseModel):
    """Issue as returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    issue_type: IssueType
    description: str
    photo_url: Optional[str] = None
    latitude: float
    longitude: float
    location_address: Optional[str] = None
    priority: Optional[IssuePriority] = None
    status: IssueStatus
    admin_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalise_timezone(cls, v: datetime) -> datetime:
        return as_utc(v)


class IssueStatusUpdate(BaseModel):
    status: IssueStatus


class IssueNotesUpdate(BaseModel):
    admin_notes: Optional[str] = Field(None, max_length=5000)


class IssueUpdateResult(BaseModel):
    """Outcome of an admin mutation; ``changed`` is False for no-op requests."""

    issue: IssueRead
    changed: bool


class IssueList(BaseModel):
    """Filtered issue listing with the unfiltered count ("showing N of M")."""

    issues: List[IssueRead]
    showing: int
    total: int


class IssueSummary(BaseModel):
    """Summary cards shown on the public and admin dashboards."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    resolved: int = 0
    resolution_rate: int = Field(0, ge=0, le=100)
    recent_activity: int = 0


class IssueAnalytics(IssueSummary):
    """Admin analytics variant of the summary."""

    avg_resolution_time: float = Field(0.0, ge=0, description="Mean days to resolve")
    by_type: Dict[str, int] = Field(default_factory=dict)
    by_priority: Dict[str, int] = Field(default_factory=dict)


class DepartmentStats(BaseModel):
    name: str
    issues_assigned: int
    avg_resolution_time: float
    resolution_rate: float
    cost: float


class MonthlyReport(BaseModel):
    month: str = Field(..., description="YYYY-MM of created_at")
    total_issues: int
    resolved_issues: int
    avg_resolution_time: float
    total_cost: float


class GeoPoint(BaseModel):
    id: UUID
    latitude: float
    longitude: float
    issue_type: IssueType
    status: IssueStatus
    priority: IssuePriority


class AnalyticsReport(BaseModel):
    """Full payload of the admin analytics page."""

    period: str
    generated_at: datetime
    stats: IssueAnalytics
    departments: List[DepartmentStats]
    monthly: List[MonthlyReport]
    geographic: List[GeoPoint]


class AdminDashboard(BaseModel):
    stats: IssueSummary
    issues: IssueList


class ReporterInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    full_name: str


class AdminIssueDetail(BaseModel):
    """A single issue with the account that reported it, for triage."""

    issue: IssueRead
    reporter: Optional[ReporterInfo] = None
