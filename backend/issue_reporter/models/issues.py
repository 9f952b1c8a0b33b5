"""
Citizen-reported issue model.
"""
from sqlalchemy import (
    Column, String, Float, DateTime, Text, ForeignKey, Index, Uuid,
    Enum as SQLEnum,
)
import uuid
import enum

from issue_reporter.core.database import Base


class IssueStatus(str, enum.Enum):
    """Issue lifecycle states."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class IssueType(str, enum.Enum):
    """Categories a citizen can report."""
    POTHOLE = "pothole"
    GARBAGE = "garbage"
    STREETLIGHT = "streetlight"
    WATER_LEAK = "water_leak"
    BROKEN_SIDEWALK = "broken_sidewalk"
    TRAFFIC_SIGNAL = "traffic_signal"
    STREET_SIGN = "street_sign"
    DRAINAGE = "drainage"
    TREE_MAINTENANCE = "tree_maintenance"
    GRAFFITI = "graffiti"
    NOISE_COMPLAINT = "noise_complaint"
    PARKING_VIOLATION = "parking_violation"
    OTHER = "other"


class IssuePriority(str, enum.Enum):
    """Optional urgency hint supplied by the reporter."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


def _string_enum(enum_cls, name: str) -> SQLEnum:
    return SQLEnum(
        enum_cls,
        name=name,
        native_enum=False,
        values_callable=lambda members: [m.value for m in members],
    )


class Issue(Base):
    """
    A geotagged complaint submitted by a citizen.

    ``user_id``, ``issue_type``, ``photo_url``, coordinates and ``created_at``
    are fixed at creation; only ``status`` and ``admin_notes`` change later.
    """
    __tablename__ = "issues"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Reporter
    user_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )

    # Report details
    issue_type = Column(_string_enum(IssueType, "issue_type"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    photo_url = Column(Text)
    priority = Column(_string_enum(IssuePriority, "issue_priority"))

    # Location
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    location_address = Column(String(512))

    # Triage
    status = Column(
        _string_enum(IssueStatus, "issue_status"),
        nullable=False,
        default=IssueStatus.PENDING,
        index=True,
    )
    admin_notes = Column(Text)

    # Timestamps (set explicitly by the store)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_issues_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Issue(id={self.id}, type={self.issue_type}, status={self.status})>"
