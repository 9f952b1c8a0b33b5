"""
Issue store: the data-access boundary for citizen issue reports.
"""
import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from issue_reporter.core.metrics import record_issue_created, record_status_change
from issue_reporter.models.issues import Issue, IssueStatus
from issue_reporter.schemas.issues import IssueCreate
from issue_reporter.utils.clock import advance, utcnow

logger = logging.getLogger(__name__)


class IssueNotFoundError(Exception):
    """No issue exists with the requested id."""

    def __init__(self, issue_id: UUID):
        super().__init__(f"Issue not found: {issue_id}")
        self.issue_id = issue_id


class IssueStore:
    """
    Persistence operations for issues.

    Every mutation refreshes ``updated_at``; requests that would not change
    anything are reported as no-ops and leave the row untouched.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_issue(self, user_id: UUID, payload: IssueCreate) -> Issue:
        """Create a new pending issue owned by ``user_id``."""
        now = utcnow()
        issue = Issue(
            user_id=user_id,
            issue_type=payload.issue_type,
            description=payload.description,
            photo_url=payload.photo_url,
            latitude=payload.latitude,
            longitude=payload.longitude,
            location_address=payload.location_address,
            priority=payload.priority,
            status=IssueStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        self.db.add(issue)
        await self.db.commit()
        await self.db.refresh(issue)

        record_issue_created(issue.issue_type.value)
        logger.info("Created %s issue %s for user %s", issue.issue_type.value, issue.id, user_id)
        return issue

    async def list_issues(self) -> List[Issue]:
        """All issues, newest first."""
        stmt = select(Issue).order_by(Issue.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_user_issues(self, user_id: UUID) -> List[Issue]:
        """Issues reported by ``user_id``, newest first."""
        stmt = (
            select(Issue)
            .where(Issue.user_id == user_id)
            .order_by(Issue.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_issue(self, issue_id: UUID) -> Optional[Issue]:
        result = await self.db.execute(select(Issue).where(Issue.id == issue_id))
        return result.scalar_one_or_none()

    async def get_issue(self, issue_id: UUID) -> Issue:
        """
        Fetch a single issue.

        Raises:
            IssueNotFoundError: If no issue has this id
        """
        issue = await self.find_issue(issue_id)
        if issue is None:
            raise IssueNotFoundError(issue_id)
        return issue

    async def update_status(self, issue_id: UUID, status: IssueStatus) -> Tuple[Issue, bool]:
        """
        Move an issue to ``status``.

        Any status may follow any other. Requesting the current status is a
        no-op: nothing is written and ``updated_at`` keeps its value.

        Returns:
            Tuple of (issue, changed)
        """
        issue = await self.get_issue(issue_id)
        previous = IssueStatus(issue.status)
        if previous == status:
            return issue, False

        issue.status = status
        issue.updated_at = advance(issue.updated_at)
        await self.db.commit()
        await self.db.refresh(issue)

        record_status_change(status.value)
        logger.info(
            "Issue %s status changed %s -> %s", issue_id, previous.value, status.value
        )
        return issue, True

    async def update_admin_notes(
        self, issue_id: UUID, admin_notes: Optional[str]
    ) -> Tuple[Issue, bool]:
        """
        Replace an issue's admin notes. Blank notes clear the field.

        Returns:
            Tuple of (issue, changed)
        """
        issue = await self.get_issue(issue_id)
        notes = admin_notes.strip() if admin_notes else None
        notes = notes or None
        if issue.admin_notes == notes:
            return issue, False

        issue.admin_notes = notes
        issue.updated_at = advance(issue.updated_at)
        await self.db.commit()
        await self.db.refresh(issue)

        logger.info("Updated admin notes on issue %s", issue_id)
        return issue, True
