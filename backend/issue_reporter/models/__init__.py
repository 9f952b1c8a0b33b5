"""
SQLAlchemy database models.
"""

from issue_reporter.models.auth import User, UserRole, UserSession
from issue_reporter.models.issues import Issue, IssuePriority, IssueStatus, IssueType

__all__ = [
    "User",
    "UserRole",
    "UserSession",
    "Issue",
    "IssuePriority",
    "IssueStatus",
    "IssueType",
]
