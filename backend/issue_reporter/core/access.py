"""
Role-gated access model: which views and actions each principal may use.

The tables here are the single source of truth for authorization. Endpoints
enforce them through the dependencies in ``issue_reporter.core.security``;
``GET /auth/permissions`` exposes them so clients can hide navigation, which
is a convenience only. ``View.LOGIN`` is granted to every principal, so the
login route runs without a check.
"""

from __future__ import annotations

import enum
from typing import FrozenSet, Optional
from uuid import UUID

from fastapi import HTTPException, status
from pydantic import BaseModel, ConfigDict

from issue_reporter.models.auth import UserRole

HOME_PATH = "/"


class PrincipalKind(str, enum.Enum):
    ANONYMOUS = "anonymous"
    CITIZEN = "citizen"
    ADMIN = "admin"


class View(str, enum.Enum):
    PUBLIC_DASHBOARD = "public_dashboard"
    ISSUE_MAP = "issue_map"
    LOGIN = "login"
    REPORT_ISSUE = "report_issue"
    MY_COMPLAINTS = "my_complaints"
    PROFILE = "profile"
    ADMIN_DASHBOARD = "admin_dashboard"
    ADMIN_ISSUE_DETAIL = "admin_issue_detail"
    ANALYTICS = "analytics"


class Action(str, enum.Enum):
    VIEW_ISSUES = "view_issues"
    CREATE_ISSUE = "create_issue"
    VIEW_OWN_ISSUES = "view_own_issues"
    EDIT_PROFILE = "edit_profile"
    UPDATE_STATUS = "update_status"
    UPDATE_NOTES = "update_notes"
    VIEW_ANALYTICS = "view_analytics"
    EXPORT_DATA = "export_data"


_ANONYMOUS_VIEWS = frozenset({View.PUBLIC_DASHBOARD, View.ISSUE_MAP, View.LOGIN})
_CITIZEN_VIEWS = _ANONYMOUS_VIEWS | {View.REPORT_ISSUE, View.MY_COMPLAINTS, View.PROFILE}
_ADMIN_VIEWS = _CITIZEN_VIEWS | {
    View.ADMIN_DASHBOARD,
    View.ADMIN_ISSUE_DETAIL,
    View.ANALYTICS,
}

_ANONYMOUS_ACTIONS = frozenset({Action.VIEW_ISSUES})
_CITIZEN_ACTIONS = _ANONYMOUS_ACTIONS | {
    Action.CREATE_ISSUE,
    Action.VIEW_OWN_ISSUES,
    Action.EDIT_PROFILE,
}
_ADMIN_ACTIONS = _CITIZEN_ACTIONS | {
    Action.UPDATE_STATUS,
    Action.UPDATE_NOTES,
    Action.VIEW_ANALYTICS,
    Action.EXPORT_DATA,
}

VIEWS_BY_KIND = {
    PrincipalKind.ANONYMOUS: _ANONYMOUS_VIEWS,
    PrincipalKind.CITIZEN: frozenset(_CITIZEN_VIEWS),
    PrincipalKind.ADMIN: frozenset(_ADMIN_VIEWS),
}

ACTIONS_BY_KIND = {
    PrincipalKind.ANONYMOUS: _ANONYMOUS_ACTIONS,
    PrincipalKind.CITIZEN: frozenset(_CITIZEN_ACTIONS),
    PrincipalKind.ADMIN: frozenset(_ADMIN_ACTIONS),
}


class Principal(BaseModel):
    """The resolved identity of the caller for a single request."""

    model_config = ConfigDict(frozen=True)

    kind: PrincipalKind = PrincipalKind.ANONYMOUS
    user_id: Optional[UUID] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    session_id: Optional[UUID] = None

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls()

    @classmethod
    def for_user(cls, user, session_id: Optional[UUID] = None) -> "Principal":
        role = UserRole(user.role)
        kind = PrincipalKind.ADMIN if role is UserRole.ADMIN else PrincipalKind.CITIZEN
        return cls(
            kind=kind,
            user_id=user.id,
            email=user.email,
            full_name=user.full_name,
            session_id=session_id,
        )

    @property
    def is_authenticated(self) -> bool:
        return self.kind is not PrincipalKind.ANONYMOUS

    @property
    def is_admin(self) -> bool:
        return self.kind is PrincipalKind.ADMIN


class AccessDeniedError(HTTPException):
    """Raised when a principal reaches a view or action it is not allowed."""

    def __init__(self, principal: Principal, target: str):
        if principal.is_authenticated:
            code = status.HTTP_403_FORBIDDEN
            detail = f"Access denied: {target} requires admin privileges"
        else:
            code = status.HTTP_401_UNAUTHORIZED
            detail = f"Access denied: please log in to access {target}"
        headers = None if principal.is_authenticated else {"WWW-Authenticate": "Bearer"}
        super().__init__(status_code=code, detail=detail, headers=headers)
        self.target = target


def permitted_views(principal: Principal) -> FrozenSet[View]:
    return VIEWS_BY_KIND[principal.kind]


def permitted_actions(principal: Principal) -> FrozenSet[Action]:
    return ACTIONS_BY_KIND[principal.kind]


def can_view(principal: Principal, view: View) -> bool:
    return view in permitted_views(principal)


def can_perform(principal: Principal, action: Action) -> bool:
    return action in permitted_actions(principal)


def ensure_view(principal: Principal, view: View) -> Principal:
    """Return the principal unchanged, or raise ``AccessDeniedError``."""
    if not can_view(principal, view):
        raise AccessDeniedError(principal, view.value)
    return principal


def ensure_action(principal: Principal, action: Action) -> Principal:
    if not can_perform(principal, action):
        raise AccessDeniedError(principal, action.value)
    return principal
