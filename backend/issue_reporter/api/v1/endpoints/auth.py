"""
Authentication endpoints for registration, login, logout and profile.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, EmailStr, ConfigDict, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from issue_reporter.core.access import (
    Action,
    Principal,
    PrincipalKind,
    View,
    permitted_actions,
    permitted_views,
)
from issue_reporter.core.database import get_db
from issue_reporter.core.rate_limiter import auth_limit
from issue_reporter.core.security import (
    REFRESH_TOKEN_TYPE,
    decode_token,
    get_current_user,
    get_principal,
    require_action,
    require_view,
    token_claims,
)
from issue_reporter.models.auth import User, UserRole
from issue_reporter.services.accounts import (
    AccountService,
    DuplicateEmailError,
    InvalidCredentialsError,
)

router = APIRouter()


# Request/Response Models
class RegisterRequest(BaseModel):
    """Self-service citizen registration."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    full_name: str = Field(..., min_length=1, max_length=255)

    @field_validator("full_name")
    @classmethod
    def full_name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Full name is required")
        return v.strip()


class LoginRequest(BaseModel):
    """Login credentials."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    """Token pair for an authenticated session."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    """Profile as shown to its owner."""

    id: UUID
    email: str
    full_name: str
    role: UserRole
    created_at: datetime
    updated_at: datetime
    last_login_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SessionResponse(TokenResponse):
    user: UserResponse


class ProfileUpdate(BaseModel):
    """Self-service profile edit. Role is deliberately absent."""

    model_config = ConfigDict(extra="forbid")

    full_name: Optional[str] = Field(None, min_length=1, max_length=255)

    @field_validator("full_name")
    @classmethod
    def full_name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.strip():
            raise ValueError("Full name cannot be blank")
        return v.strip()


class PermissionsResponse(BaseModel):
    principal: PrincipalKind
    user_id: Optional[UUID] = None
    views: List[View]
    actions: List[Action]


async def _load_user(principal: Principal, db: AsyncSession) -> User:
    user = await AccountService(db).get_by_id(principal.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


# Auth Endpoints
@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
@auth_limit
async def register(
    request: Request,
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a citizen account and log it in.

    The role is always ``citizen``; admin accounts are provisioned by the
    operator script.
    """
    accounts = AccountService(db)
    try:
        user = await accounts.create_account(
            email=payload.email,
            password=payload.password,
            full_name=payload.full_name,
        )
    except DuplicateEmailError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    tokens = await accounts.open_session(user)
    return {**tokens, "user": UserResponse.model_validate(user)}


@router.post("/login", response_model=SessionResponse)
@auth_limit
async def login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate and open a session.

    Returns access token (30 min expiry) and refresh token (7 day expiry).
    """
    accounts = AccountService(db)
    try:
        user = await accounts.authenticate(credentials.email, credentials.password)
    except InvalidCredentialsError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    tokens = await accounts.open_session(user)
    return {**tokens, "user": UserResponse.model_validate(user)}


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    payload: RefreshRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Exchange a refresh token for a new token pair on the same session.

    Fails once the session has been logged out or has expired.
    """
    claims = decode_token(payload.refresh_token)
    user_id, session_id = token_claims(claims, expected_type=REFRESH_TOKEN_TYPE)

    accounts = AccountService(db)
    user = await accounts.get_session_user(user_id, session_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired or logged out",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return accounts.issue_tokens(user, session_id)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    principal: Principal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Revoke the caller's session; its tokens stop resolving to a user."""
    await AccountService(db).revoke_session(principal.session_id)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    principal: Principal = Depends(require_view(View.PROFILE)),
    db: AsyncSession = Depends(get_db),
):
    """Get the caller's profile."""
    return await _load_user(principal, db)


@router.patch("/me", response_model=UserResponse)
async def update_current_user(
    payload: ProfileUpdate,
    principal: Principal = Depends(require_action(Action.EDIT_PROFILE)),
    db: AsyncSession = Depends(get_db),
):
    """Edit the caller's profile."""
    user = await _load_user(principal, db)
    return await AccountService(db).update_profile(user, payload.full_name)


@router.get("/permissions", response_model=PermissionsResponse)
async def get_permissions(principal: Principal = Depends(get_principal)):
    """Views and actions available to the caller, for navigation rendering."""
    return PermissionsResponse(
        principal=principal.kind,
        user_id=principal.user_id,
        views=sorted(permitted_views(principal), key=lambda v: v.value),
        actions=sorted(permitted_actions(principal), key=lambda a: a.value),
    )
