"""
Authentication and security utilities using JWT.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from issue_reporter.core.access import (
    Action,
    Principal,
    View,
    AccessDeniedError,
    ensure_action,
    ensure_view,
)
from issue_reporter.core.config import settings
from issue_reporter.core.database import get_db
from issue_reporter.core.logging import describe_principal, principal_ctx

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# JWT bearer token scheme; missing credentials resolve to the anonymous principal
security_scheme = HTTPBearer(auto_error=False)

# JWT configuration
ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary of claims to encode in the token
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.setdefault("type", ACCESS_TOKEN_TYPE)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def create_refresh_token(data: dict) -> str:
    """
    Create a JWT refresh token with longer expiration.

    Args:
        data: Dictionary of claims to encode in the token

    Returns:
        Encoded JWT refresh token string
    """
    expires_delta = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return create_access_token({**data, "type": REFRESH_TOKEN_TYPE}, expires_delta)


def decode_token(token: str) -> dict:
    """
    Decode and verify a JWT token.

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


def token_claims(payload: dict, expected_type: str = ACCESS_TOKEN_TYPE) -> tuple[UUID, UUID]:
    """
    Extract ``(user_id, session_id)`` from a decoded token payload.

    Raises:
        HTTPException: If the payload is missing claims or has the wrong type
    """
    subject = payload.get("sub")
    session_id = payload.get("sid")
    if subject is None or session_id is None or payload.get("type") != expected_type:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return UUID(str(subject)), UUID(str(session_id))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """
    Dependency resolving the caller to a principal.

    No credentials, or a token whose session has been revoked or has lapsed,
    yields the anonymous principal. Malformed or expired tokens are rejected.
    """
    from issue_reporter.services.accounts import AccountService

    if credentials is None:
        return Principal.anonymous()

    payload = decode_token(credentials.credentials)
    user_id, session_id = token_claims(payload)

    user = await AccountService(db).get_session_user(user_id, session_id)
    if user is None:
        return Principal.anonymous()

    principal = Principal.for_user(user, session_id=session_id)
    principal_ctx.set(describe_principal(principal.kind.value, principal.user_id))
    return principal


async def get_current_user(principal: Principal = Depends(get_principal)) -> Principal:
    """Dependency requiring an authenticated principal."""
    if not principal.is_authenticated:
        raise AccessDeniedError(principal, "this resource")
    return principal


def require_view(view: View):
    """Dependency factory checking the view table on every request."""

    async def view_checker(principal: Principal = Depends(get_principal)) -> Principal:
        return ensure_view(principal, view)

    return view_checker


def require_action(action: Action):
    """Dependency factory checking the action table on every request."""

    async def action_checker(principal: Principal = Depends(get_principal)) -> Principal:
        return ensure_action(principal, action)

    return action_checker
