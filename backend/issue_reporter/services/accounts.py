"""
Account and login-session service.
"""
import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from issue_reporter.core.config import settings
from issue_reporter.core.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
)
from issue_reporter.models.auth import User, UserRole, UserSession
from issue_reporter.utils.clock import advance, as_utc, utcnow

logger = logging.getLogger(__name__)


class DuplicateEmailError(Exception):
    """An account with this e-mail already exists."""


class InvalidCredentialsError(Exception):
    """E-mail/password pair did not match an account."""


def normalise_email(email: str) -> str:
    return email.strip().lower()


class AccountService:
    """
    Service for account creation, authentication and session lifecycle.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == normalise_email(email))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def create_account(
        self,
        email: str,
        password: str,
        full_name: str,
        role: UserRole = UserRole.CITIZEN,
    ) -> User:
        """
        Register a new account.

        The role is fixed here; self-service registration always passes the
        default citizen role.

        Raises:
            DuplicateEmailError: If the e-mail is already registered
        """
        if await self.get_by_email(email):
            raise DuplicateEmailError(email)

        now = utcnow()
        user = User(
            email=normalise_email(email),
            hashed_password=hash_password(password),
            full_name=full_name.strip(),
            role=role,
            created_at=now,
            updated_at=now,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent registration won the unique e-mail index.
            await self.db.rollback()
            raise DuplicateEmailError(email)
        await self.db.refresh(user)

        logger.info("Created %s account %s", role.value, user.id)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """
        Verify credentials and stamp ``last_login_at``.

        Raises:
            InvalidCredentialsError: If the e-mail is unknown or the password is wrong
        """
        user = await self.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.info("Rejected login attempt")
            raise InvalidCredentialsError()

        user.last_login_at = utcnow()
        await self.db.commit()
        return user

    async def open_session(self, user: User) -> dict:
        """Persist a new session and issue its token pair."""
        now = utcnow()
        session = UserSession(
            user_id=user.id,
            created_at=now,
            expires_at=now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session)

        return self.issue_tokens(user, session.id)

    @staticmethod
    def issue_tokens(user: User, session_id: UUID) -> dict:
        token_data = {
            "sub": str(user.id),
            "role": UserRole(user.role).value,
            "sid": str(session_id),
        }
        return {
            "access_token": create_access_token(token_data),
            "refresh_token": create_refresh_token(token_data),
            "token_type": "bearer",
        }

    async def get_active_session(self, session_id: UUID) -> Optional[UserSession]:
        """Return the session if it exists, is unexpired and not revoked."""
        result = await self.db.execute(
            select(UserSession).where(UserSession.id == session_id)
        )
        session = result.scalar_one_or_none()
        if session is None or session.revoked_at is not None:
            return None
        if as_utc(session.expires_at) <= utcnow():
            return None
        return session

    async def get_session_user(self, user_id: UUID, session_id: UUID) -> Optional[User]:
        """Resolve a token's claims to its user, or None if the session is gone."""
        session = await self.get_active_session(session_id)
        if session is None or session.user_id != user_id:
            return None
        return await self.get_by_id(user_id)

    async def revoke_session(self, session_id: UUID) -> bool:
        """Revoke a session. Returns False if it was already inactive."""
        session = await self.get_active_session(session_id)
        if session is None:
            return False
        session.revoked_at = utcnow()
        await self.db.commit()
        logger.info("Revoked session %s", session_id)
        return True

    async def update_profile(self, user: User, full_name: Optional[str]) -> User:
        """Apply self-service profile edits. Role is never editable here."""
        if full_name is not None and full_name.strip() != user.full_name:
            user.full_name = full_name.strip()
            user.updated_at = advance(user.updated_at)
            await self.db.commit()
            await self.db.refresh(user)
        return user
