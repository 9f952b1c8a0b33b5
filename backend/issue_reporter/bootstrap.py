"""
Application bootstrap helpers (runs during startup).
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from issue_reporter.core.config import settings
from issue_reporter.core.database import AsyncSessionLocal
from issue_reporter.models.auth import User, UserRole
from issue_reporter.services.accounts import AccountService

logger = logging.getLogger(__name__)


async def _ensure_admin(
    session: AsyncSession, email: str, password: str, full_name: str
) -> Optional[User]:
    """Create the admin account unless the e-mail is already registered."""
    accounts = AccountService(session)
    existing = await accounts.get_by_email(email)
    if existing:
        if UserRole(existing.role) is not UserRole.ADMIN:
            logger.warning("Bootstrap admin %s exists with role %s", email, existing.role)
        return None

    admin = await accounts.create_account(
        email=email, password=password, full_name=full_name, role=UserRole.ADMIN
    )
    logger.info("Seeded bootstrap admin account %s", admin.id)
    return admin


async def seed_admin(session: AsyncSession | None = None) -> Optional[User]:
    """
    Ensure the configured bootstrap admin exists.

    Does nothing unless BOOTSTRAP_ADMIN_EMAIL and BOOTSTRAP_ADMIN_PASSWORD are
    set. If a session is not provided, a temporary AsyncSession will be created.
    """
    if not (settings.BOOTSTRAP_ADMIN_EMAIL and settings.BOOTSTRAP_ADMIN_PASSWORD):
        return None

    args = (
        settings.BOOTSTRAP_ADMIN_EMAIL,
        settings.BOOTSTRAP_ADMIN_PASSWORD,
        settings.BOOTSTRAP_ADMIN_NAME,
    )
    if session is None:
        async with AsyncSessionLocal() as temp_session:
            return await _ensure_admin(temp_session, *args)
    return await _ensure_admin(session, *args)
