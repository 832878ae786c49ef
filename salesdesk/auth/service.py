"""Auth service: password login and external-identity upsert."""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.core.config import settings
from salesdesk.core.security import verify_password
from salesdesk.models.base import utcnow
from salesdesk.models.core import User
from salesdesk.models.enums import LoginMethod, UserRole

logger = structlog.get_logger()


async def authenticate_password(db: AsyncSession, username: str, password: str) -> User | None:
    """Return the user when the credentials match, else None."""
    stmt = select(User).where(User.username == username)
    user = (await db.execute(stmt)).scalar_one_or_none()
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", username=username)
        return None

    user.last_signed_in = utcnow()
    await db.flush()
    logger.info("login_succeeded", user_id=str(user.id), method="password")
    return user


async def upsert_external_user(
    db: AsyncSession,
    open_id: str,
    name: str | None = None,
    email: str | None = None,
) -> User:
    """Create the user on first login, refresh name/email afterwards.

    The identity matching ``OWNER_OPEN_ID`` is promoted to admin.
    """
    stmt = select(User).where(User.open_id == open_id)
    user = (await db.execute(stmt)).scalar_one_or_none()
    is_owner = bool(settings.OWNER_OPEN_ID) and open_id == settings.OWNER_OPEN_ID

    if user is None:
        user = User(
            id=uuid.uuid4(),
            open_id=open_id,
            name=name,
            email=email,
            login_method=LoginMethod.OAUTH,
            role=UserRole.ADMIN if is_owner else UserRole.SALESPERSON,
        )
        db.add(user)
        logger.info("external_user_created", user_id=str(user.id), is_owner=is_owner)
    else:
        if name is not None:
            user.name = name
        if email is not None:
            user.email = email
        if is_owner and user.role != UserRole.ADMIN:
            user.role = UserRole.ADMIN

    user.last_signed_in = utcnow()
    await db.flush()
    return user
