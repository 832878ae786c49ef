"""User management service: password accounts, roles and resets."""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.core.errors import ConflictError
from salesdesk.core.security import hash_password, verify_password
from salesdesk.models.core import User
from salesdesk.models.enums import LoginMethod, UserRole
from salesdesk.modules.users.schemas import UserCreateRequest

logger = structlog.get_logger()


async def _get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if user is None:
        raise LookupError(f"User {user_id} not found")
    return user


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return list(result.scalars().all())


async def create_user(db: AsyncSession, body: UserCreateRequest) -> User:
    existing = await db.execute(select(User.id).where(User.username == body.username))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f"Username '{body.username}' is already taken")

    user = User(
        id=uuid.uuid4(),
        username=body.username,
        password_hash=hash_password(body.password),
        name=body.name or body.username,
        email=body.email,
        role=body.role,
        department=body.department,
        login_method=LoginMethod.PASSWORD,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError(f"Username '{body.username}' is already taken") from e
    logger.info("user.created", user_id=str(user.id), role=body.role.value)
    return user


async def update_role(db: AsyncSession, user_id: uuid.UUID, role: UserRole) -> User:
    user = await _get_user(db, user_id)
    user.role = role
    await db.flush()
    logger.info("user.role_updated", user_id=str(user_id), role=role.value)
    return user


async def delete_user(db: AsyncSession, user_id: uuid.UUID, acting_user_id: uuid.UUID) -> None:
    """Delete a password account. External identities and the caller's own account are refused."""
    if user_id == acting_user_id:
        raise ValueError("You cannot delete your own account")
    user = await _get_user(db, user_id)
    if user.login_method != LoginMethod.PASSWORD:
        raise ValueError("Only password accounts can be deleted")
    await db.delete(user)
    await db.flush()
    logger.info("user.deleted", user_id=str(user_id))


async def reset_password(db: AsyncSession, user_id: uuid.UUID, new_password: str) -> None:
    user = await _get_user(db, user_id)
    if user.login_method != LoginMethod.PASSWORD:
        raise ValueError("Only password accounts have a password to reset")
    user.password_hash = hash_password(new_password)
    await db.flush()
    logger.info("user.password_reset", user_id=str(user_id))


async def change_own_password(
    db: AsyncSession,
    user_id: uuid.UUID,
    old_password: str,
    new_password: str,
) -> None:
    user = await _get_user(db, user_id)
    if not verify_password(old_password, user.password_hash):
        raise ValueError("Current password is incorrect")
    user.password_hash = hash_password(new_password)
    await db.flush()
    logger.info("user.password_changed", user_id=str(user_id))
