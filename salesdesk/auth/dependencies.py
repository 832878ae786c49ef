"""FastAPI auth dependencies: get_current_user, require_permission, get_db_user."""

import sentry_sdk
import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.auth.rbac import check_permission
from salesdesk.core.config import settings
from salesdesk.core.database import get_db
from salesdesk.core.errors import NOT_ADMIN_ERR_MSG, UNAUTHED_ERR_MSG
from salesdesk.core.security import decode_session_token
from salesdesk.models.core import User
from salesdesk.schemas.auth import CurrentUser

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=UNAUTHED_ERR_MSG,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """
    Resolve the caller from a session token.

    The token is read from the Authorization header first, then from the
    session cookie. The user row must still exist.
    """
    token = credentials.credentials if credentials else request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise _unauthenticated()

    try:
        user_id = decode_session_token(token)
    except JWTError as e:
        logger.warning("session_token_invalid", error=str(e))
        raise _unauthenticated() from e

    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if user is None:
        logger.warning("session_user_not_found", user_id=str(user_id))
        raise _unauthenticated()

    current_user = CurrentUser(
        user_id=user.id,
        role=user.role,
        name=user.name,
        username=user.username,
    )

    request.state.user_id = current_user.user_id
    sentry_sdk.set_user({"id": str(user.id)})
    sentry_sdk.set_tag("user_role", user.role.value)

    return current_user


def require_permission(action: str, resource_type: str):
    """
    Dependency factory: checks a specific (action, resource_type) permission.

    Usage:
        @router.delete("/{meeting_id}", dependencies=[Depends(require_permission("delete", "meeting"))])
    """

    async def _check_perm(
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if not check_permission(current_user.role, action, resource_type):
            logger.info(
                "permission_denied",
                user_id=str(current_user.user_id),
                role=current_user.role.value,
                action=action,
                resource_type=resource_type,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=NOT_ADMIN_ERR_MSG,
            )
        return current_user

    return _check_perm


async def get_db_user(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Load the full SQLAlchemy User model. Use when you need the complete record."""
    stmt = select(User).where(User.id == current_user.user_id)
    result = await db.execute(stmt)
    return result.scalar_one()
