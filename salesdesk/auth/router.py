"""Auth API router: login, external identity login, profile, logout, permissions."""

import hmac
from datetime import timedelta

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.auth import service
from salesdesk.auth.dependencies import get_current_user, get_db_user
from salesdesk.auth.rbac import get_permissions_for_role
from salesdesk.core.config import settings
from salesdesk.core.database import get_db
from salesdesk.core.errors import UNAUTHED_ERR_MSG
from salesdesk.core.security import create_session_token
from salesdesk.models.base import utcnow
from salesdesk.models.core import User
from salesdesk.schemas.auth import (
    CurrentUser,
    MeResponse,
    OAuthLoginRequest,
    PasswordLoginRequest,
    PermissionMatrixResponse,
    SessionResponse,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/auth", tags=["auth"])


def _issue_session(response: Response, user: User) -> SessionResponse:
    ttl = timedelta(minutes=settings.SESSION_TTL_MINUTES)
    token = create_session_token(user.id, user.role.value, expires_delta=ttl)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=int(ttl.total_seconds()),
        httponly=True,
        secure=settings.APP_ENV == "production",
        samesite="lax",
        path="/",
    )
    return SessionResponse(
        access_token=token,
        expires_at=utcnow() + ttl,
        user_id=user.id,
        role=user.role,
    )


@router.post("/login", response_model=SessionResponse)
async def login(
    body: PasswordLoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Username + password login. Sets the session cookie and returns the token."""
    user = await service.authenticate_password(db, body.username, body.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")
    return _issue_session(response, user)


@router.post("/oauth-login", response_model=SessionResponse)
async def oauth_login(
    body: OAuthLoginRequest,
    response: Response,
    x_identity_secret: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Called by the identity gateway after it has verified an external login."""
    expected = settings.IDENTITY_CALLBACK_SECRET
    if not expected or not x_identity_secret or not hmac.compare_digest(x_identity_secret, expected):
        logger.warning("identity_callback_rejected")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHED_ERR_MSG)

    user = await service.upsert_external_user(db, body.open_id, name=body.name, email=body.email)
    logger.info("login_succeeded", user_id=str(user.id), method="oauth")
    return _issue_session(response, user)


@router.get("/me", response_model=MeResponse)
async def get_me(user: User = Depends(get_db_user)):
    return MeResponse(
        id=user.id,
        username=user.username,
        name=user.name,
        email=user.email,
        role=user.role,
        login_method=user.login_method,
        department=user.department,
        last_signed_in=user.last_signed_in,
        permissions=get_permissions_for_role(user.role),
    )


@router.post("/logout")
async def logout(response: Response):
    """Clear the session cookie. Works with or without a valid session."""
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")
    return {"success": True}


@router.get("/permissions", response_model=PermissionMatrixResponse)
async def get_permissions(current_user: CurrentUser = Depends(get_current_user)):
    """Return the current user's permission matrix."""
    return PermissionMatrixResponse(
        role=current_user.role,
        permissions=get_permissions_for_role(current_user.role),
    )
