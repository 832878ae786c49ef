"""Auth schemas: CurrentUser, login requests, session and permission responses."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from salesdesk.models.enums import LoginMethod, UserRole


class CurrentUser(BaseModel):
    """Lightweight user context resolved from the session token + DB lookup."""

    user_id: uuid.UUID
    role: UserRole
    name: str | None = None
    username: str | None = None


class PasswordLoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)


class OAuthLoginRequest(BaseModel):
    open_id: str = Field(..., min_length=1, max_length=64)
    name: str | None = None
    email: str | None = None


class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user_id: uuid.UUID
    role: UserRole


class MeResponse(BaseModel):
    id: uuid.UUID
    username: str | None = None
    name: str | None = None
    email: str | None = None
    role: UserRole
    login_method: LoginMethod
    department: str | None = None
    last_signed_in: datetime | None = None
    permissions: dict[str, list[str]]  # resource_type -> allowed actions


class PermissionMatrixResponse(BaseModel):
    role: UserRole
    permissions: dict[str, list[str]]
