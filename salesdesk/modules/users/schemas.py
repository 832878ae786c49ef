"""User management: Pydantic schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from salesdesk.models.enums import LoginMethod, UserRole

USERNAME_PATTERN = r"^[A-Za-z0-9_.-]{3,32}$"
MIN_PASSWORD_LENGTH = 6
# bcrypt hashes at most 72 bytes of input
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


class UserCreateRequest(BaseModel):
    username: str = Field(..., pattern=USERNAME_PATTERN)
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_BYTES)
    name: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=320)
    role: UserRole = UserRole.SALESPERSON
    department: str | None = Field(None, max_length=100)

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class UpdateRoleRequest(BaseModel):
    role: UserRole


class ResetPasswordRequest(BaseModel):
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_BYTES)

    @field_validator("new_password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_BYTES)

    @field_validator("new_password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str | None
    name: str | None
    email: str | None
    role: UserRole
    login_method: LoginMethod
    department: str | None
    last_signed_in: datetime | None
    created_at: datetime


class UserListResponse(BaseModel):
    items: list[UserResponse]
    total: int
