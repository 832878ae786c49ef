"""Core models: User."""

from datetime import datetime

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from salesdesk.models.base import BaseModel
from salesdesk.models.enums import LoginMethod, UserRole


class User(BaseModel):
    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_username", "username", unique=True),
        Index("ix_users_open_id", "open_id", unique=True),
        Index("ix_users_role", "role"),
    )

    # Pure external identities carry no username
    username: Mapped[str | None] = mapped_column(String(64))
    open_id: Mapped[str | None] = mapped_column(String(64))
    name: Mapped[str | None] = mapped_column(String(255))
    email: Mapped[str | None] = mapped_column(String(320))
    login_method: Mapped[LoginMethod] = mapped_column(
        nullable=False, default=LoginMethod.PASSWORD
    )
    password_hash: Mapped[str | None] = mapped_column(String(255))
    role: Mapped[UserRole] = mapped_column(nullable=False, default=UserRole.SALESPERSON)
    department: Mapped[str | None] = mapped_column(String(100))
    last_signed_in: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username!r}, role={self.role.value})>"
