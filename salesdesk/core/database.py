"""Persistence client: async engine + session factory owned by the application.

A ``Database`` is constructed by the app factory, opened in the lifespan and
disposed on shutdown. Request handlers reach it through ``get_db``.
"""

from collections.abc import AsyncGenerator
from typing import Any

import structlog
from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = structlog.get_logger()


class Base(DeclarativeBase):
    pass


class Database:
    """Owns one async engine and its session factory."""

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 5,
        engine_kwargs: dict[str, Any] | None = None,
    ) -> None:
        self.url = url
        self._echo = echo
        self._pool_size = pool_size
        self._max_overflow = max_overflow
        self._engine_kwargs = engine_kwargs or {}
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not open")
        return self._engine

    def open(self) -> None:
        if self._engine is not None:
            return
        kwargs: dict[str, Any] = {"echo": self._echo, **self._engine_kwargs}
        if not self.url.startswith("sqlite"):
            kwargs.setdefault("pool_size", self._pool_size)
            kwargs.setdefault("max_overflow", self._max_overflow)
            kwargs.setdefault("pool_pre_ping", True)  # Drop stale connections before use
            kwargs.setdefault("pool_recycle", 1800)
        self._engine = create_async_engine(self.url, **kwargs)
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("database_opened", dialect=self._engine.dialect.name)

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("database_closed")

    async def create_all(self) -> None:
        """Create every table on the open engine (local runs and tests; production uses Alembic)."""
        import salesdesk.models  # noqa: F401 (register all models)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    def session(self) -> AsyncSession:
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        return self._session_factory()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
