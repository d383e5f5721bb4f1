"""Async SQLAlchemy engine/session construction, declarative base, and mixins."""

import uuid
from collections.abc import AsyncIterator
from datetime import datetime, timezone

from fastapi import Request
from sqlalchemy import event, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create the process-wide async engine for ``url``.

    SQLite (tests, local development) gets a static pool for in-memory
    databases and foreign key enforcement so ``ON DELETE CASCADE`` behaves
    as it does on PostgreSQL.
    """
    if url.startswith("sqlite"):
        kwargs: dict = {}
        if ":memory:" in url:
            kwargs["poolclass"] = StaticPool
        engine = create_async_engine(url, echo=echo, **kwargs)

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


_UPSERT_BUILDERS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def upsert_insert(db: AsyncSession):
    """Dialect-specific ``insert`` supporting ``on_conflict_do_update`` for the session's bind."""
    dialect = db.get_bind().dialect.name
    try:
        return _UPSERT_BUILDERS[dialect]
    except KeyError:
        raise RuntimeError(f"Upsert is not supported on {dialect!r}") from None


def naive_utcnow() -> datetime:
    """Current time as naive UTC, matching the naive DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """Mixin that adds created_at and updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )


class UUIDPrimaryKeyMixin:
    """Mixin that adds a UUID primary key column."""

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield an async database session for FastAPI dependency injection.

    The session factory is built once by ``create_app`` and kept on
    ``app.state``.

    Usage::

        @app.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
