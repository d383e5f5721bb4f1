"""Database session helper shared by the maintenance scripts."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import build_engine, build_session_factory


@asynccontextmanager
async def script_session() -> AsyncIterator[AsyncSession]:
    """One session for the lifetime of a script run; commits on clean exit."""
    engine = build_engine(settings.async_database_url)
    session_factory = build_session_factory(engine)
    try:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
    finally:
        await engine.dispose()
