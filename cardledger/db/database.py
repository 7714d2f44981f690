"""
Database engine and session management.

One async engine per process. Every unit of work (an HTTP request, a job
run) gets its own session from ``session_scope``: committed when the block
completes, rolled back when it raises.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from cardledger.config import settings
from cardledger.models.db import Base


def build_engine(database_url: str | None = None) -> AsyncEngine:
    """Engine for the configured database, or for an explicit URL."""
    return create_async_engine(
        database_url or settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
    )


engine = build_engine()

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Transactional session for one unit of work."""
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency wrapping ``session_scope``.

    Usage:
        @router.get("/collection/{user_id}")
        async def get_collection(session: Annotated[AsyncSession, Depends(get_session)]):
            ...
    """
    async with session_scope() as session:
        yield session


async def init_db() -> None:
    """Create missing tables; existing tables and data are left as is."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
