"""Async SQLAlchemy engine and session factory for the mock backend's store."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool


def _is_memory_url(database_url: str) -> bool:
    return database_url in ("sqlite+aiosqlite://", "sqlite+aiosqlite:///:memory:")


def make_engine(database_url: str) -> AsyncEngine:
    """Create an engine; in-memory SQLite shares one connection so every session sees the same data."""
    if _is_memory_url(database_url):
        return create_async_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(database_url, echo=False)


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine):
    """Create all tables defined in models.py."""
    from models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
