"""
base.py - SQLAlchemy async engine and session factory for the segments table
"""
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from config import DATABASE_URL


class Base(DeclarativeBase):
    pass


_engine = create_async_engine(
    DATABASE_URL,
    echo=False,
)

# Read-only from the engine's point of view; seeding uses a sync engine
async_session_factory = async_sessionmaker(
    _engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_db() -> None:
    """Create the segments table if it does not exist."""
    from . import segment_models  # noqa: F401
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    await _engine.dispose()
