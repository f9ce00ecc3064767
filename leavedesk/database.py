"""Async SQLAlchemy engine and session management."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from leavedesk.config import settings

# Async engine for FastAPI; every statement is bounded by the backend timeout
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.ENVIRONMENT == "development",
    pool_size=10,
    max_overflow=20,
    pool_pre_ping=True,
    pool_timeout=settings.BACKEND_TIMEOUT_SECONDS,
    connect_args={
        "timeout": settings.BACKEND_TIMEOUT_SECONDS,
        "command_timeout": settings.BACKEND_TIMEOUT_SECONDS,
    },
)

# Async session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def get_db() -> AsyncSession:
    """FastAPI dependency: yield an async database session.

    One session is one transaction: everything a request writes is committed
    together or rolled back together.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
