from collections.abc import AsyncIterator
from functools import lru_cache

from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)
from sqlalchemy.orm import DeclarativeBase

from academia_authz.infrastructure.config.settings import get_settings


# Modern SQLAlchemy 2.0 pattern
class Base(DeclarativeBase):
    """Base class for all database models"""

    pass


@lru_cache
def get_engine() -> AsyncEngine:
    """Create the engine once per process, on first use."""
    settings = get_settings()
    if settings.database_url.startswith("sqlite"):
        return create_async_engine(settings.database_url, echo=settings.database_echo)

    return create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_size=20,
        max_overflow=30,
        pool_recycle=3600,
        connect_args=(
            {
                "server_settings": {"jit": "off"},
                "command_timeout": 60,
            }
            if "postgresql" in settings.database_url
            else {}
        ),
    )


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Database session dependency for read operations.
    Does not commit - read-only operations don't need commits.
    Write operations should use get_db_transactional().
    """
    async with get_session_factory()() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_db_transactional() -> AsyncIterator[AsyncSession]:
    """
    Database session dependency for write operations with automatic transaction management.
    - Begins transaction automatically
    - Commits on success
    - Rolls back on exception
    - Closes session automatically

    The uniqueness check and the insert of an assignment run inside this one
    transaction, so the unique indexes arbitrate concurrent grants.
    """
    async with get_session_factory()() as session:
        try:
            async with session.begin():
                yield session
        except Exception:
            await session.rollback()
            raise
