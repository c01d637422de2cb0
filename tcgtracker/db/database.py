"""
Catalog database engine and sessions.

Import endpoints own their transaction boundaries (see
``tcgtracker.importing.reconcile.dry_run_scope``), so the request-scoped
session never commits on its own.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tcgtracker.config import settings
from tcgtracker.models.db import Base


def engine_options(database_url: str) -> dict[str, Any]:
    """Engine keyword arguments for the configured backend."""
    options: dict[str, Any] = {"echo": settings.debug}
    if make_url(database_url).get_backend_name() != "sqlite":
        # Long imports hold a connection for minutes; drop stale ones first
        options["pool_pre_ping"] = True
        options["pool_size"] = settings.db_pool_size
    return options


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a catalog session.

    Anything left uncommitted when the request ends is rolled back.
    """
    async with async_session_factory() as session:
        yield session


async def init_db() -> None:
    """Create the catalog tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_db() -> None:
    """Close pooled connections on shutdown."""
    await engine.dispose()
