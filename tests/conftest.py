import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tcgtracker.api.imports import get_registry
from tcgtracker.db.database import get_session
from tcgtracker.importing.registry import ImporterRegistry, build_default_registry
from tcgtracker.main import app
from tcgtracker.models.db import Base


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def registry() -> ImporterRegistry:
    return build_default_registry()


@pytest.fixture
async def client(session_factory, registry):
    """Provide an async test client with overridden database session and registry."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_registry] = lambda: registry

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_csv() -> bytes:
    """Generic name/set/number upload."""
    return b"""name,set,number,rarity,type
Goblin Guide,ZEN,126,rare,Creature
Lightning Bolt,M10,146,common,Instant
Counterspell,MH2,267,uncommon,Instant
"""
