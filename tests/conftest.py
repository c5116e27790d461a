"""Shared fixtures: isolated singletons, in-memory database, ASGI client."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from warroom.app.core.cache import reset_cache
from warroom.app.db import models  # noqa: F401  (registers the tables)
from warroom.app.db.async_session import get_db
from warroom.app.db.base import Base
from warroom.app.main import create_app
from warroom.app.middleware.rate_limit import reset_rate_limiters
from warroom.app.providers.mentionlytics import reset_mentionlytics_client
from warroom.app.services.listening import reset_listening_service


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def reset_singletons():
    """Process-wide cache, limiters and clients start fresh for every test."""
    reset_cache()
    reset_rate_limiters()
    reset_mentionlytics_client()
    reset_listening_service()
    yield
    reset_cache()
    reset_rate_limiters()
    reset_mentionlytics_client()
    reset_listening_service()


@pytest_asyncio.fixture
async def session_maker() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def app(session_maker):
    """Application with ``get_db`` bound to the in-memory database."""
    application = create_app()

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
