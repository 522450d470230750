"""Test fixtures for JWKSmith tests."""

import os
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import delete

from jwksmith import JWKSmith
from jwksmith.models import SigningKey

# By default every test gets its own SQLite file.
# Set DATABASE_URL (e.g. postgresql+asyncpg://...) to run against a server instead.
_raw_url = os.environ.get("DATABASE_URL", "sqlite")

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def set(self, value: datetime) -> None:
        self.current = value

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


def _database_url(tmp_path) -> str:
    if _raw_url.startswith("sqlite"):
        return f"sqlite+aiosqlite:///{tmp_path / 'jwksmith.db'}"
    return _raw_url


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def make_smith(tmp_path, clock):
    """Factory for migrated JWKSmith instances sharing the test's database and clock."""
    instances = []

    async def factory(**kwargs) -> JWKSmith:
        kwargs.setdefault("private_key_ttl", 100)
        kwargs.setdefault("key_ttl", 200)
        instance = JWKSmith(_database_url(tmp_path), clock=clock, **kwargs)
        await instance.migrate()
        instances.append(instance)
        return instance

    yield factory

    for instance in instances:
        await instance.dispose()


@pytest_asyncio.fixture
async def smith(make_smith):
    """A JWKSmith instance with 100s private key TTL and 200s key TTL."""
    instance = await make_smith()
    async with instance.get_session() as session:
        await session.execute(delete(SigningKey))
    return instance


@pytest_asyncio.fixture
async def client(smith: JWKSmith):
    """Async HTTP client against an app exposing the JWKS and admin routers."""
    app = FastAPI()
    app.include_router(smith.jwks_router())
    app.include_router(smith.admin_router())

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
