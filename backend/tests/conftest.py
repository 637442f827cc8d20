"""Pytest configuration and fixtures for testing."""

import os

# Settings are read at import time; these must be in place before any app import.
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret-with-at-least-32-bytes!")
os.environ.setdefault("MODE", "testing")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

# Registers every table on SQLModel.metadata
import app.models  # noqa: E402, F401
from app.controllers import user_controller  # noqa: E402
from app.core.pokeapi import PokeAPIClient  # noqa: E402
from app.core.token_service import TokenService  # noqa: E402
from app.core.tokens import AccessTokenCodec  # noqa: E402
from app.db.database import build_sessionmaker  # noqa: E402
from app.models.base import utc_now  # noqa: E402

TEST_SECRET = os.environ["ACCESS_TOKEN_SECRET"]
POKEAPI_TEST_URL = "https://pokeapi.test/api/v2"


class FrozenClock:
    """A clock tests can move by hand."""

    def __init__(self, now: datetime | None = None):
        self.now = now or utc_now()

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest_asyncio.fixture
async def test_engine():
    """In-memory SQLite shared by every session in the test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # ON DELETE CASCADE is off in SQLite unless asked for
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return build_sessionmaker(test_engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def codec(clock):
    return AccessTokenCodec(TEST_SECRET, ttl=timedelta(minutes=15), clock=clock)


@pytest.fixture
def token_service(codec, clock):
    return TokenService(codec=codec, refresh_ttl_days=7, lock_rows=True, clock=clock)


@pytest_asyncio.fixture
async def ash(db):
    """A committed user to hang tokens off."""
    user = await user_controller.create_user("ash", "ash@example.com", "pikachu123", db)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def misty(db):
    user = await user_controller.create_user("misty", "misty@example.com", "starmie123", db)
    await db.commit()
    return user


@pytest.fixture
def pokeapi_handler():
    """Replace in a test to script PokéAPI responses."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"detail": "Not found"})

    return handler


@pytest_asyncio.fixture
async def pokeapi_client(pokeapi_handler):
    client = PokeAPIClient(POKEAPI_TEST_URL, transport=httpx.MockTransport(lambda r: pokeapi_handler(r)))
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def client(session_factory, token_service, pokeapi_client):
    """HTTP client against the app with storage and services swapped for test ones."""
    from app.api.deps import get_db, get_pokeapi_client, get_token_service
    from app.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_service] = lambda: token_service
    app.dependency_overrides[get_pokeapi_client] = lambda: pokeapi_client

    # Secure cookies are only stored/sent over https
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="https://testserver") as http_client:
        yield http_client

    app.dependency_overrides.clear()
