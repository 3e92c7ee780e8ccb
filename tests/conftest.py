"""Shared pytest fixtures for all test suites."""

from collections.abc import AsyncGenerator, Iterator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from backend.docchat.config import Settings
from backend.docchat.db.engine import create_session_factory
from backend.docchat.db.models import Base
from backend.docchat.main import create_app

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin-password"


@pytest.fixture
def settings() -> Settings:
    """In-memory settings with no provider credentials."""
    return Settings(
        _env_file=None,
        database_url=None,
        openai_api_key=None,
        anthropic_api_key=None,
        ocr_space_api_key=None,
        bootstrap_admin_username=ADMIN_USERNAME,
        bootstrap_admin_email="admin@example.com",
        bootstrap_admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    """Fresh application (and fresh in-memory stores) per test."""
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Anonymous test client; entering it runs the lifespan (admin seeding)."""
    with TestClient(app) as test_client:
        yield test_client


def login(client: TestClient, username: str, password: str) -> None:
    """Log in and keep the session cookie on the client."""
    response = client.post("/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text


@pytest.fixture
def admin_client(client: TestClient) -> TestClient:
    """Test client logged in as the seeded admin."""
    login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
    return client


@pytest.fixture
def user_client(app: FastAPI) -> Iterator[TestClient]:
    """Test client signed up as a regular user."""
    with TestClient(app) as test_client:
        response = test_client.post(
            "/auth/signup",
            json={"email": "user@example.com", "username": "user", "password": "secret"},
        )
        assert response.status_code == 200, response.text
        yield test_client


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine with all tables created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'docchat.db'}",
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def sql_session(sqlite_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Async session bound to the SQLite test engine."""
    async with create_session_factory(sqlite_engine)() as session:
        yield session
