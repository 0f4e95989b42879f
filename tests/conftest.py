import os
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from userhub.config import Settings
from userhub.container import Container, build_container
from userhub.db.session import Base
from userhub.main import create_app
from tests.fakes import InMemorySessionRepository, InMemoryUserRepository

# Pytest only picks up fixtures from conftest.py files. Fixtures defined in other
# modules (like tests/seeds.py) are invisible unless we register them here.
pytest_plugins = ["tests.seeds"]

# Only the repository tests touch Postgres; they skip when it is not reachable.
TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL", "postgresql+asyncpg://userhub@localhost:5432/userhub_test"
)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        environment="test",
        auth_secret="test-secret",
        bcrypt_rounds=4,
        include_error_details=False,
    )


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def session_repo() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def container(
    settings: Settings,
    user_repo: InMemoryUserRepository,
    session_repo: InMemorySessionRepository,
) -> Container:
    return build_container(settings, users=user_repo, sessions=session_repo)


@pytest.fixture
def app(container: Container, settings: Settings) -> FastAPI:
    return create_app(container, settings)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """HTTP client over the in-memory app.

    raise_app_exceptions=False: Starlette re-raises unhandled errors after
    sending the 500 response, and we want to assert on that response.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        yield client


@pytest_asyncio.fixture
async def session_factory() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Create tables on the Postgres test database, yield a session factory, drop tables."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as exc:  # noqa: BLE001 refused, bad credentials, missing database
        await engine.dispose()
        pytest.skip(f"test database unavailable: {exc}")

    yield async_sessionmaker(engine, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
