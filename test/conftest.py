"""
Pytest configuration and shared fixtures.

Every test gets its own in-memory SQLite database (one shared connection
through StaticPool) with the reference categories already seeded.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from contactbook.auth.jwt import JWTService
from contactbook.auth.passwords import ScryptPasswordHasher, get_password_hasher
from contactbook.categories.seeder import seed_reference_data
from contactbook.config import Settings, get_settings
from contactbook.main import app
from contactbook.shared.database import Base, get_db_session
from contactbook.shared.rate_limit import reset_rate_limiters
from contactbook.shared.validation import years_ago


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        app_env="dev",
        debug=True,
        database_url="sqlite+aiosqlite:///:memory:",
        database_auto_create=False,
        jwt_secret_key="test-secret-key-for-testing-only",
        jwt_access_token_expire_minutes=60,
        jwt_refresh_token_expire_days=7,
        rate_limit_enabled=False,
    )


@pytest_asyncio.fixture
async def db_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """Create a seeded in-memory database engine."""
    engine = create_async_engine(
        test_settings.database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    async with session_factory() as session:
        await seed_reference_data(session)
        await session.commit()

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def password_hasher() -> ScryptPasswordHasher:
    """Cheap scrypt parameters so tests stay fast."""
    return ScryptPasswordHasher(n=2**10)


@pytest.fixture
def jwt_service(test_settings: Settings) -> JWTService:
    return JWTService(settings=test_settings)


@pytest.fixture
def access_token(jwt_service: JWTService) -> str:
    return jwt_service.create_access_token("user-123", email="admin@example.com")


@pytest.fixture
def auth_headers(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


@pytest_asyncio.fixture
async def client(
    test_settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    password_hasher: ScryptPasswordHasher,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with database and settings overridden."""

    async def _override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _override_get_db_session
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_password_hasher] = lambda: password_hasher
    reset_rate_limiters()

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    reset_rate_limiters()


def contact_payload(**overrides: Any) -> dict[str, Any]:
    """Valid create/update body in the web client's camelCase shape."""
    payload: dict[str, Any] = {
        "name": "Jan",
        "surname": "Kowalski",
        "email": "jan@example.com",
        "password": "SecureP@ss1",
        "phoneNumber": "+48123456789",
        "birthDate": years_ago(30).isoformat(),
        "categoryId": 1,
        "subcategoryId": None,
        "customSubcategory": None,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_contact_payload() -> Callable[..., dict[str, Any]]:
    return contact_payload
