"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ADMIN_API_KEY"] = "test-admin-key"

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities.account import Account, AccountRole, ProfileFields
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base, AccountUnlockModel
from infrastructure.database.repositories.sqlalchemy_account_repo import (
    SQLAlchemyAccountRepository,
)


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_USER_ID = "user-test-0001"
ADMIN_KEY = "test-admin-key"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def seed_account(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Any]:
    """Insert an account (and its unlock set) directly into the test database."""

    async def _seed(
        account_id: str,
        role: AccountRole = AccountRole.PARTICIPANT,
        email: str | None = None,
        visible: bool = True,
        unlocked: tuple[str, ...] = (),
        unlock_count: int = 0,
        **profile: Any,
    ) -> Account:
        account = Account(
            id=account_id,
            role=role,
            email=email,
            visible=visible,
            profile=ProfileFields(**profile),
            unlock_count=unlock_count,
        )
        async with session_factory() as session:
            repo = SQLAlchemyAccountRepository(session)
            await repo.create(account)
            for target_id in unlocked:
                session.add(AccountUnlockModel(viewer_id=account_id, target_id=target_id))
            await session.commit()
        return account

    return _seed


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user with fixed ID."""
    return TokenUser(
        id=TEST_USER_ID,
        email="test@example.com",
        display_name="Test User",
    )


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def headers_for(auth_provider: JWTAuthProvider) -> Callable[..., dict[str, str]]:
    """Build authorization headers for an arbitrary subject."""

    def _headers(account_id: str, email: str | None = None) -> dict[str, str]:
        token = auth_provider.create_token(TokenUser(id=account_id, email=email))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def identity_repository() -> Any:
    """Identity provider stand-in that records deletions."""
    from tests.unit.conftest import RecordingIdentityRepository

    return RecordingIdentityRepository()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def test_app(
    session_factory: async_sessionmaker[AsyncSession],
    auth_provider: JWTAuthProvider,
    identity_repository: Any,
) -> FastAPI:
    """
    Create an app wired to the test database.

    - Uses an in-memory SQLite database
    - Validates tokens signed by the test auth provider
    - Swaps the identity provider for a recording stand-in
    """
    from api.dependencies.auth import get_auth_provider
    from api.dependencies.services import (
        get_account_service,
        get_directory_service,
        get_maintenance_service,
        get_unlock_service,
    )
    from domain.entities.maintenance import PreservePolicy
    from domain.services.account_service import AccountService
    from domain.services.directory_service import DirectoryService
    from domain.services.maintenance_service import MaintenanceService
    from domain.services.unlock_service import UnlockService
    from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
    from main import create_app

    app = create_app()

    # Create a UoW factory that uses test session
    def test_uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_account_service] = lambda: AccountService(test_uow_factory)
    app.dependency_overrides[get_unlock_service] = lambda: UnlockService(test_uow_factory)
    app.dependency_overrides[get_directory_service] = lambda: DirectoryService(
        test_uow_factory
    )
    app.dependency_overrides[get_maintenance_service] = lambda: MaintenanceService(
        test_uow_factory,
        identity_repository=identity_repository,
        preserve_policy=PreservePolicy.build(emails=["keep@example.com"]),
    )
    return app


@pytest.fixture
async def api_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Client for the test app; pass per-request auth headers."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    test_app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(
    test_app: FastAPI, auth_headers: dict[str, str]
) -> AsyncGenerator[AsyncClient, None]:
    """Client that always sends the test user's token."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=auth_headers
    ) as c:
        yield c

    test_app.dependency_overrides.clear()
