"""Service test fixtures — async DB, seeded principals and lessons, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - app.state.db_manager points at the test engine for the client's lifetime
    - Tokens are issued by the same TokenService the app verifies with

Design Decisions:
    - SQLite in-memory with StaticPool: one shared connection, so every session
      sees the same schema; ON CONFLICT upserts run on SQLite as on PostgreSQL
    - ASGITransport skips the lifespan: no real engine is ever created
"""

import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from orbit.api.dependencies import get_password_hasher, get_token_service
from orbit.core.domain_types import Role
from orbit.db.base import Base
from orbit.infrastructure.database import DatabaseSessionManager
import orbit.models  # noqa: F401
from orbit.main import app
from tests.services.fakes import DEFAULT_PASSWORD, FakeHasher, FakeStore


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def db_manager(test_engine):
    return DatabaseSessionManager(test_engine)


@pytest.fixture
async def client(db_manager):
    """FastAPI test client wired to the test database."""
    app.state.db_manager = db_manager
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()
    app.state.db_manager = None


@pytest.fixture
def seed_principal(db_manager):
    """Insert a principal with a real bcrypt hash of DEFAULT_PASSWORD."""

    async def _seed(role: Role = Role.STUDENT, email: str | None = None):
        password_hash = await get_password_hasher().hash(DEFAULT_PASSWORD)
        async with db_manager.unit_of_work() as uow:
            return await uow.principals.create(
                "Test User",
                email or f"{uuid.uuid4().hex[:8]}@example.com",
                password_hash,
                role,
            )

    return _seed


@pytest.fixture
def seed_lesson(db_manager):
    async def _seed(order: int = 1):
        async with db_manager.unit_of_work() as uow:
            return await uow.lessons.create(
                f"Lesson {order}", f"lesson-{order}", "", order,
            )

    return _seed


@pytest.fixture
def auth_header():
    """Authorization header carrying a fresh token for the given principal."""

    def _header(principal) -> dict[str, str]:
        token = get_token_service().issue(principal.id, principal.role)
        return {"Authorization": f"Bearer {token}"}

    return _header


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def hasher():
    return FakeHasher()
