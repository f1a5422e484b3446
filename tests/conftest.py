"""
Shared fixtures: an in-memory SQLite database per test, seeded roles and an
HTTP client bound to the app with `get_db` overridden.
"""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.printcost.core.security import create_access_token, get_password_hash
from src.printcost.crud.crud_role import role as crud_role
from src.printcost.crud.crud_user import user as crud_user
from src.printcost.db.init_db import seed
from src.printcost.db.session import get_db
from src.printcost.main import create_app
from src.printcost.models import Base

TEST_DATABASE_URL = "sqlite+aiosqlite://"
DEFAULT_PASSWORD = "secret123"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db(engine):
    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded_db(db):
    """Database with permissions, roles and global parameters from roles.yaml."""
    await seed(db, with_admin=False)
    return db


@pytest.fixture
def make_user(seeded_db):
    """Factory creating a user with the given plan and role."""

    async def _make_user(
        email: str = "maker@example.com",
        plan_tier: str = "free",
        role: str = "user",
        status: str = "active",
        password: str = DEFAULT_PASSWORD,
    ):
        role_obj = await crud_role.get_by_name(seeded_db, name=role) if role else None
        return await crud_user.create(
            seeded_db,
            obj_in={
                "email": email,
                "name": email.split("@")[0].title(),
                "password_hash": get_password_hash(password),
                "plan_tier": plan_tier,
                "status": status,
                "role_id": role_obj.id if role_obj else None,
            },
        )

    return _make_user


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def app(seeded_db):
    app = create_app()

    async def override_get_db():
        yield seeded_db

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def headers_for():
    """Bearer headers for a user."""
    return auth_headers
