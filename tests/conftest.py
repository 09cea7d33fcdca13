"""
Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure a test environment before the app is imported
  - Provide an isolated SQLite database per test (aiosqlite)
  - Provide an HTTP client bound to that database
  - Seed roles and users for the API tests

Notes:
  - Kitchen notifications are disabled, so orders are recorded in memory
  - bcrypt runs with the minimum cost factor to keep tests fast
"""

import os
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ["ENV_MODE"] = "development"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["KITCHEN_NOTIFICATIONS_ENABLED"] = "false"
os.environ["DEBUG"] = "false"

from app.core import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None
app_config.get_settings.cache_clear()

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Permission, Role, RolePermission, User  # noqa: E402
from app.services.auth import get_password_hasher, reset_auth_services  # noqa: E402
from app.services.kitchen import get_kitchen_notifier  # noqa: E402

ADMIN_PASSWORD = "Admin123!"
WAITER_PASSWORD = "Waiter123!"


@pytest.fixture(autouse=True)
def fresh_auth_services():
    """Every test starts with an empty attempt tracker."""
    reset_auth_services()
    get_kitchen_notifier.cache_clear()
    yield
    reset_auth_services()
    get_kitchen_notifier.cache_clear()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def engine(tmp_path):
    """R: On-disk SQLite database, created fresh for each test."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def roles(db) -> dict[str, Role]:
    """R: ADMIN (every permission) and WAITER (orders only) roles."""
    admin = Role(
        name="ADMIN",
        description="System administrator",
        permissions=[RolePermission(permission=p) for p in Permission],
    )
    waiter = Role(
        name="WAITER",
        description="Waiter",
        permissions=[RolePermission(permission=Permission.MANAGE_ORDERS)],
    )
    db.add_all([admin, waiter])
    await db.commit()
    return {"ADMIN": admin, "WAITER": waiter}


@pytest.fixture
async def admin_user(db, roles) -> User:
    user = User(
        name="Admin",
        email="admin@restaurant.com",
        password_hash=get_password_hasher().hash(ADMIN_PASSWORD),
        role_id=roles["ADMIN"].id,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def waiter_user(db, roles) -> User:
    user = User(
        name="Waiter",
        email="waiter@restaurant.com",
        password_hash=get_password_hasher().hash(WAITER_PASSWORD),
        role_id=roles["WAITER"].id,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    return user


# ============================================================================
# HTTP Fixtures
# ============================================================================


@pytest.fixture
def client(session_maker):
    """
    R: TestClient whose requests use the per-test database.

    Used without a ``with`` block so the startup hook does not touch the
    application's own engine.
    """

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def login(client: TestClient, email: str, password: str) -> dict[str, str]:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def admin_headers(client, admin_user) -> dict[str, str]:
    return login(client, admin_user.email, ADMIN_PASSWORD)


@pytest.fixture
def waiter_headers(client, waiter_user) -> dict[str, str]:
    return login(client, waiter_user.email, WAITER_PASSWORD)
