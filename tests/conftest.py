"""
Pytest configuration and shared fixtures.

The environment is pinned before ``menu_app`` is imported so the cached
settings pick up the testing values. Every test gets its own SQLite
database file, in-memory session store and upload directory.
"""

import os
import sys
import tempfile
from pathlib import Path

# Add project root to sys.path so we can import menu_app
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

os.environ["ENV_MODE"] = "testing"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SESSION_BACKEND"] = "memory"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["UPLOAD_DIRECTORY"] = tempfile.mkdtemp(prefix="menu-uploads-")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from menu_app.database import get_db, init_db
from menu_app.main import app
from menu_app.models import Meal, User, UserRole
from menu_app.security import hash_password
from menu_app.services.sessions import MemorySessionStore, get_session_store
from menu_app.services.storage import LocalImageStorage, get_image_storage

from helpers import PASSWORD


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'menu.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def session_store():
    return MemorySessionStore(ttl_seconds=3600)


@pytest.fixture
def image_storage(tmp_path):
    return LocalImageStorage(str(tmp_path / "uploads"), url_prefix="/uploads", max_bytes=1024 * 1024)


@pytest_asyncio.fixture
async def client(session_maker, session_store, image_storage):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_image_storage] = lambda: image_storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c

    app.dependency_overrides.clear()


# =============================================================================
# DATA HELPERS
# =============================================================================

@pytest.fixture
def make_user(session_maker):
    """Insert a user directly and return it."""

    async def _make(username="diner", email=None, password=PASSWORD, role=UserRole.CUSTOMER):
        async with session_maker() as session:
            user = User(
                username=username,
                email=email or f"{username}@example.com",
                password=hash_password(password),
                role=role,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make


@pytest.fixture
def make_meal(session_maker):
    async def _make(name="Lamb Rogan Josh", image="/uploads/rogan-josh.png", **fields):
        values = {
            "ingredients": "lamb, yoghurt, kashmiri chilli",
            "allergens": "dairy",
            "spice_level": "medium",
            "category": "main",
            "cuisine": "Indian",
            "dish_type": "curry",
        }
        values.update(fields)
        async with session_maker() as session:
            meal = Meal(name=name, meal_image=image, **values)
            session.add(meal)
            await session.commit()
            await session.refresh(meal)
            return meal

    return _make


@pytest.fixture
def login(client):
    """Log ``user`` in through the login form; the client keeps the cookie."""

    async def _login(user, password=PASSWORD):
        response = await client.post("/login", data={"email": user.email, "password": password})
        assert response.status_code == 303
        return response

    return _login


@pytest_asyncio.fixture
async def admin(make_user, login):
    user = await make_user("chef", role=UserRole.ADMIN)
    await login(user)
    return user

