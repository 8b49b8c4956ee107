"""Pytest configuration and fixtures for storefront onboarding tests.

Tests run against an in-memory SQLite database (aiosqlite) with the full
schema created from the models, and an in-process fake Redis.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
import redis.asyncio as redis
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  (registers all tables on Base.metadata)
from app.auth.jwt import create_access_token
from app.database import Base, get_db
from app.main import app
from app.models.public.organization import Organization, Store
from app.models.public.user import User
from app.schemas.drafts import DraftAppearance, DraftProduct, DraftStoreName, DraftStoreState
from app.utils import cache


# ── Fake Redis ───────────────────────────────────────────────────

class FakeRedis:
    """In-memory stand-in for the handful of Redis commands the app uses."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key):
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            removed += self.data.pop(key, None) is not None
            self.ttls.pop(key, None)
        return removed

    async def ping(self):
        return True

    async def aclose(self):
        pass


class BrokenRedis(FakeRedis):
    """Every command fails as if the server were down."""

    async def get(self, key):
        raise redis.ConnectionError("redis down")

    async def setex(self, key, ttl, value):
        raise redis.ConnectionError("redis down")

    async def delete(self, *keys):
        raise redis.ConnectionError("redis down")


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch) -> FakeRedis:
    fake = FakeRedis()
    monkeypatch.setattr(cache, "_redis_client", fake)
    return fake


@pytest.fixture
def broken_redis(monkeypatch) -> BrokenRedis:
    broken = BrokenRedis()
    monkeypatch.setattr(cache, "_redis_client", broken)
    return broken


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """Test client sharing the test session through the get_db override."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Test Data Fixtures ───────────────────────────────────────────

@pytest_asyncio.fixture
async def merchant(db_session: AsyncSession) -> User:
    user = User(
        email="merchant@example.com",
        full_name="Test Merchant",
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def organization(db_session: AsyncSession, merchant: User) -> Organization:
    org = Organization(owner_id=merchant.id, name="Acme Org", slug="acme-org")
    db_session.add(org)
    await db_session.commit()
    return org


@pytest_asyncio.fixture
async def store(db_session: AsyncSession, organization: Organization) -> Store:
    """Empty store shell, as left behind by store setup."""
    shell = Store(
        organization_id=organization.id,
        name="My Store",
        slug="acme",
        store_type="clothing",
        status="draft",
        theme_id=None,
        onboarding_completed=None,
    )
    db_session.add(shell)
    await db_session.commit()
    return shell


@pytest_asyncio.fixture
async def storeless_merchant(db_session: AsyncSession) -> User:
    user = User(email="nostore@example.com", full_name="No Store", is_active=True)
    db_session.add(user)
    await db_session.commit()
    return user


def make_token(user_id: str) -> str:
    return create_access_token(user_id=user_id)


@pytest.fixture
def auth_headers(merchant: User, store: Store) -> dict:
    """Authorization headers for the merchant that owns `store`."""
    return {"Authorization": f"Bearer {make_token(merchant.id)}"}


# ── Draft Builders ───────────────────────────────────────────────

def make_product(product_id: str, name: str, **fields) -> DraftProduct:
    return DraftProduct(id=product_id, name=name, **fields)


def make_draft(
    store_name: str | None = None,
    products: list[DraftProduct] | None = None,
    appearance: DraftAppearance | None = None,
) -> DraftStoreState:
    return DraftStoreState(
        store_name=DraftStoreName(value=store_name, confidence="user_provided", source="user")
        if store_name else None,
        products=products or [],
        appearance=appearance,
    )


def acme_draft() -> DraftStoreState:
    """The canonical onboarding draft: Acme with two products and a palette."""
    return make_draft(
        store_name="Acme",
        products=[
            make_product(
                "p1", "Linen Shirt",
                name_ar="قميص كتان", price=450.0, category="Shirts",
                image_url="https://cdn.example.com/shirt.jpg",
            ),
            make_product("p2", "Canvas Tote", category="Bags", ai_confidence="high"),
        ],
        appearance=DraftAppearance(primary_color="#112233"),
    )


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "api: HTTP endpoint tests")
    config.addinivalue_line("markers", "auth: Authentication tests")
    config.addinivalue_line("markers", "cache: Redis cache tests")
    config.addinivalue_line("markers", "workflow: Workflow tracking tests")
    config.addinivalue_line("markers", "concierge: Draft and approval tests")
    config.addinivalue_line("markers", "onboarding: Onboarding status tests")
