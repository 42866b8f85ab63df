"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from bookcourier.app.main import app
from bookcourier.app.db.session import get_db, get_session_factory, Base
from bookcourier.app.core.identity import JWTIdentityVerifier, get_identity_verifier
from bookcourier.app.core.jwt import create_identity_token
from bookcourier.app.models.enums import UserRole
from bookcourier.app.models.user import User
from bookcourier.app.services.identifiers import generate_user_id
from bookcourier.app.services.payment_gateway import FakeCheckoutGateway, get_payment_gateway

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_SECRET_KEY = "test-secret-key-for-identity-tokens-only"

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

identity_verifier = JWTIdentityVerifier(algorithms=["HS256"], secret_key=TEST_SECRET_KEY)


@pytest.fixture
def payment_gateway():
    return FakeCheckoutGateway()


@pytest.fixture(autouse=True)
def apply_overrides(payment_gateway):
    """Point the app at the test database, test signing key and fake gateway."""

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    app.dependency_overrides[get_identity_verifier] = lambda: identity_verifier
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway
    yield
    app.dependency_overrides = {}


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def db_engine():
    return engine


def make_auth_headers(email: str) -> dict:
    """Bearer header carrying an ID token for the given email."""
    token = create_identity_token(email, secret_key=TEST_SECRET_KEY, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Factory for auth headers of principals with no stored user record."""
    return make_auth_headers


@pytest.fixture
def identity_secret():
    return TEST_SECRET_KEY


@pytest.fixture
def make_user(db_session):
    """Insert a user with the given role and return auth headers for them."""

    async def _make_user(email: str, role: UserRole = UserRole.USER, name: str = None) -> dict:
        db_session.add(User(user_id=generate_user_id(), email=email, name=name, role=role))
        await db_session.commit()
        return make_auth_headers(email)

    return _make_user


@pytest.fixture
async def admin_headers(make_user):
    return await make_user("admin@test.com", UserRole.ADMIN, "Admin")


@pytest.fixture
async def librarian_headers(make_user):
    return await make_user("librarian@test.com", UserRole.LIBRARIAN, "Libby")


@pytest.fixture
async def reader_headers(make_user):
    return await make_user("reader@test.com", UserRole.USER, "Reader")


@pytest.fixture
def book_payload():
    return {
        "title": "The Pragmatic Programmer",
        "author": "Andrew Hunt",
        "image": "https://img.test/pragprog.jpg",
        "price": 12.5,
        "quantity": 3,
    }


@pytest.fixture
async def book(client, librarian_headers, book_payload):
    """A published book listed by the librarian."""
    response = await client.post("/books", json=book_payload, headers=librarian_headers)
    assert response.status_code == 200
    return response.json()


@pytest.fixture
async def order(client, reader_headers, book):
    """A pending, unpaid order for `book` placed by the reader."""
    response = await client.post(
        "/orders",
        json={"bookId": book["id"], "quantity": 2, "phone": "555-0100", "address": "1 Test Lane"},
        headers=reader_headers
    )
    assert response.status_code == 200
    assert response.json()["success"] is True
    orders = await client.get("/orders", headers=reader_headers)
    return orders.json()[0]
