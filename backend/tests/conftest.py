"""Pytest configuration and fixtures for TalentHub tests."""

import os

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
# Minimum bcrypt cost keeps the suite fast
os.environ["BCRYPT_ROUNDS"] = "4"

from talenthub.database import Database, get_db
from talenthub.main import app
from talenthub.models import Candidate, User
from talenthub.services.auth import create_user_token, hash_password


VALID_CANDIDATE = {
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "phone": "+1 (555) 123-4567",
    "skills": "Python, SQL, analytics",
    "experience": 5,
    "department": "Engineering",
}


@pytest.fixture
async def database():
    """A fresh in-memory SQLite database (foreign keys on) for each test."""
    database = Database("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    await database.create_tables()
    try:
        yield database
    finally:
        await database.dispose()


@pytest.fixture
async def db(database):
    async with database.session() as session:
        yield session


@pytest.fixture
async def client(db):
    """Create a test client with database dependency override."""
    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as test_client:
        yield test_client
    app.dependency_overrides.clear()


async def _create_user(db, name: str, email: str, password: str = "password123") -> User:
    user = User(name=name, email=email, password_hash=hash_password(password))
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def user(db):
    """Create a user who owns candidates in most tests."""
    return await _create_user(db, "Test User", "testuser@example.com")


@pytest.fixture
async def second_user(db):
    """Create a second user for isolation testing."""
    return await _create_user(db, "Second User", "seconduser@example.com")


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_user_token(user.id)}"}


@pytest.fixture
def second_user_headers(second_user):
    return {"Authorization": f"Bearer {create_user_token(second_user.id)}"}


@pytest.fixture
async def candidate(db, user):
    """Create a candidate owned by ``user``."""
    candidate = Candidate(**VALID_CANDIDATE, user_id=user.id)
    db.add(candidate)
    await db.commit()
    await db.refresh(candidate)
    return candidate
