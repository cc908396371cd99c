"""
Global test fixtures for mongo_identity.

This module provides shared fixtures for all tests including:
- Mock MongoDB (mongomock-motor)
- Identity settings and DbContext wired to the mock database
- User and role stores
- User and role factories
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from mongo_identity.config import Settings  # noqa: E402
from mongo_identity.database.context import DbContext  # noqa: E402
from mongo_identity.models import Claim, Role, User, UserLoginInfo  # noqa: E402
from mongo_identity.services import RoleStore, UserStore  # noqa: E402


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture
def identity_settings() -> Settings:
    """Settings pointing at a test identity database."""
    return Settings(
        connection_string="mongodb://localhost:27017",
        identity_database="identity_test",
    )


# =============================================================================
# MongoDB Fixtures (mongomock-motor)
# =============================================================================

@pytest_asyncio.fixture
async def mock_async_mongo_client():
    """
    Create an async mock MongoDB client using mongomock-motor.
    """
    client = AsyncMongoMockClient()
    yield client
    client.close()


@pytest_asyncio.fixture
async def db_context(identity_settings, mock_async_mongo_client):
    """DbContext backed by the in-memory MongoDB."""
    context = DbContext(identity_settings, client=mock_async_mongo_client)
    yield context
    context.dispose()


@pytest_asyncio.fixture
async def user_store(db_context):
    """UserStore over the mock context."""
    store = UserStore(db_context)
    yield store
    store.dispose()


@pytest_asyncio.fixture
async def role_store(db_context):
    """RoleStore over the mock context."""
    store = RoleStore(db_context)
    yield store
    store.dispose()


# =============================================================================
# Entity Factories
# =============================================================================

@pytest.fixture
def make_user():
    """
    Factory for unsaved users.

    Usage:
        def test_something(make_user):
            user = make_user("alice", email="alice@example.com")
    """
    def _make(user_name: str = "alice", **fields) -> User:
        fields.setdefault("email", f"{user_name}@example.com")
        return User(user_name=user_name, **fields)
    return _make


@pytest.fixture
def make_role():
    """Factory for unsaved roles."""
    def _make(name: str = "admin", **fields) -> Role:
        return Role(name=name, **fields)
    return _make


@pytest.fixture
def full_user() -> User:
    """A user with every field populated."""
    return User(
        user_name="Alice",
        normalized_user_name="ALICE",
        email="Alice@Example.com",
        normalized_email="ALICE@EXAMPLE.COM",
        email_confirmed=True,
        password_hash="AQAAAAEAACcQAAAAEHash==",
        security_stamp="6f1b7c2e-stamp",
        concurrency_stamp="c0ffee",
        phone_number="+15555550100",
        phone_number_confirmed=True,
        two_factor_enabled=True,
        lockout_end=datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc),
        lockout_enabled=True,
        access_failed_count=2,
        claims=[Claim(type="department", value="research")],
        roles=["admin"],
    )


@pytest.fixture
def google_login() -> UserLoginInfo:
    """External login info for a Google account."""
    return UserLoginInfo(
        login_provider="Google",
        provider_key="google-oauth2|1234567890",
        provider_display_name="Google",
    )
