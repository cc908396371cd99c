"""
Backend-specific test fixtures and helpers.

These fixtures extend the global fixtures with helpers for inspecting
what actually landed in the mock MongoDB collections.
"""

import pytest
from bson import ObjectId


# =============================================================================
# Raw Document Helpers
# =============================================================================

@pytest.fixture
def raw_user_doc(db_context):
    """
    Fetch a user document straight from the collection.

    Usage:
        async def test_something(raw_user_doc):
            doc = await raw_user_doc(user.id)
    """
    async def _fetch(user_id: str):
        return await db_context.users.find_one({"_id": ObjectId(user_id)})
    return _fetch


@pytest.fixture
def raw_role_doc(db_context):
    """Fetch a role document straight from the collection."""
    async def _fetch(role_id: str):
        return await db_context.roles.find_one({"_id": ObjectId(role_id)})
    return _fetch


@pytest.fixture
def saved_role(db_context, make_role):
    """
    Factory that saves a role and returns it.

    Usage:
        async def test_something(saved_role):
            admin = await saved_role("admin")
    """
    async def _save(name: str = "admin", **fields):
        role = make_role(name, **fields)
        await db_context.save_role(role)
        return role
    return _save
