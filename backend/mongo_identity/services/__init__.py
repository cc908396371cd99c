"""
Store layer consumed by the identity framework.
"""
from mongo_identity.services.role_store import RoleStore
from mongo_identity.services.user_store import UserStore

__all__ = [
    "RoleStore",
    "UserStore",
]
