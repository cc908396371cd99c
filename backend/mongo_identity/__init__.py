"""
mongo_identity - MongoDB storage for identity users, roles, claims and logins.
"""
from mongo_identity.builder import IdentityStores, add_mongo_identity
from mongo_identity.config import Settings, get_settings
from mongo_identity.core import (
    CancellationToken,
    IdentityResult,
    IdentityStoreError,
    ConfigurationError,
    ArgumentError,
    ObjectDisposedError,
    OperationCancelledError,
    InvalidOperationError,
    RoleNotFoundError,
)
from mongo_identity.database import DbContext, create_indexes
from mongo_identity.models import Claim, Role, RoleClaim, User, UserLogin, UserLoginInfo
from mongo_identity.services import RoleStore, UserStore

__version__ = "0.1.0"

__all__ = [
    "IdentityStores",
    "add_mongo_identity",
    "Settings",
    "get_settings",
    "CancellationToken",
    "IdentityResult",
    "IdentityStoreError",
    "ConfigurationError",
    "ArgumentError",
    "ObjectDisposedError",
    "OperationCancelledError",
    "InvalidOperationError",
    "RoleNotFoundError",
    "DbContext",
    "create_indexes",
    "Claim",
    "Role",
    "RoleClaim",
    "User",
    "UserLogin",
    "UserLoginInfo",
    "RoleStore",
    "UserStore",
]
