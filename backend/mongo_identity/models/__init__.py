"""
Pydantic models for identity documents and embedded values.
"""
from mongo_identity.models.claims import Claim, RoleClaim, UserLogin, UserLoginInfo
from mongo_identity.models.role import Role
from mongo_identity.models.user import User

__all__ = [
    "Claim",
    "RoleClaim",
    "UserLogin",
    "UserLoginInfo",
    "Role",
    "User",
]
