"""
Wiring helper that builds a context and stores sharing it.
"""
import logging
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from motor.motor_asyncio import AsyncIOMotorClient

from mongo_identity.config import Settings, get_settings
from mongo_identity.database.connections import get_mongo_client
from mongo_identity.database.context import DbContext
from mongo_identity.database.indexes import create_indexes
from mongo_identity.models.role import Role
from mongo_identity.models.user import User
from mongo_identity.services.role_store import RoleStore
from mongo_identity.services.user_store import UserStore

logger = logging.getLogger(__name__)

TUser = TypeVar("TUser", bound=User)
TRole = TypeVar("TRole", bound=Role)


@dataclass
class IdentityStores(Generic[TUser, TRole]):
    """Context plus the user and role stores borrowing it."""
    context: DbContext
    users: UserStore[TUser, TRole]
    roles: RoleStore[TRole]

    def dispose(self) -> None:
        self.users.dispose()
        self.roles.dispose()
        self.context.dispose()


async def add_mongo_identity(
    settings: Optional[Settings] = None,
    *,
    user_cls: type[TUser] = User,
    role_cls: type[TRole] = Role,
    client: Optional[AsyncIOMotorClient] = None,
    ensure_indexes: bool = True,
) -> IdentityStores[TUser, TRole]:
    """
    Build the identity context and stores.

    Args:
        settings: Identity settings (defaults to environment settings)
        user_cls: User model class the stores load documents into
        role_cls: Role model class the stores load documents into
        client: MongoDB client; when None, the shared client is used for
            environment settings and a new one for explicit settings
        ensure_indexes: Create lookup indexes before returning

    Returns:
        IdentityStores bundle

    Raises:
        ConfigurationError: If connection string or database name is missing
    """
    if settings is None:
        settings = get_settings()
        if client is None:
            client = await get_mongo_client()
    context = DbContext(settings, client=client)

    if ensure_indexes:
        await create_indexes(context, unique_user_names=settings.unique_user_names)

    return IdentityStores(
        context=context,
        users=UserStore(context, user_cls=user_cls, role_cls=role_cls),
        roles=RoleStore(context, role_cls=role_cls),
    )
