"""
Principal repository: the single point of access to the user and role collections.

Every save replaces the whole document keyed by `_id` (upsert). There is no
version check, so concurrent writers to the same principal are last-write-wins.
"""
import logging
from datetime import datetime
from typing import Any, AsyncIterator, Optional, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pydantic import BaseModel

from mongo_identity.config import Settings, get_settings
from mongo_identity.core.errors import ArgumentError, ConfigurationError, ObjectDisposedError
from mongo_identity.database.collections import Collections
from mongo_identity.database.connections import create_mongo_client
from mongo_identity.models.claims import Claim
from mongo_identity.models.role import Role
from mongo_identity.models.user import User

logger = logging.getLogger(__name__)

TUser = TypeVar("TUser", bound=User)
TRole = TypeVar("TRole", bound=Role)
TModel = TypeVar("TModel", bound=BaseModel)


def normalize(value: Optional[str]) -> Optional[str]:
    """Uppercase a name or email for use as a lookup key."""
    if value is None:
        return None
    return value.upper()


def _to_bson_precision(value: datetime) -> datetime:
    """Drop sub-millisecond digits, which BSON dates cannot hold."""
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def _parse_object_id(value: Optional[str]) -> Optional[ObjectId]:
    if value is None:
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _to_document(model: BaseModel) -> dict[str, Any]:
    doc = model.model_dump(by_alias=True)
    object_id = _parse_object_id(doc["_id"])
    if object_id is None:
        raise ArgumentError("id", f"'{doc['_id']}' is not a valid ObjectId")
    doc["_id"] = object_id
    return doc


def _from_document(doc: Optional[dict[str, Any]], model_cls: type[TModel]) -> Optional[TModel]:
    if not doc:
        return None
    doc["_id"] = str(doc["_id"])
    return model_cls.model_validate(doc)


class DbContext:
    """
    Owns the MongoDB handle and exposes typed save/find operations.

    Normalized user names, emails and role names are uppercased when saved,
    and lookup input is uppercased as well, so lookups are case-insensitive.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[AsyncIOMotorClient] = None,
    ):
        """
        Resolve configuration into a database handle.

        Args:
            settings: Identity settings (defaults to environment settings)
            client: Existing client to use instead of creating one

        Raises:
            ConfigurationError: If connection string or database name is blank
        """
        settings = settings or get_settings()

        if not settings.connection_string or not settings.connection_string.strip():
            raise ConfigurationError(
                "Configuration value 'MONGO_IDENTITY_CONNECTION_STRING' is not defined."
            )
        if not settings.identity_database or not settings.identity_database.strip():
            raise ConfigurationError(
                "Configuration value 'MONGO_IDENTITY_IDENTITY_DATABASE' is not defined."
            )

        self.user_collection_name = self._collection_name(
            settings.user_table_name, Collections.USERS
        )
        self.role_collection_name = self._collection_name(
            settings.role_table_name, Collections.ROLES
        )

        self._owns_client = client is None
        self.client = client if client is not None else create_mongo_client(
            settings.connection_string
        )
        self._database: Optional[AsyncIOMotorDatabase] = self.client[settings.identity_database]

        logger.info(
            "Identity context ready db=%s users=%s roles=%s",
            settings.identity_database,
            self.user_collection_name,
            self.role_collection_name,
        )

    @staticmethod
    def _collection_name(configured: Optional[str], default: str) -> str:
        if configured and configured.strip():
            return configured
        logger.warning("Blank collection name configured, using default %s", default)
        return default

    # ==================== Handles ====================

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self._database is None:
            raise ObjectDisposedError(type(self).__name__)
        return self._database

    @property
    def users(self) -> AsyncIOMotorCollection:
        """Users collection handle."""
        return self.database[self.user_collection_name]

    @property
    def roles(self) -> AsyncIOMotorCollection:
        """Roles collection handle."""
        return self.database[self.role_collection_name]

    # ==================== Users ====================

    async def save_user(self, user: User) -> None:
        """
        Insert or replace a user document by id.

        Assigns a new ObjectId to users that have never been saved and
        normalizes the user name and email keys on the model itself. Login
        bindings added before the first save are stamped with the new id, and
        `lockout_end` is cut to the millisecond precision BSON stores.

        Args:
            user: Full, current user model
        """
        if user.normalized_user_name is None:
            user.normalized_user_name = user.user_name
        user.normalized_user_name = normalize(user.normalized_user_name)
        if user.normalized_email is None:
            user.normalized_email = user.email
        user.normalized_email = normalize(user.normalized_email)
        if user.lockout_end is not None:
            user.lockout_end = _to_bson_precision(user.lockout_end)
        if user.id is None:
            user.id = str(ObjectId())
        for login in user.login_info:
            if login.user_id is None:
                login.user_id = user.id

        doc = _to_document(user)
        await self.users.replace_one({"_id": doc["_id"]}, doc, upsert=True)
        logger.debug("Saved user id=%s", user.id)

    async def find_user_by_id(self, user_id: str, user_cls: type[TUser] = User) -> Optional[TUser]:
        """
        Get user by ID.

        Args:
            user_id: User ObjectId as string

        Returns:
            User model or None if not found or the id is malformed
        """
        object_id = _parse_object_id(user_id)
        if object_id is None:
            return None
        doc = await self.users.find_one({"_id": object_id})
        return _from_document(doc, user_cls)

    async def find_user_by_user_name(
        self,
        user_name: str,
        user_cls: type[TUser] = User,
    ) -> Optional[TUser]:
        """
        Get the first user whose normalized user name matches.

        Duplicates are tolerated; whichever document the server returns first wins.
        A None name matches nothing.
        """
        if user_name is None:
            return None
        doc = await self.users.find_one({"normalized_user_name": normalize(user_name)})
        return _from_document(doc, user_cls)

    async def find_user_by_email(
        self,
        normalized_email: str,
        user_cls: type[TUser] = User,
    ) -> Optional[TUser]:
        """Get user by normalized email. A None email matches nothing."""
        if normalized_email is None:
            return None
        doc = await self.users.find_one({"normalized_email": normalize(normalized_email)})
        return _from_document(doc, user_cls)

    async def find_user_by_login(
        self,
        login_provider: str,
        provider_key: str,
        user_cls: type[TUser] = User,
    ) -> Optional[TUser]:
        """Get the user owning an external login with this provider and key."""
        doc = await self.users.find_one(
            {
                "login_info": {
                    "$elemMatch": {
                        "login_provider": login_provider,
                        "provider_key": provider_key,
                    }
                }
            }
        )
        return _from_document(doc, user_cls)

    async def get_users_by_claim(self, claim: Claim, user_cls: type[TUser] = User) -> list[TUser]:
        """Get all users holding a claim with the same type and value."""
        query = {"claims": {"$elemMatch": {"type": claim.type, "value": claim.value}}}
        return [user async for user in self.query_users(query, user_cls=user_cls)]

    async def get_users_by_role(self, role_name: str, user_cls: type[TUser] = User) -> list[TUser]:
        """Get all users whose role list contains `role_name`."""
        return [user async for user in self.query_users({"roles": role_name}, user_cls=user_cls)]

    async def query_users(
        self,
        filter: Optional[dict[str, Any]] = None,
        *,
        skip: int = 0,
        limit: int = 0,
        user_cls: type[TUser] = User,
    ) -> AsyncIterator[TUser]:
        """
        Iterate users matching a MongoDB filter.

        Args:
            filter: MongoDB query document (all users if None)
            skip: Number of documents to skip
            limit: Maximum documents to return (0 means no limit)
            user_cls: Model class to validate documents into

        Yields:
            User models
        """
        cursor = self.users.find(filter or {}, skip=skip, limit=limit)
        async for doc in cursor:
            yield _from_document(doc, user_cls)

    # ==================== Roles ====================

    async def save_role(self, role: Role) -> None:
        """Insert or replace a role document by id."""
        if role.normalized_name is None:
            role.normalized_name = role.name
        role.normalized_name = normalize(role.normalized_name)
        if role.id is None:
            role.id = str(ObjectId())

        doc = _to_document(role)
        await self.roles.replace_one({"_id": doc["_id"]}, doc, upsert=True)
        logger.debug("Saved role id=%s", role.id)

    async def find_role_by_id(self, role_id: str, role_cls: type[TRole] = Role) -> Optional[TRole]:
        """Get role by ID, or None if not found or malformed."""
        object_id = _parse_object_id(role_id)
        if object_id is None:
            return None
        doc = await self.roles.find_one({"_id": object_id})
        return _from_document(doc, role_cls)

    async def find_role_by_name(self, name: str, role_cls: type[TRole] = Role) -> Optional[TRole]:
        """Get role by normalized name."""
        if name is None:
            return None
        doc = await self.roles.find_one({"normalized_name": normalize(name)})
        return _from_document(doc, role_cls)

    async def query_roles(
        self,
        filter: Optional[dict[str, Any]] = None,
        *,
        skip: int = 0,
        limit: int = 0,
        role_cls: type[TRole] = Role,
    ) -> AsyncIterator[TRole]:
        """Iterate roles matching a MongoDB filter."""
        cursor = self.roles.find(filter or {}, skip=skip, limit=limit)
        async for doc in cursor:
            yield _from_document(doc, role_cls)

    # ==================== Lifecycle ====================

    def dispose(self) -> None:
        """Release the database handle; later calls raise ObjectDisposedError."""
        self._database = None

    def close(self) -> None:
        """Dispose and close the client if this context created it."""
        self.dispose()
        if self._owns_client:
            self.client.close()
