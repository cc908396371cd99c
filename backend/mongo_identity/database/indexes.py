"""
Index creation for the identity collections.
"""
import logging

from pymongo import ASCENDING

from mongo_identity.database.context import DbContext

logger = logging.getLogger(__name__)


async def create_indexes(context: DbContext, unique_user_names: bool = False) -> None:
    """
    Create the indexes backing the repository lookups.

    Args:
        context: Identity context whose collections get indexed
        unique_user_names: Enforce normalized user name uniqueness at the store
    """
    users = context.users
    await users.create_index("normalized_user_name", unique=unique_user_names)
    await users.create_index("normalized_email")
    await users.create_index(
        [("login_info.login_provider", ASCENDING), ("login_info.provider_key", ASCENDING)]
    )
    await users.create_index([("claims.type", ASCENDING), ("claims.value", ASCENDING)])
    await users.create_index("roles")

    await context.roles.create_index("normalized_name")

    logger.info(
        "Identity indexes created users=%s roles=%s unique_user_names=%s",
        context.user_collection_name,
        context.role_collection_name,
        unique_user_names,
    )
