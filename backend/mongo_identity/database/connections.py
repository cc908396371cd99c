"""
MongoDB connection management.
"""
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from mongo_identity.config import get_settings
from mongo_identity.core.errors import ConfigurationError

# Global connection instance
_mongo_client: Optional[AsyncIOMotorClient] = None


def create_mongo_client(connection_string: str) -> AsyncIOMotorClient:
    """
    Create a MongoDB client that returns timezone-aware datetimes.

    Args:
        connection_string: MongoDB connection URI

    Returns:
        New AsyncIOMotorClient
    """
    return AsyncIOMotorClient(connection_string, tz_aware=True)


async def get_mongo_client() -> AsyncIOMotorClient:
    """Get or create the shared MongoDB client."""
    global _mongo_client
    if _mongo_client is None:
        settings = get_settings()
        if not settings.connection_string or not settings.connection_string.strip():
            raise ConfigurationError(
                "Configuration value 'MONGO_IDENTITY_CONNECTION_STRING' is not defined."
            )
        _mongo_client = create_mongo_client(settings.connection_string)
    return _mongo_client


async def close_connections():
    """Close the shared MongoDB client."""
    global _mongo_client

    if _mongo_client is not None:
        _mongo_client.close()
        _mongo_client = None


async def get_database(db_name: str) -> AsyncIOMotorDatabase:
    """Get a specific MongoDB database by name."""
    client = await get_mongo_client()
    return client[db_name]
