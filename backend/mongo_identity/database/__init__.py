"""
Database module - MongoDB connections, identity repository and indexes.
"""
from mongo_identity.database.connections import (
    create_mongo_client,
    get_mongo_client,
    close_connections,
    get_database,
)
from mongo_identity.database.collections import Collections
from mongo_identity.database.context import DbContext, normalize
from mongo_identity.database.indexes import create_indexes

__all__ = [
    "create_mongo_client",
    "get_mongo_client",
    "close_connections",
    "get_database",
    "Collections",
    "DbContext",
    "normalize",
    "create_indexes",
]
