"""
Identity store configuration loaded from environment variables.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Identity store settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MONGO_IDENTITY_",
        env_file=".env",
        extra="ignore",
    )

    # MongoDB
    connection_string: Optional[str] = Field(
        default=None,
        description="MongoDB connection URI",
    )
    identity_database: Optional[str] = Field(
        default=None,
        description="Database holding the user and role collections",
    )

    # Collections
    user_table_name: str = Field(default="Users")
    role_table_name: str = Field(default="Roles")

    # Indexes
    unique_user_names: bool = Field(
        default=False,
        description="Create a unique index on normalized user names",
    )

    # Logging
    log_level: str = Field(default="INFO")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
