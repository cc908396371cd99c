"""
Tests for settings, logging setup, cancellation tokens and store wiring.
"""

import logging

import pytest
from unittest.mock import patch

from mongo_identity.builder import IdentityStores, add_mongo_identity
from mongo_identity.config import Settings, get_settings
from mongo_identity.core.cancellation import CancellationToken, check_cancelled
from mongo_identity.core.errors import (
    ArgumentError,
    ConfigurationError,
    ObjectDisposedError,
    OperationCancelledError,
)
from mongo_identity.core.logging import setup_logging
from mongo_identity.models import User
from mongo_identity.services import RoleStore, UserStore


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        """Collection names default to Users/Roles; connection is unset."""
        monkeypatch.delenv("MONGO_IDENTITY_CONNECTION_STRING", raising=False)
        monkeypatch.delenv("MONGO_IDENTITY_IDENTITY_DATABASE", raising=False)

        settings = Settings(_env_file=None)

        assert settings.connection_string is None
        assert settings.identity_database is None
        assert settings.user_table_name == "Users"
        assert settings.role_table_name == "Roles"
        assert settings.unique_user_names is False

    def test_reads_prefixed_environment(self, monkeypatch):
        """MONGO_IDENTITY_* variables populate settings."""
        monkeypatch.setenv("MONGO_IDENTITY_CONNECTION_STRING", "mongodb://db:27017")
        monkeypatch.setenv("MONGO_IDENTITY_IDENTITY_DATABASE", "identity")
        monkeypatch.setenv("MONGO_IDENTITY_USER_TABLE_NAME", "Principals")
        monkeypatch.setenv("MONGO_IDENTITY_UNIQUE_USER_NAMES", "true")

        settings = Settings(_env_file=None)

        assert settings.connection_string == "mongodb://db:27017"
        assert settings.identity_database == "identity"
        assert settings.user_table_name == "Principals"
        assert settings.unique_user_names is True

    def test_get_settings_is_cached(self):
        """get_settings returns the same instance."""
        assert get_settings() is get_settings()


class TestLoggingSetup:
    """Tests for setup_logging."""

    def test_setup_logging_uses_level(self):
        """The requested level is passed to basicConfig."""
        with patch("mongo_identity.core.logging.logging.basicConfig") as mock_config:
            setup_logging("debug")

        assert mock_config.call_args.kwargs["level"] == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        """Unknown level names use INFO."""
        with patch("mongo_identity.core.logging.logging.basicConfig") as mock_config:
            setup_logging("chatty")

        assert mock_config.call_args.kwargs["level"] == logging.INFO


class TestCancellationToken:
    """Tests for CancellationToken."""

    def test_fresh_token_passes(self):
        """A new token without deadline never raises."""
        token = CancellationToken()

        token.throw_if_cancellation_requested()
        check_cancelled(token)
        check_cancelled(None)

        assert token.cancelled() is False
        assert token.expired() is False

    def test_cancel_raises(self):
        """cancel() makes the next check raise."""
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelledError, match="cancelled"):
            check_cancelled(token)

    def test_deadline_raises(self):
        """A passed deadline raises."""
        token = CancellationToken.with_timeout(-1)

        assert token.expired() is True
        with pytest.raises(OperationCancelledError, match="deadline"):
            token.throw_if_cancellation_requested()


class TestAddMongoIdentity:
    """Tests for the store wiring helper."""

    @pytest.mark.asyncio
    async def test_builds_stores_sharing_context(self, identity_settings, mock_async_mongo_client):
        """Both stores borrow one context and indexes are created."""
        stores = await add_mongo_identity(identity_settings, client=mock_async_mongo_client)

        assert isinstance(stores, IdentityStores)
        assert isinstance(stores.users, UserStore)
        assert isinstance(stores.roles, RoleStore)
        assert stores.users.context is stores.context
        assert stores.roles.context is stores.context
        assert "normalized_user_name_1" in await stores.context.users.index_information()

    @pytest.mark.asyncio
    async def test_skip_indexes(self, identity_settings, mock_async_mongo_client):
        """ensure_indexes=False leaves collections unindexed."""
        with patch("mongo_identity.builder.create_indexes") as mock_indexes:
            await add_mongo_identity(
                identity_settings,
                client=mock_async_mongo_client,
                ensure_indexes=False,
            )

        mock_indexes.assert_not_called()

    @pytest.mark.asyncio
    async def test_custom_models_flow_to_stores(self, identity_settings, mock_async_mongo_client):
        """Model classes are passed to the stores."""

        class StaffUser(User):
            employee_number: str | None = None

        stores = await add_mongo_identity(
            identity_settings,
            user_cls=StaffUser,
            client=mock_async_mongo_client,
            ensure_indexes=False,
        )

        assert stores.users.user_cls is StaffUser

    @pytest.mark.asyncio
    async def test_missing_database_fails(self, mock_async_mongo_client):
        """Configuration errors surface from the helper."""
        settings = Settings(connection_string="mongodb://localhost", identity_database="")

        with pytest.raises(ConfigurationError):
            await add_mongo_identity(settings, client=mock_async_mongo_client)

    @pytest.mark.asyncio
    async def test_environment_settings_use_shared_client(self, mock_async_mongo_client):
        """Without explicit settings, the shared client is used."""
        env_settings = Settings(
            connection_string="mongodb://db:27017",
            identity_database="identity",
        )

        async def shared():
            return mock_async_mongo_client

        with patch("mongo_identity.builder.get_settings", return_value=env_settings), \
             patch("mongo_identity.builder.get_mongo_client", side_effect=shared):
            stores = await add_mongo_identity(ensure_indexes=False)

        assert stores.context.client is mock_async_mongo_client

    @pytest.mark.asyncio
    async def test_dispose_bundle(self, identity_settings, mock_async_mongo_client):
        """dispose() disposes both stores and the context."""
        stores = await add_mongo_identity(
            identity_settings, client=mock_async_mongo_client, ensure_indexes=False
        )

        stores.dispose()

        with pytest.raises(ObjectDisposedError):
            await stores.users.find_by_name("ALICE")
        with pytest.raises(ObjectDisposedError):
            stores.context.users

    def test_store_requires_context(self):
        """Stores cannot be built without a context."""
        with pytest.raises(ArgumentError):
            UserStore(None)
