"""
User store backed by the identity DbContext.

Covers user CRUD, credentials, claims, external logins, role membership,
email, lockout, phone and two-factor state, plus bulk queries.
"""
import logging
from datetime import datetime
from typing import Any, AsyncIterator, Generic, Iterable, Optional, TypeVar

from mongo_identity.core.cancellation import CancellationToken
from mongo_identity.core.errors import ArgumentError, RoleNotFoundError
from mongo_identity.core.results import IdentityResult
from mongo_identity.database.context import DbContext
from mongo_identity.models.claims import Claim, UserLogin, UserLoginInfo
from mongo_identity.models.role import Role
from mongo_identity.models.user import User
from mongo_identity.services.base import StoreBase

logger = logging.getLogger(__name__)

TUser = TypeVar("TUser", bound=User)
TRole = TypeVar("TRole", bound=Role)


class UserStore(StoreBase, Generic[TUser, TRole]):
    """
    Identity-framework user store.

    Setters change the given model and save the whole document right away,
    except increment_access_failed_count and reset_access_failed_count which
    only change the model. Callers persist those with update().
    """

    def __init__(
        self,
        context: DbContext,
        user_cls: type[TUser] = User,
        role_cls: type[TRole] = Role,
    ):
        super().__init__(context)
        self.user_cls = user_cls
        self.role_cls = role_cls

    # ==================== Lifecycle ====================

    async def create(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> IdentityResult:
        """
        Save a new user.

        Args:
            user: User to persist; receives an id if it has none
            cancel_token: Optional cancellation token

        Returns:
            IdentityResult.success()
        """
        self._guard(cancel_token, user=user)
        await self.context.save_user(user)
        return IdentityResult.success()

    async def update(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> IdentityResult:
        """Replace the stored user with `user`."""
        self._guard(cancel_token, user=user)
        await self.context.save_user(user)
        return IdentityResult.success()

    async def delete(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> IdentityResult:
        """Soft-delete a user by marking it inactive. The document is kept."""
        self._guard(cancel_token, user=user)
        user.is_active = False
        await self.context.save_user(user)
        logger.info("User soft-deleted id=%s", user.id)
        return IdentityResult.success()

    # ==================== Identity / name ====================

    async def get_user_id(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._guard(cancel_token, user=user)
        return user.id

    async def get_user_name(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._guard(cancel_token, user=user)
        return user.user_name

    async def set_user_name(
        self,
        user: TUser,
        user_name: Optional[str],
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._guard(cancel_token, user=user)
        user.user_name = user_name
        await self.context.save_user(user)

    async def get_normalized_user_name(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._guard(cancel_token, user=user)
        return user.normalized_user_name

    async def set_normalized_user_name(
        self,
        user: TUser,
        normalized_name: Optional[str],
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._guard(cancel_token, user=user)
        user.normalized_user_name = normalized_name
        await self.context.save_user(user)

    # ==================== Lookup ====================

    async def find_by_id(
        self,
        user_id: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[TUser]:
        self._guard(cancel_token)
        return await self.context.find_user_by_id(user_id, self.user_cls)

    async def find_by_name(
        self,
        normalized_user_name: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[TUser]:
        self._guard(cancel_token, normalized_user_name=normalized_user_name)
        return await self.context.find_user_by_user_name(normalized_user_name, self.user_cls)

    async def find_by_email(
        self,
        normalized_email: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[TUser]:
        self._guard(cancel_token, normalized_email=normalized_email)
        return await self.context.find_user_by_email(normalized_email, self.user_cls)

    async def find_by_login(
        self,
        login_provider: str,
        provider_key: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[TUser]:
        """Reverse-lookup a user from an external provider and key."""
        self._guard(cancel_token)
        return await self.context.find_user_by_login(login_provider, provider_key, self.user_cls)

    def users(
        self,
        filter: Optional[dict[str, Any]] = None,
        *,
        skip: int = 0,
        limit: int = 0,
    ) -> AsyncIterator[TUser]:
        """
        Iterate the user collection.

        Args:
            filter: MongoDB query document (all users if None)
            skip: Number of documents to skip
            limit: Maximum documents to return (0 means no limit)
        """
        self._throw_if_disposed()
        return self.context.query_users(filter, skip=skip, limit=limit, user_cls=self.user_cls)

    # ==================== Credentials ====================

    async def get_password_hash(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._guard(cancel_token, user=user)
        return user.password_hash

    async def set_password_hash(
        self,
        user: TUser,
        password_hash: Optional[str],
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._guard(cancel_token, user=user)
        user.password_hash = password_hash
        await self.context.save_user(user)

    async def has_password(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> bool:
        self._guard(cancel_token, user=user)
        return user.password_hash is not None

    async def get_security_stamp(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._guard(cancel_token, user=user)
        return user.security_stamp

    async def set_security_stamp(
        self,
        user: TUser,
        stamp: Optional[str],
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._guard(cancel_token, user=user)
        user.security_stamp = stamp
        await self.context.save_user(user)

    # ==================== Roles ====================

    async def add_to_role(
        self,
        user: TUser,
        role_name: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        """
        Add the user to an existing role.

        The role's stored name is appended once; repeated calls are no-ops.

        Args:
            user: User to update
            role_name: Name of the role (looked up by normalized name)
            cancel_token: Optional cancellation token

        Raises:
            ArgumentError: If role_name is blank
            RoleNotFoundError: If no role has that name
        """
        self._guard(cancel_token, user=user)
        self._require_text("role_name", role_name)

        role = await self.context.find_role_by_name(role_name, self.role_cls)
        if role is None:
            raise RoleNotFoundError(role_name)

        if role.name not in user.roles:
            user.roles.append(role.name)
            await self.context.save_user(user)

    async def remove_from_role(
        self,
        user: TUser,
        role_name: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        """Remove the user from a role; no-op if the role or membership is absent."""
        self._guard(cancel_token, user=user)
        self._require_text("role_name", role_name)

        role = await self.context.find_role_by_name(role_name, self.role_cls)
        if role is not None and role.name in user.roles:
            user.roles.remove(role.name)
            await self.context.save_user(user)

    async def get_roles(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> list[str]:
        self._guard(cancel_token, user=user)
        return user.roles

    async def is_in_role(
        self,
        user: TUser,
        role_name: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> bool:
        """True if the role exists and its name is in the user's role list."""
        self._guard(cancel_token, user=user)
        self._require_text("role_name", role_name)

        role = await self.context.find_role_by_name(role_name, self.role_cls)
        return role is not None and role.name in user.roles

    # ==================== Claims ====================

    async def get_claims(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> list[Claim]:
        self._guard(cancel_token, user=user)
        return user.claims

    async def add_claims(
        self,
        user: TUser,
        claims: Iterable[Claim],
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._guard(cancel_token, user=user, claims=claims)
        user.claims.extend(claims)
        await self.context.save_user(user)

    async def replace_claim(
        self,
        user: TUser,
        claim: Claim,
        new_claim: Claim,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        """
        Swap `claim` for `new_claim`.

        If the user does not hold `claim`, `new_claim` is still appended.
        """
        self._guard(cancel_token, user=user, claim=claim, new_claim=new_claim)
        if claim in user.claims:
            user.claims.remove(claim)
        user.claims.append(new_claim)
        await self.context.save_user(user)

    async def remove_claims(
        self,
        user: TUser,
        claims: Iterable[Claim],
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        """Remove each claim by type and value; claims the user lacks are skipped."""
        self._guard(cancel_token, user=user, claims=claims)
        for claim in claims:
            if claim in user.claims:
                user.claims.remove(claim)
        await self.context.save_user(user)

    async def get_users_for_claim(
        self,
        claim: Claim,
        cancel_token: Optional[CancellationToken] = None,
    ) -> list[TUser]:
        self._guard(cancel_token, claim=claim)
        return await self.context.get_users_by_claim(claim, self.user_cls)

    # ==================== External logins ====================

    async def add_login(
        self,
        user: TUser,
        login: UserLoginInfo,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._guard(cancel_token, user=user, login=login)
        user.login_info.append(
            UserLogin(
                user_id=user.id,
                login_provider=login.login_provider,
                provider_key=login.provider_key,
                provider_display_name=login.provider_display_name,
            )
        )
        await self.context.save_user(user)

    async def remove_login(
        self,
        user: TUser,
        login_provider: str,
        provider_key: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        """Remove the binding matching this user, provider and key, if any."""
        self._guard(cancel_token, user=user)
        for entry in user.login_info:
            if (
                entry.user_id == user.id
                and entry.login_provider == login_provider
                and entry.provider_key == provider_key
            ):
                user.login_info.remove(entry)
                await self.context.save_user(user)
                return

    async def get_logins(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> list[UserLoginInfo]:
        self._guard(cancel_token, user=user)
        return [entry.to_login_info() for entry in user.login_info]

    # ==================== Email ====================

    async def get_email(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._guard(cancel_token, user=user)
        return user.email

    async def set_email(
        self,
        user: TUser,
        email: Optional[str],
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._guard(cancel_token, user=user)
        user.email = email
        await self.context.save_user(user)

    async def get_normalized_email(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._guard(cancel_token, user=user)
        return user.normalized_email

    async def set_normalized_email(
        self,
        user: TUser,
        normalized_email: Optional[str],
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._guard(cancel_token, user=user)
        user.normalized_email = normalized_email
        await self.context.save_user(user)

    async def get_email_confirmed(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> bool:
        self._guard(cancel_token, user=user)
        return user.email_confirmed

    async def set_email_confirmed(
        self,
        user: TUser,
        confirmed: bool,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._guard(cancel_token, user=user)
        user.email_confirmed = confirmed
        await self.context.save_user(user)

    # ==================== Lockout ====================

    async def get_lockout_end_date(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[datetime]:
        self._guard(cancel_token, user=user)
        return user.lockout_end

    async def set_lockout_end_date(
        self,
        user: TUser,
        lockout_end: Optional[datetime],
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._guard(cancel_token, user=user)
        user.lockout_end = lockout_end
        await self.context.save_user(user)

    async def get_lockout_enabled(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> bool:
        self._guard(cancel_token, user=user)
        return user.lockout_enabled

    async def set_lockout_enabled(
        self,
        user: TUser,
        enabled: bool,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._guard(cancel_token, user=user)
        user.lockout_enabled = enabled
        await self.context.save_user(user)

    async def get_access_failed_count(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> int:
        self._guard(cancel_token, user=user)
        return user.access_failed_count

    async def increment_access_failed_count(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> int:
        """
        Increment the failed-access counter on the model only.

        Not saved: the caller must call update() to persist the new count.

        Returns:
            The incremented count
        """
        self._guard(cancel_token, user=user)
        user.access_failed_count += 1
        return user.access_failed_count

    async def reset_access_failed_count(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        """Zero the failed-access counter on the model only (not saved)."""
        self._guard(cancel_token, user=user)
        user.access_failed_count = 0

    # ==================== Phone ====================

    async def get_phone_number(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._guard(cancel_token, user=user)
        return user.phone_number

    async def set_phone_number(
        self,
        user: TUser,
        phone_number: Optional[str],
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._guard(cancel_token, user=user)
        user.phone_number = phone_number
        await self.context.save_user(user)

    async def get_phone_number_confirmed(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> bool:
        self._guard(cancel_token, user=user)
        return user.phone_number_confirmed

    async def set_phone_number_confirmed(
        self,
        user: TUser,
        confirmed: bool,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._guard(cancel_token, user=user)
        user.phone_number_confirmed = confirmed
        await self.context.save_user(user)

    # ==================== Two-factor ====================

    async def get_two_factor_enabled(
        self,
        user: TUser,
        cancel_token: Optional[CancellationToken] = None,
    ) -> bool:
        self._guard(cancel_token, user=user)
        return user.two_factor_enabled

    async def set_two_factor_enabled(
        self,
        user: TUser,
        enabled: bool,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._guard(cancel_token, user=user)
        user.two_factor_enabled = enabled
        await self.context.save_user(user)

    # ==================== Bulk queries ====================

    async def get_users_in_role(
        self,
        role_name: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> list[TUser]:
        """
        Get all users holding a role.

        Returns:
            Matching users, or an empty list if the role does not exist

        Raises:
            ArgumentError: If role_name is empty
        """
        self._guard(cancel_token)
        if not role_name:
            raise ArgumentError("role_name")

        role = await self.context.find_role_by_name(role_name, self.role_cls)
        if role is None:
            return []
        return await self.context.get_users_by_role(role.name, self.user_cls)
