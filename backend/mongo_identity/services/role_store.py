"""
Role store backed by the identity DbContext.
"""
import logging
from typing import Any, AsyncIterator, Generic, Optional, TypeVar

from mongo_identity.core.cancellation import CancellationToken
from mongo_identity.core.results import IdentityResult
from mongo_identity.database.context import DbContext
from mongo_identity.models.claims import Claim, RoleClaim
from mongo_identity.models.role import Role
from mongo_identity.services.base import StoreBase

logger = logging.getLogger(__name__)

TRole = TypeVar("TRole", bound=Role)


class RoleStore(StoreBase, Generic[TRole]):
    """
    Role CRUD, role claims and role listing.

    Every setter saves the whole role document immediately.
    """

    def __init__(self, context: DbContext, role_cls: type[TRole] = Role):
        super().__init__(context)
        self.role_cls = role_cls

    # ==================== Lifecycle ====================

    async def create(
        self,
        role: TRole,
        cancel_token: Optional[CancellationToken] = None,
    ) -> IdentityResult:
        """
        Save a new role. Duplicate names are not checked.

        Args:
            role: Role to persist; receives an id if it has none
            cancel_token: Optional cancellation token

        Returns:
            IdentityResult.success()
        """
        self._guard(cancel_token, role=role)
        await self.context.save_role(role)
        return IdentityResult.success()

    async def update(
        self,
        role: TRole,
        cancel_token: Optional[CancellationToken] = None,
    ) -> IdentityResult:
        """Replace the stored role with `role`."""
        self._guard(cancel_token, role=role)
        await self.context.save_role(role)
        return IdentityResult.success()

    async def delete(
        self,
        role: TRole,
        cancel_token: Optional[CancellationToken] = None,
    ) -> IdentityResult:
        """
        Soft-delete a role by marking it inactive.

        The document stays in the collection and is still returned by
        find_by_id and find_by_name.
        """
        self._guard(cancel_token, role=role)
        role.is_active = False
        await self.context.save_role(role)
        logger.info("Role soft-deleted id=%s name=%s", role.id, role.name)
        return IdentityResult.success()

    # ==================== Accessors ====================

    async def get_role_id(
        self,
        role: TRole,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._guard(cancel_token, role=role)
        return role.id

    async def get_role_name(
        self,
        role: TRole,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._guard(cancel_token, role=role)
        return role.name

    async def set_role_name(
        self,
        role: TRole,
        role_name: Optional[str],
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        """Rename a role. Users holding the old name are not updated."""
        self._guard(cancel_token, role=role)
        role.name = role_name
        await self.context.save_role(role)

    async def get_normalized_role_name(
        self,
        role: TRole,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        self._guard(cancel_token, role=role)
        return role.normalized_name

    async def set_normalized_role_name(
        self,
        role: TRole,
        normalized_name: Optional[str],
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self._guard(cancel_token, role=role)
        role.normalized_name = normalized_name
        await self.context.save_role(role)

    # ==================== Lookup ====================

    async def find_by_id(
        self,
        role_id: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[TRole]:
        self._guard(cancel_token)
        return await self.context.find_role_by_id(role_id, self.role_cls)

    async def find_by_name(
        self,
        normalized_name: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[TRole]:
        self._guard(cancel_token, normalized_name=normalized_name)
        return await self.context.find_role_by_name(normalized_name, self.role_cls)

    def roles(
        self,
        filter: Optional[dict[str, Any]] = None,
        *,
        skip: int = 0,
        limit: int = 0,
    ) -> AsyncIterator[TRole]:
        """
        Iterate the role collection for admin-style enumeration.

        Args:
            filter: MongoDB query document (all roles if None)
            skip: Number of documents to skip
            limit: Maximum documents to return (0 means no limit)
        """
        self._throw_if_disposed()
        return self.context.query_roles(filter, skip=skip, limit=limit, role_cls=self.role_cls)

    # ==================== Claims ====================

    async def get_claims(
        self,
        role: TRole,
        cancel_token: Optional[CancellationToken] = None,
    ) -> list[Claim]:
        self._guard(cancel_token, role=role)
        return [role_claim.to_claim() for role_claim in role.claims]

    async def add_claim(
        self,
        role: TRole,
        claim: Claim,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        """Attach a claim to the role and save it."""
        self._guard(cancel_token, role=role, claim=claim)
        role.claims.append(
            RoleClaim(role_id=role.id, claim_type=claim.type, claim_value=claim.value)
        )
        await self.context.save_role(role)

    async def remove_claim(
        self,
        role: TRole,
        claim: Claim,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        """Remove the first matching claim; does nothing if the role lacks it."""
        self._guard(cancel_token, role=role, claim=claim)
        for role_claim in role.claims:
            if role_claim.matches(claim):
                role.claims.remove(role_claim)
                await self.context.save_role(role)
                return
