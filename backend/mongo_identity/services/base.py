"""
Guards shared by the user and role stores.
"""
from typing import Any, Optional

from mongo_identity.core.cancellation import CancellationToken, check_cancelled
from mongo_identity.core.errors import ArgumentError, ObjectDisposedError
from mongo_identity.database.context import DbContext


class StoreBase:
    """
    Stateless adapter over a DbContext with a one-way disposed flag.

    Stores borrow the context; disposing a store never closes it.
    """

    def __init__(self, context: DbContext):
        if context is None:
            raise ArgumentError("context")
        self.context = context
        self._disposed = False

    def dispose(self) -> None:
        self._disposed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    def _throw_if_disposed(self) -> None:
        if self._disposed:
            raise ObjectDisposedError(type(self).__name__)

    def _guard(
        self,
        cancel_token: Optional[CancellationToken],
        **required: Any,
    ) -> None:
        """
        Run the checks every store operation starts with.

        Args:
            cancel_token: Token checked before anything else
            **required: Arguments that must not be None, by parameter name

        Raises:
            OperationCancelledError: If the token is cancelled or expired
            ObjectDisposedError: If the store was disposed
            ArgumentError: If a required argument is None
        """
        check_cancelled(cancel_token)
        self._throw_if_disposed()
        for name, value in required.items():
            if value is None:
                raise ArgumentError(name)

    @staticmethod
    def _require_text(name: str, value: Optional[str]) -> str:
        if value is None or not value.strip():
            raise ArgumentError(name, f"Argument '{name}' must not be blank")
        return value
