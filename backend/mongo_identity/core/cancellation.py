"""
Cooperative cancellation for store operations.

A token is checked once at the start of every store operation, before any
I/O. It never interrupts a round trip that is already in flight.
"""
import asyncio
import time
from typing import Optional

from mongo_identity.core.errors import OperationCancelledError


class CancellationToken:
    """Cancel flag with an optional absolute deadline (monotonic seconds)."""

    def __init__(self, deadline: Optional[float] = None):
        self._cancel_event = asyncio.Event()
        self.deadline = deadline

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancellationToken":
        """Create a token that expires `seconds` from now."""
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancel_event.set()

    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def throw_if_cancellation_requested(self) -> None:
        """
        Raise if the token was cancelled or its deadline has passed.

        Raises:
            OperationCancelledError: If cancelled or expired
        """
        if self.cancelled():
            raise OperationCancelledError("operation cancelled")
        if self.expired():
            raise OperationCancelledError("deadline exceeded")


def check_cancelled(token: Optional[CancellationToken]) -> None:
    """Raise OperationCancelledError if `token` is set and cancelled."""
    if token is not None:
        token.throw_if_cancellation_requested()
