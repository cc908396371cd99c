"""
Core module - Errors, cancellation, results and logging setup.
"""
from mongo_identity.core.cancellation import CancellationToken, check_cancelled
from mongo_identity.core.errors import (
    IdentityStoreError,
    ConfigurationError,
    ArgumentError,
    ObjectDisposedError,
    OperationCancelledError,
    InvalidOperationError,
    RoleNotFoundError,
)
from mongo_identity.core.results import IdentityError, IdentityResult

__all__ = [
    "CancellationToken",
    "check_cancelled",
    "IdentityStoreError",
    "ConfigurationError",
    "ArgumentError",
    "ObjectDisposedError",
    "OperationCancelledError",
    "InvalidOperationError",
    "RoleNotFoundError",
    "IdentityError",
    "IdentityResult",
]
