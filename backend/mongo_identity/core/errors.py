"""
Exceptions raised by the identity stores and repository.

Not-found lookups are never errors: they return None.
"""


class IdentityStoreError(Exception):
    """Base class for all identity store errors."""


class ConfigurationError(IdentityStoreError):
    """Raised at construction when required configuration is missing."""


class ArgumentError(IdentityStoreError, ValueError):
    """Raised when a required argument is None or blank."""

    def __init__(self, param_name: str, message: str | None = None):
        self.param_name = param_name
        super().__init__(message or f"Argument '{param_name}' must not be empty")


class ObjectDisposedError(IdentityStoreError):
    """Raised when a store or context is used after disposal."""

    def __init__(self, object_name: str):
        self.object_name = object_name
        super().__init__(f"Cannot access a disposed object: {object_name}")


class OperationCancelledError(IdentityStoreError):
    """Raised when an operation's cancellation token was cancelled or expired."""


class InvalidOperationError(IdentityStoreError):
    """Raised when an operation is not valid for the current store state."""


class RoleNotFoundError(InvalidOperationError):
    """Raised when a user is added to a role that does not exist."""

    def __init__(self, role_name: str):
        self.role_name = role_name
        super().__init__(f"Role {role_name} not found.")
