"""
Identity database collection names.
"""


class Collections:
    """Default collection names for the identity database."""
    USERS = "Users"
    ROLES = "Roles"
