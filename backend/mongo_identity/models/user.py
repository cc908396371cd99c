"""
User model for the identity database.
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mongo_identity.models.claims import Claim, UserLogin


class User(BaseModel):
    """
    User document model for the identity Users collection.

    Role membership is stored as role names only. Renaming a role does not
    update users that hold it.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id", description="MongoDB ObjectId as string")
    user_name: Optional[str] = Field(None, description="Display user name")
    normalized_user_name: Optional[str] = Field(
        None,
        description="Uppercased user name used as the lookup key",
    )
    email: Optional[str] = Field(None, description="Email address")
    normalized_email: Optional[str] = Field(None, description="Uppercased email")
    email_confirmed: bool = Field(default=False)
    password_hash: Optional[str] = Field(None, description="Opaque password hash")
    security_stamp: Optional[str] = Field(
        None,
        description="Opaque value rotated whenever credentials change",
    )
    concurrency_stamp: Optional[str] = Field(
        None,
        description="Stored for the framework; never compared on save",
    )
    phone_number: Optional[str] = None
    phone_number_confirmed: bool = False
    two_factor_enabled: bool = False
    lockout_end: Optional[datetime] = Field(
        None,
        description="User is locked out until this timestamp",
    )
    lockout_enabled: bool = False
    access_failed_count: int = Field(
        default=0,
        description="Number of consecutive failed access attempts",
    )
    is_active: bool = Field(default=True, description="False once soft-deleted")
    claims: list[Claim] = Field(default_factory=list)
    login_info: list[UserLogin] = Field(default_factory=list)
    roles: list[str] = Field(default_factory=list, description="Names of held roles")

    @field_validator("lockout_end")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # MongoDB stores UTC; naive values come back from non tz-aware clients
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
