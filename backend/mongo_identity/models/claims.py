"""
Claim and external-login value types embedded in user and role documents.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Claim(BaseModel):
    """
    A (type, value) pair attached to a user.

    Frozen so that equality and hashing are structural.
    """
    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="Claim type, e.g. 'email' or a URI")
    value: str = Field(..., description="Claim value")


class RoleClaim(BaseModel):
    """Claim stored on a role document, tied to the owning role's id."""
    role_id: Optional[str] = Field(None, description="Owning role ObjectId as string")
    claim_type: str = Field(..., description="Claim type")
    claim_value: str = Field(..., description="Claim value")

    def to_claim(self) -> Claim:
        return Claim(type=self.claim_type, value=self.claim_value)

    def matches(self, claim: Claim) -> bool:
        return self.claim_type == claim.type and self.claim_value == claim.value


class UserLoginInfo(BaseModel):
    """External login as seen by the authentication framework."""
    login_provider: str = Field(..., description="Provider name, e.g. 'Google'")
    provider_key: str = Field(..., description="User identifier at the provider")
    provider_display_name: Optional[str] = Field(None, description="Display name for UI")


class UserLogin(UserLoginInfo):
    """External login binding stored on a user document."""
    user_id: Optional[str] = Field(None, description="Owning user ObjectId as string")

    def to_login_info(self) -> UserLoginInfo:
        return UserLoginInfo(
            login_provider=self.login_provider,
            provider_key=self.provider_key,
            provider_display_name=self.provider_display_name,
        )
