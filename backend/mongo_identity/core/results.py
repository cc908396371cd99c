"""
Result type returned by store create/update/delete operations.
"""
from pydantic import BaseModel, Field


class IdentityError(BaseModel):
    """Single error reported in a failed IdentityResult."""
    code: str = Field(..., description="Machine-readable error code")
    description: str = Field(default="", description="Human-readable message")


class IdentityResult(BaseModel):
    """Outcome of a store mutation."""
    succeeded: bool = Field(..., description="Whether the operation succeeded")
    errors: list[IdentityError] = Field(default_factory=list)

    @classmethod
    def success(cls) -> "IdentityResult":
        return cls(succeeded=True)

    @classmethod
    def failed(cls, *errors: IdentityError) -> "IdentityResult":
        return cls(succeeded=False, errors=list(errors))
