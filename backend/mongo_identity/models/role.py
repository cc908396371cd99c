"""
Role model for the identity database.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from mongo_identity.models.claims import RoleClaim


class Role(BaseModel):
    """Role document model for the identity Roles collection."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id", description="MongoDB ObjectId as string")
    name: Optional[str] = Field(None, description="Role name")
    normalized_name: Optional[str] = Field(None, description="Uppercased role name")
    concurrency_stamp: Optional[str] = None
    is_active: bool = Field(default=True, description="False once soft-deleted")
    claims: list[RoleClaim] = Field(default_factory=list)
