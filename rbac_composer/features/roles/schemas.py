"""
Pydantic schemas for roles.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator


RoleType = Literal["system", "custom"]
RoleStatus = Literal["active", "inactive", "deprecated"]


class RoleMetadata(BaseModel):
    """Delegation and expiration settings. Opaque to the engine."""
    allow_delegation: bool = False
    max_delegation_depth: Optional[int] = Field(None, ge=0)
    expiration_date: Optional[datetime] = None
    custom_fields: Dict[str, Any] = Field(default_factory=dict)


class RoleBase(BaseModel):
    """Base role schema."""
    name: str = Field(..., max_length=100, description="Role name")
    description: str = Field("", max_length=1000, description="Role description")
    status: RoleStatus = "active"
    permissions: List[str] = Field(default_factory=list, description="Granted permission ids")
    metadata: RoleMetadata = Field(default_factory=RoleMetadata)
    inherited_from: List[str] = Field(default_factory=list, description="Parent role ids")

    @field_validator('permissions')
    @classmethod
    def unique_permissions(cls, v: List[str]) -> List[str]:
        """Roles grant a set: keep first occurrence of each id."""
        return list(dict.fromkeys(v))


class Role(RoleBase):
    """A role as stored by the repository."""
    id: str
    type: RoleType = "custom"
    user_count: int = 0
    created_by: str = "system"
    created_at: Optional[datetime] = None
    updated_by: str = "system"
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_system(self) -> bool:
        return self.type == "system"

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name!r}, type={self.type})>"


class RoleCreate(RoleBase):
    """Schema for creating a new role."""
    type: RoleType = "custom"


class RoleUpdate(BaseModel):
    """Schema for updating a role. Only explicitly set fields are applied."""
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    status: Optional[RoleStatus] = None
    type: Optional[RoleType] = None
    permissions: Optional[List[str]] = None
    metadata: Optional[RoleMetadata] = None
    inherited_from: Optional[List[str]] = None
