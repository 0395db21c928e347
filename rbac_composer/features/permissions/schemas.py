"""
Pydantic schemas for the permission catalog.

Permission records, create/update payloads, validation issues and the
graph layout handed to the rendering layer.
"""
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator


PermissionType = Literal["system", "custom"]
RiskLevel = Literal["low", "medium", "high"]


# ============================================================================
# Permission Schemas
# ============================================================================

class PermissionBase(BaseModel):
    """Base permission schema."""
    name: str = Field(..., max_length=100, description="Display name")
    description: str = Field("", max_length=1000, description="Permission description")
    category: str = Field(..., max_length=100, description="Grouping (e.g., 'User Management')")
    risk: RiskLevel = Field("low", description="Risk level")
    dependencies: List[str] = Field(default_factory=list, description="Ids that must be granted alongside")
    scope: List[str] = Field(default_factory=list, description="Applicability qualifiers")

    @field_validator('dependencies', 'scope')
    @classmethod
    def strip_entries(cls, v: List[str]) -> List[str]:
        """Drop surrounding whitespace from list entries."""
        return [item.strip() for item in v]


class Permission(PermissionBase):
    """A permission as stored in the catalog."""
    id: str = Field(..., min_length=1, max_length=100, description="Stable permission id")
    type: PermissionType = Field("custom", description="System permissions are immutable")

    model_config = ConfigDict(frozen=True)

    @property
    def is_system(self) -> bool:
        return self.type == "system"

    def __repr__(self) -> str:
        return f"<Permission(id={self.id}, name={self.name!r}, risk={self.risk})>"


class PermissionCreate(PermissionBase):
    """Schema for creating a new (custom) permission."""


class PermissionUpdate(BaseModel):
    """Schema for updating a permission. Only explicitly set fields are applied."""
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    category: Optional[str] = Field(None, max_length=100)
    risk: Optional[RiskLevel] = None
    dependencies: Optional[List[str]] = None
    scope: Optional[List[str]] = None


# ============================================================================
# Validation Schemas
# ============================================================================

class ValidationIssue(BaseModel):
    """
    A single field-addressable validation failure.

    Example:
        {"field": "dependencies", "code": "circular_dependency",
         "message": "Circular dependency detected: a -> b -> a"}
    """
    field: str
    message: str
    code: str
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(frozen=True)


# ============================================================================
# Graph Layout Schemas
# ============================================================================

class LayoutNode(BaseModel):
    """Node position: dependency level and left-to-right rank within the level."""
    id: str
    level: int
    rank: int


class LayoutEdge(BaseModel):
    """Edge from a permission to one of its direct dependencies."""
    source: str = Field(..., alias="from")
    target: str = Field(..., alias="to")
    selected: bool = False

    model_config = ConfigDict(populate_by_name=True)


class GraphLayout(BaseModel):
    """Layout consumed by the graph renderer."""
    nodes: List[LayoutNode] = []
    edges: List[LayoutEdge] = []

    def levels(self) -> List[List[str]]:
        """Node ids grouped by level, each group in rank order."""
        grouped: List[List[str]] = []
        for node in self.nodes:
            while len(grouped) <= node.level:
                grouped.append([])
            grouped[node.level].append(node.id)
        return grouped


class TreeNode(BaseModel):
    """Permission tree entry; children are the permissions that depend on this one."""
    id: str
    depth: int
    children: List["TreeNode"] = []
