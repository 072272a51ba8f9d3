from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from academia_authz.domain.enums import RoleType


# Role Schemas
class RoleBase(BaseModel):
    """Base role schema"""

    name: str = Field(..., min_length=1, max_length=100, description="Unique role name")
    role_type: RoleType = Field(..., description="Role category")
    description: str | None = Field(None, description="Role description")
    department_scope: str | None = Field(
        None, max_length=15, description="Department the role is tied to, if any"
    )


class RoleCreate(RoleBase):
    """Schema for creating a role"""

    priority: int | None = Field(
        None, description="1 (lowest) to 10 (highest authority); defaults by role type"
    )
    additional_permissions: list[str] = Field(
        default_factory=list,
        description="Permission tags granted by this role (e.g. 'assign_roles')",
    )
    is_active: bool = True


class RoleUpdate(BaseModel):
    """Schema for updating a role. Send department_scope: null to clear it."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    priority: int | None = None
    department_scope: str | None = Field(None, max_length=15)
    additional_permissions: list[str] | None = None


class RoleSummary(BaseModel):
    """Role as seen by authority queries"""

    id: str
    name: str
    role_type: RoleType
    priority: int
    is_active: bool
    is_system_role: bool
    department_scope: str | None = None
    description: str | None = None
    additional_permissions: list[str] = []

    model_config = ConfigDict(from_attributes=True)

    @field_validator("additional_permissions", mode="before")
    @classmethod
    def sort_permissions(cls, value: Any) -> Any:
        if isinstance(value, set | frozenset | list | tuple):
            return sorted(getattr(tag, "value", tag) for tag in value)
        return value


class RoleResponse(RoleSummary):
    """Schema for role response"""

    tenant_id: str
    normalized_name: str
    created_at: datetime
    updated_at: datetime
    created_by: str | None = None
    updated_by: str | None = None


class RoleDeletionCheckResponse(BaseModel):
    role_id: str
    can_delete: bool
    issues: list[str]
    effective_assignment_count: int
    total_assignment_count: int

    model_config = ConfigDict(from_attributes=True)


class RoleStatisticsResponse(BaseModel):
    total_roles: int
    active_roles: int
    inactive_roles: int
    system_roles: int
    roles_by_type: dict[str, int]
    roles_by_priority: dict[int, int]
    role_user_counts: dict[str, int]
    roles_with_no_assignments: int
    roles_with_active_assignments: int

    model_config = ConfigDict(from_attributes=True)


class HierarchyLevel(BaseModel):
    role_type: RoleType
    display_name: str
    description: str
    default_priority: int


class HierarchyResponse(BaseModel):
    description: str
    levels: list[HierarchyLevel]


class AuditLogResponse(BaseModel):
    id: str
    entity_type: str
    entity_id: str
    action: str
    actor_id: str | None
    actor_type: str
    correlation_id: str | None
    entity_data: dict[str, Any]
    audit_metadata: dict[str, Any]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
