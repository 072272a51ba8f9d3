from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from academia_authz.domain.enums import AssignmentState


class AssignmentCreate(BaseModel):
    """Schema for granting a role to a principal"""

    role_id: str
    department_context: str | None = Field(
        None, max_length=15, description="Department scope; omit for a global grant"
    )
    effective_date: datetime | None = Field(None, description="Defaults to now")
    expiration_date: datetime | None = Field(None, description="Omit for no expiry")
    reason: str | None = None
    is_primary: bool = False
    assignment_context: dict[str, Any] | None = None


class AssignmentRevoke(BaseModel):
    reason: str | None = Field(None, description="Why the role is being revoked")


class AssignmentExtend(BaseModel):
    expiration_date: datetime | None = Field(
        ..., description="New expiration date; null makes the assignment permanent"
    )


class AssignmentPrimary(BaseModel):
    is_primary: bool = True


class AssignmentResponse(BaseModel):
    """Schema for assignment response"""

    id: str
    tenant_id: str
    principal_id: str
    role_id: str
    department_context: str | None
    effective_date: datetime
    expiration_date: datetime | None
    is_active: bool
    is_primary: bool
    assignment_reason: str | None
    assigned_by: str | None
    revoked_at: datetime | None
    revoked_by: str | None
    revocation_reason: str | None
    state: AssignmentState | None = None
    description: str | None = None

    model_config = ConfigDict(from_attributes=True)
