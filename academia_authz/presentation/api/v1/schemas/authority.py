from pydantic import BaseModel

from academia_authz.presentation.api.v1.schemas.role import RoleSummary


class EffectiveRolesResponse(BaseModel):
    principal_id: str
    roles: list[RoleSummary]


class SingleRoleResponse(BaseModel):
    """`role` is null when the principal has no such role; that is not an error."""

    principal_id: str
    role: RoleSummary | None


class PermissionsResponse(BaseModel):
    principal_id: str
    permissions: list[str]


class CanManageResponse(BaseModel):
    manager_id: str
    target_id: str
    can_manage: bool


class AssignmentValidationResponse(BaseModel):
    assigner_id: str
    target_id: str
    role_id: str
    is_valid: bool
    issues: list[str]
