from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from academia_authz.application.services import AuthorityResolver, RoleAssignmentService
from academia_authz.domain.exceptions import PermissionDeniedError
from academia_authz.infrastructure.persistence.models import RoleAssignment, Tenant
from academia_authz.infrastructure.persistence.repositories import AuditLogRepository
from academia_authz.presentation.api.dependencies import (
    ASSIGNMENT_PERMISSIONS, AUDIT_PERMISSIONS, get_assignment_service,
    get_assignment_service_transactional, get_audit_log_repo,
    get_authority_resolver, get_current_tenant, require_permission)
from academia_authz.presentation.api.v1.schemas.assignment import (
    AssignmentCreate, AssignmentExtend, AssignmentPrimary, AssignmentResponse,
    AssignmentRevoke)
from academia_authz.presentation.api.v1.schemas.role import AuditLogResponse
from academia_authz.presentation.api.v1.schemas.token import TokenPayload

router = APIRouter()


def to_assignment_response(
    row: RoleAssignment, now: datetime, description: str | None = None
) -> AssignmentResponse:
    entity = row.to_entity()
    return AssignmentResponse.model_validate(entity).model_copy(
        update={"state": entity.state(now), "description": description}
    )


async def _require_outranks(
    resolver: AuthorityResolver, tenant_id: str, caller_id: str, role_id: str
) -> None:
    """The caller's highest role must strictly outrank the role being administered."""
    if not await resolver.can_grant_role(tenant_id, caller_id, role_id):
        raise PermissionDeniedError(
            "Your highest role does not outrank the role being administered"
        )


@router.post(
    "/principals/{principal_id}/assignments",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def assign_role(
    principal_id: str,
    data: AssignmentCreate,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    caller: Annotated[TokenPayload, Depends(require_permission(*ASSIGNMENT_PERMISSIONS))],
    resolver: Annotated[AuthorityResolver, Depends(get_authority_resolver)],
    service: Annotated[RoleAssignmentService, Depends(get_assignment_service_transactional)],
):
    """Grant a role to a principal (requires 'assign_roles' and a higher role)"""
    await _require_outranks(resolver, tenant.id, caller.sub, data.role_id)
    row = await service.assign_role(
        tenant.id,
        principal_id,
        data.role_id,
        department_context=data.department_context,
        effective_date=data.effective_date,
        expiration_date=data.expiration_date,
        reason=data.reason,
        is_primary=data.is_primary,
        assignment_context=data.assignment_context,
        assigned_by=caller.sub,
    )
    return to_assignment_response(row, service.evaluator.now())


@router.get("/principals/{principal_id}/assignments", response_model=list[AssignmentResponse])
async def list_principal_assignments(
    principal_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    service: Annotated[RoleAssignmentService, Depends(get_assignment_service)],
    include_inactive: bool = False,
):
    rows = await service.list_for_principal(
        tenant.id, principal_id, include_inactive=include_inactive
    )
    now = service.evaluator.now()
    return [to_assignment_response(row, now) for row in rows]


@router.get("/assignments/{assignment_id}", response_model=AssignmentResponse)
async def get_assignment(
    assignment_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    service: Annotated[RoleAssignmentService, Depends(get_assignment_service)],
):
    row = await service.get_assignment(tenant.id, assignment_id)
    description = await service.describe_assignment(tenant.id, assignment_id)
    return to_assignment_response(row, service.evaluator.now(), description)


@router.post("/assignments/{assignment_id}/revoke", response_model=AssignmentResponse)
async def revoke_assignment(
    assignment_id: str,
    data: AssignmentRevoke,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    caller: Annotated[TokenPayload, Depends(require_permission(*ASSIGNMENT_PERMISSIONS))],
    resolver: Annotated[AuthorityResolver, Depends(get_authority_resolver)],
    service: Annotated[RoleAssignmentService, Depends(get_assignment_service_transactional)],
):
    """Soft-revoke an assignment; repeating the call is a no-op"""
    row = await service.get_assignment(tenant.id, assignment_id)
    await _require_outranks(resolver, tenant.id, caller.sub, row.role_id)
    revoked = await service.revoke_role(
        tenant.id, assignment_id, reason=data.reason, revoked_by=caller.sub
    )
    return to_assignment_response(revoked, service.evaluator.now())


@router.post("/assignments/{assignment_id}/primary", response_model=AssignmentResponse)
async def set_primary_assignment(
    assignment_id: str,
    data: AssignmentPrimary,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    caller: Annotated[TokenPayload, Depends(require_permission(*ASSIGNMENT_PERMISSIONS))],
    resolver: Annotated[AuthorityResolver, Depends(get_authority_resolver)],
    service: Annotated[RoleAssignmentService, Depends(get_assignment_service_transactional)],
):
    row = await service.get_assignment(tenant.id, assignment_id)
    await _require_outranks(resolver, tenant.id, caller.sub, row.role_id)
    updated = await service.set_primary_assignment(
        tenant.id, assignment_id, is_primary=data.is_primary
    )
    return to_assignment_response(updated, service.evaluator.now())


@router.post("/assignments/{assignment_id}/extend", response_model=AssignmentResponse)
async def extend_assignment(
    assignment_id: str,
    data: AssignmentExtend,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    caller: Annotated[TokenPayload, Depends(require_permission(*ASSIGNMENT_PERMISSIONS))],
    resolver: Annotated[AuthorityResolver, Depends(get_authority_resolver)],
    service: Annotated[RoleAssignmentService, Depends(get_assignment_service_transactional)],
):
    row = await service.get_assignment(tenant.id, assignment_id)
    await _require_outranks(resolver, tenant.id, caller.sub, row.role_id)
    updated = await service.extend_assignment(tenant.id, assignment_id, data.expiration_date)
    return to_assignment_response(updated, service.evaluator.now())


@router.get(
    "/assignments/{assignment_id}/audit",
    response_model=list[AuditLogResponse],
    dependencies=[Depends(require_permission(*AUDIT_PERMISSIONS))],
)
async def list_assignment_audit_trail(
    assignment_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    audit_repo: Annotated[AuditLogRepository, Depends(get_audit_log_repo)],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    return await audit_repo.get_by_entity(
        tenant.id, "role_assignment", assignment_id, skip=skip, limit=limit
    )
