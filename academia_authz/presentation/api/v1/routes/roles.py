from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from academia_authz.application.services import (AuthorityResolver,
                                                 RoleAssignmentService,
                                                 RoleCatalogService)
from academia_authz.domain.enums import RoleType
from academia_authz.domain.policies import hierarchy_description
from academia_authz.infrastructure.persistence.models import Tenant
from academia_authz.infrastructure.persistence.repositories import AuditLogRepository
from academia_authz.presentation.api.dependencies import (
    AUDIT_PERMISSIONS, CATALOG_ADMIN_PERMISSIONS, get_assignment_service,
    get_audit_log_repo, get_authority_resolver, get_current_tenant,
    get_role_catalog_service, get_role_catalog_service_transactional,
    require_permission)
from academia_authz.presentation.api.v1.routes.assignments import to_assignment_response
from academia_authz.presentation.api.v1.schemas.assignment import AssignmentResponse
from academia_authz.presentation.api.v1.schemas.role import (
    AuditLogResponse, HierarchyLevel, HierarchyResponse, RoleCreate,
    RoleDeletionCheckResponse, RoleResponse, RoleStatisticsResponse,
    RoleSummary, RoleUpdate)

router = APIRouter()


@router.post(
    "/roles",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(*CATALOG_ADMIN_PERMISSIONS))],
)
async def create_role(
    data: RoleCreate,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    service: Annotated[RoleCatalogService, Depends(get_role_catalog_service_transactional)],
):
    """Create a catalog role (requires system configuration rights)"""
    return await service.create_role(
        tenant.id,
        name=data.name,
        role_type=data.role_type,
        priority=data.priority,
        description=data.description,
        department_scope=data.department_scope,
        additional_permissions=data.additional_permissions,
        is_active=data.is_active,
    )


@router.get("/roles", response_model=list[RoleResponse])
async def list_roles(
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    service: Annotated[RoleCatalogService, Depends(get_role_catalog_service)],
    role_type: RoleType | None = None,
    priority: int | None = None,
    search: str | None = None,
    active_only: bool = False,
):
    """
    List roles in hierarchy order (priority ascending, then name).

    Filters are mutually exclusive, checked in the order role_type,
    priority, search.
    """
    if role_type is not None:
        return await service.list_roles_by_type(tenant.id, role_type)
    if priority is not None:
        return await service.list_roles_by_priority(tenant.id, priority)
    if search is not None:
        return await service.search_roles(tenant.id, search, active_only=active_only)
    return await service.list_roles_hierarchical(tenant.id, active_only=active_only)


@router.get("/roles/statistics", response_model=RoleStatisticsResponse)
async def get_role_statistics(
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    service: Annotated[RoleCatalogService, Depends(get_role_catalog_service)],
):
    return await service.get_role_statistics(tenant.id)


@router.get("/roles/hierarchy", response_model=HierarchyResponse)
async def get_role_hierarchy(
    _tenant: Annotated[Tenant, Depends(get_current_tenant)],
):
    """The built-in role types, most authoritative first"""
    levels = sorted(RoleType, key=lambda rt: rt.default_priority, reverse=True)
    return HierarchyResponse(
        description=hierarchy_description(),
        levels=[
            HierarchyLevel(
                role_type=rt,
                display_name=rt.display_name,
                description=rt.description,
                default_priority=rt.default_priority,
            )
            for rt in levels
        ],
    )


@router.get("/roles/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    service: Annotated[RoleCatalogService, Depends(get_role_catalog_service)],
):
    return await service.get_role(tenant.id, role_id)


@router.patch(
    "/roles/{role_id}",
    response_model=RoleResponse,
    dependencies=[Depends(require_permission(*CATALOG_ADMIN_PERMISSIONS))],
)
async def update_role(
    role_id: str,
    data: RoleUpdate,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    service: Annotated[RoleCatalogService, Depends(get_role_catalog_service_transactional)],
):
    fields = data.model_fields_set
    return await service.update_role(
        tenant.id,
        role_id,
        name=data.name,
        description=data.description,
        priority=data.priority,
        department_scope=data.department_scope,
        clear_department_scope="department_scope" in fields and data.department_scope is None,
        additional_permissions=data.additional_permissions,
    )


@router.post(
    "/roles/{role_id}/activate",
    response_model=RoleResponse,
    dependencies=[Depends(require_permission(*CATALOG_ADMIN_PERMISSIONS))],
)
async def activate_role(
    role_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    service: Annotated[RoleCatalogService, Depends(get_role_catalog_service_transactional)],
):
    return await service.activate_role(tenant.id, role_id)


@router.post(
    "/roles/{role_id}/deactivate",
    response_model=RoleResponse,
    dependencies=[Depends(require_permission(*CATALOG_ADMIN_PERMISSIONS))],
)
async def deactivate_role(
    role_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    service: Annotated[RoleCatalogService, Depends(get_role_catalog_service_transactional)],
):
    return await service.deactivate_role(tenant.id, role_id)


@router.get("/roles/{role_id}/deletion-check", response_model=RoleDeletionCheckResponse)
async def check_role_deletion(
    role_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    service: Annotated[RoleCatalogService, Depends(get_role_catalog_service)],
):
    """Every reason the role cannot be deleted, in one response"""
    return await service.validate_role_deletion(tenant.id, role_id)


@router.delete(
    "/roles/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(*CATALOG_ADMIN_PERMISSIONS))],
)
async def delete_role(
    role_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    service: Annotated[RoleCatalogService, Depends(get_role_catalog_service_transactional)],
):
    await service.delete_role(tenant.id, role_id)


@router.get("/roles/{role_id}/subordinates", response_model=list[RoleSummary])
async def list_subordinate_roles(
    role_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    resolver: Annotated[AuthorityResolver, Depends(get_authority_resolver)],
):
    return await resolver.subordinate_roles(tenant.id, role_id)


@router.get("/roles/{role_id}/assignments", response_model=list[AssignmentResponse])
async def list_role_assignments(
    role_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    service: Annotated[RoleAssignmentService, Depends(get_assignment_service)],
    include_inactive_principals: bool = False,
):
    rows = await service.list_for_role(
        tenant.id, role_id, include_inactive_principals=include_inactive_principals
    )
    now = service.evaluator.now()
    return [to_assignment_response(row, now) for row in rows]


@router.get(
    "/roles/{role_id}/audit",
    response_model=list[AuditLogResponse],
    dependencies=[Depends(require_permission(*AUDIT_PERMISSIONS))],
)
async def list_role_audit_trail(
    role_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    audit_repo: Annotated[AuditLogRepository, Depends(get_audit_log_repo)],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    return await audit_repo.get_by_entity(tenant.id, "role", role_id, skip=skip, limit=limit)
