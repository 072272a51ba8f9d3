from typing import Annotated

from fastapi import APIRouter, Depends

from academia_authz.application.services import AuthorityResolver
from academia_authz.infrastructure.persistence.models import Tenant
from academia_authz.presentation.api.dependencies import (
    get_authority_resolver, get_current_tenant, get_current_user)
from academia_authz.presentation.api.v1.schemas.authority import (
    AssignmentValidationResponse, CanManageResponse, EffectiveRolesResponse,
    PermissionsResponse, SingleRoleResponse)
from academia_authz.presentation.api.v1.schemas.role import RoleSummary
from academia_authz.presentation.api.v1.schemas.token import TokenPayload

router = APIRouter()


# "me" routes are registered before the {principal_id} routes they shadow
@router.get("/principals/me/effective-roles", response_model=EffectiveRolesResponse)
async def get_my_effective_roles(
    user: Annotated[TokenPayload, Depends(get_current_user)],
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    resolver: Annotated[AuthorityResolver, Depends(get_authority_resolver)],
):
    roles = await resolver.effective_roles(tenant.id, user.sub)
    return EffectiveRolesResponse(
        principal_id=user.sub, roles=[RoleSummary.model_validate(r) for r in roles]
    )


@router.get("/principals/me/permissions", response_model=PermissionsResponse)
async def get_my_permissions(
    user: Annotated[TokenPayload, Depends(get_current_user)],
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    resolver: Annotated[AuthorityResolver, Depends(get_authority_resolver)],
):
    permissions = await resolver.effective_permissions(tenant.id, user.sub)
    return PermissionsResponse(principal_id=user.sub, permissions=permissions)


@router.get("/principals/{principal_id}/effective-roles", response_model=EffectiveRolesResponse)
async def get_effective_roles(
    principal_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    resolver: Annotated[AuthorityResolver, Depends(get_authority_resolver)],
):
    """Roles currently granted to the principal, most authoritative first"""
    roles = await resolver.effective_roles(tenant.id, principal_id)
    return EffectiveRolesResponse(
        principal_id=principal_id, roles=[RoleSummary.model_validate(r) for r in roles]
    )


@router.get("/principals/{principal_id}/primary-role", response_model=SingleRoleResponse)
async def get_primary_role(
    principal_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    resolver: Annotated[AuthorityResolver, Depends(get_authority_resolver)],
):
    role = await resolver.primary_role(tenant.id, principal_id)
    return SingleRoleResponse(
        principal_id=principal_id,
        role=RoleSummary.model_validate(role) if role else None,
    )


@router.get("/principals/{principal_id}/highest-role", response_model=SingleRoleResponse)
async def get_highest_authority_role(
    principal_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    resolver: Annotated[AuthorityResolver, Depends(get_authority_resolver)],
):
    role = await resolver.highest_authority_role(tenant.id, principal_id)
    return SingleRoleResponse(
        principal_id=principal_id,
        role=RoleSummary.model_validate(role) if role else None,
    )


@router.get("/principals/{principal_id}/permissions", response_model=PermissionsResponse)
async def get_effective_permissions(
    principal_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    resolver: Annotated[AuthorityResolver, Depends(get_authority_resolver)],
):
    permissions = await resolver.effective_permissions(tenant.id, principal_id)
    return PermissionsResponse(principal_id=principal_id, permissions=permissions)


@router.get("/principals/{principal_id}/manageable-roles", response_model=list[RoleSummary])
async def get_manageable_roles(
    principal_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    resolver: Annotated[AuthorityResolver, Depends(get_authority_resolver)],
    active_only: bool = True,
):
    return await resolver.manageable_roles(tenant.id, principal_id, active_only=active_only)


@router.get("/principals/{principal_id}/assignable-roles", response_model=list[RoleSummary])
async def get_assignable_roles(
    principal_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    resolver: Annotated[AuthorityResolver, Depends(get_authority_resolver)],
):
    return await resolver.assignable_roles(tenant.id, principal_id)


@router.get(
    "/principals/{manager_id}/can-manage/{target_id}", response_model=CanManageResponse
)
async def can_manage(
    manager_id: str,
    target_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    resolver: Annotated[AuthorityResolver, Depends(get_authority_resolver)],
):
    allowed = await resolver.can_manage(tenant.id, manager_id, target_id)
    return CanManageResponse(manager_id=manager_id, target_id=target_id, can_manage=allowed)


@router.get(
    "/principals/{assigner_id}/can-assign/{target_id}/{role_id}",
    response_model=AssignmentValidationResponse,
)
async def validate_role_assignment(
    assigner_id: str,
    target_id: str,
    role_id: str,
    tenant: Annotated[Tenant, Depends(get_current_tenant)],
    resolver: Annotated[AuthorityResolver, Depends(get_authority_resolver)],
):
    """Dry run of a grant: every failing precondition is listed"""
    result = await resolver.validate_role_assignment(tenant.id, assigner_id, target_id, role_id)
    return AssignmentValidationResponse(
        assigner_id=assigner_id,
        target_id=target_id,
        role_id=role_id,
        is_valid=result.is_valid,
        issues=result.issues,
    )
