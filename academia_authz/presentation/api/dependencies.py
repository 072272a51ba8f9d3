from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from academia_authz.application.services import (AuthorityResolver,
                                                 RoleAssignmentService,
                                                 RoleCatalogService)
from academia_authz.domain.enums import PermissionTag
from academia_authz.domain.exceptions import PermissionDeniedError
from academia_authz.domain.policies import EffectivenessEvaluator
from academia_authz.infrastructure.config.settings import get_settings
from academia_authz.infrastructure.persistence.database import get_db, get_db_transactional
from academia_authz.infrastructure.persistence.models import Tenant
from academia_authz.infrastructure.persistence.repositories import (
    AssignmentRepository, AuditLogRepository, PrincipalRepository,
    RoleRepository, TenantRepository)
from academia_authz.infrastructure.security.jwt import verify_token
from academia_authz.presentation.api.v1.schemas.token import TokenPayload
from academia_authz.shared.context import set_current_actor
from academia_authz.shared.enums import ActorType
from academia_authz.shared.utils import Clock, SystemClock

security = HTTPBearer()

_system_clock = SystemClock()

# Permission sets guarding mutating routes
CATALOG_ADMIN_PERMISSIONS = (PermissionTag.FULL_SYSTEM_ADMIN, PermissionTag.SYSTEM_CONFIGURATION)
ASSIGNMENT_PERMISSIONS = (PermissionTag.ASSIGN_ROLES,)
AUDIT_PERMISSIONS = (PermissionTag.VIEW_AUDIT_TRAILS,)


def get_clock() -> Clock:
    """Clock dependency; tests override it with a FixedClock"""
    return _system_clock


def get_evaluator(clock: Clock = Depends(get_clock)) -> EffectivenessEvaluator:
    return EffectivenessEvaluator(clock)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> TokenPayload:
    """
    Validate the bearer token and bind the caller to the request context.
    Token must contain 'sub' (principal id) and 'tenant_id' claims.
    """
    try:
        payload = verify_token(credentials.credentials)
        token_data = TokenPayload(**payload)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    set_current_actor(token_data.sub, token_data.tenant_id, ActorType.USER)
    return token_data


async def get_current_tenant(
    user: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Tenant:
    """
    Get current tenant from the caller's token claims.
    Tenant ID is derived from the token, never from a header or path.
    """
    tenant = await TenantRepository(db).get_by_id(user.tenant_id)
    if not tenant or not tenant.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Tenant not found or access denied",
        )
    return tenant


def _build_authority_resolver(
    db: AsyncSession, evaluator: EffectivenessEvaluator
) -> AuthorityResolver:
    return AuthorityResolver(
        role_store=RoleRepository(db),
        assignment_store=AssignmentRepository(db),
        principal_lookup=PrincipalRepository(db),
        evaluator=evaluator,
        timeout_seconds=get_settings().authz_query_timeout_seconds,
    )


def _build_catalog_service(
    db: AsyncSession, evaluator: EffectivenessEvaluator
) -> RoleCatalogService:
    return RoleCatalogService(
        role_repo=RoleRepository(db),
        assignment_repo=AssignmentRepository(db),
        principal_repo=PrincipalRepository(db),
        evaluator=evaluator,
    )


def _build_assignment_service(
    db: AsyncSession, evaluator: EffectivenessEvaluator
) -> RoleAssignmentService:
    return RoleAssignmentService(
        assignment_repo=AssignmentRepository(db),
        role_repo=RoleRepository(db),
        principal_repo=PrincipalRepository(db),
        evaluator=evaluator,
    )


async def get_authority_resolver(
    db: AsyncSession = Depends(get_db),
    evaluator: EffectivenessEvaluator = Depends(get_evaluator),
) -> AuthorityResolver:
    """Authority resolver for read-only permission and hierarchy checks"""
    return _build_authority_resolver(db, evaluator)


async def get_role_catalog_service(
    db: AsyncSession = Depends(get_db),
    evaluator: EffectivenessEvaluator = Depends(get_evaluator),
) -> RoleCatalogService:
    return _build_catalog_service(db, evaluator)


async def get_assignment_service(
    db: AsyncSession = Depends(get_db),
    evaluator: EffectivenessEvaluator = Depends(get_evaluator),
) -> RoleAssignmentService:
    return _build_assignment_service(db, evaluator)


# Transactional dependencies for write operations
async def get_role_catalog_service_transactional(
    db: AsyncSession = Depends(get_db_transactional),
    evaluator: EffectivenessEvaluator = Depends(get_evaluator),
) -> RoleCatalogService:
    """Catalog service with transaction management"""
    return _build_catalog_service(db, evaluator)


async def get_assignment_service_transactional(
    db: AsyncSession = Depends(get_db_transactional),
    evaluator: EffectivenessEvaluator = Depends(get_evaluator),
) -> RoleAssignmentService:
    """Assignment service with transaction management"""
    return _build_assignment_service(db, evaluator)


async def get_audit_log_repo(db: AsyncSession = Depends(get_db)) -> AuditLogRepository:
    return AuditLogRepository(db)


def require_permission(*tags: PermissionTag):
    """
    Dependency factory for route-level permission checking.
    The caller needs at least one of `tags` among its effective permissions.

    Usage:
        @router.post("/roles", dependencies=[Depends(require_permission(PermissionTag.SYSTEM_CONFIGURATION))])
        async def create_role(...):
            ...
    """

    async def permission_checker(
        user: TokenPayload = Depends(get_current_user),
        tenant: Tenant = Depends(get_current_tenant),
        resolver: AuthorityResolver = Depends(get_authority_resolver),
    ) -> TokenPayload:
        if not await resolver.has_any_permission(tenant.id, user.sub, tags):
            required = " or ".join(tag.value for tag in tags)
            raise PermissionDeniedError(
                f"Permission denied: {required} required", permission=required
            )
        return user

    return permission_checker
