"""Application services."""

from academia_authz.application.services.authority_resolver import (
    AuthorityResolver,
    PrincipalAuthority,
    RoleAssignmentValidation,
)
from academia_authz.application.services.role_assignment_service import RoleAssignmentService
from academia_authz.application.services.role_catalog_service import (
    RoleCatalogService,
    RoleDeletionValidationResult,
    RoleStatistics,
)
from academia_authz.application.services.system_audit_service import SystemAuditService

__all__ = [
    "AuthorityResolver",
    "PrincipalAuthority",
    "RoleAssignmentValidation",
    "RoleAssignmentService",
    "RoleCatalogService",
    "RoleDeletionValidationResult",
    "RoleStatistics",
    "SystemAuditService",
]
