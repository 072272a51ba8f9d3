""" Repository module for the persistence layer. """

from academia_authz.infrastructure.persistence.repositories.assignment_repo import AssignmentRepository
from academia_authz.infrastructure.persistence.repositories.audit_log_repo import AuditLogRepository
from academia_authz.infrastructure.persistence.repositories.auditable_repo import AuditableRepository
from academia_authz.infrastructure.persistence.repositories.base import BaseRepository, storage_errors
from academia_authz.infrastructure.persistence.repositories.principal_repo import PrincipalRepository
from academia_authz.infrastructure.persistence.repositories.role_repo import RoleRepository
from academia_authz.infrastructure.persistence.repositories.tenant_repo import TenantRepository

__all__ = [
    "AssignmentRepository",
    "AuditLogRepository",
    "AuditableRepository",
    "BaseRepository",
    "PrincipalRepository",
    "RoleRepository",
    "TenantRepository",
    "storage_errors",
]
