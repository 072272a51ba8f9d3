from academia_authz.infrastructure.persistence.models.assignment import RoleAssignment
from academia_authz.infrastructure.persistence.models.audit_log import AuditLog
# Mixins for model composition
from academia_authz.infrastructure.persistence.models.mixins import (
    ActorAuditMixin, AuditedMultiTenantModel, CuidMixin, MultiTenantModel,
    TenantMixin, TimestampMixin)
from academia_authz.infrastructure.persistence.models.principal import Principal
from academia_authz.infrastructure.persistence.models.role import Role
from academia_authz.infrastructure.persistence.models.tenant import Tenant

__all__ = [
    # Models
    "Tenant",
    "Principal",
    "Role",
    "RoleAssignment",
    "AuditLog",
    # Mixins
    "CuidMixin",
    "TenantMixin",
    "TimestampMixin",
    "ActorAuditMixin",
    "MultiTenantModel",
    "AuditedMultiTenantModel",
]
