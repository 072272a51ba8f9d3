"""Domain entities."""

from academia_authz.domain.entities.assignment import AssignmentEntity
from academia_authz.domain.entities.principal import PrincipalEntity
from academia_authz.domain.entities.role import RoleEntity

__all__ = [
    "AssignmentEntity",
    "PrincipalEntity",
    "RoleEntity",
]
