"""
Role domain entity.

This represents the business concept of a role, independent of how it's
stored in the database. Instances are immutable snapshots so an authority
decision can be computed over a consistent view of the catalog.
"""

from dataclasses import dataclass, field

from academia_authz.domain.enums import PermissionTag, RoleType


@dataclass(frozen=True)
class RoleEntity:
    """
    Domain entity for Role (SRP - business logic separate from persistence)
    """

    id: str
    tenant_id: str
    name: str
    normalized_name: str
    role_type: RoleType
    priority: int
    is_active: bool = True
    is_system_role: bool = False
    department_scope: str | None = None
    description: str | None = None
    additional_permissions: frozenset[PermissionTag] = field(default_factory=frozenset)

    def outranks(self, other: "RoleEntity") -> bool:
        """Higher priority carries more authority; equal priority never outranks."""
        return self.priority > other.priority
