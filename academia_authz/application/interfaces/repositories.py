"""
Repository interfaces (ports) for the application layer.

These protocols describe the storage boundary the authorization services
consume. The SQLAlchemy repositories implement them; tests may substitute
in-memory fakes or AsyncMocks.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from academia_authz.domain.entities import (AssignmentEntity,
                                                PrincipalEntity, RoleEntity)
    from academia_authz.infrastructure.persistence.models import (Role,
                                                                  RoleAssignment)


class IRoleStore(Protocol):
    """Protocol for role catalog reads used by authority decisions (DIP)"""

    async def find_roles(
        self, tenant_id: str, role_ids: list[str] | None = None, active_only: bool = False
    ) -> list[RoleEntity]:
        """Immutable role snapshots, optionally restricted to `role_ids`"""
        ...

    async def get_by_id_and_tenant(self, role_id: str, tenant_id: str) -> Role | None:
        ...


class IAssignmentStore(Protocol):
    """Protocol for the assignment storage boundary (DIP)"""

    async def find_assignments(
        self,
        tenant_id: str,
        principal_ids: list[str] | None = None,
        role_id: str | None = None,
        active_only: bool = False,
    ) -> list[AssignmentEntity]:
        ...

    async def insert(
        self, obj: RoleAssignment, metadata: dict[str, Any] | None = None
    ) -> RoleAssignment:
        """Insert or raise DuplicateAssignmentError"""
        ...

    async def update(self, obj: RoleAssignment) -> RoleAssignment:
        ...

    async def revoke_if_active(
        self,
        assignment_id: str,
        tenant_id: str,
        *,
        revoked_at: datetime,
        revoked_by: str | None,
        reason: str | None,
    ) -> bool:
        """True if this call performed the revocation"""
        ...


class IPrincipalLookup(Protocol):
    """Protocol for principal lookups (DIP)"""

    async def is_principal_active(self, principal_id: str, tenant_id: str) -> bool:
        ...

    async def get_entity(self, principal_id: str, tenant_id: str) -> PrincipalEntity | None:
        ...

    async def get_entities(
        self, principal_ids: list[str], tenant_id: str
    ) -> dict[str, PrincipalEntity]:
        ...
