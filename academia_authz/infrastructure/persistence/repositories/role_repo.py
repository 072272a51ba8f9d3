from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academia_authz.domain.entities import RoleEntity
from academia_authz.domain.enums import RoleType
from academia_authz.domain.exceptions import DuplicateNameError
from academia_authz.infrastructure.persistence.models.role import Role
from academia_authz.infrastructure.persistence.repositories.auditable_repo import AuditableRepository
from academia_authz.shared.enums import AuditAction

if TYPE_CHECKING:
    from academia_authz.application.services.system_audit_service import SystemAuditService


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class RoleRepository(AuditableRepository[Role]):
    """Role catalog storage with automatic audit tracking."""

    def __init__(
        self,
        db: AsyncSession,
        audit_service: "SystemAuditService | None" = None,
        *,
        enable_audit: bool = True,
    ):
        super().__init__(db, Role, audit_service, enable_audit=enable_audit)

    # Auditable implementation
    def _get_entity_type(self) -> str:
        return "role"

    def _get_tenant_id(self, obj: Role) -> str:
        return obj.tenant_id

    def _serialize_for_audit(self, obj: Role) -> dict[str, Any]:
        return obj.snapshot()

    async def create(self, obj: Role) -> Role:
        """Insert a role; the unique index on normalized_name is the final arbiter."""
        try:
            return await super().create(obj)
        except IntegrityError as e:
            raise DuplicateNameError(obj.name) from e

    async def update(self, obj: Role) -> Role:
        try:
            return await super().update(obj)
        except IntegrityError as e:
            raise DuplicateNameError(obj.name) from e

    async def get_by_id_and_tenant(self, role_id: str, tenant_id: str) -> Role | None:
        result = await self._execute(
            select(Role).where(Role.id == role_id, Role.tenant_id == tenant_id),
            "get_by_id_and_tenant",
        )
        return result.scalar_one_or_none()

    async def get_by_normalized_name(self, tenant_id: str, normalized_name: str) -> Role | None:
        result = await self._execute(
            select(Role).where(
                Role.tenant_id == tenant_id, Role.normalized_name == normalized_name
            ),
            "get_by_normalized_name",
        )
        return result.scalar_one_or_none()

    async def exists_by_name(
        self, tenant_id: str, normalized_name: str, exclude_role_id: str | None = None
    ) -> bool:
        query = select(Role.id).where(
            Role.tenant_id == tenant_id, Role.normalized_name == normalized_name
        )
        if exclude_role_id is not None:
            query = query.where(Role.id != exclude_role_id)
        result = await self._execute(query.limit(1), "exists_by_name")
        return result.scalar_one_or_none() is not None

    async def list_hierarchical(self, tenant_id: str, active_only: bool = False) -> list[Role]:
        """Roles ordered by priority ascending, then name"""
        query = select(Role).where(Role.tenant_id == tenant_id)
        if active_only:
            query = query.where(Role.is_active.is_(True))
        result = await self._execute(
            query.order_by(Role.priority.asc(), Role.name.asc(), Role.id.asc()),
            "list_hierarchical",
        )
        return list(result.scalars().all())

    async def get_by_type(self, tenant_id: str, role_type: RoleType) -> list[Role]:
        result = await self._execute(
            select(Role)
            .where(Role.tenant_id == tenant_id, Role.role_type == role_type.value)
            .order_by(Role.priority.asc(), Role.name.asc()),
            "get_by_type",
        )
        return list(result.scalars().all())

    async def get_by_priority(self, tenant_id: str, priority: int) -> list[Role]:
        result = await self._execute(
            select(Role)
            .where(Role.tenant_id == tenant_id, Role.priority == priority)
            .order_by(Role.name.asc()),
            "get_by_priority",
        )
        return list(result.scalars().all())

    async def search(self, tenant_id: str, term: str, active_only: bool = False) -> list[Role]:
        """Case-insensitive substring match over name and description"""
        pattern = _like_pattern(term.strip())
        query = select(Role).where(
            Role.tenant_id == tenant_id,
            or_(
                Role.name.ilike(pattern, escape="\\"),
                Role.description.ilike(pattern, escape="\\"),
            ),
        )
        if active_only:
            query = query.where(Role.is_active.is_(True))
        result = await self._execute(
            query.order_by(Role.priority.asc(), Role.name.asc()), "search"
        )
        return list(result.scalars().all())

    async def find_roles(
        self, tenant_id: str, role_ids: list[str] | None = None, active_only: bool = False
    ) -> list[RoleEntity]:
        """Immutable snapshots of catalog roles, optionally restricted to `role_ids`."""
        if role_ids is not None and not role_ids:
            return []
        query = select(Role).where(Role.tenant_id == tenant_id)
        if role_ids is not None:
            query = query.where(Role.id.in_(role_ids))
        if active_only:
            query = query.where(Role.is_active.is_(True))
        result = await self._execute(query, "find_roles")
        return [role.to_entity() for role in result.scalars().all()]

    async def deactivate(self, role: Role) -> Role:
        """Deactivate a role with audit event."""
        role.is_active = False
        updated = await self.update(role)
        await self.emit_custom_audit(updated, AuditAction.DEACTIVATED)
        return updated

    async def activate(self, role: Role) -> Role:
        """Activate a role with audit event."""
        role.is_active = True
        updated = await self.update(role)
        await self.emit_custom_audit(updated, AuditAction.ACTIVATED)
        return updated

