"""
Auditable Repository base class for automatic audit trail tracking.

Extends BaseRepository with hooks that automatically write audit_log rows
for all CRUD operations on entities that should be tracked.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, TypeVar

from academia_authz.infrastructure.persistence.database import Base
from academia_authz.infrastructure.persistence.repositories.base import BaseRepository
from academia_authz.shared.context import get_current_actor_id, get_current_actor_type
from academia_authz.shared.enums import AuditAction
from academia_authz.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from academia_authz.application.services.system_audit_service import SystemAuditService

ModelType = TypeVar("ModelType", bound=Base)

logger = get_logger(__name__)


class AuditableRepository(BaseRepository[ModelType]):
    """
    Repository base class with automatic audit row emission.

    Auditing is ENABLED BY DEFAULT. Audit rows are written in the caller's
    transaction for all CRUD operations without any additional configuration.

    Subclasses must implement:
    - _get_entity_type(): Return the entity type string (e.g., "role")
    - _get_tenant_id(obj): Extract tenant_id from the entity
    - _serialize_for_audit(obj): Convert entity to dict for audit payload

    Optionally override:
    - _get_actor_id(): Return the current actor ID (user performing action)
    - _should_audit(): Return False to skip auditing for certain operations
    """

    def __init__(
        self,
        db: "AsyncSession",
        model: type[ModelType],
        audit_service: "SystemAuditService | None" = None,
        *,
        enable_audit: bool = True,
    ):
        super().__init__(db, model)
        self._audit_service = audit_service
        self._audit_enabled = enable_audit

    @property
    def audit_service(self) -> "SystemAuditService | None":
        """Get the audit service, lazily initializing if needed."""
        if self._audit_service is None and self._audit_enabled:
            from academia_authz.application.services.system_audit_service import (
                SystemAuditService,
            )

            self._audit_service = SystemAuditService(self.db)
        return self._audit_service

    def disable_auditing(self) -> None:
        """Disable auditing for this repository instance."""
        self._audit_enabled = False

    # Abstract methods that subclasses must implement
    @abstractmethod
    def _get_entity_type(self) -> str:
        """Return the entity type string for audit rows (e.g., 'role')."""
        ...

    @abstractmethod
    def _get_tenant_id(self, obj: ModelType) -> str:
        """Extract tenant_id from the entity."""
        ...

    @abstractmethod
    def _serialize_for_audit(self, obj: ModelType) -> dict[str, Any]:
        """Convert entity to dict for audit payload."""
        ...

    # Optional overrides
    def _get_actor_id(self) -> str | None:
        """Return the current actor ID from the request context."""
        return get_current_actor_id()

    def _should_audit(self, action: AuditAction, obj: ModelType) -> bool:
        """Return whether this operation should be audited. Override to filter."""
        return True

    async def _emit_audit_event(
        self,
        action: AuditAction,
        obj: ModelType,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Write an audit row for the given action and entity."""
        if not self._audit_enabled or not self._should_audit(action, obj):
            return

        service = self.audit_service
        if service is None:
            return

        try:
            await service.emit_audit_event(
                tenant_id=self._get_tenant_id(obj),
                entity_type=self._get_entity_type(),
                action=action,
                entity_id=getattr(obj, "id", str(obj)),
                entity_data=self._serialize_for_audit(obj),
                actor_id=self._get_actor_id(),
                actor_type=get_current_actor_type(),
                metadata=metadata,
            )
        except Exception as e:
            # Log but don't fail the operation if auditing fails
            logger.warning(
                "Failed to emit audit event for %s.%s: %s",
                self._get_entity_type(),
                action.value,
                str(e),
            )

    # Override hooks from BaseRepository
    async def _on_after_create(self, obj: ModelType) -> None:
        await super()._on_after_create(obj)
        await self._emit_audit_event(AuditAction.CREATED, obj)

    async def _on_after_update(self, obj: ModelType) -> None:
        await super()._on_after_update(obj)
        await self._emit_audit_event(AuditAction.UPDATED, obj)

    async def _on_before_delete(self, obj: ModelType) -> None:
        await super()._on_before_delete(obj)
        await self._emit_audit_event(AuditAction.DELETED, obj)

    async def emit_custom_audit(
        self,
        obj: ModelType,
        action: AuditAction,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Emit a custom audit row (e.g., activated, revoked)."""
        await self._emit_audit_event(action, obj, metadata)
