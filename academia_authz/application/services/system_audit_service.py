"""
System Audit Service for tracking catalog and assignment mutations.

Audit rows are added to the caller's session, so they commit or roll back
together with the operation they describe.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from academia_authz.infrastructure.persistence.models.audit_log import AuditLog
from academia_authz.shared.context import get_correlation_id
from academia_authz.shared.enums import ActorType, AuditAction
from academia_authz.shared.telemetry.logging import get_logger
from academia_authz.shared.utils import utc_now

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class SystemAuditService:
    """
    Service for writing audit_log rows.

    Stateless apart from the session; one instance per request.
    """

    def __init__(self, db: "AsyncSession") -> None:
        self.db = db

    async def emit_audit_event(
        self,
        tenant_id: str,
        entity_type: str,
        action: AuditAction,
        entity_id: str,
        entity_data: dict[str, Any],
        actor_id: str | None = None,
        actor_type: ActorType = ActorType.SYSTEM,
        metadata: dict[str, Any] | None = None,
    ) -> AuditLog:
        """
        Record an audit row for an entity operation.

        Args:
            tenant_id: The tenant context
            entity_type: Type of entity ("role", "role_assignment")
            action: The action performed (created, revoked, etc.)
            entity_id: ID of the affected entity
            entity_data: Snapshot of entity data after the operation
            actor_id: ID of the principal that performed the action
            actor_type: Type of actor (user, system, external)
            metadata: Additional context, e.g. the revocation reason

        Returns:
            The pending AuditLog row
        """
        entry = AuditLog(
            tenant_id=tenant_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action.value,
            actor_id=actor_id,
            actor_type=actor_type.value,
            correlation_id=get_correlation_id() or None,
            entity_data=self._sanitize_entity_data(entity_data),
            audit_metadata=self._sanitize_entity_data(metadata or {}),
            created_at=utc_now(),
        )

        self.db.add(entry)
        # Note: Don't flush here - let the caller control transaction

        logger.debug(
            "Emitted audit event for %s.%s (entity_id: %s)",
            entity_type,
            action.value,
            entity_id,
        )

        return entry

    @staticmethod
    def _sanitize_entity_data(data: dict[str, Any]) -> dict[str, Any]:
        """
        Sanitize entity data for storage in the audit row.

        Removes sensitive fields and handles non-serializable types.
        """
        sensitive_fields = {
            "password",
            "secret",
            "token",
            "access_token",
            "credentials",
        }

        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            if key.lower() in sensitive_fields:
                sanitized[key] = "[REDACTED]"
            elif isinstance(value, dict):
                sanitized[key] = SystemAuditService._sanitize_entity_data(value)
            elif isinstance(value, datetime):
                sanitized[key] = value.isoformat()
            elif isinstance(value, Enum):
                sanitized[key] = value.value
            elif isinstance(value, set | frozenset):
                sanitized[key] = sorted(str(v) for v in value)
            elif hasattr(value, "__dict__") and not isinstance(value, dict):
                sanitized[key] = str(value)
            else:
                sanitized[key] = value

        return sanitized
