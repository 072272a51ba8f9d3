from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academia_authz.infrastructure.persistence.models.audit_log import AuditLog
from academia_authz.infrastructure.persistence.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    """Read access to the append-only audit trail."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, AuditLog)

    async def get_by_entity(
        self,
        tenant_id: str,
        entity_type: str,
        entity_id: str,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AuditLog]:
        """Audit rows for one entity, oldest first"""
        result = await self._execute(
            select(AuditLog)
            .where(
                AuditLog.tenant_id == tenant_id,
                AuditLog.entity_type == entity_type,
                AuditLog.entity_id == entity_id,
            )
            .order_by(AuditLog.created_at.asc(), AuditLog.id.asc())
            .offset(skip)
            .limit(limit),
            "get_by_entity",
        )
        return list(result.scalars().all())
