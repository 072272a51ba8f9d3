from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academia_authz.infrastructure.persistence.models.tenant import Tenant
from academia_authz.infrastructure.persistence.repositories.base import BaseRepository


class TenantRepository(BaseRepository[Tenant]):
    """
    Repository for Tenant lookups.

    Tenants are provisioned outside this service, so there is no audit
    trail here; only reads used by seeding and request validation.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db, Tenant)

    async def get_by_code(self, code: str) -> Tenant | None:
        result = await self._execute(select(Tenant).where(Tenant.code == code), "get_by_code")
        return result.scalar_one_or_none()

    async def get_active_tenants(self) -> list[Tenant]:
        """Get all active tenants"""
        result = await self._execute(
            select(Tenant).where(Tenant.is_active.is_(True)).order_by(Tenant.code),
            "get_active_tenants",
        )
        return list(result.scalars().all())
