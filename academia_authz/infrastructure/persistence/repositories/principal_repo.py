from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academia_authz.domain.entities import PrincipalEntity
from academia_authz.infrastructure.persistence.models.principal import Principal
from academia_authz.infrastructure.persistence.repositories.base import BaseRepository


class PrincipalRepository(BaseRepository[Principal]):
    """
    Principal lookup boundary.

    Accounts are owned by the identity provider; this service only reads
    them to decide whether an assignment may grant authority.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db, Principal)

    async def get_by_id_and_tenant(self, principal_id: str, tenant_id: str) -> Principal | None:
        result = await self._execute(
            select(Principal).where(
                Principal.id == principal_id, Principal.tenant_id == tenant_id
            ),
            "get_by_id_and_tenant",
        )
        return result.scalar_one_or_none()

    async def get_entity(self, principal_id: str, tenant_id: str) -> PrincipalEntity | None:
        principal = await self.get_by_id_and_tenant(principal_id, tenant_id)
        return principal.to_entity() if principal else None

    async def is_principal_active(self, principal_id: str, tenant_id: str) -> bool:
        """Unknown principals are reported inactive."""
        principal = await self.get_by_id_and_tenant(principal_id, tenant_id)
        return bool(principal and principal.is_active)

    async def get_entities(
        self, principal_ids: list[str], tenant_id: str
    ) -> dict[str, PrincipalEntity]:
        if not principal_ids:
            return {}
        result = await self._execute(
            select(Principal).where(
                Principal.tenant_id == tenant_id, Principal.id.in_(principal_ids)
            ),
            "get_entities",
        )
        return {p.id: p.to_entity() for p in result.scalars().all()}
