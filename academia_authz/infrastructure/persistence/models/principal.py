from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from academia_authz.domain.entities import PrincipalEntity
from academia_authz.infrastructure.persistence.database import Base
from academia_authz.infrastructure.persistence.models.mixins import MultiTenantModel


class Principal(MultiTenantModel, Base):
    """
    A user account that can hold roles.

    Credentials live with the identity provider; this table only carries
    what authorization needs: identity, tenancy and the active flag.

    Inherits from MultiTenantModel:
        - id: CUID primary key
        - tenant_id: Foreign key to tenant
        - created_at / updated_at
    """

    __tablename__ = "principal"

    username: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "username", name="uq_principal_tenant_username"),
    )

    def to_entity(self) -> PrincipalEntity:
        return PrincipalEntity(
            id=self.id,
            tenant_id=self.tenant_id,
            username=self.username,
            is_active=self.is_active,
        )
