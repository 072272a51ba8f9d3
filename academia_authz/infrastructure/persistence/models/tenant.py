from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from academia_authz.infrastructure.persistence.database import Base
from academia_authz.infrastructure.persistence.models.mixins import (CuidMixin,
                                                                     TimestampMixin)


class Tenant(CuidMixin, TimestampMixin, Base):
    """
    Root tenant (an institution) for multi-tenant isolation.

    Note: Tenant does not have a tenant_id since it is the root of the hierarchy.
    Uses CuidMixin and TimestampMixin only (no TenantMixin).
    """

    __tablename__ = "tenant"

    code: Mapped[str] = mapped_column(String, unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
