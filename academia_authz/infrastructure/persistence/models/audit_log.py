from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from academia_authz.infrastructure.persistence.database import Base
from academia_authz.infrastructure.persistence.models.mixins import CuidMixin, TenantMixin
from academia_authz.shared.utils.datetime import utc_now


class AuditLog(CuidMixin, TenantMixin, Base):
    """
    Append-only record of every catalog and assignment mutation.

    Inherits from:
        - CuidMixin: CUID primary key
        - TenantMixin: Tenant foreign key

    Note: audit rows are never updated, so no updated_at.
    """

    __tablename__ = "audit_log"

    entity_type: Mapped[str] = mapped_column(String, nullable=False)  # 'role', 'role_assignment'
    entity_id: Mapped[str] = mapped_column(String, nullable=False)
    action: Mapped[str] = mapped_column(String, nullable=False)
    actor_id: Mapped[str | None] = mapped_column(String, nullable=True)
    actor_type: Mapped[str] = mapped_column(String, nullable=False)
    correlation_id: Mapped[str | None] = mapped_column(String, nullable=True)
    entity_data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    audit_metadata: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_audit_log_entity", "tenant_id", "entity_type", "entity_id"),
    )
