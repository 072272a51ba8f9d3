"""
SQLAlchemy mixins for common model patterns.

These mixins provide reusable column definitions so every authorization
table carries the same identity, tenancy and audit columns.

Audit Levels:
    - TimestampMixin: Just timestamps (created_at, updated_at)
    - ActorAuditMixin: Adds who created / last updated the row
"""
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from academia_authz.shared.utils.generators import generate_cuid


class CuidMixin:
    """
    Mixin for models using CUID as primary key.

    Provides:
        - id: String primary key with automatic CUID generation
    """

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TenantMixin:
    """
    Mixin for multi-tenant models.

    Provides:
        - tenant_id: Foreign key to tenant table with cascade delete
    """

    @declared_attr
    def tenant_id(cls) -> Mapped[str]:
        return mapped_column(
            String,
            ForeignKey("tenant.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )


class TimestampMixin:
    """
    Mixin for timestamp tracking.

    Provides:
        - created_at: Timestamp set on creation (server-side default)
        - updated_at: Timestamp updated on modification (server-side default + onupdate)
    """

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class ActorAuditMixin(TimestampMixin):
    """
    Actor tracking (who did what).

    Provides:
        - created_at / updated_at
        - created_by: Principal ID (or "system") that created the record
        - updated_by: Principal ID (or "system") that last updated the record

    Actor ids are plain strings so seeding jobs can record "system".
    """

    @declared_attr
    def created_by(cls) -> Mapped[str | None]:
        return mapped_column(String, nullable=True)

    @declared_attr
    def updated_by(cls) -> Mapped[str | None]:
        return mapped_column(String, nullable=True)


class MultiTenantModel(CuidMixin, TenantMixin, TimestampMixin):
    """
    Complete mixin for standard multi-tenant models.

    Combines:
        - CuidMixin: CUID primary key
        - TenantMixin: Tenant foreign key
        - TimestampMixin: Created/updated timestamps
    """

    __abstract__ = True


class AuditedMultiTenantModel(CuidMixin, TenantMixin, ActorAuditMixin):
    """
    Multi-tenant model with actor tracking.

    Use this for catalog and assignment rows where "who changed it" matters.
    """

    __abstract__ = True
