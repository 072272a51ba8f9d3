from datetime import datetime
from typing import Any

from sqlalchemy import (JSON, Boolean, CheckConstraint, DateTime, ForeignKey,
                        Index, String, Text, text)
from sqlalchemy.orm import Mapped, mapped_column

from academia_authz.domain.entities import AssignmentEntity
from academia_authz.infrastructure.persistence.database import Base
from academia_authz.infrastructure.persistence.models.mixins import AuditedMultiTenantModel
from academia_authz.shared.utils.datetime import ensure_utc, ensure_utc_or_none


class RoleAssignment(AuditedMultiTenantModel, Base):
    """
    Time-bounded, optionally department-scoped binding of principal to role.

    Two independent uniqueness spaces are enforced by partial unique indexes:
    one global binding per (principal, role), plus one per
    (principal, role, department_context). A third partial index allows at
    most one active primary assignment per principal.

    Rows are never deleted; revocation sets is_active = False and stamps
    revoked_at / revoked_by / revocation_reason.
    """

    __tablename__ = "role_assignment"

    principal_id: Mapped[str] = mapped_column(
        String, ForeignKey("principal.id", ondelete="CASCADE"), nullable=False
    )
    role_id: Mapped[str] = mapped_column(
        String, ForeignKey("role.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    department_context: Mapped[str | None] = mapped_column(String(15), nullable=True)

    # Window
    effective_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expiration_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Assignment metadata
    assignment_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    assigned_by: Mapped[str | None] = mapped_column(String, nullable=True)
    assignment_context: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    # Revocation metadata
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    revoked_by: Mapped[str | None] = mapped_column(String, nullable=True)
    revocation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index(
            "uq_role_assignment_global",
            "tenant_id",
            "principal_id",
            "role_id",
            unique=True,
            postgresql_where=text("department_context IS NULL"),
            sqlite_where=text("department_context IS NULL"),
        ),
        Index(
            "uq_role_assignment_scoped",
            "tenant_id",
            "principal_id",
            "role_id",
            "department_context",
            unique=True,
            postgresql_where=text("department_context IS NOT NULL"),
            sqlite_where=text("department_context IS NOT NULL"),
        ),
        Index(
            "uq_role_assignment_primary",
            "tenant_id",
            "principal_id",
            unique=True,
            postgresql_where=text("is_primary AND is_active"),
            sqlite_where=text("is_primary AND is_active"),
        ),
        Index("ix_role_assignment_lookup", "tenant_id", "principal_id"),
        CheckConstraint(
            "expiration_date IS NULL OR expiration_date > effective_date",
            name="role_assignment_window_check",
        ),
    )

    def to_entity(self) -> AssignmentEntity:
        return AssignmentEntity(
            id=self.id,
            tenant_id=self.tenant_id,
            principal_id=self.principal_id,
            role_id=self.role_id,
            effective_date=ensure_utc(self.effective_date),
            expiration_date=ensure_utc_or_none(self.expiration_date),
            is_active=self.is_active,
            is_primary=self.is_primary,
            department_context=self.department_context,
            assignment_reason=self.assignment_reason,
            assigned_by=self.assigned_by,
            revoked_at=ensure_utc_or_none(self.revoked_at),
            revoked_by=self.revoked_by,
            revocation_reason=self.revocation_reason,
        )

    def snapshot(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "principal_id": self.principal_id,
            "role_id": self.role_id,
            "department_context": self.department_context,
            "effective_date": self.effective_date,
            "expiration_date": self.expiration_date,
            "is_active": self.is_active,
            "is_primary": self.is_primary,
            "assignment_reason": self.assignment_reason,
            "assigned_by": self.assigned_by,
            "revoked_at": self.revoked_at,
            "revocation_reason": self.revocation_reason,
        }
