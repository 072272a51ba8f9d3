from typing import Any

from sqlalchemy import (JSON, Boolean, CheckConstraint, Index, Integer, String,
                        Text, UniqueConstraint)
from sqlalchemy.orm import Mapped, mapped_column

from academia_authz.domain.entities import RoleEntity
from academia_authz.domain.enums import PermissionTag, RoleType
from academia_authz.domain.value_objects import MAX_PRIORITY, MIN_PRIORITY
from academia_authz.infrastructure.persistence.database import Base
from academia_authz.infrastructure.persistence.models.mixins import AuditedMultiTenantModel


class Role(AuditedMultiTenantModel, Base):
    """
    Tenant-scoped academic roles (e.g., 'Registrar', 'Department Chair').

    Inherits from AuditedMultiTenantModel:
        - id: CUID primary key
        - tenant_id: Foreign key to tenant
        - created_at / updated_at, created_by / updated_by
    """

    __tablename__ = "role"

    name: Mapped[str] = mapped_column(String(100), nullable=False)  # Display name
    normalized_name: Mapped[str] = mapped_column(
        String(100), nullable=False
    )  # Upper-cased lookup key
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    role_type: Mapped[str] = mapped_column(String, nullable=False, index=True)
    priority: Mapped[int] = mapped_column(
        Integer, nullable=False
    )  # 1 (lowest) .. 10 (highest authority)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_system_role: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )  # System roles cannot be deleted
    department_scope: Mapped[str | None] = mapped_column(String(15), nullable=True)
    additional_permissions: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "normalized_name", name="uq_role_tenant_normalized_name"),
        CheckConstraint(
            f"priority >= {MIN_PRIORITY} AND priority <= {MAX_PRIORITY}",
            name="role_priority_range_check",
        ),
        CheckConstraint(f"role_type IN {tuple(RoleType.values())}", name="role_type_check"),
        Index("ix_role_hierarchy", "tenant_id", "priority", "name"),
    )

    def to_entity(self) -> RoleEntity:
        return RoleEntity(
            id=self.id,
            tenant_id=self.tenant_id,
            name=self.name,
            normalized_name=self.normalized_name,
            role_type=RoleType(self.role_type),
            priority=self.priority,
            is_active=self.is_active,
            is_system_role=self.is_system_role,
            department_scope=self.department_scope,
            description=self.description,
            additional_permissions=frozenset(
                PermissionTag(tag) for tag in (self.additional_permissions or [])
            ),
        )

    def snapshot(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "normalized_name": self.normalized_name,
            "description": self.description,
            "role_type": self.role_type,
            "priority": self.priority,
            "is_active": self.is_active,
            "is_system_role": self.is_system_role,
            "department_scope": self.department_scope,
            "additional_permissions": list(self.additional_permissions or []),
        }
