from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academia_authz.domain.entities import AssignmentEntity
from academia_authz.domain.exceptions import DuplicateAssignmentError, ValidationException
from academia_authz.infrastructure.persistence.models.assignment import RoleAssignment
from academia_authz.infrastructure.persistence.repositories.auditable_repo import AuditableRepository
from academia_authz.shared.enums import AuditAction
from academia_authz.shared.utils.datetime import ensure_utc, ensure_utc_or_none

if TYPE_CHECKING:
    from academia_authz.application.services.system_audit_service import SystemAuditService

PRIMARY_INDEX = "uq_role_assignment_primary"


def _is_primary_conflict(error: IntegrityError) -> bool:
    message = str(error.orig)
    if PRIMARY_INDEX in message:
        return True
    # SQLite names the indexed columns instead of the index
    return message.rstrip().endswith("role_assignment.principal_id")


def _conflict_error(
    error: IntegrityError, principal_id: str, role_id: str, department_context: str | None
) -> Exception:
    """Map a unique index violation to the domain error it stands for."""
    if _is_primary_conflict(error):
        return ValidationException(
            f"Principal {principal_id} already has an active primary assignment",
            field="is_primary",
        )
    return DuplicateAssignmentError(principal_id, role_id, department_context)


class AssignmentRepository(AuditableRepository[RoleAssignment]):
    """
    Storage boundary for principal-role assignments.

    Rows are never physically removed. Revocation and reinstatement are
    compare-and-swaps on is_active so concurrent callers settle on a single
    winner.
    """

    def __init__(
        self,
        db: AsyncSession,
        audit_service: "SystemAuditService | None" = None,
        *,
        enable_audit: bool = True,
    ):
        super().__init__(db, RoleAssignment, audit_service, enable_audit=enable_audit)

    # Auditable implementation
    def _get_entity_type(self) -> str:
        return "role_assignment"

    def _get_tenant_id(self, obj: RoleAssignment) -> str:
        return obj.tenant_id

    def _serialize_for_audit(self, obj: RoleAssignment) -> dict[str, Any]:
        return obj.snapshot()

    def _should_audit(self, action: AuditAction, obj: RoleAssignment) -> bool:
        # Every assignment mutation emits its own specific action
        return action not in (AuditAction.CREATED, AuditAction.UPDATED)

    async def insert(
        self, obj: RoleAssignment, metadata: dict[str, Any] | None = None
    ) -> RoleAssignment:
        """Insert an assignment; unique index violations become domain errors."""
        try:
            created = await self.create(obj)
        except IntegrityError as e:
            raise _conflict_error(
                e, obj.principal_id, obj.role_id, obj.department_context
            ) from e
        await self.emit_custom_audit(created, AuditAction.ASSIGNED, metadata)
        return created

    async def save(
        self,
        obj: RoleAssignment,
        action: AuditAction,
        metadata: dict[str, Any] | None = None,
    ) -> RoleAssignment:
        """Flush changes to an existing row and record `action` in the audit trail."""
        try:
            updated = await self.update(obj)
        except IntegrityError as e:
            raise _conflict_error(
                e, obj.principal_id, obj.role_id, obj.department_context
            ) from e
        await self.emit_custom_audit(updated, action, metadata)
        return updated

    async def reinstate_if_revoked(
        self,
        revoked: RoleAssignment,
        *,
        effective_date: datetime,
        expiration_date: datetime | None,
        is_primary: bool,
        reason: str | None,
        assigned_by: str | None,
        assignment_context: dict[str, Any] | None,
        metadata: dict[str, Any] | None = None,
    ) -> RoleAssignment:
        """
        Compare-and-swap reactivation of a revoked row.

        Only one caller can flip a given row back to active. Losers get
        DuplicateAssignmentError and no audit row is written for them.
        """
        try:
            result = await self._execute(
                update(RoleAssignment)
                .where(
                    RoleAssignment.id == revoked.id,
                    RoleAssignment.tenant_id == revoked.tenant_id,
                    RoleAssignment.is_active.is_(False),
                )
                .values(
                    is_active=True,
                    is_primary=is_primary,
                    effective_date=ensure_utc(effective_date),
                    expiration_date=ensure_utc_or_none(expiration_date),
                    assignment_reason=reason,
                    assigned_by=assigned_by,
                    assignment_context=assignment_context,
                    revoked_at=None,
                    revoked_by=None,
                    revocation_reason=None,
                    updated_by=assigned_by,
                )
                .execution_options(synchronize_session=False),
                "reinstate_if_revoked",
            )
        except IntegrityError as e:
            raise _conflict_error(
                e, revoked.principal_id, revoked.role_id, revoked.department_context
            ) from e
        if result.rowcount == 0:
            raise DuplicateAssignmentError(
                revoked.principal_id, revoked.role_id, revoked.department_context
            )

        await self.db.refresh(revoked)
        await self.emit_custom_audit(revoked, AuditAction.ASSIGNED, metadata)
        return revoked

    async def get_by_id_and_tenant(
        self, assignment_id: str, tenant_id: str
    ) -> RoleAssignment | None:
        result = await self._execute(
            select(RoleAssignment).where(
                RoleAssignment.id == assignment_id, RoleAssignment.tenant_id == tenant_id
            ),
            "get_by_id_and_tenant",
        )
        return result.scalar_one_or_none()

    async def find_binding(
        self,
        tenant_id: str,
        principal_id: str,
        role_id: str,
        department_context: str | None,
    ) -> RoleAssignment | None:
        """The row occupying the (principal, role, scope) uniqueness slot, if any"""
        query = select(RoleAssignment).where(
            RoleAssignment.tenant_id == tenant_id,
            RoleAssignment.principal_id == principal_id,
            RoleAssignment.role_id == role_id,
        )
        if department_context is None:
            query = query.where(RoleAssignment.department_context.is_(None))
        else:
            query = query.where(RoleAssignment.department_context == department_context)
        result = await self._execute(query, "find_binding")
        return result.scalar_one_or_none()

    async def find_by_principal(
        self, tenant_id: str, principal_id: str, include_inactive: bool = False
    ) -> list[RoleAssignment]:
        query = select(RoleAssignment).where(
            RoleAssignment.tenant_id == tenant_id,
            RoleAssignment.principal_id == principal_id,
        )
        if not include_inactive:
            query = query.where(RoleAssignment.is_active.is_(True))
        result = await self._execute(
            query.order_by(RoleAssignment.effective_date.asc(), RoleAssignment.id.asc()),
            "find_by_principal",
        )
        return list(result.scalars().all())

    async def find_by_role(self, tenant_id: str, role_id: str) -> list[RoleAssignment]:
        result = await self._execute(
            select(RoleAssignment)
            .where(RoleAssignment.tenant_id == tenant_id, RoleAssignment.role_id == role_id)
            .order_by(RoleAssignment.effective_date.asc(), RoleAssignment.id.asc()),
            "find_by_role",
        )
        return list(result.scalars().all())

    async def find_assignments(
        self,
        tenant_id: str,
        principal_ids: list[str] | None = None,
        role_id: str | None = None,
        active_only: bool = False,
    ) -> list[AssignmentEntity]:
        """Immutable snapshots for authority evaluation"""
        if principal_ids is not None and not principal_ids:
            return []
        query = select(RoleAssignment).where(RoleAssignment.tenant_id == tenant_id)
        if principal_ids is not None:
            query = query.where(RoleAssignment.principal_id.in_(principal_ids))
        if role_id is not None:
            query = query.where(RoleAssignment.role_id == role_id)
        if active_only:
            query = query.where(RoleAssignment.is_active.is_(True))
        result = await self._execute(query, "find_assignments")
        return [row.to_entity() for row in result.scalars().all()]

    async def find_active_primaries(
        self, tenant_id: str, principal_id: str
    ) -> list[RoleAssignment]:
        result = await self._execute(
            select(RoleAssignment).where(
                RoleAssignment.tenant_id == tenant_id,
                RoleAssignment.principal_id == principal_id,
                RoleAssignment.is_primary.is_(True),
                RoleAssignment.is_active.is_(True),
            ),
            "find_active_primaries",
        )
        return list(result.scalars().all())

    async def revoke_if_active(
        self,
        assignment_id: str,
        tenant_id: str,
        *,
        revoked_at: datetime,
        revoked_by: str | None,
        reason: str | None,
    ) -> bool:
        """
        Compare-and-swap revocation.

        Returns True if this call flipped the row, False if it was already
        revoked (the stored revocation metadata is left untouched).
        """
        result = await self._execute(
            update(RoleAssignment)
            .where(
                RoleAssignment.id == assignment_id,
                RoleAssignment.tenant_id == tenant_id,
                RoleAssignment.is_active.is_(True),
            )
            .values(
                is_active=False,
                is_primary=False,
                revoked_at=ensure_utc(revoked_at),
                revoked_by=revoked_by,
                revocation_reason=reason,
                updated_by=revoked_by,
            )
            .execution_options(synchronize_session=False),
            "revoke_if_active",
        )
        if result.rowcount == 0:
            return False

        row = await self.get_by_id_and_tenant(assignment_id, tenant_id)
        if row is not None:
            await self.db.refresh(row)
            await self.emit_custom_audit(
                row, AuditAction.REVOKED, metadata={"reason": reason}
            )
        return True

    async def demote_primaries(
        self, tenant_id: str, principal_id: str, keep_assignment_id: str | None = None
    ) -> list[RoleAssignment]:
        """Clear is_primary on every other active primary of the principal."""
        demoted: list[RoleAssignment] = []
        for row in await self.find_active_primaries(tenant_id, principal_id):
            if row.id == keep_assignment_id:
                continue
            row.is_primary = False
            demoted.append(row)
        if demoted:
            await self._flush("demote_primaries")
            for row in demoted:
                await self.db.refresh(row)
                await self.emit_custom_audit(
                    row, AuditAction.PRIMARY_CHANGED, metadata={"is_primary": False}
                )
        return demoted
