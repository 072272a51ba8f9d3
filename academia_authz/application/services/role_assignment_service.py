"""
Role assignment service.

Grants, revokes and maintains time-bounded principal-role bindings. The
check-then-insert sequence runs inside the caller's transaction; the partial
unique indexes on role_assignment settle any race that slips past the check.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from academia_authz.domain.enums import AssignmentState
from academia_authz.domain.exceptions import (DuplicateAssignmentError,
                                              NotFoundError,
                                              PrincipalInactiveError,
                                              RoleInactiveError,
                                              ValidationException)
from academia_authz.domain.policies import EffectivenessEvaluator
from academia_authz.domain.value_objects import AssignmentWindow, DepartmentCode
from academia_authz.infrastructure.persistence.models import Principal, Role, RoleAssignment
from academia_authz.infrastructure.persistence.repositories import (
    AssignmentRepository, PrincipalRepository, RoleRepository)
from academia_authz.shared.context import get_current_actor_id
from academia_authz.shared.enums import AuditAction
from academia_authz.shared.telemetry.logging import get_logger
from academia_authz.shared.utils import ensure_utc, ensure_utc_or_none

logger = get_logger(__name__)


class RoleAssignmentService:
    """
    Application service for the assignment store.

    Revocation never deletes a row: it flips is_active and stamps who, when
    and why. Expiry needs no write at all; it is a function of the clock.
    """

    def __init__(
        self,
        assignment_repo: AssignmentRepository,
        role_repo: RoleRepository,
        principal_repo: PrincipalRepository,
        evaluator: EffectivenessEvaluator,
    ):
        self.assignment_repo = assignment_repo
        self.role_repo = role_repo
        self.principal_repo = principal_repo
        self.evaluator = evaluator

    async def _get_principal(self, tenant_id: str, principal_id: str) -> Principal:
        principal = await self.principal_repo.get_by_id_and_tenant(principal_id, tenant_id)
        if principal is None:
            raise NotFoundError("Principal", principal_id)
        return principal

    async def _get_role(self, tenant_id: str, role_id: str) -> Role:
        role = await self.role_repo.get_by_id_and_tenant(role_id, tenant_id)
        if role is None:
            raise NotFoundError("Role", role_id)
        return role

    async def get_assignment(self, tenant_id: str, assignment_id: str) -> RoleAssignment:
        assignment = await self.assignment_repo.get_by_id_and_tenant(assignment_id, tenant_id)
        if assignment is None:
            raise NotFoundError("Assignment", assignment_id)
        return assignment

    async def assign_role(
        self,
        tenant_id: str,
        principal_id: str,
        role_id: str,
        *,
        department_context: str | None = None,
        effective_date: datetime | None = None,
        expiration_date: datetime | None = None,
        reason: str | None = None,
        is_primary: bool = False,
        assignment_context: dict[str, Any] | None = None,
        assigned_by: str | None = None,
    ) -> RoleAssignment:
        """
        Grant `role_id` to `principal_id`, optionally scoped to a department.

        effective_date defaults to now. A revoked binding occupying the same
        (principal, role, scope) slot is reinstated in place with the new
        window; an active one is a duplicate.

        Raises:
            NotFoundError: unknown principal or role
            PrincipalInactiveError / RoleInactiveError
            InvalidWindowError: expiration_date <= effective_date
            DuplicateAssignmentError: the binding already exists and is active,
                or a concurrent caller reinstated it first
        """
        principal = await self._get_principal(tenant_id, principal_id)
        if not principal.is_active:
            raise PrincipalInactiveError(principal_id)
        role = await self._get_role(tenant_id, role_id)
        if not role.is_active:
            raise RoleInactiveError(role_id)

        scope = DepartmentCode(department_context).value if department_context else None
        window = AssignmentWindow(
            effective_date=ensure_utc(effective_date) if effective_date else self.evaluator.now(),
            expiration_date=ensure_utc_or_none(expiration_date),
        )
        actor_id = assigned_by or get_current_actor_id()

        existing = await self.assignment_repo.find_binding(tenant_id, principal_id, role_id, scope)
        if existing is not None and existing.is_active:
            raise DuplicateAssignmentError(principal_id, role_id, scope)

        if is_primary:
            await self.assignment_repo.demote_primaries(tenant_id, principal_id)

        if existing is not None:
            assignment = await self.assignment_repo.reinstate_if_revoked(
                existing,
                effective_date=window.effective_date,
                expiration_date=window.expiration_date,
                is_primary=is_primary,
                reason=reason,
                assigned_by=actor_id,
                assignment_context=assignment_context,
                metadata={
                    "reason": reason,
                    "reinstated": True,
                    "previous": {
                        "revoked_at": existing.revoked_at,
                        "revocation_reason": existing.revocation_reason,
                    },
                },
            )
        else:
            assignment = await self.assignment_repo.insert(
                RoleAssignment(
                    tenant_id=tenant_id,
                    principal_id=principal_id,
                    role_id=role_id,
                    department_context=scope,
                    effective_date=window.effective_date,
                    expiration_date=window.expiration_date,
                    is_active=True,
                    is_primary=is_primary,
                    assignment_reason=reason,
                    assigned_by=actor_id,
                    assignment_context=assignment_context,
                    created_by=actor_id,
                    updated_by=actor_id,
                ),
                {"reason": reason},
            )

        logger.info(
            "Assigned role %s to principal %s (scope: %s) in tenant %s",
            role.name,
            principal_id,
            scope or "global",
            tenant_id,
        )
        return assignment

    async def revoke_role(
        self,
        tenant_id: str,
        assignment_id: str,
        reason: str | None = None,
        revoked_by: str | None = None,
    ) -> RoleAssignment:
        """
        Soft-revoke an assignment.

        Idempotent: revoking an already revoked assignment returns it
        unchanged, with the original revoked_at and reason intact.
        """
        assignment = await self.get_assignment(tenant_id, assignment_id)
        if not assignment.is_active:
            logger.debug("Assignment %s already revoked", assignment_id)
            return assignment

        flipped = await self.assignment_repo.revoke_if_active(
            assignment_id,
            tenant_id,
            revoked_at=self.evaluator.now(),
            revoked_by=revoked_by or get_current_actor_id(),
            reason=reason,
        )
        await self.assignment_repo.db.refresh(assignment)
        if flipped:
            logger.info("Revoked assignment %s in tenant %s", assignment_id, tenant_id)
        else:
            logger.debug("Assignment %s was revoked concurrently", assignment_id)
        return assignment

    async def list_for_principal(
        self, tenant_id: str, principal_id: str, include_inactive: bool = False
    ) -> list[RoleAssignment]:
        """Assignments held by a principal; revoked rows only when include_inactive."""
        await self._get_principal(tenant_id, principal_id)
        return await self.assignment_repo.find_by_principal(
            tenant_id, principal_id, include_inactive=include_inactive
        )

    async def list_for_role(
        self, tenant_id: str, role_id: str, include_inactive_principals: bool = False
    ) -> list[RoleAssignment]:
        """
        Assignments referencing a role.

        By default only assignments that currently grant the role to an
        active principal are returned; include_inactive_principals returns
        the full history.
        """
        await self._get_role(tenant_id, role_id)
        rows = await self.assignment_repo.find_by_role(tenant_id, role_id)
        if include_inactive_principals:
            return rows

        principals = await self.principal_repo.get_entities(
            sorted({row.principal_id for row in rows}), tenant_id
        )
        now = self.evaluator.now()
        return [
            row
            for row in rows
            if row.principal_id in principals
            and principals[row.principal_id].is_active
            and self.evaluator.is_effective(row.to_entity(), now)
        ]

    async def set_primary_assignment(
        self, tenant_id: str, assignment_id: str, is_primary: bool = True
    ) -> RoleAssignment:
        """Mark an assignment primary, demoting any other primary of the same principal."""
        assignment = await self.get_assignment(tenant_id, assignment_id)
        if not assignment.is_active:
            raise ValidationException(
                "Revoked assignments cannot be marked primary", field="assignment_id"
            )
        if assignment.is_primary == is_primary:
            return assignment

        if is_primary:
            await self.assignment_repo.demote_primaries(
                tenant_id, assignment.principal_id, keep_assignment_id=assignment.id
            )
        assignment.is_primary = is_primary
        assignment.updated_by = get_current_actor_id()
        updated = await self.assignment_repo.save(
            assignment, AuditAction.PRIMARY_CHANGED, {"is_primary": is_primary}
        )
        logger.info(
            "Set primary=%s on assignment %s for principal %s",
            is_primary,
            assignment_id,
            assignment.principal_id,
        )
        return updated

    async def extend_assignment(
        self, tenant_id: str, assignment_id: str, new_expiration: datetime | None
    ) -> RoleAssignment:
        """
        Move the expiration date (None makes the assignment permanent).

        The new window is revalidated; revoked assignments cannot be extended.
        """
        assignment = await self.get_assignment(tenant_id, assignment_id)
        if not assignment.is_active:
            raise ValidationException(
                "Revoked assignments cannot be extended", field="assignment_id"
            )

        window = AssignmentWindow(
            effective_date=ensure_utc(assignment.effective_date),
            expiration_date=ensure_utc_or_none(new_expiration),
        )
        previous_expiration = ensure_utc_or_none(assignment.expiration_date)
        extension = (
            f"{window.expiration_date:%Y-%m-%d}" if window.expiration_date else "permanent"
        )
        note = f"Extended to: {extension}"

        assignment.expiration_date = window.expiration_date
        assignment.assignment_reason = (
            f"{assignment.assignment_reason}. {note}" if assignment.assignment_reason else note
        )
        assignment.updated_by = get_current_actor_id()
        updated = await self.assignment_repo.save(
            assignment,
            AuditAction.EXTENDED,
            {"previous_expiration": previous_expiration, "new_expiration": window.expiration_date},
        )
        logger.info("Extended assignment %s to %s", assignment_id, extension)
        return updated

    async def assignment_state(
        self, tenant_id: str, assignment_id: str, now: datetime | None = None
    ) -> AssignmentState:
        assignment = await self.get_assignment(tenant_id, assignment_id)
        return self.evaluator.state(assignment.to_entity(), ensure_utc_or_none(now))

    async def describe_assignment(self, tenant_id: str, assignment_id: str) -> str:
        assignment = await self.get_assignment(tenant_id, assignment_id)
        role = await self.role_repo.get_by_id_and_tenant(assignment.role_id, tenant_id)
        return assignment.to_entity().describe(
            role.name if role else "Unknown Role", self.evaluator.now()
        )
