"""
Authority resolver.

Derives a principal's effective roles and permissions and decides whether
one principal may administer another. Each public call loads the catalog,
the relevant assignments and principals once, reads the clock once, and
evaluates everything against that snapshot.

Convention: a higher priority number carries more authority.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from academia_authz.application.interfaces import (IAssignmentStore,
                                                   IPrincipalLookup,
                                                   IRoleStore)
from academia_authz.domain.entities import (AssignmentEntity, PrincipalEntity,
                                            RoleEntity)
from academia_authz.domain.enums import PermissionTag, RoleType
from academia_authz.domain.exceptions import NotFoundError
from academia_authz.domain.policies import (EffectivenessEvaluator,
                                            authority_sort_key,
                                            effective_permissions,
                                            highest_authority_role,
                                            manageable_roles,
                                            subordinate_roles)
from academia_authz.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PrincipalAuthority:
    """Everything needed to answer authority questions about one principal at `now`."""

    principal_id: str
    now: datetime
    principal: PrincipalEntity | None
    assignments: tuple[AssignmentEntity, ...] = ()
    catalog: dict[str, RoleEntity] = field(default_factory=dict)

    def granted_assignments(self, evaluator: EffectivenessEvaluator) -> list[AssignmentEntity]:
        return [
            assignment
            for assignment in self.assignments
            if evaluator.is_granted(
                assignment, self.catalog.get(assignment.role_id), self.principal, self.now
            )
        ]

    def effective_roles(self, evaluator: EffectivenessEvaluator) -> list[RoleEntity]:
        """Deduplicated: a role held under several scopes appears once."""
        role_ids = {a.role_id for a in self.granted_assignments(evaluator)}
        return sorted((self.catalog[role_id] for role_id in role_ids), key=authority_sort_key)

    def primary_role(self, evaluator: EffectivenessEvaluator) -> RoleEntity | None:
        primaries = [a for a in self.granted_assignments(evaluator) if a.is_primary]
        if not primaries:
            return None
        return highest_authority_role(self.catalog[a.role_id] for a in primaries)

    def highest_authority_role(self, evaluator: EffectivenessEvaluator) -> RoleEntity | None:
        return highest_authority_role(self.effective_roles(evaluator))


@dataclass
class RoleAssignmentValidation:
    """Outcome of checking whether an assigner may grant a role to a target."""

    is_valid: bool
    issues: list[str] = field(default_factory=list)


class AuthorityResolver:
    """
    Read-only authority queries over a consistent snapshot.

    Loading is bounded by `timeout_seconds`. A timed-out load fails closed:
    the principal is treated as holding no effective role. Cancellation and
    storage errors propagate to the caller.
    """

    def __init__(
        self,
        role_store: IRoleStore,
        assignment_store: IAssignmentStore,
        principal_lookup: IPrincipalLookup,
        evaluator: EffectivenessEvaluator,
        timeout_seconds: float | None = None,
    ):
        self.role_store = role_store
        self.assignment_store = assignment_store
        self.principal_lookup = principal_lookup
        self.evaluator = evaluator
        self.timeout_seconds = timeout_seconds

    async def _load(
        self, tenant_id: str, principal_ids: list[str], now: datetime
    ) -> dict[str, PrincipalAuthority]:
        catalog = {role.id: role for role in await self.role_store.find_roles(tenant_id)}
        assignments = await self.assignment_store.find_assignments(
            tenant_id, principal_ids=principal_ids, active_only=True
        )
        principals = await self.principal_lookup.get_entities(principal_ids, tenant_id)
        return {
            principal_id: PrincipalAuthority(
                principal_id=principal_id,
                now=now,
                principal=principals.get(principal_id),
                assignments=tuple(a for a in assignments if a.principal_id == principal_id),
                catalog=catalog,
            )
            for principal_id in principal_ids
        }

    async def snapshot(self, tenant_id: str, *principal_ids: str) -> dict[str, PrincipalAuthority]:
        """Load authority for the given principals against one `now`."""
        now = self.evaluator.now()
        unique_ids = list(dict.fromkeys(principal_ids))
        try:
            if self.timeout_seconds is None:
                return await self._load(tenant_id, unique_ids, now)
            return await asyncio.wait_for(
                self._load(tenant_id, unique_ids, now), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Authority lookup timed out after %ss for %s in tenant %s; failing closed",
                self.timeout_seconds,
                ", ".join(unique_ids),
                tenant_id,
            )
            return {
                principal_id: PrincipalAuthority(principal_id=principal_id, now=now, principal=None)
                for principal_id in unique_ids
            }

    async def _authority(self, tenant_id: str, principal_id: str) -> PrincipalAuthority:
        return (await self.snapshot(tenant_id, principal_id))[principal_id]

    async def effective_roles(self, tenant_id: str, principal_id: str) -> list[RoleEntity]:
        """Granted roles, most authoritative first, each role once."""
        authority = await self._authority(tenant_id, principal_id)
        return authority.effective_roles(self.evaluator)

    async def primary_role(self, tenant_id: str, principal_id: str) -> RoleEntity | None:
        """None when no granted assignment is marked primary; never guessed."""
        authority = await self._authority(tenant_id, principal_id)
        return authority.primary_role(self.evaluator)

    async def highest_authority_role(self, tenant_id: str, principal_id: str) -> RoleEntity | None:
        authority = await self._authority(tenant_id, principal_id)
        return authority.highest_authority_role(self.evaluator)

    async def subordinate_roles(self, tenant_id: str, role_id: str) -> list[RoleEntity]:
        catalog = await self.role_store.find_roles(tenant_id)
        role = next((r for r in catalog if r.id == role_id), None)
        if role is None:
            raise NotFoundError("Role", role_id)
        return subordinate_roles(role, catalog)

    async def manageable_roles(
        self, tenant_id: str, principal_id: str, active_only: bool = False
    ) -> list[RoleEntity]:
        """Catalog roles strictly below the principal's highest role."""
        authority = await self._authority(tenant_id, principal_id)
        return manageable_roles(
            authority.highest_authority_role(self.evaluator),
            authority.catalog.values(),
            active_only=active_only,
        )

    async def assignable_roles(self, tenant_id: str, principal_id: str) -> list[RoleEntity]:
        """Active roles the principal may grant to others."""
        return await self.manageable_roles(tenant_id, principal_id, active_only=True)

    async def can_manage(self, tenant_id: str, manager_id: str, target_id: str) -> bool:
        """
        True iff the manager's highest role strictly outranks the target's.

        False when either side has no effective role; a principal never
        manages itself.
        """
        if manager_id == target_id:
            return False
        authorities = await self.snapshot(tenant_id, manager_id, target_id)
        manager = authorities[manager_id].highest_authority_role(self.evaluator)
        target = authorities[target_id].highest_authority_role(self.evaluator)
        if manager is None or target is None:
            logger.debug(
                "can_manage(%s, %s): no effective role on %s side",
                manager_id,
                target_id,
                "manager" if manager is None else "target",
            )
            return False
        return manager.outranks(target)

    async def effective_permissions(self, tenant_id: str, principal_id: str) -> list[str]:
        """Union of additional permissions over granted roles, lexicographically ordered."""
        return effective_permissions(await self.effective_roles(tenant_id, principal_id))

    async def has_permission(
        self, tenant_id: str, principal_id: str, tag: PermissionTag | str
    ) -> bool:
        return PermissionTag(tag).value in await self.effective_permissions(
            tenant_id, principal_id
        )

    async def has_any_permission(
        self, tenant_id: str, principal_id: str, tags: Iterable[PermissionTag | str]
    ) -> bool:
        granted = set(await self.effective_permissions(tenant_id, principal_id))
        return any(PermissionTag(tag).value in granted for tag in tags)

    async def has_role_or_higher(
        self, tenant_id: str, principal_id: str, role_type: RoleType | str
    ) -> bool:
        """Highest granted role sits at or above the default level of `role_type`."""
        highest = await self.highest_authority_role(tenant_id, principal_id)
        if highest is None:
            return False
        return highest.priority >= RoleType(role_type).default_priority

    async def validate_role_assignment(
        self, tenant_id: str, assigner_id: str, target_id: str, role_id: str
    ) -> RoleAssignmentValidation:
        """
        Check every precondition for `assigner` granting `role` to `target`.

        All failing checks are reported together.
        """
        authorities = await self.snapshot(tenant_id, assigner_id, target_id)
        assigner = authorities[assigner_id]
        target = authorities[target_id]
        role = assigner.catalog.get(role_id)

        issues: list[str] = []
        if role is None:
            issues.append(f"Role not found: {role_id}")
        elif not role.is_active:
            issues.append(f"Role {role.name} is inactive")

        if target.principal is None:
            issues.append(f"Principal not found: {target_id}")
        elif not target.principal.is_active:
            issues.append(f"Principal {target.principal.username} is inactive")

        assigner_highest = assigner.highest_authority_role(self.evaluator)
        if assigner_highest is None:
            issues.append("Assigner holds no effective role")
        elif role is not None and not assigner_highest.outranks(role):
            issues.append(
                f"Assigner's highest role {assigner_highest.name} "
                f"(priority {assigner_highest.priority}) does not outrank "
                f"{role.name} (priority {role.priority})"
            )

        return RoleAssignmentValidation(is_valid=not issues, issues=issues)

    async def can_grant_role(self, tenant_id: str, principal_id: str, role_id: str) -> bool:
        """
        True iff the principal's highest role strictly outranks `role_id`.

        Raises NotFoundError for a role outside the tenant's catalog.
        """
        authority = await self._authority(tenant_id, principal_id)
        role = authority.catalog.get(role_id)
        if role is None:
            if not authority.catalog:
                # failed-closed snapshot: nothing is known, nothing is granted
                return False
            raise NotFoundError("Role", role_id)
        highest = authority.highest_authority_role(self.evaluator)
        return highest is not None and highest.outranks(role)
