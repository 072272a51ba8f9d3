"""
Role catalog service.

Owns role creation and editing, hierarchy-ordered listings, the deletion
guard and catalog statistics. Every catalog lookup goes through the injected
RoleRepository; there is no process-wide role list.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from academia_authz.domain.enums import RoleType
from academia_authz.domain.exceptions import (DuplicateNameError,
                                              NotFoundError,
                                              ProtectedRoleError,
                                              RoleInUseError,
                                              ValidationException)
from academia_authz.domain.permissions import default_permissions
from academia_authz.domain.policies import EffectivenessEvaluator
from academia_authz.domain.value_objects import (DepartmentCode,
                                                 PermissionSet, Priority,
                                                 RoleName)
from academia_authz.infrastructure.persistence.models import Role
from academia_authz.infrastructure.persistence.repositories import (
    AssignmentRepository, PrincipalRepository, RoleRepository)
from academia_authz.shared.context import get_current_actor_id
from academia_authz.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RoleDeletionValidationResult:
    """Every reason a role cannot be deleted, not just the first one found."""

    role_id: str
    can_delete: bool
    issues: list[str] = field(default_factory=list)
    effective_assignment_count: int = 0
    total_assignment_count: int = 0


@dataclass
class RoleStatistics:
    total_roles: int = 0
    active_roles: int = 0
    inactive_roles: int = 0
    system_roles: int = 0
    roles_by_type: dict[str, int] = field(default_factory=dict)
    roles_by_priority: dict[int, int] = field(default_factory=dict)
    role_user_counts: dict[str, int] = field(default_factory=dict)
    roles_with_no_assignments: int = 0
    roles_with_active_assignments: int = 0


def _parse_role_type(value: RoleType | str) -> RoleType:
    try:
        return RoleType(value)
    except ValueError:
        raise ValidationException(f"Unknown role type: {value}", field="role_type") from None


class RoleCatalogService:
    """
    Application service for the role catalog.

    Validation happens here, before anything reaches storage; the unique
    index on (tenant_id, normalized_name) is the last line of defence for
    concurrent creates.
    """

    def __init__(
        self,
        role_repo: RoleRepository,
        assignment_repo: AssignmentRepository,
        principal_repo: PrincipalRepository,
        evaluator: EffectivenessEvaluator,
    ):
        self.role_repo = role_repo
        self.assignment_repo = assignment_repo
        self.principal_repo = principal_repo
        self.evaluator = evaluator

    async def get_role(self, tenant_id: str, role_id: str) -> Role:
        role = await self.role_repo.get_by_id_and_tenant(role_id, tenant_id)
        if role is None:
            raise NotFoundError("Role", role_id)
        return role

    async def get_role_by_name(self, tenant_id: str, name: str) -> Role | None:
        """Case-insensitive lookup; None when no role carries the name."""
        return await self.role_repo.get_by_normalized_name(tenant_id, RoleName(name).normalized)

    async def create_role(
        self,
        tenant_id: str,
        name: str,
        role_type: RoleType | str,
        priority: int | None = None,
        description: str | None = None,
        department_scope: str | None = None,
        additional_permissions: list[str] | None = None,
        is_system_role: bool = False,
        is_active: bool = True,
    ) -> Role:
        """
        Create a catalog role.

        Raises:
            DuplicateNameError: normalized name already used in the tenant
            InvalidPriorityError: priority outside [1, 10]
            ValidationException: blank name, unknown type or permission tag
        """
        role_name = RoleName(name)
        kind = _parse_role_type(role_type)
        level = Priority(kind.default_priority if priority is None else priority)
        scope = DepartmentCode(department_scope).value if department_scope else None
        permissions = PermissionSet.parse(additional_permissions)

        if await self.role_repo.exists_by_name(tenant_id, role_name.normalized):
            raise DuplicateNameError(role_name.value)

        actor_id = get_current_actor_id()
        role = Role(
            tenant_id=tenant_id,
            name=role_name.value,
            normalized_name=role_name.normalized,
            description=description,
            role_type=kind.value,
            priority=level.value,
            is_active=is_active,
            is_system_role=is_system_role,
            department_scope=scope,
            additional_permissions=permissions.to_list(),
            created_by=actor_id,
            updated_by=actor_id,
        )
        created = await self.role_repo.create(role)
        logger.info(
            "Created role %s (%s, priority %d) in tenant %s",
            created.name,
            created.role_type,
            created.priority,
            tenant_id,
        )
        return created

    async def update_role(
        self,
        tenant_id: str,
        role_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        priority: int | None = None,
        department_scope: str | None = None,
        clear_department_scope: bool = False,
        additional_permissions: list[str] | None = None,
    ) -> Role:
        """
        Edit a role. Renaming re-normalizes and re-checks uniqueness.

        System roles keep their name and priority; attempting to change
        either raises ProtectedRoleError.
        """
        role = await self.get_role(tenant_id, role_id)

        if name is not None:
            role_name = RoleName(name)
            if role_name.value != role.name:
                if role.is_system_role:
                    raise ProtectedRoleError(role.id, ["System roles cannot be renamed"])
                if await self.role_repo.exists_by_name(
                    tenant_id, role_name.normalized, exclude_role_id=role.id
                ):
                    raise DuplicateNameError(role_name.value)
                role.name = role_name.value
                role.normalized_name = role_name.normalized

        if priority is not None:
            level = Priority(priority)
            if level.value != role.priority:
                if role.is_system_role:
                    raise ProtectedRoleError(
                        role.id, ["System role priority cannot be changed"]
                    )
                role.priority = level.value

        if description is not None:
            role.description = description
        if clear_department_scope:
            role.department_scope = None
        elif department_scope is not None:
            role.department_scope = DepartmentCode(department_scope).value
        if additional_permissions is not None:
            role.additional_permissions = PermissionSet.parse(additional_permissions).to_list()

        role.updated_by = get_current_actor_id()
        updated = await self.role_repo.update(role)
        logger.info("Updated role %s in tenant %s", updated.id, tenant_id)
        return updated

    async def activate_role(self, tenant_id: str, role_id: str) -> Role:
        role = await self.get_role(tenant_id, role_id)
        if role.is_active:
            return role
        role.updated_by = get_current_actor_id()
        activated = await self.role_repo.activate(role)
        logger.info("Activated role %s in tenant %s", role_id, tenant_id)
        return activated

    async def deactivate_role(self, tenant_id: str, role_id: str) -> Role:
        """Deactivated roles stop granting authority; their assignments remain."""
        role = await self.get_role(tenant_id, role_id)
        if not role.is_active:
            return role
        role.updated_by = get_current_actor_id()
        deactivated = await self.role_repo.deactivate(role)
        logger.info("Deactivated role %s in tenant %s", role_id, tenant_id)
        return deactivated

    # Listings
    async def list_roles_hierarchical(self, tenant_id: str, active_only: bool = False) -> list[Role]:
        return await self.role_repo.list_hierarchical(tenant_id, active_only=active_only)

    async def list_roles_by_type(self, tenant_id: str, role_type: RoleType | str) -> list[Role]:
        return await self.role_repo.get_by_type(tenant_id, _parse_role_type(role_type))

    async def list_roles_by_priority(self, tenant_id: str, priority: int) -> list[Role]:
        return await self.role_repo.get_by_priority(tenant_id, Priority(priority).value)

    async def search_roles(
        self, tenant_id: str, term: str | None, active_only: bool = False
    ) -> list[Role]:
        """Substring search over name and description; a blank term lists everything."""
        if not term or not term.strip():
            return await self.role_repo.list_hierarchical(tenant_id, active_only=active_only)
        return await self.role_repo.search(tenant_id, term, active_only=active_only)

    # Deletion guard
    async def validate_role_deletion(
        self, tenant_id: str, role_id: str
    ) -> RoleDeletionValidationResult:
        """
        Collect every reason the role cannot be physically removed.

        Any assignment blocks deletion, effective or not, because revoked
        and expired rows are the audit history of the role.
        """
        role = await self.get_role(tenant_id, role_id)
        assignments = await self.assignment_repo.find_assignments(tenant_id, role_id=role.id)
        now = self.evaluator.now()
        effective = sum(1 for a in assignments if self.evaluator.is_effective(a, now))
        total = len(assignments)

        issues: list[str] = []
        if role.is_system_role:
            issues.append("System roles cannot be deleted")
        if effective:
            issues.append(f"Role has {effective} currently effective assignment(s)")
        if total - effective:
            issues.append(
                f"Role has {total - effective} inactive or expired assignment(s) retained for audit"
            )

        return RoleDeletionValidationResult(
            role_id=role.id,
            can_delete=not issues,
            issues=issues,
            effective_assignment_count=effective,
            total_assignment_count=total,
        )

    async def delete_role(self, tenant_id: str, role_id: str) -> None:
        """
        Raises:
            ProtectedRoleError: the role is a system role (issues list included)
            RoleInUseError: any assignment still references the role
        """
        validation = await self.validate_role_deletion(tenant_id, role_id)
        if not validation.can_delete:
            role = await self.get_role(tenant_id, role_id)
            if role.is_system_role:
                raise ProtectedRoleError(role_id, validation.issues)
            raise RoleInUseError(role_id, validation.issues)

        role = await self.get_role(tenant_id, role_id)
        await self.role_repo.delete(role)
        logger.info("Deleted role %s (%s) from tenant %s", role.name, role_id, tenant_id)

    # Statistics
    async def get_role_user_counts(
        self, tenant_id: str, include_inactive_principals: bool = False
    ) -> dict[str, int]:
        """
        Distinct principals per role name.

        By default only granted assignments count: effective now, held by an
        active principal.
        """
        roles = await self.role_repo.find_roles(tenant_id)
        names = {role.id: role.name for role in roles}
        assignments = await self.assignment_repo.find_assignments(tenant_id)
        now = self.evaluator.now()

        if not include_inactive_principals:
            principals = await self.principal_repo.get_entities(
                sorted({a.principal_id for a in assignments}), tenant_id
            )
            assignments = [
                a
                for a in assignments
                if self.evaluator.is_effective(a, now)
                and a.principal_id in principals
                and principals[a.principal_id].is_active
            ]

        holders: dict[str, set[str]] = {}
        for assignment in assignments:
            holders.setdefault(assignment.role_id, set()).add(assignment.principal_id)
        return {
            names[role_id]: len(principal_ids)
            for role_id, principal_ids in holders.items()
            if role_id in names
        }

    async def get_role_statistics(self, tenant_id: str) -> RoleStatistics:
        roles = await self.role_repo.find_roles(tenant_id)
        assignments = await self.assignment_repo.find_assignments(tenant_id)
        principals = await self.principal_repo.get_entities(
            sorted({a.principal_id for a in assignments}), tenant_id
        )
        now = self.evaluator.now()

        assigned_role_ids = {a.role_id for a in assignments}
        granted_role_ids = {
            a.role_id
            for a in assignments
            if self.evaluator.is_effective(a, now)
            and a.principal_id in principals
            and principals[a.principal_id].is_active
        }

        by_type = Counter(role.role_type.value for role in roles)
        by_priority = Counter(role.priority for role in roles)
        active = sum(1 for role in roles if role.is_active)

        return RoleStatistics(
            total_roles=len(roles),
            active_roles=active,
            inactive_roles=len(roles) - active,
            system_roles=sum(1 for role in roles if role.is_system_role),
            roles_by_type=dict(sorted(by_type.items())),
            roles_by_priority=dict(sorted(by_priority.items())),
            role_user_counts=await self.get_role_user_counts(tenant_id),
            roles_with_no_assignments=sum(1 for role in roles if role.id not in assigned_role_ids),
            roles_with_active_assignments=sum(1 for role in roles if role.id in granted_role_ids),
        )

    # Seeding
    async def ensure_system_roles(self, tenant_id: str) -> list[Role]:
        """
        Idempotently create one protected role per RoleType.

        Returns only the roles created by this call.
        """
        created: list[Role] = []
        for role_type in RoleType:
            normalized = RoleName(role_type.display_name).normalized
            if await self.role_repo.exists_by_name(tenant_id, normalized):
                continue
            created.append(
                await self.create_role(
                    tenant_id,
                    name=role_type.display_name,
                    role_type=role_type,
                    priority=role_type.default_priority,
                    description=role_type.description,
                    additional_permissions=[p.value for p in default_permissions(role_type)],
                    is_system_role=True,
                )
            )
        if created:
            logger.info("Seeded %d system role(s) for tenant %s", len(created), tenant_id)
        return created
