"""
Role hierarchy policy.

Convention: a HIGHER priority number carries MORE authority
(1 = student ... 10 = system administrator). Every comparison below uses
strict greater-than, so two roles at the same level never manage each other.
"""

from collections.abc import Iterable

from academia_authz.domain.entities import RoleEntity
from academia_authz.domain.enums import RoleType


def hierarchy_sort_key(role: RoleEntity) -> tuple[int, str, str]:
    """Catalog listing order: priority ascending, then name."""
    return (role.priority, role.name, role.id)


def authority_sort_key(role: RoleEntity) -> tuple[int, str, str]:
    """Most authoritative first; ties broken by name then id."""
    return (-role.priority, role.name, role.id)


def highest_authority_role(roles: Iterable[RoleEntity]) -> RoleEntity | None:
    ranked = sorted(roles, key=authority_sort_key)
    return ranked[0] if ranked else None


def subordinate_roles(role: RoleEntity, catalog: Iterable[RoleEntity]) -> list[RoleEntity]:
    """Catalog roles strictly below `role`, in hierarchy order."""
    return sorted(
        (candidate for candidate in catalog if role.outranks(candidate)),
        key=hierarchy_sort_key,
    )


def manageable_roles(
    highest: RoleEntity | None, catalog: Iterable[RoleEntity], *, active_only: bool = False
) -> list[RoleEntity]:
    """Roles the holder of `highest` may administer; never includes `highest` itself."""
    if highest is None:
        return []
    return [
        role
        for role in subordinate_roles(highest, catalog)
        if role.id != highest.id and (role.is_active or not active_only)
    ]


def can_manage(manager_highest: RoleEntity | None, target_highest: RoleEntity | None) -> bool:
    """False when either side currently holds no effective role."""
    if manager_highest is None or target_highest is None:
        return False
    return manager_highest.outranks(target_highest)


def effective_permissions(roles: Iterable[RoleEntity]) -> list[str]:
    """Union of additional permissions, deduplicated and lexicographically ordered."""
    tags = {tag.value for role in roles for tag in role.additional_permissions}
    return sorted(tags)


def hierarchy_description() -> str:
    """e.g. 'System Administrator (Priority: 10) > ... > Student (Priority: 1)'"""
    ranked = sorted(RoleType, key=lambda rt: rt.default_priority, reverse=True)
    return " > ".join(f"{rt.display_name} (Priority: {rt.default_priority})" for rt in ranked)
