"""Pure authorization policies. No I/O and no clock reads: callers pass `now`."""

from academia_authz.domain.policies.effectiveness import (
    EffectivenessEvaluator,
    assignment_state,
    is_assignment_effective,
    is_role_granted,
)
from academia_authz.domain.policies.hierarchy import (
    authority_sort_key,
    can_manage,
    effective_permissions,
    hierarchy_description,
    hierarchy_sort_key,
    highest_authority_role,
    manageable_roles,
    subordinate_roles,
)

__all__ = [
    "EffectivenessEvaluator",
    "assignment_state",
    "is_assignment_effective",
    "is_role_granted",
    "authority_sort_key",
    "can_manage",
    "effective_permissions",
    "hierarchy_description",
    "hierarchy_sort_key",
    "highest_authority_role",
    "manageable_roles",
    "subordinate_roles",
]
