"""Domain value objects."""

from academia_authz.domain.value_objects.core import (
    MAX_PRIORITY,
    MIN_PRIORITY,
    AssignmentWindow,
    DepartmentCode,
    PermissionSet,
    Priority,
    RoleName,
)

__all__ = [
    "MIN_PRIORITY",
    "MAX_PRIORITY",
    "AssignmentWindow",
    "DepartmentCode",
    "PermissionSet",
    "Priority",
    "RoleName",
]
