"""
Domain layer - Enterprise Business Rules.

This is the innermost layer containing role and assignment entities, value
objects, the pure effectiveness and hierarchy policies, and domain
exceptions. It has no dependencies on other layers.
"""

from academia_authz.domain.entities import AssignmentEntity, PrincipalEntity, RoleEntity
from academia_authz.domain.enums import AssignmentState, PermissionTag, RoleType
from academia_authz.domain.exceptions import (
    AcademiaAuthzException,
    DuplicateAssignmentError,
    DuplicateNameError,
    InvalidPriorityError,
    InvalidWindowError,
    NotFoundError,
    PermissionDeniedError,
    PrincipalInactiveError,
    ProtectedRoleError,
    RoleInactiveError,
    RoleInUseError,
    ValidationException,
)
from academia_authz.domain.value_objects import (
    AssignmentWindow,
    DepartmentCode,
    PermissionSet,
    Priority,
    RoleName,
)

__all__ = [
    # Entities
    "AssignmentEntity",
    "PrincipalEntity",
    "RoleEntity",
    # Value Objects
    "AssignmentWindow",
    "DepartmentCode",
    "PermissionSet",
    "Priority",
    "RoleName",
    # Enums
    "AssignmentState",
    "PermissionTag",
    "RoleType",
    # Exceptions
    "AcademiaAuthzException",
    "ValidationException",
    "DuplicateNameError",
    "InvalidPriorityError",
    "DuplicateAssignmentError",
    "InvalidWindowError",
    "RoleInUseError",
    "ProtectedRoleError",
    "PrincipalInactiveError",
    "RoleInactiveError",
    "NotFoundError",
    "PermissionDeniedError",
]
