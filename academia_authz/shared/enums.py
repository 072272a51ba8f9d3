"""
Shared enumerations for the authorization service.

Note: RoleType, AssignmentState and PermissionTag live in
academia_authz/domain/enums.py as they are domain concepts.
"""

from enum import Enum


class ActorType(str, Enum):
    """Actor type enumeration for audit tracking"""

    USER = "user"
    SYSTEM = "system"
    EXTERNAL = "external"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [actor.value for actor in cls]


class AuditAction(str, Enum):
    """Audit action types for role and assignment tracking"""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    ACTIVATED = "activated"
    DEACTIVATED = "deactivated"
    ASSIGNED = "assigned"
    REVOKED = "revoked"
    PRIMARY_CHANGED = "primary_changed"
    EXTENDED = "extended"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [action.value for action in cls]
