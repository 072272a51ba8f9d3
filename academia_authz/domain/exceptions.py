"""
Domain exceptions for the authorization service.

This module defines domain-level exceptions that represent business rule
violations in the role catalog and assignment store. They are independent of
infrastructure concerns; the API layer maps each error_code to a status.
"""

from typing import Any


class AcademiaAuthzException(Exception):
    """
    Base exception for all authorization service errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error code for API responses
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AcademiaAuthzException):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class DuplicateNameError(AcademiaAuthzException):
    """A role with the same normalized name already exists in the tenant."""

    def __init__(self, name: str):
        super().__init__(
            f"Role name already in use: {name}",
            "DUPLICATE_NAME",
            {"name": name},
        )


class InvalidPriorityError(AcademiaAuthzException):
    """Role priority falls outside the allowed hierarchy range."""

    def __init__(self, priority: int, minimum: int, maximum: int):
        super().__init__(
            f"Priority {priority} is outside the allowed range [{minimum}, {maximum}]",
            "INVALID_PRIORITY",
            {"priority": priority, "min": minimum, "max": maximum},
        )


class DuplicateAssignmentError(AcademiaAuthzException):
    """The principal already holds this role in the same scope."""

    def __init__(self, principal_id: str, role_id: str, department_context: str | None):
        scope = department_context or "global"
        super().__init__(
            f"Principal {principal_id} already holds role {role_id} ({scope} scope)",
            "DUPLICATE_ASSIGNMENT",
            {
                "principal_id": principal_id,
                "role_id": role_id,
                "department_context": department_context,
            },
        )


class InvalidWindowError(AcademiaAuthzException):
    """Expiration date does not fall after the effective date."""

    def __init__(self, effective_date: Any, expiration_date: Any):
        super().__init__(
            "Expiration date must be after the effective date",
            "INVALID_WINDOW",
            {"effective_date": str(effective_date), "expiration_date": str(expiration_date)},
        )


class RoleInUseError(AcademiaAuthzException):
    """Role still has assignments and cannot be physically removed."""

    def __init__(self, role_id: str, issues: list[str]):
        super().__init__(
            f"Role {role_id} is still referenced by assignments",
            "ROLE_IN_USE",
            {"role_id": role_id, "issues": issues},
        )


class ProtectedRoleError(AcademiaAuthzException):
    """System roles can never be deleted."""

    def __init__(self, role_id: str, issues: list[str]):
        super().__init__(
            f"Role {role_id} is a protected system role",
            "PROTECTED_ROLE",
            {"role_id": role_id, "issues": issues},
        )


class PrincipalInactiveError(AcademiaAuthzException):
    """Raised when granting a role to a deactivated principal."""

    def __init__(self, principal_id: str):
        super().__init__(
            f"Principal is inactive: {principal_id}",
            "PRINCIPAL_INACTIVE",
            {"principal_id": principal_id},
        )


class RoleInactiveError(AcademiaAuthzException):
    """Raised when granting a deactivated role."""

    def __init__(self, role_id: str):
        super().__init__(
            f"Cannot assign inactive role: {role_id}",
            "ROLE_INACTIVE",
            {"role_id": role_id},
        )


class NotFoundError(AcademiaAuthzException):
    """Raised when a role, assignment or principal id is unknown."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class PermissionDeniedError(AcademiaAuthzException):
    """Caller lacks the permission or hierarchy position for the operation."""

    def __init__(
        self,
        message: str = "Permission denied",
        permission: str | None = None,
    ):
        details: dict[str, Any] = {}
        if permission:
            details["permission"] = permission
        super().__init__(message, "PERMISSION_DENIED", details)
