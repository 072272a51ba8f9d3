"""
Infrastructure exceptions for the authorization service.

This module defines infrastructure-level exceptions raised by the storage
boundary. They are propagated to the caller, never retried here.
"""

from academia_authz.domain.exceptions import AcademiaAuthzException


# Storage Exceptions
class StorageException(AcademiaAuthzException):
    """Base exception for storage operations."""

    pass


class StorageUnavailableError(StorageException):
    """The database could not be reached or the statement did not complete."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Storage unavailable during {operation}",
            "STORAGE_UNAVAILABLE",
            {"operation": operation, "reason": reason},
        )
