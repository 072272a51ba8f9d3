"""
Application layer interfaces (ports).

These protocols define the contracts between the application layer
and the infrastructure layer, following the Dependency Inversion Principle.
"""

from academia_authz.application.interfaces.repositories import (
    IAssignmentStore, IPrincipalLookup, IRoleStore)

__all__ = [
    "IAssignmentStore",
    "IPrincipalLookup",
    "IRoleStore",
]
