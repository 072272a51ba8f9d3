"""
Application layer - Application Business Rules.

This layer contains application-specific business rules, including:
- Interfaces (ports) for the storage boundary
- Application services orchestrating the domain policies
"""

from academia_authz.application.interfaces import (IAssignmentStore,
                                                   IPrincipalLookup,
                                                   IRoleStore)
from academia_authz.application.services import (AuthorityResolver,
                                                 RoleAssignmentService,
                                                 RoleCatalogService,
                                                 SystemAuditService)

__all__ = [
    # Interfaces
    "IAssignmentStore",
    "IPrincipalLookup",
    "IRoleStore",
    # Services
    "AuthorityResolver",
    "RoleAssignmentService",
    "RoleCatalogService",
    "SystemAuditService",
]
