"""
Middleware layer for the authorization API.

This package contains middleware components for request processing:
correlation IDs and request timeouts.
"""

from academia_authz.presentation.middleware.correlation import CorrelationIDMiddleware
from academia_authz.presentation.middleware.timeout import TimeoutMiddleware

__all__ = ["CorrelationIDMiddleware", "TimeoutMiddleware"]
