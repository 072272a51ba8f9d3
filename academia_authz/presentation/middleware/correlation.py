"""Correlation ID middleware for request tracing"""

import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from academia_authz.shared.context import set_correlation_id

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Attach a correlation ID to every request.

    Accepts the client's X-Correlation-ID header or generates one, exposes
    it through the request context (audit rows record it) and echoes it on
    the response.
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        set_correlation_id(correlation_id)

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
