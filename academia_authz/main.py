import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from academia_authz.domain.exceptions import AcademiaAuthzException
from academia_authz.infrastructure.config.settings import get_settings
from academia_authz.infrastructure.persistence.database import get_db, get_engine
from academia_authz.presentation.api.v1.routes import assignments, authority, roles
from academia_authz.presentation.middleware import CorrelationIDMiddleware, TimeoutMiddleware
from academia_authz.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)

settings = get_settings()

# error_code -> HTTP status; unknown codes fall back to 400
ERROR_STATUS_CODES = {
    "NOT_FOUND": 404,
    "DUPLICATE_NAME": 409,
    "DUPLICATE_ASSIGNMENT": 409,
    "ROLE_IN_USE": 409,
    "PROTECTED_ROLE": 409,
    "INVALID_PRIORITY": 422,
    "INVALID_WINDOW": 422,
    "VALIDATION_ERROR": 422,
    "PRINCIPAL_INACTIVE": 400,
    "ROLE_INACTIVE": 400,
    "PERMISSION_DENIED": 403,
    "STORAGE_UNAVAILABLE": 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for application initialization and cleanup"""
    setup_logging()

    # Database schema is managed by migrations; seed system roles with
    # scripts/seed_roles.py
    logger.info("%s %s starting", settings.app_name, settings.app_version)

    yield

    await get_engine().dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)


@app.exception_handler(AcademiaAuthzException)
async def authz_exception_handler(request: Request, exc: AcademiaAuthzException):
    status_code = ERROR_STATUS_CODES.get(exc.error_code, 400)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info(
            "%s %s rejected with %s: %s",
            request.method,
            request.url.path,
            exc.error_code,
            exc.message,
        )
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# Middleware (order matters - applied in reverse)
# 1. Request timeout
app.add_middleware(TimeoutMiddleware, timeout=settings.request_timeout_seconds)

# 2. Correlation ID for request tracing
app.add_middleware(CorrelationIDMiddleware)

# 3. CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.allowed_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(roles.router, prefix="/api/v1", tags=["roles"])
app.include_router(assignments.router, prefix="/api/v1", tags=["assignments"])
app.include_router(authority.router, prefix="/api/v1", tags=["authority"])


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint for load balancers and monitoring.

    Returns:
    - 200 OK if the database answers
    - 503 Service Unavailable otherwise
    """
    checks: dict[str, Any] = {"api": True, "database": False}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception as e:
        logger.warning("Health check failed: %s", e)
        checks["error"] = str(e)
        return JSONResponse(status_code=503, content={"status": "unhealthy", "checks": checks})

    return {"status": "healthy", "checks": checks}
