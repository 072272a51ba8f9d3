"""Bearer token verification. Tokens are issued by the identity provider."""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from academia_authz.infrastructure.config.settings import get_settings


def create_access_token(
    data: dict[str, Any], expires_delta: timedelta | None = None
) -> str:
    """
    Sign a token with the shared secret.

    Used by development tooling and tests; production tokens come from the
    identity provider and must carry `sub` and `tenant_id`.
    """
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)
    assert isinstance(encoded_jwt, str)
    return encoded_jwt


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode a bearer token, returning its claims"""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        raise ValueError(f"Invalid token: {str(e)}") from e
    if not isinstance(payload, dict):
        raise ValueError("Token payload must be a dictionary")
    for claim in ("sub", "tenant_id"):
        if not payload.get(claim):
            raise ValueError(f"Token is missing the '{claim}' claim")
    return payload
