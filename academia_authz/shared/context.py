"""
Request context management using contextvars.

Holds the authenticated actor and the correlation id for the current
request so repositories can stamp audit rows without threading the caller
through every signature.

Usage:
    # In a dependency, after the bearer token is verified:
    set_current_actor(actor_id="user123", tenant_id="tenant_abc")

    # Anywhere below:
    actor_id = get_current_actor_id()
"""

from contextvars import ContextVar
from dataclasses import dataclass

from academia_authz.shared.enums import ActorType

_current_actor_id: ContextVar[str | None] = ContextVar("current_actor_id", default=None)
_current_tenant_id: ContextVar[str | None] = ContextVar("current_tenant_id", default=None)
_current_actor_type: ContextVar[ActorType] = ContextVar(
    "current_actor_type", default=ActorType.SYSTEM
)
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


@dataclass(frozen=True)
class ActorContext:
    """Immutable snapshot of the current actor context."""

    actor_id: str | None
    tenant_id: str | None
    actor_type: ActorType
    correlation_id: str = ""


def set_current_actor(
    actor_id: str | None,
    tenant_id: str | None = None,
    actor_type: ActorType = ActorType.USER,
) -> None:
    """Bind the authenticated actor to the current async task."""
    _current_actor_id.set(actor_id)
    _current_tenant_id.set(tenant_id)
    _current_actor_type.set(actor_type)


def clear_current_actor() -> None:
    """Reset the actor context to the anonymous system actor."""
    _current_actor_id.set(None)
    _current_tenant_id.set(None)
    _current_actor_type.set(ActorType.SYSTEM)


def get_current_actor_id() -> str | None:
    """Get the current actor ID, or None if not authenticated."""
    return _current_actor_id.get()


def get_current_actor_type() -> ActorType:
    """Get the current actor type (defaults to SYSTEM if not set)."""
    return _current_actor_type.get()


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def get_correlation_id() -> str:
    """Get the correlation ID for the current request"""
    return _correlation_id.get()


def get_actor_context() -> ActorContext:
    """Get a snapshot of the current actor context."""
    return ActorContext(
        actor_id=_current_actor_id.get(),
        tenant_id=_current_tenant_id.get(),
        actor_type=_current_actor_type.get(),
        correlation_id=_correlation_id.get(),
    )
