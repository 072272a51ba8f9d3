"""Principal domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PrincipalEntity:
    """A user account that can hold roles."""

    id: str
    tenant_id: str
    username: str
    is_active: bool = True
