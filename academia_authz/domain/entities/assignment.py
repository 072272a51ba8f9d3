"""
Role assignment domain entity.

An assignment binds a principal to a role for a time window, optionally
scoped to a department. It is never deleted: revocation flips is_active and
expiry is purely a function of time, so the record stays for audit.
"""

from dataclasses import dataclass
from datetime import datetime

from academia_authz.domain.enums import AssignmentState


@dataclass(frozen=True)
class AssignmentEntity:
    """
    Domain entity for a principal-role binding (SRP - business logic
    separate from persistence)
    """

    id: str
    tenant_id: str
    principal_id: str
    role_id: str
    effective_date: datetime
    expiration_date: datetime | None = None
    is_active: bool = True
    is_primary: bool = False
    department_context: str | None = None
    assignment_reason: str | None = None
    assigned_by: str | None = None
    revoked_at: datetime | None = None
    revoked_by: str | None = None
    revocation_reason: str | None = None

    def is_currently_effective(self, now: datetime) -> bool:
        """
        Business rule: an assignment is effective iff it is active, has
        started, and has not yet expired.
        """
        return (
            self.is_active
            and self.effective_date <= now
            and (self.expiration_date is None or self.expiration_date > now)
        )

    def state(self, now: datetime) -> AssignmentState:
        """Lifecycle state at `now`. Revocation wins over any date-based state."""
        if not self.is_active:
            return AssignmentState.REVOKED
        if self.effective_date > now:
            return AssignmentState.PENDING
        if self.expiration_date is not None and self.expiration_date <= now:
            return AssignmentState.EXPIRED
        return AssignmentState.EFFECTIVE

    def describe(self, role_name: str, now: datetime) -> str:
        """Human-readable summary, e.g. 'Registrar in CS (expires 2025-01-01) [PRIMARY]'."""
        description = role_name
        if self.department_context:
            description += f" in {self.department_context}"
        if self.expiration_date is not None:
            description += f" (expires {self.expiration_date:%Y-%m-%d})"

        current = self.state(now)
        if current is AssignmentState.REVOKED:
            description += " [INACTIVE]"
        elif current is not AssignmentState.EFFECTIVE:
            description += " [NOT EFFECTIVE]"
        elif self.is_primary:
            description += " [PRIMARY]"
        return description
