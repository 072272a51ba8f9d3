"""
Effectiveness evaluation for role assignments.

An assignment is effective at `now` iff
    is_active and effective_date <= now and (expiration_date is None or expiration_date > now)

A role is *granted* through an assignment when, additionally, the role and
the owning principal are both active.
"""

from datetime import datetime

from academia_authz.domain.entities import AssignmentEntity, PrincipalEntity, RoleEntity
from academia_authz.domain.enums import AssignmentState
from academia_authz.shared.utils.clock import Clock


def is_assignment_effective(assignment: AssignmentEntity, now: datetime) -> bool:
    return assignment.is_currently_effective(now)


def assignment_state(assignment: AssignmentEntity, now: datetime) -> AssignmentState:
    return assignment.state(now)


def is_role_granted(
    assignment: AssignmentEntity,
    role: RoleEntity | None,
    principal: PrincipalEntity | None,
    now: datetime,
) -> bool:
    """Missing role or principal rows never grant anything."""
    if role is None or principal is None:
        return False
    if assignment.role_id != role.id or assignment.principal_id != principal.id:
        return False
    return role.is_active and principal.is_active and assignment.is_currently_effective(now)


class EffectivenessEvaluator:
    """
    Clock-bound wrapper around the effectiveness predicates.

    Subclass and override is_effective() to change the rule; inject a
    FixedClock for deterministic tests.
    """

    def __init__(self, clock: Clock):
        self.clock = clock

    def now(self) -> datetime:
        return self.clock.now()

    def is_effective(self, assignment: AssignmentEntity, now: datetime | None = None) -> bool:
        return is_assignment_effective(assignment, now or self.clock.now())

    def state(self, assignment: AssignmentEntity, now: datetime | None = None) -> AssignmentState:
        return assignment_state(assignment, now or self.clock.now())

    def is_granted(
        self,
        assignment: AssignmentEntity,
        role: RoleEntity | None,
        principal: PrincipalEntity | None,
        now: datetime | None = None,
    ) -> bool:
        at = now or self.clock.now()
        if role is None or principal is None:
            return False
        return (
            role.is_active
            and principal.is_active
            and assignment.role_id == role.id
            and assignment.principal_id == principal.id
            and self.is_effective(assignment, at)
        )
