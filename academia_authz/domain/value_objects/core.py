import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar

from academia_authz.domain.enums import PermissionTag
from academia_authz.domain.exceptions import (
    InvalidPriorityError,
    InvalidWindowError,
    ValidationException,
)

MIN_PRIORITY = 1
MAX_PRIORITY = 10


@dataclass(frozen=True)
class RoleName:
    """
    Value object for a role name and its case-insensitive lookup key.

    Names are trimmed; the normalized form is the upper-cased name and is
    what uniqueness is enforced on.
    """

    value: str

    MAX_LENGTH: ClassVar[int] = 100

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValidationException("Role name must be a non-empty string", field="name")
        if len(self.value.strip()) > self.MAX_LENGTH:
            raise ValidationException(
                f"Role name must not exceed {self.MAX_LENGTH} characters", field="name"
            )
        object.__setattr__(self, "value", self.value.strip())

    @property
    def normalized(self) -> str:
        return self.value.upper()


@dataclass(frozen=True)
class Priority:
    """Value object for a role's hierarchy position (higher = more authority)."""

    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationException("Priority must be an integer", field="priority")
        if not MIN_PRIORITY <= self.value <= MAX_PRIORITY:
            raise InvalidPriorityError(self.value, MIN_PRIORITY, MAX_PRIORITY)


@dataclass(frozen=True)
class DepartmentCode:
    """Value object for an organizational-unit identifier (e.g. 'CS', 'MATH')."""

    value: str

    MAX_LENGTH: ClassVar[int] = 15

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value:
            raise ValidationException("Department code must be a non-empty string", field="department")
        if len(self.value) > self.MAX_LENGTH:
            raise ValidationException(
                f"Department code must not exceed {self.MAX_LENGTH} characters",
                field="department",
            )
        if not re.match(r"^[A-Za-z0-9_-]+$", self.value):
            raise ValidationException(
                "Department code must be alphanumeric with optional '-' or '_'",
                field="department",
            )


@dataclass(frozen=True)
class AssignmentWindow:
    """Value object for an assignment's [effective, expiration) window."""

    effective_date: datetime
    expiration_date: datetime | None = None

    def __post_init__(self):
        if self.expiration_date is not None and self.expiration_date <= self.effective_date:
            raise InvalidWindowError(self.effective_date, self.expiration_date)


@dataclass(frozen=True)
class PermissionSet:
    """Closed, deduplicated set of permission tags."""

    tags: frozenset[PermissionTag]

    @classmethod
    def parse(cls, raw: Iterable[str | PermissionTag] | None) -> "PermissionSet":
        """Validate raw strings against the known vocabulary."""
        tags: set[PermissionTag] = set()
        for item in raw or ():
            try:
                tags.add(PermissionTag(item))
            except ValueError:
                raise ValidationException(
                    f"Unknown permission tag: {item}", field="additional_permissions"
                ) from None
        return cls(frozenset(tags))

    def to_list(self) -> list[str]:
        """Lexicographically ordered tag values, for storage and stable output."""
        return sorted(tag.value for tag in self.tags)
