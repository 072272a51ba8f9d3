"""Tests for the role hierarchy policy"""

import pytest

from academia_authz.domain.entities import RoleEntity
from academia_authz.domain.enums import PermissionTag, RoleType
from academia_authz.domain.permissions import default_permissions
from academia_authz.domain.policies import (can_manage, effective_permissions,
                                            hierarchy_description,
                                            highest_authority_role,
                                            manageable_roles,
                                            subordinate_roles)


def make_role(role_id: str, name: str, priority: int, **kwargs) -> RoleEntity:
    return RoleEntity(
        id=role_id,
        tenant_id="t1",
        name=name,
        normalized_name=name.upper(),
        role_type=kwargs.pop("role_type", RoleType.PROFESSOR),
        priority=priority,
        **kwargs,
    )


@pytest.fixture
def catalog():
    return [
        make_role("student", "Student", 1),
        make_role("ta", "Teaching Assistant", 3),
        make_role("professor", "Professor", 5),
        make_role("lecturer", "Lecturer", 5),
        make_role("registrar", "Registrar", 6, is_active=False),
        make_role("chair", "Department Chair", 7),
        make_role("sysadmin", "System Administrator", 10),
    ]


def by_id(catalog, role_id):
    return next(role for role in catalog if role.id == role_id)


class TestHighestAuthority:
    def test_picks_highest_priority(self, catalog):
        assert highest_authority_role(catalog).id == "sysadmin"

    def test_tie_broken_by_name(self, catalog):
        tied = [by_id(catalog, "professor"), by_id(catalog, "lecturer")]
        assert highest_authority_role(tied).id == "lecturer"

    def test_empty_is_none(self):
        assert highest_authority_role([]) is None


class TestSubordinates:
    def test_strictly_lower_in_hierarchy_order(self, catalog):
        result = subordinate_roles(by_id(catalog, "chair"), catalog)

        assert [r.id for r in result] == ["student", "ta", "lecturer", "professor", "registrar"]

    def test_equal_priority_excluded(self, catalog):
        result = subordinate_roles(by_id(catalog, "professor"), catalog)
        assert "lecturer" not in [r.id for r in result]

    def test_lowest_role_has_no_subordinates(self, catalog):
        assert subordinate_roles(by_id(catalog, "student"), catalog) == []


class TestManageable:
    def test_active_only_filters_inactive(self, catalog):
        everything = manageable_roles(by_id(catalog, "chair"), catalog)
        active = manageable_roles(by_id(catalog, "chair"), catalog, active_only=True)

        assert "registrar" in [r.id for r in everything]
        assert "registrar" not in [r.id for r in active]

    def test_never_includes_own_role(self, catalog):
        highest = by_id(catalog, "sysadmin")
        assert highest not in manageable_roles(highest, catalog)

    def test_no_role_manages_nothing(self, catalog):
        assert manageable_roles(None, catalog) == []


class TestCanManage:
    def test_strictly_higher_manages(self, catalog):
        assert can_manage(by_id(catalog, "chair"), by_id(catalog, "professor"))

    def test_equal_priority_does_not_manage(self, catalog):
        assert not can_manage(by_id(catalog, "professor"), by_id(catalog, "lecturer"))
        assert not can_manage(by_id(catalog, "lecturer"), by_id(catalog, "professor"))

    def test_lower_does_not_manage(self, catalog):
        assert not can_manage(by_id(catalog, "student"), by_id(catalog, "chair"))

    def test_missing_side_does_not_manage(self, catalog):
        assert not can_manage(None, by_id(catalog, "student"))
        assert not can_manage(by_id(catalog, "sysadmin"), None)


class TestEffectivePermissions:
    def test_union_is_sorted_and_deduplicated(self):
        roles = [
            make_role("a", "A", 2, additional_permissions=frozenset(
                {PermissionTag.VIEW_USERS, PermissionTag.VIEW_GRADES})),
            make_role("b", "B", 3, additional_permissions=frozenset(
                {PermissionTag.ASSIGN_ROLES, PermissionTag.VIEW_USERS})),
        ]

        assert effective_permissions(roles) == ["assign_roles", "view_grades", "view_users"]

    def test_no_roles_no_permissions(self):
        assert effective_permissions([]) == []


class TestDefaults:
    def test_default_priorities_follow_authority(self):
        assert RoleType.STUDENT.default_priority == 1
        assert RoleType.SYSTEM_ADMIN.default_priority == 10
        assert RoleType.CHAIR.default_priority > RoleType.PROFESSOR.default_priority

    def test_chair_can_assign_roles_but_student_cannot(self):
        assert PermissionTag.ASSIGN_ROLES in default_permissions(RoleType.CHAIR)
        assert PermissionTag.ASSIGN_ROLES not in default_permissions(RoleType.STUDENT)

    def test_system_admin_has_full_admin(self):
        assert PermissionTag.FULL_SYSTEM_ADMIN in default_permissions(RoleType.SYSTEM_ADMIN)

    def test_hierarchy_description_highest_first(self):
        description = hierarchy_description()

        assert description.startswith("System Administrator (Priority: 10)")
        assert description.endswith("Student (Priority: 1)")
