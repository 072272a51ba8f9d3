"""Test authority query endpoints"""

import pytest

from academia_authz.domain.enums import RoleType


@pytest.fixture
async def professor(make_principal, assignment_service, system_roles, test_db, test_tenant):
    """alice: Professor in CS (primary) plus Student"""
    alice = await make_principal("alice")
    await assignment_service.assign_role(
        test_tenant.id,
        alice.id,
        system_roles[RoleType.PROFESSOR].id,
        department_context="CS",
        is_primary=True,
    )
    await assignment_service.assign_role(
        test_tenant.id, alice.id, system_roles[RoleType.STUDENT].id
    )
    await test_db.commit()
    return alice


class TestEffectiveRoles:
    @pytest.mark.asyncio
    async def test_my_effective_roles(self, client, professor, make_auth_headers):
        response = await client.get(
            "/api/v1/principals/me/effective-roles", headers=make_auth_headers("alice-id")
        )

        assert response.status_code == 200
        data = response.json()
        assert data["principal_id"] == "alice-id"
        assert [r["name"] for r in data["roles"]] == ["Professor", "Student"]

    @pytest.mark.asyncio
    async def test_other_principal(self, client, auth_headers, professor):
        response = await client.get(
            "/api/v1/principals/alice-id/effective-roles", headers=auth_headers
        )

        assert [r["role_type"] for r in response.json()["roles"]] == ["professor", "student"]

    @pytest.mark.asyncio
    async def test_unknown_principal_has_no_roles(self, client, auth_headers):
        response = await client.get(
            "/api/v1/principals/ghost-id/effective-roles", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["roles"] == []

    @pytest.mark.asyncio
    async def test_primary_and_highest(self, client, auth_headers, professor):
        primary = await client.get("/api/v1/principals/alice-id/primary-role", headers=auth_headers)
        highest = await client.get("/api/v1/principals/alice-id/highest-role", headers=auth_headers)
        nobody = await client.get("/api/v1/principals/ghost-id/highest-role", headers=auth_headers)

        assert primary.json()["role"]["name"] == "Professor"
        assert highest.json()["role"]["priority"] == 5
        assert nobody.json()["role"] is None


class TestPermissions:
    @pytest.mark.asyncio
    async def test_my_permissions(self, client, professor, make_auth_headers):
        response = await client.get(
            "/api/v1/principals/me/permissions", headers=make_auth_headers("alice-id")
        )

        permissions = response.json()["permissions"]
        assert permissions == sorted(permissions)
        assert "create_courses" in permissions
        assert "view_own_grades" in permissions
        assert "assign_roles" not in permissions

    @pytest.mark.asyncio
    async def test_admin_permissions(self, client, auth_headers):
        response = await client.get("/api/v1/principals/admin-id/permissions", headers=auth_headers)

        assert "full_system_admin" in response.json()["permissions"]


class TestHierarchyQueries:
    @pytest.mark.asyncio
    async def test_can_manage(self, client, auth_headers, professor):
        down = await client.get(
            "/api/v1/principals/admin-id/can-manage/alice-id", headers=auth_headers
        )
        up = await client.get(
            "/api/v1/principals/alice-id/can-manage/admin-id", headers=auth_headers
        )
        itself = await client.get(
            "/api/v1/principals/admin-id/can-manage/admin-id", headers=auth_headers
        )

        assert down.json()["can_manage"] is True
        assert up.json()["can_manage"] is False
        assert itself.json()["can_manage"] is False

    @pytest.mark.asyncio
    async def test_manageable_roles(self, client, auth_headers, professor):
        response = await client.get(
            "/api/v1/principals/alice-id/manageable-roles", headers=auth_headers
        )

        assert [r["name"] for r in response.json()] == ["Student", "Teaching Professor"]

    @pytest.mark.asyncio
    async def test_manageable_roles_skip_inactive_by_default(
        self, client, auth_headers, professor, system_roles
    ):
        teaching_id = system_roles[RoleType.TEACHING_PROFESSOR].id
        await client.post(f"/api/v1/roles/{teaching_id}/deactivate", headers=auth_headers)

        default = await client.get(
            "/api/v1/principals/alice-id/manageable-roles", headers=auth_headers
        )
        everything = await client.get(
            "/api/v1/principals/alice-id/manageable-roles",
            params={"active_only": "false"},
            headers=auth_headers,
        )

        assert [r["name"] for r in default.json()] == ["Student"]
        assert [r["name"] for r in everything.json()] == ["Student", "Teaching Professor"]

    @pytest.mark.asyncio
    async def test_assignable_roles_skip_inactive(
        self, client, auth_headers, professor, system_roles
    ):
        teaching_id = system_roles[RoleType.TEACHING_PROFESSOR].id
        await client.post(f"/api/v1/roles/{teaching_id}/deactivate", headers=auth_headers)

        response = await client.get(
            "/api/v1/principals/alice-id/assignable-roles", headers=auth_headers
        )

        assert [r["name"] for r in response.json()] == ["Student"]

    @pytest.mark.asyncio
    async def test_can_assign_valid(self, client, auth_headers, professor, make_principal, system_roles):
        await make_principal("bob")
        student_id = system_roles[RoleType.STUDENT].id

        response = await client.get(
            f"/api/v1/principals/alice-id/can-assign/bob-id/{student_id}", headers=auth_headers
        )

        assert response.json() == {
            "assigner_id": "alice-id",
            "target_id": "bob-id",
            "role_id": student_id,
            "is_valid": True,
            "issues": [],
        }

    @pytest.mark.asyncio
    async def test_can_assign_reports_every_issue(
        self, client, auth_headers, make_principal, system_roles
    ):
        await make_principal("carol", is_active=False)
        admin_role_id = system_roles[RoleType.SYSTEM_ADMIN].id

        response = await client.get(
            f"/api/v1/principals/admin-id/can-assign/carol-id/{admin_role_id}",
            headers=auth_headers,
        )

        data = response.json()
        assert data["is_valid"] is False
        assert data["issues"] == [
            "Principal carol is inactive",
            "Assigner's highest role System Administrator (priority 10) does not outrank "
            "System Administrator (priority 10)",
        ]
