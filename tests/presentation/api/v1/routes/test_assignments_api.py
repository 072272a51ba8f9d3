"""Test role assignment endpoints"""

import pytest

from academia_authz.domain.enums import RoleType


@pytest.fixture
async def alice(make_principal):
    return await make_principal("alice")


@pytest.fixture
def role_ids(system_roles):
    """Plain ids survive the session rollback a rejected request triggers"""
    return {role_type: role.id for role_type, role in system_roles.items()}


async def grant(client, headers, principal_id, role_id, **extra):
    return await client.post(
        f"/api/v1/principals/{principal_id}/assignments",
        json={"role_id": role_id, **extra},
        headers=headers,
    )


class TestAssign:
    @pytest.mark.asyncio
    async def test_assign_role(self, client, auth_headers, alice, role_ids):
        response = await grant(
            client,
            auth_headers,
            "alice-id",
            role_ids[RoleType.PROFESSOR],
            department_context="CS",
            reason="Faculty hire",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["principal_id"] == "alice-id"
        assert data["department_context"] == "CS"
        assert data["state"] == "effective"
        assert data["assigned_by"] == "admin-id"
        assert data["assignment_reason"] == "Faculty hire"
        assert data["expiration_date"] is None

    @pytest.mark.asyncio
    async def test_future_assignment_is_pending(self, client, auth_headers, alice, role_ids):
        response = await grant(
            client,
            auth_headers,
            "alice-id",
            role_ids[RoleType.STUDENT],
            effective_date="2025-09-01T00:00:00Z",
        )

        assert response.status_code == 201
        assert response.json()["state"] == "pending"

    @pytest.mark.asyncio
    async def test_cannot_grant_equal_rank(self, client, auth_headers, alice, role_ids):
        response = await grant(client, auth_headers, "alice-id", role_ids[RoleType.SYSTEM_ADMIN])

        assert response.status_code == 403
        assert response.json()["error"] == "PERMISSION_DENIED"

    @pytest.mark.asyncio
    async def test_chair_cannot_grant_chair(
        self, client, auth_headers, make_principal, make_auth_headers, alice, role_ids
    ):
        await make_principal("chair")
        await grant(client, auth_headers, "chair-id", role_ids[RoleType.CHAIR])
        chair_headers = make_auth_headers("chair-id")

        allowed = await grant(client, chair_headers, "alice-id", role_ids[RoleType.PROFESSOR])
        denied = await grant(client, chair_headers, "alice-id", role_ids[RoleType.CHAIR])

        assert allowed.status_code == 201
        assert denied.status_code == 403

    @pytest.mark.asyncio
    async def test_requires_assign_permission(
        self, client, auth_headers, make_auth_headers, alice, make_principal, role_ids
    ):
        await make_principal("bob")
        await grant(client, auth_headers, "alice-id", role_ids[RoleType.ADMINISTRATOR])

        # Administrators can edit users but not assign roles
        response = await grant(
            client, make_auth_headers("alice-id"), "bob-id", role_ids[RoleType.STUDENT]
        )

        assert response.status_code == 403
        assert response.json()["details"]["permission"] == "assign_roles"

    @pytest.mark.asyncio
    async def test_duplicate_binding(self, client, auth_headers, alice, role_ids):
        await grant(client, auth_headers, "alice-id", role_ids[RoleType.STUDENT])

        response = await grant(client, auth_headers, "alice-id", role_ids[RoleType.STUDENT])

        assert response.status_code == 409
        assert response.json()["error"] == "DUPLICATE_ASSIGNMENT"

    @pytest.mark.asyncio
    async def test_inactive_principal(self, client, auth_headers, make_principal, role_ids):
        await make_principal("carol", is_active=False)

        response = await grant(client, auth_headers, "carol-id", role_ids[RoleType.STUDENT])

        assert response.status_code == 400
        assert response.json()["error"] == "PRINCIPAL_INACTIVE"

    @pytest.mark.asyncio
    async def test_invalid_window(self, client, auth_headers, alice, role_ids):
        response = await grant(
            client,
            auth_headers,
            "alice-id",
            role_ids[RoleType.STUDENT],
            effective_date="2025-02-01T00:00:00Z",
            expiration_date="2025-02-01T00:00:00Z",
        )

        assert response.status_code == 422
        assert response.json()["error"] == "INVALID_WINDOW"

    @pytest.mark.asyncio
    async def test_unknown_role(self, client, auth_headers, alice, system_roles):
        response = await grant(client, auth_headers, "alice-id", "no-such-role")

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"


class TestAssignmentLifecycle:
    @pytest.mark.asyncio
    async def test_revoke_is_idempotent(self, client, auth_headers, alice, role_ids):
        created = await grant(client, auth_headers, "alice-id", role_ids[RoleType.STUDENT])
        assignment_id = created.json()["id"]
        url = f"/api/v1/assignments/{assignment_id}/revoke"

        first = await client.post(url, json={"reason": "Graduated"}, headers=auth_headers)
        second = await client.post(url, json={"reason": "Again"}, headers=auth_headers)

        assert first.status_code == 200
        assert first.json()["state"] == "revoked"
        assert first.json()["is_active"] is False
        assert first.json()["revoked_by"] == "admin-id"
        assert second.status_code == 200
        assert second.json()["revocation_reason"] == "Graduated"

    @pytest.mark.asyncio
    async def test_list_for_principal(self, client, auth_headers, alice, role_ids):
        kept = await grant(client, auth_headers, "alice-id", role_ids[RoleType.STUDENT])
        dropped = await grant(client, auth_headers, "alice-id", role_ids[RoleType.PROFESSOR])
        await client.post(
            f"/api/v1/assignments/{dropped.json()['id']}/revoke", json={}, headers=auth_headers
        )

        active = await client.get("/api/v1/principals/alice-id/assignments", headers=auth_headers)
        everything = await client.get(
            "/api/v1/principals/alice-id/assignments",
            params={"include_inactive": True},
            headers=auth_headers,
        )

        assert [a["id"] for a in active.json()] == [kept.json()["id"]]
        assert len(everything.json()) == 2

    @pytest.mark.asyncio
    async def test_extend_and_describe(self, client, auth_headers, alice, role_ids):
        created = await grant(
            client,
            auth_headers,
            "alice-id",
            role_ids[RoleType.TEACHING_PROFESSOR],
            expiration_date="2025-05-31T00:00:00Z",
            reason="Spring term",
        )
        assignment_id = created.json()["id"]

        extended = await client.post(
            f"/api/v1/assignments/{assignment_id}/extend",
            json={"expiration_date": "2025-12-31T00:00:00Z"},
            headers=auth_headers,
        )
        fetched = await client.get(f"/api/v1/assignments/{assignment_id}", headers=auth_headers)

        assert extended.status_code == 200
        assert extended.json()["assignment_reason"] == "Spring term. Extended to: 2025-12-31"
        assert fetched.json()["description"] == "Teaching Professor (expires 2025-12-31)"

    @pytest.mark.asyncio
    async def test_extend_to_permanent(self, client, auth_headers, alice, role_ids):
        created = await grant(
            client,
            auth_headers,
            "alice-id",
            role_ids[RoleType.STUDENT],
            expiration_date="2025-05-31T00:00:00Z",
        )

        response = await client.post(
            f"/api/v1/assignments/{created.json()['id']}/extend",
            json={"expiration_date": None},
            headers=auth_headers,
        )

        assert response.json()["expiration_date"] is None
        assert response.json()["assignment_reason"] == "Extended to: permanent"

    @pytest.mark.asyncio
    async def test_set_primary(self, client, auth_headers, alice, role_ids):
        first = await grant(
            client, auth_headers, "alice-id", role_ids[RoleType.STUDENT], is_primary=True
        )
        second = await grant(client, auth_headers, "alice-id", role_ids[RoleType.PROFESSOR])

        response = await client.post(
            f"/api/v1/assignments/{second.json()['id']}/primary",
            json={"is_primary": True},
            headers=auth_headers,
        )
        previous = await client.get(
            f"/api/v1/assignments/{first.json()['id']}", headers=auth_headers
        )
        current = await client.get(
            f"/api/v1/assignments/{second.json()['id']}", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["is_primary"] is True
        assert previous.json()["is_primary"] is False
        assert current.json()["description"] == "Professor [PRIMARY]"

    @pytest.mark.asyncio
    async def test_get_unknown_assignment(self, client, auth_headers):
        response = await client.get("/api/v1/assignments/missing", headers=auth_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_role_assignments_listing(self, client, auth_headers, alice, role_ids):
        await grant(client, auth_headers, "alice-id", role_ids[RoleType.STUDENT])
        student_role_id = role_ids[RoleType.STUDENT]

        response = await client.get(
            f"/api/v1/roles/{student_role_id}/assignments", headers=auth_headers
        )

        assert [a["principal_id"] for a in response.json()] == ["alice-id"]

    @pytest.mark.asyncio
    async def test_audit_trail(self, client, auth_headers, alice, role_ids):
        created = await grant(client, auth_headers, "alice-id", role_ids[RoleType.STUDENT])
        assignment_id = created.json()["id"]
        await client.post(
            f"/api/v1/assignments/{assignment_id}/revoke",
            json={"reason": "Withdrew"},
            headers=auth_headers,
        )

        response = await client.get(
            f"/api/v1/assignments/{assignment_id}/audit", headers=auth_headers
        )

        assert response.status_code == 200
        entries = response.json()
        assert [e["action"] for e in entries] == ["assigned", "revoked"]
        assert entries[1]["audit_metadata"]["reason"] == "Withdrew"
        assert all(e["entity_type"] == "role_assignment" for e in entries)
