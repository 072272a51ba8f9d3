"""Test role and assignment repositories"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from academia_authz.domain.exceptions import (DuplicateAssignmentError, DuplicateNameError,
                                              ValidationException)
from academia_authz.infrastructure.exceptions import StorageUnavailableError
from academia_authz.infrastructure.persistence.models import Role, RoleAssignment
from academia_authz.infrastructure.persistence.repositories import (
    AssignmentRepository, RoleRepository, storage_errors)


def make_role(tenant_id: str, name: str = "Registrar", priority: int = 6) -> Role:
    return Role(
        tenant_id=tenant_id,
        name=name,
        normalized_name=name.upper(),
        role_type="administrator",
        priority=priority,
        additional_permissions=[],
    )


def make_assignment(tenant_id: str, principal_id: str, role_id: str, now, **kwargs) -> RoleAssignment:
    return RoleAssignment(
        tenant_id=tenant_id,
        principal_id=principal_id,
        role_id=role_id,
        effective_date=now,
        **kwargs,
    )


@pytest.fixture
async def role(role_repo, test_db, test_tenant):
    created = await role_repo.create(make_role(test_tenant.id))
    await test_db.commit()
    return created


@pytest.fixture
async def alice(make_principal):
    return await make_principal("alice")


@pytest.mark.asyncio
async def test_role_unique_index_reports_duplicate_name(role_repo, role, test_tenant):
    """The unique index catches duplicates that slip past the service check"""
    with pytest.raises(DuplicateNameError):
        await role_repo.create(make_role(test_tenant.id, name="registrar"))


@pytest.mark.asyncio
async def test_global_binding_unique_index(assignment_repo, role, alice, clock, test_tenant):
    await assignment_repo.insert(make_assignment(test_tenant.id, alice.id, role.id, clock.now()))

    with pytest.raises(DuplicateAssignmentError):
        await assignment_repo.insert(
            make_assignment(test_tenant.id, alice.id, role.id, clock.now())
        )


@pytest.mark.asyncio
async def test_scoped_bindings_are_independent(assignment_repo, role, alice, clock, test_tenant):
    now = clock.now()
    await assignment_repo.insert(make_assignment(test_tenant.id, alice.id, role.id, now))
    await assignment_repo.insert(
        make_assignment(test_tenant.id, alice.id, role.id, now, department_context="CS")
    )

    with pytest.raises(DuplicateAssignmentError):
        await assignment_repo.insert(
            make_assignment(test_tenant.id, alice.id, role.id, now, department_context="CS")
        )


@pytest.mark.asyncio
async def test_single_active_primary_index(assignment_repo, role_repo, alice, clock, test_tenant):
    """The partial index allows one active primary per principal"""
    first_role = await role_repo.create(make_role(test_tenant.id, "First"))
    second_role = await role_repo.create(make_role(test_tenant.id, "Second"))
    await assignment_repo.insert(
        make_assignment(test_tenant.id, alice.id, first_role.id, clock.now(), is_primary=True)
    )

    with pytest.raises(ValidationException) as exc:
        await assignment_repo.insert(
            make_assignment(test_tenant.id, alice.id, second_role.id, clock.now(), is_primary=True)
        )
    assert exc.value.details["field"] == "is_primary"


@pytest.mark.asyncio
async def test_reinstate_if_revoked_is_compare_and_swap(
    assignment_repo, role, alice, clock, test_tenant
):
    assignment = await assignment_repo.insert(
        make_assignment(test_tenant.id, alice.id, role.id, clock.now())
    )
    await assignment_repo.revoke_if_active(
        assignment.id, test_tenant.id, revoked_at=clock.now(), revoked_by="x", reason="Leave"
    )
    clock.advance(timedelta(days=1))
    reinstate = dict(
        effective_date=clock.now(),
        expiration_date=None,
        is_primary=False,
        assigned_by="y",
        assignment_context=None,
    )

    reinstated = await assignment_repo.reinstate_if_revoked(
        assignment, reason="Returned", **reinstate
    )

    assert reinstated.is_active is True
    assert reinstated.revoked_at is None
    assert reinstated.revocation_reason is None
    assert reinstated.assignment_reason == "Returned"

    with pytest.raises(DuplicateAssignmentError):
        await assignment_repo.reinstate_if_revoked(assignment, reason="Again", **reinstate)
    assert (await assignment_repo.get_by_id(assignment.id)).assignment_reason == "Returned"


@pytest.mark.asyncio
async def test_reinstate_as_second_primary_is_rejected(
    assignment_repo, role_repo, alice, clock, test_tenant
):
    first_role = await role_repo.create(make_role(test_tenant.id, "First"))
    second_role = await role_repo.create(make_role(test_tenant.id, "Second"))
    await assignment_repo.insert(
        make_assignment(test_tenant.id, alice.id, first_role.id, clock.now(), is_primary=True)
    )
    revoked = await assignment_repo.insert(
        make_assignment(test_tenant.id, alice.id, second_role.id, clock.now())
    )
    await assignment_repo.revoke_if_active(
        revoked.id, test_tenant.id, revoked_at=clock.now(), revoked_by=None, reason=None
    )

    with pytest.raises(ValidationException):
        await assignment_repo.reinstate_if_revoked(
            revoked,
            effective_date=clock.now(),
            expiration_date=None,
            is_primary=True,
            reason=None,
            assigned_by=None,
            assignment_context=None,
        )


@pytest.mark.asyncio
async def test_revoke_if_active_is_compare_and_swap(
    assignment_repo, role, alice, clock, test_tenant
):
    assignment = await assignment_repo.insert(
        make_assignment(test_tenant.id, alice.id, role.id, clock.now())
    )

    first = await assignment_repo.revoke_if_active(
        assignment.id, test_tenant.id, revoked_at=clock.now(), revoked_by="x", reason="first"
    )
    clock.advance(timedelta(minutes=5))
    second = await assignment_repo.revoke_if_active(
        assignment.id, test_tenant.id, revoked_at=clock.now(), revoked_by="y", reason="second"
    )

    assert first is True
    assert second is False
    row = await assignment_repo.get_by_id_and_tenant(assignment.id, test_tenant.id)
    assert row.revocation_reason == "first"
    assert row.revoked_by == "x"


@pytest.mark.asyncio
async def test_find_assignments_filters(
    assignment_repo, role, alice, make_principal, clock, second_tenant, test_tenant
):
    bob = await make_principal("bob")
    now = clock.now()
    kept = await assignment_repo.insert(make_assignment(test_tenant.id, alice.id, role.id, now))
    revoked = await assignment_repo.insert(make_assignment(test_tenant.id, bob.id, role.id, now))
    await assignment_repo.revoke_if_active(
        revoked.id, test_tenant.id, revoked_at=now, revoked_by=None, reason=None
    )

    everything = await assignment_repo.find_assignments(test_tenant.id)
    active = await assignment_repo.find_assignments(test_tenant.id, active_only=True)
    for_alice = await assignment_repo.find_assignments(test_tenant.id, principal_ids=[alice.id])
    none_requested = await assignment_repo.find_assignments(test_tenant.id, principal_ids=[])
    other_tenant = await assignment_repo.find_assignments(second_tenant.id)

    assert {a.id for a in everything} == {kept.id, revoked.id}
    assert [a.id for a in active] == [kept.id]
    assert [a.id for a in for_alice] == [kept.id]
    assert none_requested == []
    assert other_tenant == []
    assert everything[0].effective_date.tzinfo is not None


@pytest.mark.asyncio
async def test_find_binding_distinguishes_scopes(
    assignment_repo, role, alice, clock, test_tenant
):
    now = clock.now()
    global_row = await assignment_repo.insert(
        make_assignment(test_tenant.id, alice.id, role.id, now)
    )
    scoped_row = await assignment_repo.insert(
        make_assignment(test_tenant.id, alice.id, role.id, now, department_context="CS")
    )

    assert (await assignment_repo.find_binding(test_tenant.id, alice.id, role.id, None)).id == (
        global_row.id
    )
    assert (await assignment_repo.find_binding(test_tenant.id, alice.id, role.id, "CS")).id == (
        scoped_row.id
    )
    assert await assignment_repo.find_binding(test_tenant.id, alice.id, role.id, "MATH") is None


@pytest.mark.asyncio
async def test_audit_failure_does_not_fail_the_write(test_db, test_tenant):
    failing_audit = AsyncMock()
    failing_audit.emit_audit_event.side_effect = RuntimeError("audit sink down")
    repo = RoleRepository(test_db, audit_service=failing_audit)

    created = await repo.create(make_role(test_tenant.id, "Audited"))

    assert created.id
    failing_audit.emit_audit_event.assert_awaited_once()


@pytest.mark.asyncio
async def test_auditing_can_be_disabled(test_db, role, alice, clock, test_tenant):
    audit = AsyncMock()
    repo = AssignmentRepository(test_db, audit_service=audit)
    repo.disable_auditing()

    await repo.insert(make_assignment(test_tenant.id, alice.id, role.id, clock.now()))

    audit.emit_audit_event.assert_not_awaited()


@pytest.mark.asyncio
async def test_storage_errors_wrap_driver_failures():
    with pytest.raises(StorageUnavailableError) as exc:
        async with storage_errors("find_roles"):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    assert exc.value.error_code == "STORAGE_UNAVAILABLE"
    assert exc.value.details["operation"] == "find_roles"


@pytest.mark.asyncio
async def test_principal_lookup(principal_repo, make_principal, second_tenant, test_tenant):
    await make_principal("alice")
    await make_principal("dormant", is_active=False)

    assert await principal_repo.is_principal_active("alice-id", test_tenant.id) is True
    assert await principal_repo.is_principal_active("dormant-id", test_tenant.id) is False
    assert await principal_repo.is_principal_active("ghost-id", test_tenant.id) is False
    assert await principal_repo.is_principal_active("alice-id", second_tenant.id) is False
