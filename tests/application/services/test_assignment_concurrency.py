"""Concurrent assignment writers against a file-backed SQLite database"""

import asyncio
from datetime import UTC, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from academia_authz.application.services import RoleAssignmentService, RoleCatalogService
from academia_authz.domain.enums import RoleType
from academia_authz.domain.exceptions import DuplicateAssignmentError
from academia_authz.domain.policies import EffectivenessEvaluator
from academia_authz.infrastructure.persistence.database import Base
from academia_authz.infrastructure.persistence.models import Principal, Tenant
from academia_authz.infrastructure.persistence.repositories import (
    AssignmentRepository, AuditLogRepository, PrincipalRepository, RoleRepository)
from academia_authz.shared.utils import FixedClock

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


def build_services(session: AsyncSession) -> tuple[RoleCatalogService, RoleAssignmentService]:
    role_repo = RoleRepository(session)
    assignment_repo = AssignmentRepository(session)
    principal_repo = PrincipalRepository(session)
    evaluator = EffectivenessEvaluator(FixedClock(NOW))
    catalog = RoleCatalogService(
        role_repo=role_repo,
        assignment_repo=assignment_repo,
        principal_repo=principal_repo,
        evaluator=evaluator,
    )
    assignments = RoleAssignmentService(
        assignment_repo=assignment_repo,
        role_repo=role_repo,
        principal_repo=principal_repo,
        evaluator=evaluator,
    )
    return catalog, assignments


@pytest.fixture
async def file_sessions(tmp_path):
    """Session factory over a database file, so each session gets its own connection"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'authz.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )

    await engine.dispose()


@pytest.fixture
async def revoked_binding(file_sessions):
    """A Registrar assignment for alice that has been revoked and committed"""
    async with file_sessions() as session:
        session.add(Tenant(id="t1", code="T1", name="Test University", is_active=True))
        session.add(
            Principal(
                id="alice-id",
                tenant_id="t1",
                username="alice",
                email="alice@example.edu",
                is_active=True,
            )
        )
        await session.commit()

        catalog, assignments = build_services(session)
        role = await catalog.create_role(
            "t1", name="Registrar", role_type=RoleType.ADMINISTRATOR, priority=6
        )
        original = await assignments.assign_role("t1", "alice-id", role.id)
        await assignments.revoke_role("t1", original.id, reason="Leave")
        await session.commit()
        return original.id, role.id


class TestConcurrentReinstatement:
    @pytest.mark.asyncio
    async def test_only_one_writer_reinstates(self, file_sessions, revoked_binding):
        """
        GIVEN a revoked binding seen as revoked by two sessions at once
        WHEN both try to assign the role again and commit
        THEN exactly one succeeds and the other gets DuplicateAssignmentError.
        """
        assignment_id, role_id = revoked_binding
        both_read = asyncio.Barrier(2)

        async def reassign(reason: str):
            async with file_sessions() as session:
                _, assignments = build_services(session)
                find_binding = assignments.assignment_repo.find_binding

                async def find_binding_then_wait(*args, **kwargs):
                    existing = await find_binding(*args, **kwargs)
                    await both_read.wait()
                    return existing

                assignments.assignment_repo.find_binding = find_binding_then_wait
                try:
                    await assignments.assign_role("t1", "alice-id", role_id, reason=reason)
                    await session.commit()
                except DuplicateAssignmentError:
                    await session.rollback()
                    raise
                return reason

        outcomes = await asyncio.gather(
            reassign("first"), reassign("second"), return_exceptions=True
        )

        winners = [o for o in outcomes if isinstance(o, str)]
        losers = [o for o in outcomes if isinstance(o, DuplicateAssignmentError)]
        assert len(winners) == 1
        assert len(losers) == 1

        async with file_sessions() as session:
            stored = await AssignmentRepository(session).get_by_id_and_tenant(assignment_id, "t1")
            assert stored.is_active is True
            assert stored.revoked_at is None
            assert stored.assignment_reason == winners[0]

            entries = await AuditLogRepository(session).get_by_entity(
                "t1", "role_assignment", assignment_id
            )
            assert [e.action for e in entries] == ["assigned", "revoked", "assigned"]
