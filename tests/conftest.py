"""Shared test fixtures for pytest"""
import os

# Settings are read once at import time; configure them before the app loads
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

from datetime import UTC, datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from academia_authz.application.services import (AuthorityResolver,
                                                 RoleAssignmentService,
                                                 RoleCatalogService)
from academia_authz.domain.enums import RoleType
from academia_authz.domain.policies import EffectivenessEvaluator
from academia_authz.infrastructure.persistence.database import (Base, get_db,
                                                                get_db_transactional)
from academia_authz.infrastructure.persistence.models import Principal, Tenant
from academia_authz.infrastructure.persistence.repositories import (
    AssignmentRepository, PrincipalRepository, RoleRepository)
from academia_authz.infrastructure.security.jwt import create_access_token
from academia_authz.main import app
from academia_authz.presentation.api.dependencies import get_clock
from academia_authz.shared.context import clear_current_actor
from academia_authz.shared.utils import FixedClock

TEST_DATABASE_URL = "sqlite+aiosqlite://"

# Every test runs at this instant unless it moves the clock itself
NOW = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def reset_actor_context():
    clear_current_actor()
    yield
    clear_current_actor()


@pytest.fixture
async def test_engine():
    """In-memory database shared by every connection of one test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def test_db(test_engine):
    """Create test database session"""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def evaluator(clock):
    return EffectivenessEvaluator(clock)


@pytest.fixture
def role_repo(test_db):
    return RoleRepository(test_db)


@pytest.fixture
def assignment_repo(test_db):
    return AssignmentRepository(test_db)


@pytest.fixture
def principal_repo(test_db):
    return PrincipalRepository(test_db)


@pytest.fixture
def catalog_service(role_repo, assignment_repo, principal_repo, evaluator):
    return RoleCatalogService(
        role_repo=role_repo,
        assignment_repo=assignment_repo,
        principal_repo=principal_repo,
        evaluator=evaluator,
    )


@pytest.fixture
def assignment_service(role_repo, assignment_repo, principal_repo, evaluator):
    return RoleAssignmentService(
        assignment_repo=assignment_repo,
        role_repo=role_repo,
        principal_repo=principal_repo,
        evaluator=evaluator,
    )


@pytest.fixture
def resolver(role_repo, assignment_repo, principal_repo, evaluator):
    return AuthorityResolver(
        role_store=role_repo,
        assignment_store=assignment_repo,
        principal_lookup=principal_repo,
        evaluator=evaluator,
    )


@pytest.fixture
async def test_tenant(test_db):
    """Create test tenant"""
    tenant = Tenant(id="test-tenant-id", code="TEST", name="Test University", is_active=True)
    test_db.add(tenant)
    await test_db.commit()
    await test_db.refresh(tenant)
    return tenant


@pytest.fixture
async def second_tenant(test_db):
    """Create second tenant for isolation tests"""
    tenant = Tenant(id="tenant-2", code="TENANT2", name="Second University", is_active=True)
    test_db.add(tenant)
    await test_db.commit()
    await test_db.refresh(tenant)
    return tenant


@pytest.fixture
def make_principal(test_db, test_tenant):
    """Factory creating principals in the test tenant (or another one)"""

    async def _make(username: str, is_active: bool = True, tenant_id: str | None = None):
        principal = Principal(
            id=f"{username}-id",
            tenant_id=tenant_id or test_tenant.id,
            username=username,
            email=f"{username}@example.edu",
            is_active=is_active,
        )
        test_db.add(principal)
        await test_db.commit()
        await test_db.refresh(principal)
        return principal

    return _make


@pytest.fixture
async def system_roles(catalog_service, test_db, test_tenant):
    """The seeded system roles, keyed by role type"""
    created = await catalog_service.ensure_system_roles(test_tenant.id)
    await test_db.commit()
    return {RoleType(role.role_type): role for role in created}


@pytest.fixture
async def admin_principal(make_principal, assignment_service, system_roles, test_db, test_tenant):
    """Principal holding the System Administrator role"""
    admin = await make_principal("admin")
    await assignment_service.assign_role(
        test_tenant.id,
        admin.id,
        system_roles[RoleType.SYSTEM_ADMIN].id,
        is_primary=True,
        reason="Bootstrap administrator",
    )
    await test_db.commit()
    return admin


@pytest.fixture
async def client(test_db, clock):
    """HTTP client for API testing"""

    async def override_get_db():
        yield test_db

    async def override_get_db_transactional():
        try:
            yield test_db
            await test_db.commit()
        except Exception:
            await test_db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_db_transactional] = override_get_db_transactional
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_auth_headers(test_tenant):
    """Bearer headers for any principal of the test tenant"""

    def _make(principal_id: str, tenant_id: str | None = None) -> dict[str, str]:
        token = create_access_token(
            data={"sub": principal_id, "tenant_id": tenant_id or test_tenant.id}
        )
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def auth_headers(admin_principal, make_auth_headers):
    """Auth headers for the System Administrator"""
    return make_auth_headers(admin_principal.id)
