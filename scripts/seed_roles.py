"""
Seed the protected system roles (one per role type) for all active tenants.

Safe to re-run: roles that already exist are left untouched.

Usage:
    python -m scripts.seed_roles
"""
import asyncio

from academia_authz.application.services import RoleCatalogService
from academia_authz.domain.policies import EffectivenessEvaluator
from academia_authz.infrastructure.persistence.database import get_engine, get_session_factory
from academia_authz.infrastructure.persistence.repositories import (
    AssignmentRepository, PrincipalRepository, RoleRepository, TenantRepository)
from academia_authz.shared.context import clear_current_actor, set_current_actor
from academia_authz.shared.enums import ActorType
from academia_authz.shared.telemetry.logging import setup_logging
from academia_authz.shared.utils import SystemClock


async def seed_tenant(db, tenant) -> int:
    """Create missing system roles for one tenant. Returns how many were created."""
    set_current_actor(None, tenant.id, ActorType.SYSTEM)
    service = RoleCatalogService(
        role_repo=RoleRepository(db),
        assignment_repo=AssignmentRepository(db),
        principal_repo=PrincipalRepository(db),
        evaluator=EffectivenessEvaluator(SystemClock()),
    )
    created = await service.ensure_system_roles(tenant.id)
    for role in created:
        print(f"  ✓ Created role: {role.name} (priority {role.priority})")
    return len(created)


async def seed_all_tenants():
    """Seed system roles for every active tenant, one commit per tenant"""
    async with get_session_factory()() as db:
        tenants = await TenantRepository(db).get_active_tenants()

        print(f"\n🌱 Seeding system roles for {len(tenants)} tenant(s)...\n")

        for tenant in tenants:
            print(f"📦 Tenant: {tenant.name} ({tenant.code})")
            created = await seed_tenant(db, tenant)
            await db.commit()
            if created:
                print(f"  ✅ Completed for tenant: {tenant.code}\n")
            else:
                print("  ℹ System roles already present\n")

        clear_current_actor()
        print("✅ Role seeding completed successfully!")

    await get_engine().dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed_all_tenants())
