"""
Unit Tests for Seed Data
"""
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from portal.db.seed_data import seed_all
from portal.models.role import Role
from portal.models.system_setting import SystemSetting
from portal.modules.auth.registration_settings import load_registration_settings, default_registration_settings


class TestSeedData:

    async def test_seeds_roles_and_settings(self, db_session: AsyncSession):
        await seed_all(db_session)

        role_types = set((await db_session.execute(select(Role.type))).scalars().all())
        assert role_types == {"student", "authenticated", "public"}

        loaded = await load_registration_settings(db_session)
        assert loaded == default_registration_settings()

    async def test_idempotent(self, db_session: AsyncSession, student_role):
        await seed_all(db_session)
        await seed_all(db_session)

        assert await db_session.scalar(select(func.count()).select_from(Role)) == 3
        assert await db_session.scalar(select(func.count()).select_from(SystemSetting)) == 3
