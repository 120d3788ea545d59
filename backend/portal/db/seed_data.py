"""
Database Seed Data Module

Roles and registration switches the portal needs before it can accept
sign-ups. Safe to run repeatedly: existing rows are left untouched.

Run with: python -m portal.db.seed_data
"""
import asyncio
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import settings
from portal.core.database import AsyncSessionLocal, init_db, close_db
from portal.core.logging_config import logger
from portal.models.role import Role
from portal.models.system_setting import SystemSetting
from portal.modules.auth.registration_settings import (
    ALLOW_REGISTER_KEY,
    UNIQUE_EMAIL_KEY,
    EMAIL_CONFIRMATION_KEY,
)


# ==================== Seed Data Constants ====================

DEFAULT_ROLES = [
    {"name": "Student", "type": "student", "description": "Self-registered student account"},
    {"name": "Authenticated", "type": "authenticated", "description": "Default role given to authenticated users"},
    {"name": "Public", "type": "public", "description": "Default role given to unauthenticated users"},
]


def default_settings_rows() -> List[dict]:
    return [
        {
            "key": ALLOW_REGISTER_KEY,
            "value": settings.DEFAULT_ALLOW_REGISTER,
            "description": "Allow public student self-registration",
        },
        {
            "key": UNIQUE_EMAIL_KEY,
            "value": settings.DEFAULT_UNIQUE_EMAIL,
            "description": "One account per email across all providers",
        },
        {
            "key": EMAIL_CONFIRMATION_KEY,
            "value": settings.DEFAULT_EMAIL_CONFIRMATION,
            "description": "Require email confirmation before first login",
        },
    ]


# ==================== Seed Functions ====================

async def seed_roles(db: AsyncSession) -> List[Role]:
    """Create missing roles"""
    created = []
    existing = set((await db.execute(select(Role.type))).scalars().all())

    for role_data in DEFAULT_ROLES:
        if role_data["type"] in existing:
            continue
        role = Role(**role_data)
        db.add(role)
        created.append(role)

    await db.flush()
    logger.info(f"[Seed] Created {len(created)} roles")
    return created


async def seed_registration_settings(db: AsyncSession) -> List[SystemSetting]:
    """Create missing registration switches with the environment defaults"""
    created = []
    existing = set((await db.execute(select(SystemSetting.key))).scalars().all())

    for row in default_settings_rows():
        if row["key"] in existing:
            continue
        setting = SystemSetting(category="registration", **row)
        db.add(setting)
        created.append(setting)

    await db.flush()
    logger.info(f"[Seed] Created {len(created)} registration settings")
    return created


async def seed_all(db: AsyncSession) -> None:
    await seed_roles(db)
    await seed_registration_settings(db)
    await db.commit()


async def main():
    await init_db()
    try:
        async with AsyncSessionLocal() as db:
            await seed_all(db)
        logger.info("[Seed] Done")
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
