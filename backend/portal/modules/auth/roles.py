from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from portal.core.exceptions import RoleConfigurationError
from portal.core.logging_config import logger
from portal.models.role import Role

STUDENT_ROLE_TYPE = "student"


async def resolve_role_id(db: AsyncSession, role_type: str = STUDENT_ROLE_TYPE) -> str:
    """
    Get the id of the role with the given type.

    A missing role means the roles table was never seeded: that is a
    deployment fault, not something the caller can fix.
    """
    role_id = await db.scalar(select(Role.id).where(Role.type == role_type))

    if role_id is None:
        logger.critical(
            f"[Roles] Role '{role_type}' missing from the roles table - run the seed script",
            extra={"event_type": "configuration_error", "role_type": role_type}
        )
        raise RoleConfigurationError(role_type)

    return role_id
