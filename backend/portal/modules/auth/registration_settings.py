"""
Registration settings.

The three registration switches live in the system_settings table so admins
can flip them at runtime. They are read fresh for every request and handed
to the registration pipeline as a RegistrationSettings value; nothing here is
cached.
"""
from dataclasses import dataclass
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from portal.core.config import settings as app_settings
from portal.core.logging_config import logger
from portal.models.system_setting import SystemSetting

SETTING_PREFIX = "registration."

ALLOW_REGISTER_KEY = f"{SETTING_PREFIX}allow_register"
UNIQUE_EMAIL_KEY = f"{SETTING_PREFIX}unique_email"
EMAIL_CONFIRMATION_KEY = f"{SETTING_PREFIX}email_confirmation"


@dataclass(frozen=True)
class RegistrationSettings:
    allow_register: bool = True
    unique_email: bool = True
    email_confirmation: bool = False
    role_type: str = "student"
    email_domain: str = "nitp.ac.in"


def default_registration_settings() -> RegistrationSettings:
    """Settings built from environment defaults only"""
    return RegistrationSettings(
        allow_register=app_settings.DEFAULT_ALLOW_REGISTER,
        unique_email=app_settings.DEFAULT_UNIQUE_EMAIL,
        email_confirmation=app_settings.DEFAULT_EMAIL_CONFIRMATION,
        role_type=app_settings.REGISTRATION_ROLE_TYPE,
        email_domain=app_settings.INSTITUTE_EMAIL_DOMAIN,
    )


async def load_registration_settings(db: AsyncSession) -> RegistrationSettings:
    """
    Load the registration switches.

    A row in system_settings wins over the environment default; missing rows
    fall back to DEFAULT_* from the environment.
    """
    defaults = default_registration_settings()

    result = await db.execute(
        select(SystemSetting).where(SystemSetting.key.startswith(SETTING_PREFIX))
    )
    stored = {row.key: row.value for row in result.scalars().all()}

    def flag(key: str, default: bool) -> bool:
        value = stored.get(key)
        if isinstance(value, bool):
            return value
        if value is not None:
            logger.warning(f"[Settings] {key} holds {value!r}, not a boolean; using default {default}")
        return default

    return RegistrationSettings(
        allow_register=flag(ALLOW_REGISTER_KEY, defaults.allow_register),
        unique_email=flag(UNIQUE_EMAIL_KEY, defaults.unique_email),
        email_confirmation=flag(EMAIL_CONFIRMATION_KEY, defaults.email_confirmation),
        role_type=defaults.role_type,
        email_domain=defaults.email_domain,
    )
