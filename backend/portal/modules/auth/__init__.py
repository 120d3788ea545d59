# Authentication module

from portal.modules.auth.dependencies import get_optional_auth
from portal.modules.auth.password_requests import request_password_change
from portal.modules.auth.registration import (
    RegistrationService,
    RegistrationResult,
    sanitize_params,
    sanitize_user,
)
from portal.modules.auth.registration_settings import (
    RegistrationSettings,
    load_registration_settings,
)
from portal.modules.auth.roles import resolve_role_id
from portal.modules.auth.validators import (
    is_institute_email,
    is_valid_roll_number,
    allowed_roll_year_codes,
    looks_already_hashed,
)

__all__ = [
    "get_optional_auth",
    "request_password_change",
    "RegistrationService",
    "RegistrationResult",
    "sanitize_params",
    "sanitize_user",
    "RegistrationSettings",
    "load_registration_settings",
    "resolve_role_id",
    "is_institute_email",
    "is_valid_roll_number",
    "allowed_roll_year_codes",
    "looks_already_hashed",
]
