"""
Student self-registration.

Public sign-up for students: the body has the same shape as a local account
registration (email, password, username) where username is the student's
roll number. The role is always the configured registration role since the
endpoint is public; admins have their own endpoint for other roles.

Pipeline, failing fast at every step:

    feature gate -> strip protected fields -> structural validation
    -> hashed-password guard -> role lookup -> institute email -> roll number
    -> email conflict check -> persist -> shape response
    -> confirmation email | credential token
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import (
    PortalError,
    InvalidInputError,
    InvalidEmailError,
    InvalidRollNumberError,
    InvalidCredentialFormatError,
    EmailTakenError,
    UsernameTakenError,
    RegistrationDisabledError,
    RegistrationFailedError,
)
from portal.core.logging_config import logger, set_user_id
from portal.core.security import issue_credential_token
from portal.models.user import User, AuthProvider
from portal.modules.auth.registration_settings import RegistrationSettings
from portal.modules.auth.roles import resolve_role_id
from portal.modules.auth.validators import (
    is_institute_email,
    is_valid_roll_number,
    looks_already_hashed,
)
from portal.schemas.auth import StudentRegisterBody, UserResponse, AdminUserResponse
from portal.services import user_service

# Never attacker-controlled
PROTECTED_FIELDS = ("confirmed", "confirmationToken", "resetPasswordToken")


@dataclass
class RegistrationResult:
    user: Dict[str, Any]
    jwt: Optional[str] = None


def sanitize_params(body: Dict[str, Any]) -> Dict[str, Any]:
    """Drop protected fields and pin the provider to local"""
    params = {key: value for key, value in body.items() if key not in PROTECTED_FIELDS}
    params["provider"] = AuthProvider.LOCAL.value
    return params


def sanitize_user(user: User, auth: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Output view of an account, role included, credential excluded.

    Callers whose token carries the admin role get the admin view.
    """
    schema = AdminUserResponse if auth and auth.get("role") == "admin" else UserResponse
    return schema.model_validate(user).model_dump(mode="json")


def validate_register_body(params: Dict[str, Any]) -> None:
    """Require a syntactically valid email and a non-empty password"""
    try:
        StudentRegisterBody.model_validate(params)
    except ValidationError as exc:
        fields = []
        messages = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"]) or "body"
            if field not in fields:
                fields.append(field)
            messages.append(f"{field}: {error['msg']}")
        raise InvalidInputError(
            f"Invalid input: {', '.join(fields)}",
            fields=fields,
            messages=messages,
        )


class RegistrationService:
    """
    Registration pipeline bound to one database session.

    ``email_sender`` is anything with an async
    ``send_confirmation_email(to_email, username, confirmation_token)`` that
    raises with the provider message when delivery fails;
    it is only needed when email confirmation is switched on.
    """

    def __init__(
        self,
        db: AsyncSession,
        email_sender=None,
        token_issuer: Callable[[str], str] = issue_credential_token,
    ):
        self.db = db
        self.email_sender = email_sender
        self.token_issuer = token_issuer

    async def register(
        self,
        body: Dict[str, Any],
        settings: RegistrationSettings,
        auth: Optional[Dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> RegistrationResult:
        try:
            result = await self._register(body, settings, auth, now or datetime.now())
        except PortalError as exc:
            logger.log_auth_event(
                event="register",
                success=False,
                user_email=body.get("email") if isinstance(body.get("email"), str) else None,
                reason=exc.code,
            )
            raise

        logger.log_auth_event(
            event="register",
            success=True,
            user_email=result.user.get("email"),
            pending_confirmation=result.jwt is None,
        )
        return result

    async def _register(
        self,
        body: Dict[str, Any],
        settings: RegistrationSettings,
        auth: Optional[Dict[str, Any]],
        now: datetime,
    ) -> RegistrationResult:
        if not settings.allow_register:
            raise RegistrationDisabledError()

        params = sanitize_params(body)

        validate_register_body(params)

        if looks_already_hashed(params["password"]):
            raise InvalidCredentialFormatError()

        role_id = await resolve_role_id(self.db, settings.role_type)

        if not is_institute_email(params["email"], settings.email_domain):
            raise InvalidEmailError()
        params["email"] = params["email"].lower()

        if not is_valid_roll_number(params.get("username"), now):
            raise InvalidRollNumberError()

        await self._check_email_conflict(params["email"], params["provider"], settings)

        if not settings.email_confirmation:
            params["confirmed"] = True

        user = await self._persist(params, role_id)
        set_user_id(str(user.id))

        sanitized_user = sanitize_user(user, auth)

        if settings.email_confirmation:
            await self._send_confirmation(user)
            return RegistrationResult(user=sanitized_user)

        return RegistrationResult(user=sanitized_user, jwt=self.token_issuer(str(user.id)))

    async def _check_email_conflict(
        self, email: str, provider: str, settings: RegistrationSettings
    ) -> None:
        # Best-effort pre-check; the username index and the email/provider constraint arbitrate races
        for existing in await user_service.find_users_by_email(self.db, email):
            if existing.provider == provider:
                raise EmailTakenError()
            if settings.unique_email:
                raise EmailTakenError()

    async def _persist(self, params: Dict[str, Any], role_id: str) -> User:
        try:
            return await user_service.add_user(self.db, params, role_id)
        except IntegrityError as exc:
            await self.db.rollback()
            if "username" in str(exc.orig if exc.orig is not None else exc):
                raise UsernameTakenError()
            logger.log_error_with_context(exc, context="register.persist")
            raise RegistrationFailedError()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.log_error_with_context(exc, context="register.persist")
            raise RegistrationFailedError()

    async def _send_confirmation(self, user: User) -> None:
        # The account stays in place if anything below fails
        if self.email_sender is None:
            raise RegistrationFailedError("Email confirmation is enabled but no email sender is configured")

        try:
            token = await user_service.issue_confirmation_token(self.db, user)
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.log_error_with_context(exc, context="register.confirmation_token")
            raise RegistrationFailedError()

        try:
            sent = await self.email_sender.send_confirmation_email(
                to_email=user.email,
                username=user.username,
                confirmation_token=token,
            )
        except Exception as exc:
            logger.log_error_with_context(exc, context="register.confirmation_email", user_id=str(user.id))
            raise RegistrationFailedError(str(exc))

        if not sent:
            raise RegistrationFailedError("Confirmation email could not be sent")

    async def confirm_email(self, confirmation_token: Optional[str]) -> RegistrationResult:
        """Confirm a pending account and log it in"""
        user = await user_service.confirm_user(self.db, confirmation_token)

        if user is None:
            logger.log_auth_event(event="email_confirmation", success=False, reason="Invalid token")
            raise InvalidInputError("Invalid token", fields=["confirmation"])

        logger.log_auth_event(event="email_confirmation", success=True, user_email=user.email)
        return RegistrationResult(user=sanitize_user(user), jwt=self.token_issuer(str(user.id)))
