"""
Public student endpoints: self-registration and password change requests.
"""
from fastapi import APIRouter, Body, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, Optional

from portal.core.database import get_db
from portal.core.rate_limiter import limiter, register_rate_limit, password_request_rate_limit
from portal.modules.auth import (
    RegistrationService,
    get_optional_auth,
    load_registration_settings,
    request_password_change,
)
from portal.schemas.auth import (
    RegisterResponse,
    PasswordChangeRequest,
    MessageResponse,
    ErrorResponse,
)
from portal.services.email_service import email_service


router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    403: {"model": ErrorResponse, "description": "Registration disabled"},
    404: {"model": ErrorResponse, "description": "Student not found"},
    409: {"model": ErrorResponse, "description": "Email or roll number already taken"},
    500: {"model": ErrorResponse, "description": "Server-side failure"},
}


def get_email_sender():
    """Confirmation email sender (overridden in tests)"""
    return email_service


@router.post(
    "/register",
    response_model=RegisterResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
@limiter.limit(register_rate_limit)
async def register_student(
    request: Request,
    body: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    auth: Optional[Dict[str, Any]] = Depends(get_optional_auth),
    email_sender=Depends(get_email_sender),
):
    """
    Sign up as a student.

    Same body as a local account registration: ``email`` (institute address),
    ``password`` and ``username`` (the roll number). Returns the user plus a
    ``jwt``, or only the user when email confirmation is switched on.
    """
    registration_settings = await load_registration_settings(db)
    service = RegistrationService(db, email_sender=email_sender)

    result = await service.register(body, registration_settings, auth=auth)

    return RegisterResponse(jwt=result.jwt, user=result.user)


@router.post(
    "/request-password-change",
    response_model=MessageResponse,
    responses=ERROR_RESPONSES,
)
@limiter.limit(password_request_rate_limit)
async def request_student_password_change(
    request: Request,
    body: PasswordChangeRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    "Forgot password" for students.

    Needs both ``institute_email_id`` and ``roll``; an admin handles the
    actual change.
    """
    return await request_password_change(db, body.institute_email_id, body.roll)
