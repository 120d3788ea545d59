from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from portal.core.database import get_db
from portal.modules.auth import RegistrationService
from portal.schemas.auth import RegisterResponse, ErrorResponse


router = APIRouter()


@router.get(
    "/email-confirmation",
    response_model=RegisterResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid token"}},
)
async def email_confirmation(
    confirmation: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """
    Confirm an account with the token from the confirmation email.

    A token confirms exactly once; afterwards it is rejected as invalid.
    """
    service = RegistrationService(db)
    result = await service.confirm_email(confirmation)
    return RegisterResponse(jwt=result.jwt, user=result.user)
