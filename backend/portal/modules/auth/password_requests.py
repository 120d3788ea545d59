"""
"Forgot password" for students.

Students cannot reset their own password; they ask for a change and an admin
handles it. The request needs both the roll number and the institute email
so nobody can raise requests for arbitrary roll numbers, and a miss never
says which of the two was wrong.
"""
from typing import Dict, Optional

from sqlalchemy import select, update, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import InvalidInputError, StudentNotFoundError, PersistenceError
from portal.core.logging_config import logger
from portal.models.student import Student

PASSWORD_CHANGE_REQUESTED_MESSAGE = "Password change request sent"


async def request_password_change(
    db: AsyncSession,
    institute_email_id: Optional[str],
    roll: Optional[str],
) -> Dict[str, str]:
    """
    Flag the matching student record for a password change.

    Idempotent: asking again while the flag is already set succeeds.
    """
    if not institute_email_id or not institute_email_id.strip() or not roll or not roll.strip():
        raise InvalidInputError("Required roll and email", fields=["institute_email_id", "roll"])

    student_id = await db.scalar(
        select(Student.id).where(and_(
            Student.roll == roll,
            Student.institute_email_id == institute_email_id,
        ))
    )

    if student_id is None:
        logger.log_auth_event(
            event="password_change_request",
            success=False,
            user_email=institute_email_id,
            reason="No student matches roll and email",
        )
        raise StudentNotFoundError()

    try:
        result = await db.execute(
            update(Student)
            .where(Student.id == student_id)
            .values(password_change_requested=True)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.log_error_with_context(exc, context="password_change_request", student_id=student_id)
        raise PersistenceError()

    if result.rowcount != 1:
        logger.error(f"[PasswordRequest] Student {student_id} vanished before update")
        raise PersistenceError()

    logger.log_auth_event(
        event="password_change_request",
        success=True,
        user_email=institute_email_id,
        student_id=student_id,
    )
    return {"message": PASSWORD_CHANGE_REQUESTED_MESSAGE}
