"""
Unit Tests for Student Password Change Requests
"""
import pytest
from unittest.mock import AsyncMock
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import InvalidInputError, StudentNotFoundError, PersistenceError
from portal.models.student import Student
from portal.modules.auth.password_requests import (
    PASSWORD_CHANGE_REQUESTED_MESSAGE,
    request_password_change,
)


class TestRequestPasswordChange:
    """Test flagging a student for a password change"""

    async def test_sets_flag(self, db_session: AsyncSession, student_record):
        result = await request_password_change(
            db_session, student_record.institute_email_id, student_record.roll
        )

        assert result == {"message": PASSWORD_CHANGE_REQUESTED_MESSAGE}
        await db_session.refresh(student_record)
        assert student_record.password_change_requested is True

    async def test_idempotent(self, db_session: AsyncSession, student_record):
        for _ in range(2):
            result = await request_password_change(
                db_session, student_record.institute_email_id, student_record.roll
            )
            assert result["message"] == "Password change request sent"

        await db_session.refresh(student_record)
        assert student_record.password_change_requested is True

    @pytest.mark.parametrize("email, roll", [
        (None, "2001034"),
        ("raj@nitp.ac.in", None),
        ("", "2001034"),
        ("raj@nitp.ac.in", "   "),
        (None, None),
    ])
    async def test_both_fields_required(self, db_session: AsyncSession, email, roll):
        with pytest.raises(InvalidInputError) as exc_info:
            await request_password_change(db_session, email, roll)

        assert exc_info.value.message == "Required roll and email"

    async def test_wrong_roll_and_wrong_email_look_the_same(self, db_session: AsyncSession, student_record):
        """A miss never says which field was wrong"""
        with pytest.raises(StudentNotFoundError) as wrong_roll:
            await request_password_change(db_session, student_record.institute_email_id, "0000000")

        with pytest.raises(StudentNotFoundError) as wrong_email:
            await request_password_change(db_session, "nobody@nitp.ac.in", student_record.roll)

        assert wrong_roll.value.to_dict() == wrong_email.value.to_dict()
        assert wrong_roll.value.message == "Student not found/Roll and Email don't match"

    async def test_other_students_untouched(self, db_session: AsyncSession, student_record):
        other = Student(roll="2001099", institute_email_id="other@nitp.ac.in")
        db_session.add(other)
        await db_session.commit()

        await request_password_change(db_session, student_record.institute_email_id, student_record.roll)

        await db_session.refresh(other)
        assert other.password_change_requested is False

    async def test_store_failure(self, student_record):
        db = AsyncMock()
        db.scalar.return_value = student_record.id
        db.execute.side_effect = OperationalError("UPDATE students", {}, Exception("disk I/O error"))

        with pytest.raises(PersistenceError) as exc_info:
            await request_password_change(db, student_record.institute_email_id, student_record.roll)

        assert exc_info.value.message == "Error updating student"
        db.rollback.assert_awaited_once()

    async def test_record_vanished_before_update(self, student_record):
        db = AsyncMock()
        db.scalar.return_value = student_record.id
        db.execute.return_value.rowcount = 0

        with pytest.raises(PersistenceError):
            await request_password_change(db, student_record.institute_email_id, student_record.roll)
