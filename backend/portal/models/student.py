from sqlalchemy import Column, String, Boolean, DateTime
from datetime import datetime

from portal.core.database import Base
from portal.core.types import GUID, generate_uuid


class Student(Base):
    """Student record (institute system-of-record, separate from login accounts)"""
    __tablename__ = "students"

    id = Column(GUID, primary_key=True, default=generate_uuid)

    # Student details
    roll = Column(String(20), unique=True, index=True, nullable=False)
    institute_email_id = Column(String(255), index=True, nullable=False)
    name = Column(String(255), nullable=True)

    # Set by the public "request password change" endpoint, cleared by admins
    password_change_requested = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Student {self.roll}>"
