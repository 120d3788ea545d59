from sqlalchemy import Column, String, DateTime, Text
from datetime import datetime

from portal.core.database import Base
from portal.core.types import GUID, JSONType, generate_uuid


class SystemSetting(Base):
    """System settings for admin configuration"""
    __tablename__ = "system_settings"

    id = Column(GUID, primary_key=True, default=generate_uuid)

    # Setting key (unique identifier), e.g. "registration.allow_register"
    key = Column(String(100), unique=True, nullable=False, index=True)

    # Setting value (stored as JSON for flexibility)
    value = Column(JSONType, nullable=False)

    # Metadata
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=True)  # 'registration', 'general'

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<SystemSetting {self.key}>"
