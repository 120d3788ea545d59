from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from portal.core.database import Base
from portal.core.types import GUID, generate_uuid


class AuthProvider(str, enum.Enum):
    """Account providers"""
    LOCAL = "local"
    GOOGLE = "google"
    GITHUB = "github"


class User(Base):
    """User account model"""
    __tablename__ = "users"
    __table_args__ = (
        # One local account per email; other providers may reuse the address
        UniqueConstraint("email", "provider", name="uq_users_email_provider"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    # Roll number for students
    username = Column(String(100), unique=True, index=True, nullable=False)
    # Unique per provider, see __table_args__
    email = Column(String(255), index=True, nullable=False)
    provider = Column(String(50), default=AuthProvider.LOCAL.value, nullable=False)
    hashed_password = Column(String(255), nullable=True)

    confirmation_token = Column(String(255), unique=True, nullable=True)
    reset_password_token = Column(String(255), nullable=True)
    confirmed = Column(Boolean, default=False, nullable=False)
    blocked = Column(Boolean, default=False, nullable=False)

    role_id = Column(GUID, ForeignKey("roles.id"), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    role = relationship("Role", back_populates="users", lazy="joined")

    def __repr__(self):
        return f"<User {self.username}>"
