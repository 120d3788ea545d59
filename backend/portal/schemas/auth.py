from pydantic import BaseModel, ConfigDict, EmailStr, Field, AliasChoices, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime


class StudentRegisterBody(BaseModel):
    """Structural shape of a registration body.

    Only checks that the email is syntactically an email and the password is
    present. Institutional domain and roll number rules are applied later by
    the registration pipeline.
    """
    model_config = ConfigDict(extra="allow")

    email: EmailStr
    password: str = Field(..., min_length=1)
    username: Optional[str] = None


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: str
    description: Optional[str] = None


class UserResponse(BaseModel):
    """Public view of an account. Never carries the credential or tokens."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    provider: str
    confirmed: bool
    created_at: datetime
    role: Optional[RoleResponse] = None


class AdminUserResponse(UserResponse):
    """Account view for callers holding the admin role"""
    blocked: bool
    updated_at: Optional[datetime] = None


class RegisterResponse(BaseModel):
    jwt: Optional[str] = None
    user: Dict[str, Any]


class PasswordChangeRequest(BaseModel):
    """Body of the password change request.

    Both fields are optional here so a missing one is reported as a portal
    INVALID_INPUT error instead of a framework 422.
    """
    model_config = ConfigDict(populate_by_name=True)

    institute_email_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("institute_email_id", "institutionalEmail")
    )
    roll: Optional[str] = None

    @field_validator("roll", mode="before")
    @classmethod
    def coerce_roll(cls, value):
        # Roll numbers are digits, some clients send them as JSON numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class MessageResponse(BaseModel):
    message: str


class ErrorDetail(BaseModel):
    code: str
    message: str
    messages: List[str]
    details: Dict[str, Any] = {}


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail
