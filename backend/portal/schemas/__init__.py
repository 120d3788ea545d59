from portal.schemas.auth import (
    StudentRegisterBody,
    RoleResponse,
    UserResponse,
    AdminUserResponse,
    RegisterResponse,
    PasswordChangeRequest,
    MessageResponse,
    ErrorDetail,
    ErrorResponse,
)

__all__ = [
    "StudentRegisterBody",
    "RoleResponse",
    "UserResponse",
    "AdminUserResponse",
    "RegisterResponse",
    "PasswordChangeRequest",
    "MessageResponse",
    "ErrorDetail",
    "ErrorResponse",
]
