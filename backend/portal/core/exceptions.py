"""
Custom Exceptions for the NITP Student Portal
=============================================

Every failure of the registration and password-change-request pipelines is
raised as a PortalError subclass. The API layer renders them with
error_response() and the status_code carried by the class, so clients always
get a stable machine-readable code plus a list of human-readable messages.

Usage:
    from portal.core.exceptions import InvalidEmailError

    if not is_institute_email(email):
        raise InvalidEmailError()
"""

from typing import Optional, Any, Dict, List


class PortalError(Exception):
    """Base exception for all portal errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        messages: Optional[List[str]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        self.messages = messages or [message]
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "messages": self.messages,
            "details": self.details
        }


# ============================================
# Validation Errors (400-type)
# ============================================

class InvalidInputError(PortalError):
    """Request body is structurally invalid"""

    status_code = 400

    def __init__(self, message: str = "Invalid input", fields: Optional[List[str]] = None,
                 messages: Optional[List[str]] = None):
        details = {"fields": fields} if fields else {}
        super().__init__(message, code="INVALID_INPUT", details=details, messages=messages)


class InvalidEmailError(PortalError):
    """Email is not an institutional address"""

    status_code = 400

    def __init__(self, message: str = "Please provide a valid email address"):
        super().__init__(message, code="INVALID_EMAIL", details={"field": "email"})


class InvalidRollNumberError(PortalError):
    """Roll number has the wrong shape or is outside the admission window"""

    status_code = 400

    def __init__(self, message: str = "Please provide a valid roll number"):
        super().__init__(message, code="INVALID_ROLL_NUMBER", details={"field": "username"})


class InvalidCredentialFormatError(PortalError):
    """Plaintext password looks like an already-hashed value"""

    status_code = 400

    def __init__(self, message: str = "Your password cannot contain more than three times the symbol `$`"):
        super().__init__(message, code="INVALID_CREDENTIAL_FORMAT", details={"field": "password"})


# ============================================
# Conflict Errors (409-type)
# ============================================

class EmailTakenError(PortalError):
    """An account already uses this email"""

    status_code = 409

    def __init__(self, message: str = "Email is already taken"):
        super().__init__(message, code="EMAIL_TAKEN", details={"field": "email"})


class UsernameTakenError(PortalError):
    """An account already uses this roll number as its username"""

    status_code = 409

    def __init__(self, message: str = "Username already taken"):
        super().__init__(message, code="USERNAME_TAKEN", details={"field": "username"})


# ============================================
# Feature gate (403-type)
# ============================================

class RegistrationDisabledError(PortalError):
    """Public self-registration is switched off"""

    status_code = 403

    def __init__(self, message: str = "Register action is currently disabled"):
        super().__init__(message, code="REGISTRATION_DISABLED")


# ============================================
# Resource Errors (404-type)
# ============================================

class StudentNotFoundError(PortalError):
    """No student matches the given roll and email. Deliberately non-specific."""

    status_code = 404

    def __init__(self, message: str = "Student not found/Roll and Email don't match"):
        super().__init__(message, code="NOT_FOUND")


# ============================================
# Server-side Errors (500-type)
# ============================================

class RoleConfigurationError(PortalError):
    """A role the pipeline depends on is missing from the role store"""

    status_code = 500

    def __init__(self, role_type: str):
        super().__init__(
            f"Role '{role_type}' is not configured",
            code="CONFIGURATION_ERROR",
            details={"role_type": role_type}
        )


class PersistenceError(PortalError):
    """A store write failed"""

    status_code = 500

    def __init__(self, message: str = "Error updating student"):
        super().__init__(message, code="PERSISTENCE_ERROR")


class RegistrationFailedError(PortalError):
    """Account creation or confirmation dispatch failed"""

    status_code = 500

    def __init__(self, message: str = "Some error occurred (maybe Roll/Email is already taken)"):
        super().__init__(message, code="REGISTRATION_FAILED")


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: PortalError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
