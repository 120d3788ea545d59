# Re-export all models for convenient imports
from portal.models.role import Role
from portal.models.user import User, AuthProvider
from portal.models.student import Student
from portal.models.system_setting import SystemSetting

__all__ = [
    # Accounts
    "Role",
    "User",
    "AuthProvider",
    # Student records
    "Student",
    # Admin
    "SystemSetting",
]
