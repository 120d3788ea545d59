from portal.services.email_service import EmailService, EmailDeliveryError, email_service
from portal.services import user_service

__all__ = [
    "EmailService",
    "EmailDeliveryError",
    "email_service",
    "user_service",
]
