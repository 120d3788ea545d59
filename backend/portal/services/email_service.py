"""
Email Service for the Student Portal
====================================
Sends the account confirmation email after self-registration.

Supports both SMTP (aiosmtplib) and SendGrid. Delivery failures raise
EmailDeliveryError carrying the provider's own message.
"""

import asyncio
import aiosmtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
from datetime import datetime
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To, Content

from portal.core.config import settings
from portal.core.logging_config import logger


class EmailDeliveryError(Exception):
    """The provider refused or could not be reached"""


class EmailService:
    """Async email service using SMTP or SendGrid"""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.EMAIL_FROM
        self.from_name = settings.EMAIL_FROM_NAME
        self.sendgrid_api_key = settings.SENDGRID_API_KEY
        self.use_sendgrid = settings.USE_SENDGRID and bool(self.sendgrid_api_key)

    @property
    def is_configured(self) -> bool:
        """Check if email service is properly configured"""
        if self.use_sendgrid:
            return bool(self.sendgrid_api_key)
        return bool(self.smtp_user and self.smtp_password)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """
        Send an email asynchronously.

        Returns True once the provider accepted the message; raises
        EmailDeliveryError otherwise.
        """
        if not self.is_configured:
            logger.warning("[Email] Email service not configured, cannot send")
            raise EmailDeliveryError("Email service is not configured")

        if self.use_sendgrid:
            await self._send_via_sendgrid(to_email, subject, html_content, text_content)
        else:
            await self._send_via_smtp(to_email, subject, html_content, text_content)
        return True

    async def _send_via_sendgrid(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> None:
        """Send email via SendGrid API"""
        message = Mail(
            from_email=Email(self.from_email, self.from_name),
            to_emails=To(to_email),
            subject=subject,
            html_content=Content("text/html", html_content)
        )

        if text_content:
            message.add_content(Content("text/plain", text_content))

        try:
            sg = SendGridAPIClient(self.sendgrid_api_key)
            # SendGrid client is synchronous
            loop = asyncio.get_running_loop()
            response = await loop.run_in_executor(None, sg.send, message)
        except Exception as e:
            logger.error(f"[Email/SendGrid] Failed to send email to {to_email}: {e}")
            raise EmailDeliveryError(f"SendGrid error: {e}") from e

        if response.status_code not in (200, 201, 202):
            logger.error(f"[Email/SendGrid] Failed with status {response.status_code}: {response.body}")
            raise EmailDeliveryError(f"SendGrid rejected the message with status {response.status_code}")

        logger.info(f"[Email/SendGrid] Successfully sent email to {to_email}: {subject}")

    async def _send_via_smtp(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> None:
        """Send email via SMTP"""
        message = MIMEMultipart("alternative")
        message["From"] = f"{self.from_name} <{self.from_email}>"
        message["To"] = to_email
        message["Subject"] = subject

        if text_content:
            message.attach(MIMEText(text_content, "plain"))
        message.attach(MIMEText(html_content, "html"))

        try:
            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                start_tls=True
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"[Email/SMTP] Failed to send email to {to_email}: {e}")
            raise EmailDeliveryError(f"SMTP error: {e}") from e

        logger.info(f"[Email/SMTP] Successfully sent email to {to_email}: {subject}")

    async def send_confirmation_email(
        self,
        to_email: str,
        username: str,
        confirmation_token: str
    ) -> bool:
        """Send the account confirmation link to a newly registered student.

        Raises EmailDeliveryError when the provider does not take the message.
        """
        confirmation_link = settings.get_confirmation_url(confirmation_token)

        subject = f"Confirm your account - {settings.APP_NAME}"

        html_content = f"""
        <html>
        <body style="font-family: sans-serif; line-height: 1.6; color: #333;">
            <p>Hi {username},</p>
            <p>Thank you for registering on the {settings.APP_NAME}.</p>
            <p>Please confirm your account by opening the link below:</p>
            <p><a href="{confirmation_link}">{confirmation_link}</a></p>
            <p style="font-size: 12px; color: #6b7280;">
                &copy; {datetime.utcnow().year} {settings.APP_NAME}.
                If you didn't register, please ignore this email.
            </p>
        </body>
        </html>
        """

        text_content = f"""
        Hi {username},

        Thank you for registering on the {settings.APP_NAME}.
        Please confirm your account by opening the link below:

        {confirmation_link}

        If you didn't register, please ignore this email.
        """

        return await self.send_email(to_email, subject, html_content, text_content)


# Singleton instance
email_service = EmailService()
