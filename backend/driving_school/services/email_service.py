"""
Email Service for the Driving School API
========================================
Sends transactional email over SMTP (currently the password reset link).
"""

import aiosmtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
from datetime import datetime

from driving_school.core.config import settings
from driving_school.core.logging_config import logger


class EmailService:
    """Async SMTP email service"""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.EMAIL_FROM
        self.from_name = settings.EMAIL_FROM_NAME
        self.frontend_url = settings.FRONTEND_URL.rstrip("/")

    @property
    def is_configured(self) -> bool:
        """SMTP credentials are present"""
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)

    def build_reset_link(self, reset_token: str) -> str:
        return f"{self.frontend_url}/reset-password?token={reset_token}"

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """
        Send an email asynchronously.

        Returns True if the SMTP server accepted the message, False otherwise.
        """
        if not self.is_configured:
            logger.warning("[Email] Email service not configured, skipping email send")
            return False

        message = MIMEMultipart("alternative")
        message["From"] = f"{self.from_name} <{self.from_email}>"
        message["To"] = to_email
        message["Subject"] = subject

        # Plain text first so clients that can't render HTML fall back to it
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
            return False

        logger.info(f"[Email/SMTP] Sent email to {to_email}: {subject}")
        return True

    async def send_password_reset_email(
        self,
        to_email: str,
        admin_name: str,
        reset_token: str
    ) -> bool:
        """Send password reset link"""
        reset_link = self.build_reset_link(reset_token)
        expires = settings.PASSWORD_RESET_EXPIRE_MINUTES

        subject = "Password Reset Request - Driving School Management System"

        html_content = f"""
        <!DOCTYPE html>
        <html>
        <head>
            <style>
                body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
                .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
                .header {{ background: #1e40af; color: white; padding: 24px; text-align: center; border-radius: 8px 8px 0 0; }}
                .content {{ background: #f9fafb; padding: 24px; border-radius: 0 0 8px 8px; }}
                .button {{ display: inline-block; background: #1e40af; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; margin: 16px 0; }}
                .footer {{ text-align: center; margin-top: 24px; font-size: 12px; color: #6b7280; }}
            </style>
        </head>
        <body>
            <div class="container">
                <div class="header">
                    <h1>Driving School Management System</h1>
                </div>
                <div class="content">
                    <p>Hello {admin_name or 'there'},</p>
                    <p>You requested a password reset. Click the button below to choose a new password:</p>
                    <p style="text-align: center;">
                        <a href="{reset_link}" class="button">Reset Password</a>
                    </p>
                    <p>This link expires in {expires} minutes. If you did not request a reset, you can ignore this email.</p>
                    <p style="font-size: 13px; color: #6b7280;">Or paste this link in your browser:<br>{reset_link}</p>
                </div>
                <div class="footer">
                    <p>&copy; {datetime.utcnow().year} Driving School Management System</p>
                </div>
            </div>
        </body>
        </html>
        """

        text_content = (
            f"Hello {admin_name or 'there'},\n\n"
            f"You requested a password reset. Open the link below to choose a new password:\n\n"
            f"{reset_link}\n\n"
            f"This link expires in {expires} minutes. If you did not request a reset, ignore this email.\n"
        )

        return await self.send_email(to_email, subject, html_content, text_content)


email_service = EmailService()
