"""Service for sending account emails."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional
from urllib.parse import urlencode

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails via SMTP.

    When SMTP is not configured the message is not sent; the verification
    link or reset code is logged instead so local development keeps working.
    """

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: str = "AquaPulse",
        frontend_base_url: str = "http://localhost:3001",
    ):
        self.smtp_host = smtp_host or ""
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username or ""
        self.smtp_password = smtp_password or ""
        self.from_email = from_email or ""
        self.from_name = from_name
        self.frontend_base_url = frontend_base_url.rstrip("/")
        self.enabled = bool(self.smtp_host and self.smtp_username and self.from_email)

    def verification_url(self, to_email: str, verification_token: str) -> str:
        query = urlencode({"token": verification_token, "email": to_email})
        return f"{self.frontend_base_url}/verify-email?{query}"

    def send_verification_email(self, to_email: str, verification_token: str) -> bool:
        """
        Send the email verification link.

        Args:
            to_email: Recipient email
            verification_token: Verification token stored on the account

        Returns:
            True if sent successfully, False otherwise
        """
        verification_url = self.verification_url(to_email, verification_token)
        if not self.enabled:
            logger.info("SMTP disabled; verification URL for %s: %s", to_email, verification_url)
            return True

        subject = "Verify your email - AquaPulse"
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <div style="background-color: #0078d4; padding: 30px; border-radius: 10px; text-align: center;">
                    <h1 style="color: #ffffff; margin: 0;">AquaPulse</h1>
                </div>

                <div style="padding: 30px 0;">
                    <h2 style="color: #1e293b; margin-bottom: 20px;">Welcome to AquaPulse!</h2>

                    <p style="color: #475569; line-height: 1.6; margin-bottom: 20px;">
                        Thanks for signing up. Please confirm your email address to activate your account:
                    </p>

                    <div style="text-align: center; margin: 30px 0;">
                        <a href="{verification_url}"
                           style="background-color: #0078d4; color: white; padding: 15px 30px;
                                  text-decoration: none; border-radius: 5px; display: inline-block;
                                  font-weight: bold;">
                            Verify Email
                        </a>
                    </div>

                    <p style="color: #64748b; font-size: 14px; margin-top: 30px;">
                        If you did not create an AquaPulse account, you can ignore this email.
                    </p>
                </div>
            </body>
        </html>
        """

        text_body = f"""
        AquaPulse - Email verification

        Welcome to AquaPulse!

        Confirm your email address by opening the link below:
        {verification_url}

        If you did not create an AquaPulse account, you can ignore this email.
        """

        return self.send(to_email, subject, html_body, text_body)

    def send_password_reset_code(self, to_email: str, code: str) -> bool:
        """Send a six-digit password reset code."""
        if not self.enabled:
            logger.info("SMTP disabled; password reset code for %s: %s", to_email, code)
            return True

        subject = "Password reset code - AquaPulse"
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2 style="color: #0078d4;">Password Reset Request</h2>
                <p>We received a request to reset your password. Use the following code to continue:</p>
                <div style="background-color: #f0f0f0; padding: 15px; text-align: center; font-size: 24px;
                            font-weight: bold; letter-spacing: 5px; border: 1px dashed #ccc;">
                    {code}
                </div>
                <p>This code will expire in <b>10 minutes</b>.</p>
                <p>If you did not request a password reset, please ignore this email.</p>
            </body>
        </html>
        """

        text_body = f"""
        AquaPulse - Password reset

        Your password reset code is: {code}

        This code will expire in 10 minutes.
        """

        return self.send(to_email, subject, html_body, text_body)

    def send(self, to_email: str, subject: str, html_body: str, text_body: str) -> bool:
        """
        Send an email via SMTP.

        Args:
            to_email: Recipient email
            subject: Email subject
            html_body: HTML body
            text_body: Plain text body

        Returns:
            True if sent successfully, False otherwise
        """
        if not self.enabled:
            logger.info("SMTP disabled; dropping email %r to %s", subject, to_email)
            return False

        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = f"{self.from_name} <{self.from_email}>"
            msg["To"] = to_email

            msg.attach(MIMEText(text_body, "plain", "utf-8"))
            msg.attach(MIMEText(html_body, "html", "utf-8"))

            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)

            return True

        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", to_email, exc)
            return False
