"""Email service for notification copies."""
from __future__ import annotations

import logging
from typing import Optional

from flask import current_app
from flask_mail import Mail, Message

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending notification emails."""

    def __init__(self, mail: Optional[Mail] = None):
        self.mail = mail

    def send_notification_email(self, email: str, title: str, message: str, user_name: str | None = None) -> bool:
        """Send a plain-text copy of an in-app notification."""
        greeting = f"Hi {user_name}," if user_name else "Hello,"
        body = f"{greeting}\n\n{message}\n\nThis is an automated message from SwiftExpense."
        return self._send_email(to_email=email, subject=f"SwiftExpense - {title}", text_body=body)

    def _send_email(self, to_email: str, subject: str, text_body: str, html_body: str | None = None) -> bool:
        """Send email using Flask-Mail."""
        if not self.mail:
            logger.error("Mail service not initialized")
            return False

        msg = Message(
            subject=subject,
            sender=current_app.config.get("MAIL_DEFAULT_SENDER"),
            recipients=[to_email],
        )
        msg.body = text_body
        if html_body:
            msg.html = html_body

        try:
            self.mail.send(msg)
        except Exception as exc:  # smtplib and socket errors vary by backend
            logger.error("Failed to send email to %s: %s", to_email, exc)
            return False

        logger.info("Email sent successfully to %s", to_email)
        return True


email_service = EmailService()


def init_email_service(mail: Mail) -> None:
    """Initialize email service with Flask-Mail instance."""
    email_service.mail = mail
