"""Email service for sending invitation mails."""
from __future__ import annotations

import logging
from typing import Optional

from flask import current_app
from flask_mail import Mail, Message

from tripflow.models import Invitation
from tripflow.utils.retry import retry

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails through Flask-Mail."""

    def __init__(self, mail: Optional[Mail] = None):
        self.mail = mail

    def send_invitation_email(self, invitation: Invitation) -> bool:
        """Send the invitation link. Failures are logged and reported as ``False``."""
        try:
            accept_url = current_app.config["INVITATION_ACCEPT_URL"].format(token=invitation.token)
            company_name = invitation.invited_by.company.name if invitation.invited_by else "TripFlow"
            return self._send_email(
                to_email=invitation.email,
                subject=f"You're invited to join {company_name} on TripFlow",
                html_body=self._get_invitation_html(invitation, company_name, accept_url),
                text_body=self._get_invitation_text(invitation, company_name, accept_url),
            )
        except Exception as e:
            logger.error(f"Failed to send invitation email to {invitation.email}: {str(e)}")
            return False

    def _send_email(self, to_email: str, subject: str, html_body: str, text_body: str = None) -> bool:
        """Send email using Flask-Mail, retrying transient failures."""
        if not self.mail:
            logger.error("Mail service not initialized")
            return False

        msg = Message(
            subject=subject,
            sender=current_app.config.get("MAIL_DEFAULT_SENDER"),
            recipients=[to_email],
        )
        if html_body:
            msg.html = html_body
        if text_body:
            msg.body = text_body

        send = retry(
            max_attempts=current_app.config.get("MAIL_RETRY_ATTEMPTS", 3),
            base_delay=current_app.config.get("MAIL_RETRY_BACKOFF", 0.5),
        )(self.mail.send)
        send(msg)
        logger.info(f"Email sent successfully to {to_email}")
        return True

    def _get_invitation_html(self, invitation: Invitation, company_name: str, accept_url: str) -> str:
        name_greeting = f"Hi {invitation.full_name}," if invitation.full_name else "Hello,"
        department = invitation.department.name if invitation.department else None
        department_line = f"<p>You will join the <strong>{department}</strong> department.</p>" if department else ""

        return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="UTF-8">
            <title>TripFlow - Invitation</title>
        </head>
        <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;">
            <h2>You're invited to {company_name}</h2>
            <p>{name_greeting}</p>
            <p>You have been invited to TripFlow as <strong>{invitation.role.value}</strong>.</p>
            {department_line}
            <p><a href="{accept_url}">Accept the invitation</a></p>
            <p>This invitation expires on {invitation.expires_at:%Y-%m-%d}.</p>
        </body>
        </html>
        """

    def _get_invitation_text(self, invitation: Invitation, company_name: str, accept_url: str) -> str:
        name_greeting = f"Hi {invitation.full_name}," if invitation.full_name else "Hello,"
        text = f"""
{name_greeting}

You have been invited to join {company_name} on TripFlow as {invitation.role.value}.

Accept the invitation: {accept_url}

This invitation expires on {invitation.expires_at:%Y-%m-%d}.

--
TripFlow Team
        """
        return text.strip()


# Global email service instance
email_service = EmailService()


def init_email_service(mail: Mail) -> None:
    """Initialize the email service with Flask-Mail instance."""
    email_service.mail = mail


def send_invitation_email(invitation: Invitation) -> bool:
    """Convenience function to send an invitation email."""
    return email_service.send_invitation_email(invitation)
