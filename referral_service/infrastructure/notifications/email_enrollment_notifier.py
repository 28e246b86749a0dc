"""
Enrollment email notifier (async).
==================================

Sends the welcome email to a newly registered user with their referral code
and share link. Fire-and-forget: failures are logged, never raised, so a
broken SMTP server cannot fail a registration.
"""
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib

from ...application.services.enrollment_notifier import EnrollmentNotifier
from ...core.config import Settings, get_settings
from ...domain.models.user import User

logger = logging.getLogger(__name__)


def build_share_link(base_url: str, referral_code: str) -> str:
    """Public link a user shares so that sign-ups are credited to them."""
    return f"{base_url.rstrip('/')}/?ref={referral_code}"


def _build_html_body(user: User, share_link: str) -> str:
    """Build the HTML welcome body."""
    greeting = f"Hi {user.username}," if user.username else "Hi,"
    return f"""
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Welcome</title>
</head>
<body style="font-family:Segoe UI,Helvetica,Arial,sans-serif;background:#f5f5f5;margin:0;padding:24px;">
  <div style="max-width:600px;margin:0 auto;background:#fff;border-radius:8px;box-shadow:0 2px 8px rgba(0,0,0,0.08);overflow:hidden;">
    <div style="background:linear-gradient(135deg,#1a237e 0%,#283593 100%);color:#fff;padding:20px 24px;">
      <h1 style="margin:0;font-size:20px;font-weight:600;">You're on the list</h1>
    </div>
    <div style="padding:24px;font-size:14px;color:#333;">
      <p>{greeting}</p>
      <p>Thanks for signing up. Your referral code is <strong>{user.referral_code}</strong>.</p>
      <p>Share this link: every friend who joins through it moves you up the line.</p>
      <p><a href="{share_link}">{share_link}</a></p>
    </div>
    <div style="background:#fafafa;padding:12px 24px;font-size:12px;color:#888;">
      This is an automated message. Do not reply to this email.
    </div>
  </div>
</body>
</html>
"""


def _build_text_body(user: User, share_link: str) -> str:
    return (
        "Thanks for signing up.\n\n"
        f"Your referral code is {user.referral_code}.\n"
        f"Share this link to move up the line: {share_link}\n"
    )


class EmailEnrollmentNotifier(EnrollmentNotifier):
    """Sends the enrollment email over SMTP with aiosmtplib"""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings if settings is not None else get_settings()

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.smtp_host and self.settings.smtp_user and self.settings.smtp_password)

    async def send_enrollment_notification(self, user: User) -> bool:
        """
        Send the welcome email to the user's primary address.

        Args:
            user: Newly created user (with ID and referral code)

        Returns:
            True if send succeeded, False otherwise. Logs errors; does not raise.
        """
        settings = self.settings
        if not settings.enrollment_email_enabled:
            logger.debug("[enrollment_email] Disabled, skip send for %s", user.id)
            return False

        if not self.is_configured:
            logger.warning("[enrollment_email] SMTP not configured. Set SMTP_HOST, SMTP_USER, SMTP_PASSWORD")
            return False

        to_email = user.primary_email
        if not to_email:
            logger.warning("[enrollment_email] User %s has no email address, skip send", user.id)
            return False

        share_link = build_share_link(settings.app_base_url, user.referral_code)

        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = "Welcome! Here is your referral link"
            msg["From"] = f"{settings.email_from_name} <{settings.email_from}>"
            msg["To"] = to_email
            msg.attach(MIMEText(_build_text_body(user, share_link), "plain", "utf-8"))
            msg.attach(MIMEText(_build_html_body(user, share_link), "html", "utf-8"))

            await aiosmtplib.send(
                msg,
                sender=settings.email_from,
                recipients=[to_email],
                hostname=settings.smtp_host,
                port=settings.smtp_port,
                username=settings.smtp_user,
                password=settings.smtp_password,
                use_tls=settings.smtp_use_tls,
            )
            logger.info("[enrollment_email] Enrollment email sent to %s | user_id=%s", to_email, user.id)
            return True
        except Exception as e:
            logger.exception("[enrollment_email] Failed to send enrollment email to %s: %s", to_email, e)
            return False
