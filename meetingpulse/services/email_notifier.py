# meetingpulse/services/email_notifier.py
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from meetingpulse.core.config import get_settings
from meetingpulse.schemas.auth import IssuedMagicLink

logger = logging.getLogger(__name__)


def build_magic_link_email_body(issued: IssuedMagicLink, app_name: str) -> str:
    """
    Plain-text body for the sign-in email.
    """
    lines = [
        f"Sign in to {app_name}",
        "",
        "Click the link below to sign in. It can be used once and expires at "
        f"{issued.expires.strftime('%Y-%m-%d %H:%M UTC')}.",
        "",
        issued.link,
        "",
        "If you did not request this email you can safely ignore it.",
        "",
        app_name,
    ]
    return "\n".join(lines)


def send_magic_link_email(issued: IssuedMagicLink, subject: str | None = None) -> bool:
    """
    Deliver the magic link via SMTP.

    Returns
    -------
    bool
        True if the message was handed to the SMTP server.
        False if email sending is not configured or fails. In development
        environments the link is logged instead so sign-in still works.
    """
    settings = get_settings()

    if not settings.SMTP_HOST or not settings.SMTP_FROM_ADDRESS:
        if settings.is_development:
            logger.info("Magic link for %s: %s", issued.email, issued.link)
        else:
            logger.warning("SMTP not configured; magic link for %s not sent", issued.email)
        return False

    if subject is None:
        subject = f"[{settings.APP_NAME}] Your sign-in link"

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.SMTP_FROM_ADDRESS
    msg["To"] = issued.email
    msg.set_content(build_magic_link_email_body(issued, settings.APP_NAME))

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as smtp:
            if settings.SMTP_USE_TLS:
                smtp.starttls()
            if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            smtp.send_message(msg)
        return True
    except (smtplib.SMTPException, OSError):
        # The sign-in request still succeeds; the user can ask for a new link.
        logger.exception("Failed to send magic link email to %s", issued.email)
        return False
