"""Outbound email for account, message, and moderation notifications."""

from __future__ import annotations

import hashlib
import logging
from email.message import EmailMessage
from html import escape

import aiosmtplib

from app.obs import metrics as obs_metrics
from app.settings import settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(RuntimeError):
    """Raised when SMTP rejects or cannot deliver a message."""


def mask_email(email: str) -> str:
    masked = hashlib.sha256(email.lower().encode("utf-8")).hexdigest()
    return masked[:12]


async def _send_email(to_email: str, subject: str, body_html: str, *, kind: str) -> None:
    """Send an email using configured SMTP settings.

    Raises EmailDeliveryError on failure; callers running in the background
    decide whether to swallow it.
    """
    if not settings.smtp_host:
        logger.warning("SMTP not configured, skipping %s email to %s", kind, mask_email(to_email))
        obs_metrics.inc_email(kind, "skipped")
        return

    msg = EmailMessage()
    msg["From"] = settings.smtp_from_email
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body_html, subtype="html")

    # STARTTLS on 587, implicit TLS on 465.
    start_tls = bool(settings.smtp_tls) and int(settings.smtp_port) == 587
    use_tls = bool(settings.smtp_tls) and int(settings.smtp_port) == 465
    try:
        await aiosmtplib.send(
            msg,
            hostname=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            start_tls=start_tls,
            use_tls=use_tls,
        )
    except (aiosmtplib.SMTPException, OSError) as exc:
        obs_metrics.inc_email(kind, "failed")
        raise EmailDeliveryError(str(exc)) from exc
    obs_metrics.inc_email(kind, "sent")
    logger.info("Email sent", extra={"kind": kind, "recipient": mask_email(to_email)})


async def send_quietly(coro) -> None:
    """Await a send coroutine from a background task, logging instead of raising."""
    try:
        await coro
    except EmailDeliveryError as exc:
        logger.error("Background email failed: %s", exc)


async def send_password_reset(email: str, link: str) -> None:
    subject = "Reset your FemConnect password"
    body = f"""
    <html>
        <body>
            <p>Hello,</p>
            <p>You requested a password reset. The link below is valid for {settings.password_reset_ttl_minutes} minutes:</p>
            <p><a href="{escape(link)}">Reset Password</a></p>
            <p>If you did not request this, please ignore this email.</p>
        </body>
    </html>
    """
    await _send_email(email, subject, body, kind="password_reset")


async def send_new_message_notification(to_email: str, recipient_name: str, sender_name: str, preview: str) -> None:
    subject = f"New message from {sender_name} on FemConnect"
    snippet = preview if len(preview) <= 140 else preview[:137] + "..."
    body = f"""
    <html>
        <body>
            <p>Hi {escape(recipient_name)},</p>
            <p><strong>{escape(sender_name)}</strong> sent you a message:</p>
            <blockquote>{escape(snippet)}</blockquote>
            <p><a href="{settings.public_base_url}/messages">Open your inbox</a></p>
            <p style="color: #666; font-size: 13px;">You can turn these emails off in your profile settings.</p>
        </body>
    </html>
    """
    await _send_email(to_email, subject, body, kind="new_message")


async def send_profile_picture_reminder(to_email: str, username: str) -> None:
    subject = "Add a profile picture to your FemConnect account"
    body = f"""
    <html>
        <body>
            <p>Hi {escape(username)},</p>
            <p>Profiles with a picture get far more replies. Take a minute to add one:</p>
            <p><a href="{settings.public_base_url}/profile">Update your profile</a></p>
        </body>
    </html>
    """
    await _send_email(to_email, subject, body, kind="profile_pic_reminder")


async def send_report_notification(
    to_email: str,
    *,
    reporter_name: str,
    reason: str,
    reported_name: str | None,
    details: str | None,
) -> None:
    subject = f"New report filed: {reason}"
    target = escape(reported_name) if reported_name else "a message"
    extra = f"<p>Details: {escape(details)}</p>" if details else ""
    body = f"""
    <html>
        <body>
            <p><strong>{escape(reporter_name)}</strong> reported {target} for <strong>{escape(reason)}</strong>.</p>
            {extra}
            <p><a href="{settings.public_base_url}/admin">Review reports</a></p>
        </body>
    </html>
    """
    await _send_email(to_email, subject, body, kind="report")
