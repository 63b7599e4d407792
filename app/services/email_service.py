"""
Email service for the Veloria API.

Uses SMTP (Zoho by default) to send transactional HTML emails rendered from
Jinja2 templates under templates/emails/. One synchronous attempt per call,
no retry, no queue. Failures are logged and reported as False, never raised,
so callers can treat email as best-effort.

Usage:
    from app.services.email_service import send_email

    sent = send_email(
        to="user@example.com",
        subject="Hello",
        template="emails/contact_received.html",
        context={"name": "Jane"},
    )
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from flask import current_app, render_template

logger = logging.getLogger(__name__)


def _send_smtp(app, msg):
    """Deliver a built message. Returns True on success."""
    host = app.config.get("MAIL_SMTP_HOST", "smtp.zoho.in")
    port = app.config.get("MAIL_SMTP_PORT", 587)
    username = app.config.get("MAIL_USERNAME")
    password = app.config.get("MAIL_PASSWORD")

    if not username or not password:
        logger.warning(
            f"Email not sent to {msg['To']} — MAIL_USERNAME or MAIL_PASSWORD not configured."
        )
        return False

    try:
        if app.config.get("MAIL_USE_SSL"):
            with smtplib.SMTP_SSL(host, port, timeout=30) as server:
                server.login(username, password)
                server.send_message(msg)
        else:
            with smtplib.SMTP(host, port, timeout=30) as server:
                server.ehlo()
                server.starttls()
                server.ehlo()
                server.login(username, password)
                server.send_message(msg)
        logger.info(f"Email sent to {msg['To']} — {msg['Subject']}")
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email to {msg['To']}: {e}")
        return False


def build_message(to, subject, html_body, reply_to=None):
    """Build the MIME message with the configured From header."""
    app = current_app._get_current_object()

    from_name = app.config.get("MAIL_FROM_NAME", "Veloria Team")
    from_email = app.config.get("MAIL_FROM_ADDRESS") or app.config.get("MAIL_USERNAME") or ""

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{from_name} <{from_email}>"
    msg["To"] = to if isinstance(to, str) else ", ".join(to)

    if reply_to:
        msg["Reply-To"] = reply_to

    msg.attach(MIMEText(html_body, "html"))
    return msg


def send_email(to, subject, template, context=None, reply_to=None):
    """
    Render and send a templated HTML email, blocking until done.

    Args:
        to:        Recipient email address (str or list).
        subject:   Email subject line.
        template:  Path to Jinja2 HTML template (relative to templates/).
        context:   Dict of variables to pass to the template.
        reply_to:  Optional reply-to address.

    Returns:
        True if the SMTP server accepted the message, False otherwise.
    """
    app = current_app._get_current_object()
    context = context or {}

    html_body = render_template(template, **context)
    msg = build_message(to, subject, html_body, reply_to=reply_to)

    return _send_smtp(app, msg)
