"""Notification dispatcher.

Two entry points wrap the email service:

    notify_admin(kind, data)              — alert the studio inbox
    confirm_user(kind, recipient, data)   — confirmation to the visitor

Each kind maps to a subject line and an HTML template. Sends are a single
synchronous attempt; any failure (including template errors) is logged and
returned as False so the caller's write is never affected.
"""

import logging
from datetime import datetime, timezone

from flask import current_app

from app.services.email_service import send_email

logger = logging.getLogger(__name__)

ADMIN_NOTIFICATIONS = {
    "new_contact": (
        "New Contact Form Submission - {subject}",
        "emails/admin_new_contact.html",
    ),
    "new_booking": (
        "New Discovery Call Booked - {name}",
        "emails/admin_new_booking.html",
    ),
    "booking_cancelled": (
        "Discovery Call Cancelled - {name}",
        "emails/admin_booking_cancelled.html",
    ),
    "new_project": (
        "New Project Request - {projectName}",
        "emails/admin_new_project.html",
    ),
}

USER_CONFIRMATIONS = {
    "contact_received": (
        "We received your message — Veloria",
        "emails/contact_received.html",
    ),
    "booking_confirmed": (
        "Your discovery call is confirmed — Veloria",
        "emails/booking_confirmed.html",
    ),
    "booking_cancellation": (
        "Your discovery call has been cancelled — Veloria",
        "emails/booking_cancellation.html",
    ),
    "project_received": (
        "We received your project request — Veloria",
        "emails/project_received.html",
    ),
}


class _Missing(dict):
    """Format helper: unknown placeholders render as "N/A"."""

    def __missing__(self, key):
        return "N/A"


def _subject(template, data):
    values = _Missing({k: v for k, v in data.items() if v not in (None, "")})
    return template.format_map(values)


def _lookup(registry, kind):
    try:
        return registry[kind]
    except KeyError:
        raise ValueError(
            f"Unknown notification type '{kind}'. Must be one of: {', '.join(registry)}"
        )


def _dispatch(registry, kind, to, data, reply_to=None):
    subject_tpl, template = _lookup(registry, kind)
    context = dict(data)
    context.setdefault("year", datetime.now(timezone.utc).year)

    try:
        return send_email(
            to=to,
            subject=_subject(subject_tpl, data),
            template=template,
            context=context,
            reply_to=reply_to,
        )
    except Exception:
        logger.exception(f"Notification '{kind}' to {to} failed")
        return False


def notify_admin(kind, data):
    """Send an admin alert for a new or changed submission.

    Args:
        kind: One of ADMIN_NOTIFICATIONS.
        data: Template variables (the submission fields).

    Returns:
        True if the email was accepted for delivery.

    Raises:
        ValueError: If kind is unknown.
    """
    _lookup(ADMIN_NOTIFICATIONS, kind)
    to = current_app.config.get("MAIL_ADMIN_TO")
    if not to:
        logger.warning(f"Admin notification '{kind}' skipped — MAIL_ADMIN_TO not configured.")
        return False
    return _dispatch(ADMIN_NOTIFICATIONS, kind, to, data, reply_to=data.get("email"))


def confirm_user(kind, recipient, data):
    """Send a confirmation email to the person who submitted a form.

    Raises:
        ValueError: If kind is unknown.
    """
    return _dispatch(USER_CONFIRMATIONS, kind, recipient, data)
