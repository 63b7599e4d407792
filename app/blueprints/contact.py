"""
Contact form blueprint — /api/contact

Stores the contact form submission, then notifies the studio and sends a
confirmation to the visitor. Email is best-effort: the submission is
saved and reported as a success even if both emails fail.
"""

import logging

from flask import Blueprint

from app.extensions import db, form_limit, limiter
from app.responses import (
    client_info,
    get_json_payload,
    success_response,
    validation_error_response,
)
from app.services import contact_service
from app.services.notification_service import confirm_user, notify_admin
from app.services.validation import SubmissionValidationError

contact_bp = Blueprint("contact", __name__, url_prefix="/api/contact")

logger = logging.getLogger(__name__)


@contact_bp.route("", methods=["POST"])
@limiter.limit(form_limit)
def submit_contact():
    """
    Accept a JSON contact form submission.

    Expects: { name, email, message, phone (optional), subject (optional) }
    Returns: 201 { success: true, message, data: { id } }
    """
    data = get_json_payload()

    try:
        contact = contact_service.submit_contact(data, **client_info())
    except SubmissionValidationError as e:
        return validation_error_response(e.errors)
    db.session.commit()

    email_data = {
        "name": contact.name,
        "email": contact.email,
        "phone": contact.phone,
        "subject": contact.subject,
        "message": contact.message,
    }
    notified = notify_admin("new_contact", email_data)
    confirmed = confirm_user("contact_received", contact.email, email_data)

    logger.info(
        f"Contact form submitted by {contact.name} <{contact.email}> "
        f"(id={contact.id}, admin_email={notified}, confirmation={confirmed})"
    )

    if notified:
        message = "Your message has been sent successfully!"
    else:
        message = (
            "Your message has been received and saved! "
            "(Email notifications are currently unavailable)"
        )
    return success_response({"id": contact.id}, message=message, status_code=201)
