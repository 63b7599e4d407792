"""Contact submissions: public intake, listing and admin edits.

Functions flush but do NOT commit — the caller commits.
"""

from sqlalchemy import or_

from app.extensions import db
from app.models.contact import ContactSubmission
from app.services import audit_service
from app.services.validation import (
    MAX_MESSAGE_LENGTH,
    SubmissionValidationError,
    check_contact_fields,
    check_required,
    clean_payload,
    clean_text,
)

REQUIRED_FIELDS = ["name", "email", "message"]
OPTIONAL_FIELDS = ["phone", "subject"]


def validate_contact(data):
    """Return (cleaned, errors) for a contact form payload."""
    errors = []
    cleaned = clean_payload(data, REQUIRED_FIELDS + OPTIONAL_FIELDS, errors)
    check_required(cleaned, REQUIRED_FIELDS, errors)
    check_contact_fields(cleaned, errors)
    if isinstance(cleaned["message"], str) and len(cleaned["message"]) > MAX_MESSAGE_LENGTH:
        errors.append("message is too long")
    return cleaned, errors


def submit_contact(data, ip_address=None, user_agent=None):
    """Validate and store a public contact form submission.

    Returns:
        The created ContactSubmission (status "new").

    Raises:
        SubmissionValidationError: With every validation problem found.
    """
    cleaned, errors = validate_contact(data)
    if errors:
        raise SubmissionValidationError(errors)

    contact = ContactSubmission(
        status="new",
        ip_address=ip_address,
        user_agent=(user_agent or "")[:500] or None,
        **cleaned,
    )
    db.session.add(contact)
    db.session.flush()
    return contact


def list_contacts(status=None, q=None, sort="newest"):
    """All contacts, optionally filtered by status and free-text search."""
    query = ContactSubmission.query

    if status:
        if status not in ContactSubmission.STATUSES:
            raise ValueError(
                f"Invalid status '{status}'. Must be one of: {', '.join(ContactSubmission.STATUSES)}"
            )
        query = query.filter_by(status=status)

    if q:
        pattern = f"%{q.strip()}%"
        query = query.filter(or_(
            ContactSubmission.name.ilike(pattern),
            ContactSubmission.email.ilike(pattern),
            ContactSubmission.subject.ilike(pattern),
            ContactSubmission.message.ilike(pattern),
        ))

    order = ContactSubmission.created_at.asc() if sort == "oldest" else ContactSubmission.created_at.desc()
    return query.order_by(order).all()


def update_contact(contact, data, actor):
    """Apply an admin edit (status and/or notes). Only submitted keys change.

    Raises:
        ValueError: If status is not one of ContactSubmission.STATUSES.
    """
    if "status" in data:
        new_status = clean_text(data.get("status"), "status") or ""
        if new_status not in ContactSubmission.STATUSES:
            raise ValueError(
                f"Invalid status '{new_status}'. Must be one of: {', '.join(ContactSubmission.STATUSES)}"
            )
        if new_status != contact.status:
            old_status = contact.status
            contact.status = new_status
            audit_service.record(
                actor, "contact.status_changed",
                contact_id=contact.id, old_status=old_status, new_status=new_status,
            )

    if "notes" in data:
        contact.notes = clean_text(data.get("notes"), "notes")
        audit_service.record(actor, "contact.notes_updated", contact_id=contact.id)

    db.session.flush()
    return contact


def delete_contact(contact, actor):
    """Permanently remove a contact submission."""
    audit_service.record(
        actor, "contact.deleted", contact_id=contact.id, email=contact.email,
    )
    db.session.delete(contact)
    db.session.flush()
