"""Audit log helper.

Functions flush but do NOT commit — the caller commits.
"""

from app.extensions import db
from app.models.audit import AuditEvent


def record(actor, action, **metadata):
    """Add an AuditEvent for an action, e.g. record("admin", "contact.deleted", contact_id=...)."""
    event = AuditEvent(actor=actor, action=action, metadata_=metadata)
    db.session.add(event)
    db.session.flush()
    return event


def recent(limit=20):
    return (
        AuditEvent.query
        .order_by(AuditEvent.created_at.desc())
        .limit(limit)
        .all()
    )
