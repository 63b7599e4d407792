"""Audit event model.

Logs every admin mutation (status changes, edits, deletions, payment
updates) for the dashboard activity feed and debugging.
"""

import uuid

from app.extensions import db
from app.serializers import iso


class AuditEvent(db.Model):
    __tablename__ = "audit_events"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    actor = db.Column(
        db.String(255), nullable=True
    )  # admin username, or "public" for visitor actions
    action = db.Column(db.String(255), nullable=False)  # e.g. "booking.status_changed"
    metadata_ = db.Column(
        "metadata", db.JSON, default=dict
    )  # extra context, named metadata_ to avoid Python builtin clash
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    def to_dict(self):
        return {
            "id": self.id,
            "actor": self.actor,
            "action": self.action,
            "metadata": self.metadata_ or {},
            "createdAt": iso(self.created_at),
        }

    def __repr__(self):
        return f"<AuditEvent {self.action}>"
