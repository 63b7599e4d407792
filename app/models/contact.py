"""ContactSubmission model.

Created by the public contact form. Admins move it through
new -> read -> replied -> archived (free-form, no enforced order).
"""

import uuid

from app.extensions import db
from app.serializers import iso


class ContactSubmission(db.Model):
    __tablename__ = "contacts"

    # -- Valid statuses --
    STATUSES = ["new", "read", "replied", "archived"]

    # -- Admin UI badge for every status --
    STATUS_DISPLAY = {
        "new": {"label": "New", "color": "#3498db"},
        "read": {"label": "Read", "color": "#95a5a6"},
        "replied": {"label": "Replied", "color": "#2ecc71"},
        "archived": {"label": "Archived", "color": "#7f8c8d"},
    }

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=True)
    subject = db.Column(db.String(255), nullable=True)
    message = db.Column(db.Text, nullable=False)
    status = db.Column(
        db.String(20), default="new", nullable=False, index=True
    )  # new | read | replied | archived
    notes = db.Column(db.Text, nullable=True)  # admin-only
    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(500), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "subject": self.subject,
            "message": self.message,
            "status": self.status,
            "notes": self.notes,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }

    def __repr__(self):
        return f"<ContactSubmission {self.email} ({self.status})>"
