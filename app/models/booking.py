"""Booking model.

A discovery call booked through the public calendar (or entered by an
admin). Status is free-form: scheduled | completed | cancelled | rescheduled.
"""

import re
import uuid
from datetime import datetime, time as dt_time

from app.extensions import db
from app.serializers import iso


class Booking(db.Model):
    __tablename__ = "bookings"

    # -- Valid statuses --
    STATUSES = ["scheduled", "completed", "cancelled", "rescheduled"]

    # -- Valid call types --
    CALL_TYPES = ["video", "phone"]

    # -- Calendar colour + label for every status --
    STATUS_DISPLAY = {
        "scheduled": {"label": "Scheduled", "color": "#3498db"},
        "completed": {"label": "Completed", "color": "#2ecc71"},
        "cancelled": {"label": "Cancelled", "color": "#e74c3c"},
        "rescheduled": {"label": "Rescheduled", "color": "#f39c12"},
    }

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=True)
    company = db.Column(db.String(255), nullable=True)
    date = db.Column(db.Date, nullable=False, index=True)
    time = db.Column(db.String(20), nullable=False)  # "10:30 AM" or "14:00"
    timezone = db.Column(db.String(64), nullable=False)
    call_type = db.Column(db.String(10), nullable=False)  # video | phone
    project_type = db.Column(db.String(255), nullable=False)
    additional_info = db.Column(db.Text, nullable=True)
    status = db.Column(
        db.String(20), default="scheduled", nullable=False, index=True
    )
    meeting_link = db.Column(db.String(500), nullable=True)
    notes = db.Column(db.Text, nullable=True)
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

    @property
    def start_time(self):
        """Parse the display time into a time object (midnight if unparseable)."""
        return parse_time_of_day(self.time) or dt_time(0, 0)

    @property
    def starts_at(self):
        return datetime.combine(self.date, self.start_time)

    @property
    def display_datetime(self):
        """e.g. "Mon Mar 03 2025 at 10:30 AM (Asia/Kolkata)"."""
        return f"{self.date.strftime('%a %b %d %Y')} at {self.time} ({self.timezone})"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "company": self.company,
            "date": iso(self.date),
            "time": self.time,
            "timezone": self.timezone,
            "callType": self.call_type,
            "projectType": self.project_type,
            "additionalInfo": self.additional_info,
            "status": self.status,
            "meetingLink": self.meeting_link,
            "notes": self.notes,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Booking {self.email} {self.date} {self.time} ({self.status})>"


_TIME_FORMATS = ("%I:%M %p", "%I:%M%p", "%H:%M", "%H:%M:%S")
_WS_RE = re.compile(r"\s+")


def parse_time_of_day(value):
    """Parse "10:30 AM", "2:00pm" or "14:00". Returns None when it can't."""
    if not value:
        return None
    cleaned = _WS_RE.sub(" ", value.strip()).upper()
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).time()
        except ValueError:
            continue
    return None
