"""Booking service — discovery call intake, visitor cancellation, admin edits,
calendar and "today" views.

Status changes are free-form: any valid status may follow any other.

Functions flush but do NOT commit — the caller commits.
"""

from datetime import date, timedelta

from flask import current_app
from sqlalchemy import or_

from app.extensions import db
from app.models.booking import Booking
from app.services import audit_service
from app.services.validation import (
    MAX_FIELD_LENGTH,
    SubmissionValidationError,
    check_choice,
    check_contact_fields,
    check_required,
    clean_payload,
    clean_text,
    parse_date,
)

REQUIRED_FIELDS = ["name", "email", "date", "time", "timezone", "callType", "projectType"]
OPTIONAL_FIELDS = ["phone", "company", "additionalInfo"]

# JSON field -> column
FIELD_MAP = {
    "name": "name",
    "email": "email",
    "phone": "phone",
    "company": "company",
    "date": "date",
    "time": "time",
    "timezone": "timezone",
    "callType": "call_type",
    "projectType": "project_type",
    "additionalInfo": "additional_info",
}


def validate_booking(data):
    """Return (column kwargs, errors) for a booking payload."""
    errors = []
    cleaned = clean_payload(data, REQUIRED_FIELDS + OPTIONAL_FIELDS, errors)
    check_required(cleaned, REQUIRED_FIELDS, errors)
    check_contact_fields(cleaned, errors)
    check_choice(cleaned, "callType", Booking.CALL_TYPES, errors)

    if isinstance(cleaned["additionalInfo"], str) and len(cleaned["additionalInfo"]) > MAX_FIELD_LENGTH:
        errors.append("additionalInfo is too long")

    if isinstance(cleaned["date"], str):
        try:
            cleaned["date"] = parse_date(cleaned["date"])
        except ValueError:
            errors.append("Invalid date format")

    fields = {FIELD_MAP[k]: v for k, v in cleaned.items()}
    return fields, errors


def create_booking(data, ip_address=None, user_agent=None, actor=None):
    """Validate and store a booking (status "scheduled").

    Args:
        data: Request payload with camelCase keys.
        actor: Admin username when entered from the admin panel, else None.

    Raises:
        SubmissionValidationError: With every validation problem found.
    """
    fields, errors = validate_booking(data)
    if errors:
        raise SubmissionValidationError(errors)

    booking = Booking(
        status="scheduled",
        ip_address=ip_address,
        user_agent=(user_agent or "")[:500] or None,
        **fields,
    )
    db.session.add(booking)
    db.session.flush()

    if actor:
        audit_service.record(actor, "booking.created", booking_id=booking.id)
    return booking


def meeting_details(booking):
    """Join details for the confirmation email and the public response."""
    return {
        "link": current_app.config.get("MEETING_LINK") if booking.call_type == "video" else None,
        "phone": current_app.config.get("MEETING_PHONE") if booking.call_type == "phone" else None,
        "datetime": booking.display_datetime,
    }


def cancel_booking(booking, email):
    """Visitor-initiated cancellation, authorised by the booking's email.

    Returns:
        True when the booking moved to "cancelled", False when it already was.

    Raises:
        SubmissionValidationError: If no email is supplied.
        PermissionError: If the email doesn't match the booking.
    """
    if email is not None and not isinstance(email, str):
        raise SubmissionValidationError(["email must be a string"])
    email = (email or "").strip()
    if not email:
        raise SubmissionValidationError(["email is required"])
    if email.lower() != (booking.email or "").strip().lower():
        raise PermissionError("Not authorized to cancel this booking")

    if booking.status == "cancelled":
        return False

    old_status = booking.status
    booking.status = "cancelled"
    db.session.flush()

    audit_service.record(
        "public", "booking.cancelled",
        booking_id=booking.id, old_status=old_status,
    )
    return True


def list_bookings(status=None, call_type=None, q=None):
    """All bookings sorted by date (soonest first)."""
    query = Booking.query

    if status:
        if status not in Booking.STATUSES:
            raise ValueError(
                f"Invalid status '{status}'. Must be one of: {', '.join(Booking.STATUSES)}"
            )
        query = query.filter_by(status=status)

    if call_type:
        if call_type not in Booking.CALL_TYPES:
            raise ValueError(
                f"Invalid callType '{call_type}'. Must be one of: {', '.join(Booking.CALL_TYPES)}"
            )
        query = query.filter_by(call_type=call_type)

    if q:
        pattern = f"%{q.strip()}%"
        query = query.filter(or_(
            Booking.name.ilike(pattern),
            Booking.email.ilike(pattern),
            Booking.company.ilike(pattern),
            Booking.project_type.ilike(pattern),
        ))

    return query.order_by(Booking.date.asc(), Booking.created_at.asc()).all()


def update_booking(booking, data, actor):
    """Apply an admin edit. Only keys present in data are touched.

    Editable: status, notes, meetingLink, date, time, timezone.

    Raises:
        ValueError: On an unknown status or unparseable date.
    """
    if "status" in data:
        new_status = clean_text(data.get("status"), "status") or ""
        if new_status not in Booking.STATUSES:
            raise ValueError(
                f"Invalid status '{new_status}'. Must be one of: {', '.join(Booking.STATUSES)}"
            )
        if new_status != booking.status:
            old_status = booking.status
            booking.status = new_status
            audit_service.record(
                actor, "booking.status_changed",
                booking_id=booking.id, old_status=old_status, new_status=new_status,
            )

    if "date" in data:
        new_date = parse_date(data.get("date"))
        if new_date is None:
            raise ValueError("date cannot be blank.")
        booking.date = new_date
    for key, column in (("time", "time"), ("timezone", "timezone")):
        if key in data:
            value = clean_text(data.get(key), key)
            if not value:
                raise ValueError(f"{key} cannot be blank.")
            setattr(booking, column, value)

    if "notes" in data:
        booking.notes = clean_text(data.get("notes"), "notes")
    if "meetingLink" in data:
        booking.meeting_link = clean_text(data.get("meetingLink"), "meetingLink")

    db.session.flush()

    edited = sorted(k for k in data if k in ("date", "time", "timezone", "notes", "meetingLink"))
    if edited:
        audit_service.record(actor, "booking.updated", booking_id=booking.id, fields=edited)
    return booking


def delete_booking(booking, actor):
    """Permanently remove a booking."""
    audit_service.record(
        actor, "booking.deleted", booking_id=booking.id, email=booking.email,
    )
    db.session.delete(booking)
    db.session.flush()


def calendar_events(start=None, end=None):
    """Bookings between two dates (inclusive) as one-hour calendar events.

    Args:
        start, end: date objects; either may be None for an open range.
    """
    query = Booking.query
    if start:
        query = query.filter(Booking.date >= start)
    if end:
        query = query.filter(Booking.date <= end)

    events = []
    for booking in query.order_by(Booking.date.asc()).all():
        starts_at = booking.starts_at
        icon = "📹" if booking.call_type == "video" else "📞"
        events.append({
            "id": booking.id,
            "title": f"{icon} {booking.name}: {booking.project_type}",
            "start": starts_at.isoformat(),
            "end": (starts_at + timedelta(hours=1)).isoformat(),
            "allDay": False,
            "type": "booking",
            "color": Booking.STATUS_DISPLAY[booking.status]["color"],
            "extendedProps": {
                "email": booking.email,
                "phone": booking.phone,
                "company": booking.company,
                "projectType": booking.project_type,
                "callType": booking.call_type,
                "status": booking.status,
            },
        })
    return events


def todays_bookings(today=None):
    """Today's bookings that aren't cancelled, earliest first."""
    today = today or date.today()
    bookings = (
        Booking.query
        .filter(Booking.date == today, Booking.status != "cancelled")
        .all()
    )
    return sorted(bookings, key=lambda b: b.start_time)


def notification_data(booking):
    """Template variables shared by the booking emails."""
    details = meeting_details(booking)
    return {
        "name": booking.name,
        "email": booking.email,
        "phone": booking.phone,
        "company": booking.company,
        "date": booking.date.isoformat(),
        "time": booking.time,
        "timezone": booking.timezone,
        "datetime": details["datetime"],
        "callType": booking.call_type,
        "projectType": booking.project_type,
        "additionalInfo": booking.additional_info,
        "meetingLink": booking.meeting_link or details["link"],
        "meetingPhone": details["phone"],
    }
