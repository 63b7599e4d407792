"""
Bookings blueprint — /api/bookings

Public discovery-call booking and visitor self-cancellation.

Route Map:
  POST  /api/bookings              — Book a discovery call
  PATCH /api/bookings/cancel/<id>  — Cancel a booking (email must match)
"""

import logging

from flask import Blueprint

from app.extensions import db, form_limit, general_limit, limiter
from app.models.booking import Booking
from app.responses import (
    client_info,
    error_response,
    get_json_payload,
    not_found_response,
    success_response,
    validation_error_response,
)
from app.services import booking_service
from app.services.notification_service import confirm_user, notify_admin
from app.services.validation import SubmissionValidationError

bookings_bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")

logger = logging.getLogger(__name__)


@bookings_bp.route("", methods=["POST"])
@limiter.limit(form_limit)
def create_booking():
    """
    Book a discovery call.

    Expects: { name, email, date, time, timezone, callType, projectType,
               phone?, company?, additionalInfo? }
    Returns: 201 { success, message, data: { id, date, time, callType, meetingDetails } }
    """
    data = get_json_payload()

    try:
        booking = booking_service.create_booking(data, **client_info())
    except SubmissionValidationError as e:
        return validation_error_response(e.errors)
    db.session.commit()

    email_data = booking_service.notification_data(booking)
    notified = notify_admin("new_booking", email_data)
    confirmed = confirm_user("booking_confirmed", booking.email, email_data)

    logger.info(
        f"Booking {booking.id} created for {booking.email} on {booking.date} "
        f"(admin_email={notified}, confirmation={confirmed})"
    )

    return success_response(
        {
            "id": booking.id,
            "date": booking.date.isoformat(),
            "time": booking.time,
            "timezone": booking.timezone,
            "callType": booking.call_type,
            "meetingDetails": booking_service.meeting_details(booking),
        },
        message="Your discovery call has been scheduled!",
        status_code=201,
    )


@bookings_bp.route("/cancel/<booking_id>", methods=["PATCH"])
@limiter.limit(general_limit)
def cancel_booking(booking_id):
    """Cancel a booking. The caller proves ownership with the booking email."""
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        return not_found_response("Booking")

    data = get_json_payload()
    try:
        cancelled = booking_service.cancel_booking(booking, data.get("email"))
    except SubmissionValidationError as e:
        db.session.rollback()
        return validation_error_response(e.errors)
    except PermissionError as e:
        db.session.rollback()
        logger.warning(f"Rejected cancellation of booking {booking_id}: email mismatch")
        return error_response(str(e), 403)
    db.session.commit()

    if cancelled:
        email_data = booking_service.notification_data(booking)
        notify_admin("booking_cancelled", email_data)
        confirm_user("booking_cancellation", booking.email, email_data)
        logger.info(f"Booking {booking.id} cancelled by {booking.email}")
        message = "Your booking has been cancelled successfully."
    else:
        message = "This booking was already cancelled."
    return success_response(
        {"id": booking.id, "status": booking.status}, message=message,
    )
