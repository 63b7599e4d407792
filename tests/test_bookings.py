"""Tests for discovery call bookings — /api/bookings.

Covers:
- Booking creation with meeting details per call type
- Validation (required fields, callType, date)
- Visitor cancellation: email match (case-insensitive), mismatch 403, missing 400
- Time-of-day parsing used by the calendar and "today" views
"""

from datetime import time

import pytest

from app.extensions import db
from app.models.audit import AuditEvent
from app.models.booking import Booking, parse_time_of_day


class TestCreateBooking:

    def test_video_booking_created(self, client, booking_payload, sent_emails):
        resp = client.post("/api/bookings", json=booking_payload)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["message"] == "Your discovery call has been scheduled!"

        data = body["data"]
        assert data["date"] == booking_payload["date"]
        assert data["time"] == "10:30 AM"
        assert data["callType"] == "video"
        assert data["meetingDetails"]["link"] == "https://zoom.us/j/test"
        assert data["meetingDetails"]["phone"] is None
        assert "at 10:30 AM (Asia/Kolkata)" in data["meetingDetails"]["datetime"]

        booking = db.session.get(Booking, data["id"])
        assert booking.status == "scheduled"

    def test_phone_booking_gets_phone_number(self, client, booking_payload, sent_emails):
        booking_payload["callType"] = "phone"
        resp = client.post("/api/bookings", json=booking_payload)
        details = resp.get_json()["data"]["meetingDetails"]
        assert details["phone"] == "+911234567890"
        assert details["link"] is None

    def test_confirmation_emails_sent(self, client, booking_payload, sent_emails):
        client.post("/api/bookings", json=booking_payload)
        assert [m["To"] for m in sent_emails] == ["admin@veloria.test", "arjun@example.com"]
        assert sent_emails[0]["Subject"] == "New Discovery Call Booked - Arjun Mehta"

    def test_missing_fields(self, client):
        resp = client.post("/api/bookings", json={"name": "Arjun"})
        assert resp.status_code == 400
        errors = resp.get_json()["errors"]
        for field in ("email", "date", "time", "timezone", "callType", "projectType"):
            assert f"{field} is required" in errors
        assert Booking.query.count() == 0

    def test_invalid_call_type(self, client, booking_payload):
        booking_payload["callType"] = "carrier-pigeon"
        resp = client.post("/api/bookings", json=booking_payload)
        assert resp.status_code == 400
        assert "callType must be one of: video, phone" in resp.get_json()["errors"]

    def test_invalid_date(self, client, booking_payload):
        booking_payload["date"] = "next tuesday"
        resp = client.post("/api/bookings", json=booking_payload)
        assert resp.status_code == 400
        assert "Invalid date format" in resp.get_json()["errors"]

    @pytest.mark.parametrize("field, value", [
        ("name", 123),
        ("email", ["a@b.co"]),
        ("date", 20300115),
        ("callType", True),
    ])
    def test_non_string_field_rejected(self, client, booking_payload, field, value):
        booking_payload[field] = value
        resp = client.post("/api/bookings", json=booking_payload)
        assert resp.status_code == 400
        assert resp.get_json()["errors"] == [f"{field} must be a string"]
        assert Booking.query.count() == 0

    def test_iso_datetime_date_accepted(self, client, booking_payload, sent_emails):
        booking_payload["date"] = "2030-01-15T00:00:00.000Z"
        resp = client.post("/api/bookings", json=booking_payload)
        assert resp.status_code == 201
        assert resp.get_json()["data"]["date"] == "2030-01-15"


class TestCancelBooking:

    def test_cancel_with_matching_email(self, client, seed_data, sent_emails):
        resp = client.patch(
            f"/api/bookings/cancel/{seed_data['booking_id']}",
            json={"email": "  ARJUN@example.com "},
        )
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["message"] == "Your booking has been cancelled successfully."
        assert body["data"]["status"] == "cancelled"

        booking = db.session.get(Booking, seed_data["booking_id"])
        assert booking.status == "cancelled"

        event = AuditEvent.query.filter_by(action="booking.cancelled").first()
        assert event is not None
        assert event.actor == "public"

        subjects = [m["Subject"] for m in sent_emails]
        assert "Discovery Call Cancelled - Arjun Mehta" in subjects

    def test_cancel_with_wrong_email(self, client, seed_data):
        resp = client.patch(
            f"/api/bookings/cancel/{seed_data['booking_id']}",
            json={"email": "someone-else@example.com"},
        )
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Not authorized to cancel this booking"

        booking = db.session.get(Booking, seed_data["booking_id"])
        assert booking.status == "scheduled"

    def test_cancel_without_email(self, client, seed_data):
        resp = client.patch(f"/api/bookings/cancel/{seed_data['booking_id']}", json={})
        assert resp.status_code == 400
        assert "email is required" in resp.get_json()["errors"]

    def test_cancel_with_non_string_email(self, client, seed_data):
        resp = client.patch(
            f"/api/bookings/cancel/{seed_data['booking_id']}", json={"email": 123},
        )
        assert resp.status_code == 400
        assert resp.get_json()["errors"] == ["email must be a string"]

    def test_cancel_twice_notifies_once(self, client, seed_data, sent_emails):
        url = f"/api/bookings/cancel/{seed_data['booking_id']}"
        assert client.patch(url, json={"email": "arjun@example.com"}).status_code == 200
        sent = len(sent_emails)

        resp = client.patch(url, json={"email": "arjun@example.com"})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["message"] == "This booking was already cancelled."
        assert body["data"]["status"] == "cancelled"
        assert len(sent_emails) == sent
        assert AuditEvent.query.filter_by(action="booking.cancelled").count() == 1

    def test_cancel_unknown_booking(self, client):
        resp = client.patch("/api/bookings/cancel/does-not-exist", json={"email": "a@b.co"})
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Booking not found."


class TestTimeOfDay:

    def test_twelve_hour_clock(self):
        assert parse_time_of_day("10:30 AM") == time(10, 30)
        assert parse_time_of_day("2:00pm") == time(14, 0)
        assert parse_time_of_day("12:15 AM") == time(0, 15)

    def test_twenty_four_hour_clock(self):
        assert parse_time_of_day("14:00") == time(14, 0)
        assert parse_time_of_day("09:05:30") == time(9, 5, 30)

    def test_unparseable(self):
        assert parse_time_of_day("after lunch") is None
        assert parse_time_of_day("") is None
        assert parse_time_of_day(None) is None

    def test_unparseable_time_sorts_as_midnight(self, seed_data):
        booking = seed_data["booking"]
        booking.time = "sometime"
        assert booking.start_time == time(0, 0)
