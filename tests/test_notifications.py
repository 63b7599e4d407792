"""Tests for the notification dispatcher and SMTP email service."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from app.services import email_service
from app.services.notification_service import (
    ADMIN_NOTIFICATIONS,
    USER_CONFIRMATIONS,
    confirm_user,
    notify_admin,
)


def html_of(msg):
    return msg.get_payload()[0].get_payload(decode=True).decode()


BOOKING_DATA = {
    "name": "Arjun Mehta",
    "email": "arjun@example.com",
    "phone": "+919800000001",
    "company": "Mehta Textiles",
    "datetime": "Mon Mar 03 2025 at 10:30 AM (Asia/Kolkata)",
    "callType": "video",
    "projectType": "E-commerce",
    "additionalInfo": None,
    "meetingLink": "https://zoom.us/j/test",
    "meetingPhone": None,
}


class TestDispatcher:

    def test_unknown_admin_kind_raises(self, app):
        with pytest.raises(ValueError):
            notify_admin("birthday", {"name": "x"})

    def test_unknown_confirmation_kind_raises(self, app):
        with pytest.raises(ValueError):
            confirm_user("birthday", "x@example.com", {})

    def test_every_kind_renders(self, app, sent_emails):
        """Each registered template renders with sparse data."""
        for kind in ADMIN_NOTIFICATIONS:
            assert notify_admin(kind, {"name": "Sam", "email": "sam@example.com"}) is True
        for kind in USER_CONFIRMATIONS:
            assert confirm_user(kind, "sam@example.com", {"name": "Sam"}) is True
        assert len(sent_emails) == len(ADMIN_NOTIFICATIONS) + len(USER_CONFIRMATIONS)

    def test_booking_confirmation_contains_link(self, app, sent_emails):
        confirm_user("booking_confirmed", "arjun@example.com", BOOKING_DATA)
        body = html_of(sent_emails[0])
        assert "https://zoom.us/j/test" in body
        assert "Mon Mar 03 2025 at 10:30 AM (Asia/Kolkata)" in body

    def test_admin_alert_lists_goals(self, app, sent_emails):
        notify_admin("new_project", {
            "projectName": "Store",
            "projectGoals": ["Sell online", "Grow"],
            "email": "a@example.com",
        })
        body = html_of(sent_emails[0])
        assert "<li>Sell online</li>" in body
        assert sent_emails[0]["Subject"] == "New Project Request - Store"

    def test_admin_alert_skipped_without_recipient(self, app, sent_emails, monkeypatch):
        monkeypatch.setitem(app.config, "MAIL_ADMIN_TO", None)
        assert notify_admin("new_contact", {"name": "x"}) is False
        assert sent_emails == []

    def test_unknown_admin_kind_raises_without_recipient(self, app, monkeypatch):
        monkeypatch.setitem(app.config, "MAIL_ADMIN_TO", None)
        with pytest.raises(ValueError):
            notify_admin("birthday", {"name": "x"})

    def test_template_error_returns_false(self, app, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("template blew up")

        monkeypatch.setattr("app.services.notification_service.send_email", broken)
        assert notify_admin("new_booking", BOOKING_DATA) is False


class TestEmailService:

    def test_missing_credentials_returns_false(self, app):
        with patch("smtplib.SMTP") as smtp:
            sent = email_service.send_email(
                "x@example.com", "Hi", "emails/test_email.html", {"year": 2025},
            )
        assert sent is False
        smtp.assert_not_called()

    def test_starttls_delivery(self, app, monkeypatch):
        monkeypatch.setitem(app.config, "MAIL_USERNAME", "bot@veloria.test")
        monkeypatch.setitem(app.config, "MAIL_PASSWORD", "secret")

        with patch("smtplib.SMTP") as smtp:
            server = MagicMock()
            smtp.return_value.__enter__.return_value = server
            sent = email_service.send_email(
                "x@example.com", "Hi", "emails/test_email.html", {"year": 2025},
                reply_to="reply@example.com",
            )

        assert sent is True
        smtp.assert_called_once_with("smtp.zoho.in", 587, timeout=30)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("bot@veloria.test", "secret")
        msg = server.send_message.call_args[0][0]
        assert msg["From"] == "Veloria Team <hello@veloria.test>"
        assert msg["Reply-To"] == "reply@example.com"

    def test_ssl_delivery(self, app, monkeypatch):
        monkeypatch.setitem(app.config, "MAIL_USERNAME", "bot@veloria.test")
        monkeypatch.setitem(app.config, "MAIL_PASSWORD", "secret")
        monkeypatch.setitem(app.config, "MAIL_USE_SSL", True)
        monkeypatch.setitem(app.config, "MAIL_SMTP_PORT", 465)

        with patch("smtplib.SMTP_SSL") as smtp_ssl:
            server = MagicMock()
            smtp_ssl.return_value.__enter__.return_value = server
            assert email_service.send_email(
                "x@example.com", "Hi", "emails/test_email.html", {"year": 2025},
            ) is True

        smtp_ssl.assert_called_once_with("smtp.zoho.in", 465, timeout=30)
        server.starttls.assert_not_called()

    def test_smtp_error_returns_false(self, app, monkeypatch):
        monkeypatch.setitem(app.config, "MAIL_USERNAME", "bot@veloria.test")
        monkeypatch.setitem(app.config, "MAIL_PASSWORD", "secret")

        with patch("smtplib.SMTP") as smtp:
            server = MagicMock()
            server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad creds")
            smtp.return_value.__enter__.return_value = server
            sent = email_service.send_email(
                "x@example.com", "Hi", "emails/test_email.html", {"year": 2025},
            )
        assert sent is False
