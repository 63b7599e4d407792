"""Shared test fixtures for the Veloria API test suite.

Provides:
- app: Flask app configured for testing (in-memory SQLite, rate limits off)
- client: Flask test client
- db_session: clean database per test (tables created/dropped)
- auth_headers / bad_auth_headers: HTTP Basic headers for the admin API
- sent_emails: captures outgoing email instead of talking to SMTP
- seed_data: one contact, one booking, one project with payments + milestones
"""

import base64
from datetime import date, timedelta

import pytest

from app import create_app
from app.extensions import db as _db
from app.models.booking import Booking
from app.models.contact import ContactSubmission
from app.models.project import Milestone, PaymentScheduleItem, Project


def basic_auth(username, password):
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture(scope="session")
def app():
    """Create the Flask application configured for testing."""
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def db_session(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield _db.session
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def auth_headers():
    """Valid admin credentials (see TestConfig)."""
    return basic_auth("admin", "admin123")


@pytest.fixture
def bad_auth_headers():
    return basic_auth("admin", "wrong-password")


@pytest.fixture
def make_auth():
    """Build Basic headers for arbitrary credentials."""
    return basic_auth


@pytest.fixture
def sent_emails(monkeypatch):
    """Record every message handed to SMTP and report success."""
    sent = []

    def fake_send(app, msg):
        sent.append(msg)
        return True

    monkeypatch.setattr("app.services.email_service._send_smtp", fake_send)
    return sent


@pytest.fixture
def contact_payload():
    return {
        "name": "Priya Sharma",
        "email": "priya@example.com",
        "phone": "+919812345678",
        "subject": "New website",
        "message": "We need a new website for our bakery.",
    }


@pytest.fixture
def booking_payload():
    return {
        "name": "Arjun Mehta",
        "email": "arjun@example.com",
        "phone": "+919800000001",
        "company": "Mehta Textiles",
        "date": (date.today() + timedelta(days=5)).isoformat(),
        "time": "10:30 AM",
        "timezone": "Asia/Kolkata",
        "callType": "video",
        "projectType": "E-commerce",
        "additionalInfo": "Looking to sell sarees online.",
    }


@pytest.fixture
def project_payload():
    return {
        "serviceType": "ecommerce",
        "projectName": "Mehta Online Store",
        "projectDescription": "An online store for handmade textiles.",
        "projectGoals": ["Sell online", "Reach new customers"],
        "budget": "50k-1L",
        "timeline": "standard",
        "companyName": "Mehta Textiles",
        "companyWebsite": "https://mehta.example.com",
        "industry": "Retail",
        "targetAudience": "Women aged 25-45",
        "name": "Arjun Mehta",
        "email": "arjun@example.com",
        "phone": "+919800000001",
    }


@pytest.fixture
def seed_data(app, db_session):
    """Seed one record of each kind.

    The project is accepted, worth 100000, with a paid 40000 advance and a
    pending 60000 final payment.
    """
    today = date.today()

    contact = ContactSubmission(
        name="Priya Sharma",
        email="priya@example.com",
        subject="New website",
        message="We need a new website.",
    )
    booking = Booking(
        name="Arjun Mehta",
        email="arjun@example.com",
        date=today,
        time="02:00 PM",
        timezone="Asia/Kolkata",
        call_type="phone",
        project_type="Portfolio",
    )
    project = Project(
        service_type="portfolio",
        project_name="Sharma Portfolio",
        project_description="Portfolio site for a photographer.",
        project_goals=["Showcase work"],
        budget="25k-50k",
        timeline="relaxed",
        company_name="Sharma Studio",
        industry="Photography",
        target_audience="Couples",
        name="Priya Sharma",
        email="priya@example.com",
        status="accepted",
        workflow_stage="design",
        project_value=100000,
        received_payments=40000,
        start_date=today,
        deadline=today + timedelta(days=30),
    )
    project.payments.append(PaymentScheduleItem(
        name="Advance", amount=40000, due_date=today - timedelta(days=10), status="paid",
    ))
    project.payments.append(PaymentScheduleItem(
        name="Final", amount=60000, due_date=today + timedelta(days=30), status="pending",
    ))
    project.milestones.append(Milestone(
        name="Design sign-off", due_date=today + timedelta(days=7),
    ))

    _db.session.add_all([contact, booking, project])
    _db.session.commit()

    return {
        "contact": contact,
        "contact_id": contact.id,
        "booking": booking,
        "booking_id": booking.id,
        "project": project,
        "project_id": project.id,
        "advance_id": project.payments[0].id,
        "final_id": project.payments[1].id,
        "milestone_id": project.milestones[0].id,
    }
