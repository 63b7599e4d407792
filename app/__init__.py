import os
import logging
from datetime import date, datetime, timedelta, timezone

import click
from flask import Flask, request
from werkzeug.exceptions import HTTPException

from app.config import config_by_name
from app.extensions import db, migrate, login_manager, limiter, general_limit
from app.responses import error_response, success_response


def create_app(config_name=None):
    """Application factory."""

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # --- Validate required env vars (skip in testing) ---
    if config_name != "testing":
        try:
            config_by_name[config_name].validate()
        except RuntimeError as e:
            app.logger.warning(f"Config validation: {e}")

    # --- Init extensions ---
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    # --- Import models so Alembic can discover them ---
    with app.app_context():
        from app import models  # noqa: F401

    # --- Register blueprints ---
    from app.blueprints.contact import contact_bp
    from app.blueprints.bookings import bookings_bp
    from app.blueprints.projects import projects_bp
    from app.blueprints.admin import admin_bp

    app.register_blueprint(contact_bp)
    app.register_blueprint(bookings_bp)
    app.register_blueprint(projects_bp)
    app.register_blueprint(admin_bp)

    # --- Root + health ---
    @app.route("/")
    def index():
        return success_response({"name": "Veloria API", "health": "/api/health"})

    @app.route("/api/health")
    @limiter.limit(general_limit)
    def health():
        return success_response(
            status="ok",
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    register_error_handlers(app)

    # --- CLI commands ---
    register_cli(app)

    # --- Security + CORS headers ---
    @app.after_request
    def add_security_headers(response):
        """Add security headers to every response."""
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"
        # Control referrer information
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Strict Transport Security (only in production)
        if not app.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return _cors_headers(app, response)

    # --- Logging ---
    if not app.debug:
        logging.basicConfig(level=logging.INFO)

    return app


def _cors_headers(app, response):
    """Allow the public site and configured dev origins to call /api/*."""
    origin = request.headers.get("Origin")
    if not origin or not request.path.startswith("/api/"):
        return response
    if origin not in app.config.get("CORS_ORIGINS", []):
        return response

    response.headers["Access-Control-Allow-Origin"] = origin
    response.headers["Access-Control-Allow-Credentials"] = "true"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, PATCH, DELETE, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
    response.headers.add("Vary", "Origin")
    return response


def register_error_handlers(app):
    """JSON error envelopes. 500s never expose exception details."""

    def _http_error(e):
        return error_response(e.description, e.code)

    for code in (400, 403, 404, 405):
        app.register_error_handler(code, _http_error)

    @app.errorhandler(401)
    def unauthorized(e):
        response, status = error_response("Authentication required.", 401)
        response.headers["WWW-Authenticate"] = 'Basic realm="Veloria Admin"'
        return response, status

    @app.errorhandler(429)
    def rate_limited(e):
        return error_response(
            "Too many requests from this IP, please try again later.", 429
        )

    @app.errorhandler(500)
    def server_error(e):
        db.session.rollback()
        original = getattr(e, "original_exception", None)
        if original is not None and not isinstance(original, HTTPException):
            app.logger.error(f"Unhandled error on {request.path}: {original!r}")
        return error_response("Internal server error.", 500)


def register_cli(app):
    """Register custom CLI commands with the Flask app."""

    @app.cli.command("seed-demo")
    def seed_demo():
        """Create a demo contact, booking and project for local development.

        Usage:
            flask seed-demo
        """
        from app.services import booking_service, contact_service, project_service

        today = date.today()

        contact = contact_service.submit_contact({
            "name": "Asha Demo",
            "email": "asha@example.com",
            "phone": "+919876543210",
            "subject": "Website redesign",
            "message": "Hi, we'd like a quote for refreshing our bakery website.",
        })

        booking = booking_service.create_booking({
            "name": "Ravi Demo",
            "email": "ravi@example.com",
            "company": "Demo Foods",
            "date": (today + timedelta(days=3)).isoformat(),
            "time": "11:00 AM",
            "timezone": "Asia/Kolkata",
            "callType": "video",
            "projectType": "E-commerce",
        }, actor="seed")

        project = project_service.create_project({
            "serviceType": "ecommerce",
            "projectName": "Demo Foods Store",
            "projectDescription": "Online store for a regional snack brand.",
            "projectGoals": ["Sell online", "Grow brand awareness"],
            "budget": "50k-1L",
            "timeline": "standard",
            "companyName": "Demo Foods",
            "industry": "Food",
            "targetAudience": "Urban families",
            "name": "Ravi Demo",
            "email": "ravi@example.com",
            "status": "accepted",
            "projectValue": 80000,
            "startDate": today.isoformat(),
            "deadline": (today + timedelta(days=45)).isoformat(),
            "paymentSchedule": [
                {"name": "Advance 50%", "amount": 40000, "dueDate": today.isoformat(),
                 "status": "paid"},
                {"name": "Final 50%", "amount": 40000,
                 "dueDate": (today + timedelta(days=45)).isoformat()},
            ],
            "milestones": [
                {"name": "Design sign-off", "dueDate": (today + timedelta(days=10)).isoformat()},
                {"name": "Launch", "dueDate": (today + timedelta(days=45)).isoformat()},
            ],
        }, actor="seed")

        db.session.commit()

        click.echo("")
        click.echo("=" * 60)
        click.echo("Demo data created successfully!")
        click.echo("=" * 60)
        click.echo(f"  Contact:  {contact.name} (id: {contact.id})")
        click.echo(f"  Booking:  {booking.display_datetime} (id: {booking.id})")
        click.echo(f"  Project:  {project.project_name} (id: {project.id})")
        click.echo(f"            value {project.project_value:.0f}, received {project.received_payments:.0f}")
        click.echo("=" * 60)

    @app.cli.command("send-test-email")
    @click.option("--to", "recipient", required=True, help="Recipient address")
    def send_test_email(recipient):
        """Send a test email to verify SMTP settings.

        Usage:
            flask send-test-email --to you@example.com
        """
        from app.services.email_service import send_email

        sent = send_email(
            to=recipient,
            subject="Veloria SMTP test",
            template="emails/test_email.html",
            context={"year": datetime.now(timezone.utc).year},
        )
        if sent:
            click.echo(f"Test email sent to {recipient}")
        else:
            click.echo(f"ERROR: test email to {recipient} failed (see logs)")
            raise SystemExit(1)

    @app.cli.command("mark-overdue-payments")
    @click.option("--dry-run", is_flag=True, help="List overdue payments without changing them.")
    def mark_overdue_payments(dry_run):
        """Flip pending payments past their due date to "overdue".

        Usage:
            flask mark-overdue-payments
            flask mark-overdue-payments --dry-run
        """
        from app.services.project_service import mark_overdue_payments as _mark

        overdue = _mark(dry_run=dry_run)
        if not dry_run:
            db.session.commit()

        prefix = "[DRY RUN] " if dry_run else ""
        for payment in overdue:
            click.echo(
                f"  {prefix}{payment.project.project_name}: {payment.name} "
                f"{payment.amount:.2f} due {payment.due_date.isoformat()}"
            )
        click.echo(f"{prefix}{len(overdue)} payment(s) overdue.")
