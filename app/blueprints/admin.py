"""Admin blueprint — /api/admin/*

JSON API behind the admin panel: submissions CRUD, project pipeline,
payment schedule, milestones, stats and finance. All routes protected by
@admin_required (HTTP Basic, checked per request).

Route Map:
  GET    /api/admin/session                            — Credential check
  GET    /api/admin/dashboard                          — Counts + recent items
  GET    /api/admin/contacts                           — List (status, q, sort)
  GET    /api/admin/contacts/<id>                      — Detail
  PATCH  /api/admin/contacts/<id>                      — Update status / notes
  DELETE /api/admin/contacts/<id>                      — Delete
  GET    /api/admin/bookings                           — List (status, callType, q)
  POST   /api/admin/bookings                           — Create booking
  GET    /api/admin/bookings/calendar                  — Calendar events (start, end)
  GET    /api/admin/bookings/today                     — Today's bookings
  GET    /api/admin/bookings/<id>                      — Detail
  PATCH  /api/admin/bookings/<id>                      — Update
  DELETE /api/admin/bookings/<id>                      — Delete
  GET    /api/admin/projects                           — List (status, serviceType, workflowStage, q)
  POST   /api/admin/projects                           — Create project
  GET    /api/admin/projects/stats                     — Pipeline aggregation
  GET    /api/admin/projects/calendar                  — Project calendar events
  GET    /api/admin/projects/<id>                      — Detail
  PATCH  /api/admin/projects/<id>                      — Update
  PATCH  /api/admin/projects/<id>/workflow             — Change workflow stage
  DELETE /api/admin/projects/<id>                      — Delete
  POST   /api/admin/projects/<id>/payments             — Add payment
  PATCH  /api/admin/projects/<id>/payments/<pid>       — Update payment
  DELETE /api/admin/projects/<id>/payments/<pid>       — Delete payment
  POST   /api/admin/projects/<id>/milestones           — Add milestone
  PATCH  /api/admin/projects/<id>/milestones/<mid>     — Update milestone
  DELETE /api/admin/projects/<id>/milestones/<mid>     — Delete milestone
  GET    /api/admin/finance/overview                   — Finance overview
"""

import logging
from functools import partial

from flask import Blueprint, request
from flask_login import current_user

from app.decorators import admin_required
from app.extensions import db, general_limit, limiter
from app.models.booking import Booking
from app.models.contact import ContactSubmission
from app.models.project import Milestone, PaymentScheduleItem, Project
from app.responses import (
    error_response,
    get_json_payload,
    not_found_response,
    success_response,
    validation_error_response,
)
from app.services import (
    booking_service,
    contact_service,
    pipeline_service,
    project_service,
)
from app.services.validation import SubmissionValidationError, parse_date

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")
limiter.limit(general_limit)(admin_bp)

logger = logging.getLogger(__name__)


def _actor():
    return current_user.username


def _list_response(items):
    return success_response([item.to_dict() for item in items], count=len(items))


def _date_range():
    """Parse ?start=&end= query params. Raises ValueError on bad dates."""
    return parse_date(request.args.get("start")), parse_date(request.args.get("end"))


def _commit_or_error(fn, *args):
    """Run a service mutation; commit on success, roll back on bad input.

    Returns (result, error_response_or_None).
    """
    try:
        result = fn(*args)
    except SubmissionValidationError as e:
        db.session.rollback()
        return None, validation_error_response(e.errors)
    except ValueError as e:
        db.session.rollback()
        return None, error_response(str(e), 400)
    db.session.commit()
    return result, None


# ══════════════════════════════════════════════
#  SESSION + DASHBOARD
# ══════════════════════════════════════════════

@admin_bp.route("/session")
@admin_required
def session_check():
    """Lets the admin login screen verify credentials without side effects."""
    return success_response({"username": current_user.username})


@admin_bp.route("/dashboard")
@admin_required
def dashboard():
    return success_response(pipeline_service.dashboard_summary())


# ══════════════════════════════════════════════
#  CONTACTS
# ══════════════════════════════════════════════

@admin_bp.route("/contacts")
@admin_required
def contact_list():
    try:
        contacts = contact_service.list_contacts(
            status=request.args.get("status"),
            q=request.args.get("q"),
            sort=request.args.get("sort", "newest"),
        )
    except ValueError as e:
        return error_response(str(e), 400)
    return _list_response(contacts)


@admin_bp.route("/contacts/<contact_id>")
@admin_required
def contact_detail(contact_id):
    contact = db.session.get(ContactSubmission, contact_id)
    if contact is None:
        return not_found_response("Contact")
    return success_response(contact.to_dict())


@admin_bp.route("/contacts/<contact_id>", methods=["PATCH"])
@admin_required
def contact_update(contact_id):
    contact = db.session.get(ContactSubmission, contact_id)
    if contact is None:
        return not_found_response("Contact")

    contact, err = _commit_or_error(
        contact_service.update_contact, contact, get_json_payload(), _actor()
    )
    if err:
        return err
    return success_response(contact.to_dict())


@admin_bp.route("/contacts/<contact_id>", methods=["DELETE"])
@admin_required
def contact_delete(contact_id):
    contact = db.session.get(ContactSubmission, contact_id)
    if contact is None:
        return not_found_response("Contact")

    contact_service.delete_contact(contact, _actor())
    db.session.commit()
    logger.info(f"Contact {contact_id} deleted by {_actor()}")
    return success_response(message="Contact deleted successfully")


# ══════════════════════════════════════════════
#  BOOKINGS
# ══════════════════════════════════════════════

@admin_bp.route("/bookings")
@admin_required
def booking_list():
    try:
        bookings = booking_service.list_bookings(
            status=request.args.get("status"),
            call_type=request.args.get("callType"),
            q=request.args.get("q"),
        )
    except ValueError as e:
        return error_response(str(e), 400)
    return _list_response(bookings)


@admin_bp.route("/bookings", methods=["POST"])
@admin_required
def booking_create():
    """Admin-entered booking (e.g. a call arranged by phone). No emails sent."""
    booking, err = _commit_or_error(
        partial(booking_service.create_booking, actor=_actor()),
        get_json_payload(),
    )
    if err:
        return err
    return success_response(booking.to_dict(), message="Booking created.", status_code=201)


@admin_bp.route("/bookings/calendar")
@admin_required
def booking_calendar():
    try:
        start, end = _date_range()
    except ValueError as e:
        return error_response(str(e), 400)
    return success_response(booking_service.calendar_events(start, end))


@admin_bp.route("/bookings/today")
@admin_required
def booking_today():
    return _list_response(booking_service.todays_bookings())


@admin_bp.route("/bookings/<booking_id>")
@admin_required
def booking_detail(booking_id):
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        return not_found_response("Booking")
    return success_response(booking.to_dict())


@admin_bp.route("/bookings/<booking_id>", methods=["PATCH"])
@admin_required
def booking_update(booking_id):
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        return not_found_response("Booking")

    booking, err = _commit_or_error(
        booking_service.update_booking, booking, get_json_payload(), _actor()
    )
    if err:
        return err
    return success_response(booking.to_dict())


@admin_bp.route("/bookings/<booking_id>", methods=["DELETE"])
@admin_required
def booking_delete(booking_id):
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        return not_found_response("Booking")

    booking_service.delete_booking(booking, _actor())
    db.session.commit()
    logger.info(f"Booking {booking_id} deleted by {_actor()}")
    return success_response(message="Booking deleted successfully")


# ══════════════════════════════════════════════
#  PROJECTS
# ══════════════════════════════════════════════

def _get_project_or_404(project_id):
    project = db.session.get(Project, project_id)
    if project is None:
        return None, not_found_response("Project")
    return project, None


@admin_bp.route("/projects")
@admin_required
def project_list():
    try:
        projects = project_service.list_projects(
            status=request.args.get("status"),
            service_type=request.args.get("serviceType"),
            workflow_stage=request.args.get("workflowStage"),
            q=request.args.get("q"),
        )
    except ValueError as e:
        return error_response(str(e), 400)
    return _list_response(projects)


@admin_bp.route("/projects", methods=["POST"])
@admin_required
def project_create():
    project, err = _commit_or_error(
        project_service.create_project, get_json_payload(), _actor()
    )
    if err:
        return err
    return success_response(project.to_dict(), message="Project created.", status_code=201)


@admin_bp.route("/projects/stats")
@admin_required
def project_stats():
    return success_response(pipeline_service.project_stats())


@admin_bp.route("/projects/calendar")
@admin_required
def project_calendar():
    try:
        start, end = _date_range()
    except ValueError as e:
        return error_response(str(e), 400)
    return success_response(project_service.calendar_events(start, end))


@admin_bp.route("/projects/<project_id>")
@admin_required
def project_detail(project_id):
    project, err = _get_project_or_404(project_id)
    if err:
        return err
    return success_response(project.to_dict())


@admin_bp.route("/projects/<project_id>", methods=["PATCH"])
@admin_required
def project_update(project_id):
    project, err = _get_project_or_404(project_id)
    if err:
        return err

    project, err = _commit_or_error(
        project_service.update_project, project, get_json_payload(), _actor()
    )
    if err:
        return err
    return success_response(project.to_dict())


@admin_bp.route("/projects/<project_id>/workflow", methods=["PATCH"])
@admin_required
def project_workflow(project_id):
    project, err = _get_project_or_404(project_id)
    if err:
        return err

    project, err = _commit_or_error(
        project_service.set_workflow_stage,
        project, get_json_payload().get("workflowStage"), _actor(),
    )
    if err:
        return err
    return success_response(project.to_dict())


@admin_bp.route("/projects/<project_id>", methods=["DELETE"])
@admin_required
def project_delete(project_id):
    project, err = _get_project_or_404(project_id)
    if err:
        return err

    project_service.delete_project(project, _actor())
    db.session.commit()
    logger.info(f"Project {project_id} deleted by {_actor()}")
    return success_response(message="Project deleted successfully")


# --- Payment schedule ---

def _get_payment(project, payment_id):
    payment = db.session.get(PaymentScheduleItem, payment_id)
    if payment is None or payment.project_id != project.id:
        return None
    return payment


@admin_bp.route("/projects/<project_id>/payments", methods=["POST"])
@admin_required
def payment_add(project_id):
    project, err = _get_project_or_404(project_id)
    if err:
        return err

    _, err = _commit_or_error(
        project_service.add_payment, project, get_json_payload(), _actor()
    )
    if err:
        return err
    return success_response(project.to_dict(), status_code=201)


@admin_bp.route("/projects/<project_id>/payments/<payment_id>", methods=["PATCH"])
@admin_required
def payment_update(project_id, payment_id):
    project, err = _get_project_or_404(project_id)
    if err:
        return err
    payment = _get_payment(project, payment_id)
    if payment is None:
        return not_found_response("Payment")

    _, err = _commit_or_error(
        project_service.update_payment, project, payment, get_json_payload(), _actor()
    )
    if err:
        return err
    return success_response(project.to_dict())


@admin_bp.route("/projects/<project_id>/payments/<payment_id>", methods=["DELETE"])
@admin_required
def payment_delete(project_id, payment_id):
    project, err = _get_project_or_404(project_id)
    if err:
        return err
    payment = _get_payment(project, payment_id)
    if payment is None:
        return not_found_response("Payment")

    project_service.delete_payment(project, payment, _actor())
    db.session.commit()
    return success_response(project.to_dict())


# --- Milestones ---

def _get_milestone(project, milestone_id):
    milestone = db.session.get(Milestone, milestone_id)
    if milestone is None or milestone.project_id != project.id:
        return None
    return milestone


@admin_bp.route("/projects/<project_id>/milestones", methods=["POST"])
@admin_required
def milestone_add(project_id):
    project, err = _get_project_or_404(project_id)
    if err:
        return err

    _, err = _commit_or_error(
        project_service.add_milestone, project, get_json_payload(), _actor()
    )
    if err:
        return err
    return success_response(project.to_dict(), status_code=201)


@admin_bp.route("/projects/<project_id>/milestones/<milestone_id>", methods=["PATCH"])
@admin_required
def milestone_update(project_id, milestone_id):
    project, err = _get_project_or_404(project_id)
    if err:
        return err
    milestone = _get_milestone(project, milestone_id)
    if milestone is None:
        return not_found_response("Milestone")

    _, err = _commit_or_error(
        project_service.update_milestone, project, milestone, get_json_payload(), _actor()
    )
    if err:
        return err
    return success_response(project.to_dict())


@admin_bp.route("/projects/<project_id>/milestones/<milestone_id>", methods=["DELETE"])
@admin_required
def milestone_delete(project_id, milestone_id):
    project, err = _get_project_or_404(project_id)
    if err:
        return err
    milestone = _get_milestone(project, milestone_id)
    if milestone is None:
        return not_found_response("Milestone")

    project_service.delete_milestone(project, milestone, _actor())
    db.session.commit()
    return success_response(project.to_dict())


# ══════════════════════════════════════════════
#  FINANCE
# ══════════════════════════════════════════════

@admin_bp.route("/finance/overview")
@admin_required
def finance_overview():
    return success_response(pipeline_service.finance_overview())
