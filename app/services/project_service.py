"""Project service — project requests, pipeline edits, payment schedule and
milestones.

Statuses and workflow stages are free-form (no transition guards) but must
be valid values. received_payments is recomputed from the schedule after
every payment change.

Functions flush but do NOT commit — the caller commits.
"""

from datetime import date, datetime, timezone

from sqlalchemy import or_

from app.extensions import db
from app.models.project import Milestone, PaymentScheduleItem, Project
from app.services import audit_service
from app.services.validation import (
    SubmissionValidationError,
    check_choice,
    check_contact_fields,
    check_required,
    clean_payload,
    clean_text,
    is_valid_email,
    is_valid_phone,
    parse_amount,
    parse_date,
    parse_datetime,
    sanitize,
)

REQUIRED_FIELDS = [
    "serviceType",
    "projectName",
    "projectDescription",
    "projectGoals",
    "budget",
    "timeline",
    "companyName",
    "industry",
    "targetAudience",
    "name",
    "email",
]
OPTIONAL_FIELDS = ["phone", "companyWebsite"]

# JSON field -> column for the request fields
FIELD_MAP = {
    "serviceType": "service_type",
    "projectName": "project_name",
    "projectDescription": "project_description",
    "projectGoals": "project_goals",
    "budget": "budget",
    "timeline": "timeline",
    "companyName": "company_name",
    "companyWebsite": "company_website",
    "industry": "industry",
    "targetAudience": "target_audience",
    "name": "name",
    "email": "email",
    "phone": "phone",
}

REFERRAL_MAP = {
    "name": "referral_name",
    "email": "referral_email",
    "phone": "referral_phone",
    "notes": "referral_notes",
}


def _clean_goals(value):
    """Accept a list of strings or a single string; drop blanks."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    goals = []
    for goal in value:
        if isinstance(goal, str):
            goal = sanitize(goal)
            if goal:
                goals.append(goal)
    return goals


def validate_project(data):
    """Return (column kwargs, errors) for a project request payload."""
    errors = []
    text_fields = [f for f in REQUIRED_FIELDS + OPTIONAL_FIELDS if f != "projectGoals"]
    cleaned = clean_payload(data, text_fields, errors)
    cleaned["projectGoals"] = _clean_goals(data.get("projectGoals")) or None

    check_required(cleaned, REQUIRED_FIELDS, errors)
    check_contact_fields(cleaned, errors)
    check_choice(cleaned, "serviceType", Project.SERVICE_TYPES, errors)
    check_choice(cleaned, "timeline", Project.TIMELINES, errors)

    fields = {FIELD_MAP[k]: v for k, v in cleaned.items()}
    fields["project_goals"] = fields["project_goals"] or []
    return fields, errors


def submit_project(data, ip_address=None, user_agent=None):
    """Validate and store a public project request (status "new").

    Raises:
        SubmissionValidationError: With every validation problem found.
    """
    fields, errors = validate_project(data)
    if errors:
        raise SubmissionValidationError(errors)

    project = Project(
        status="new",
        project_value=0,
        received_payments=0,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:500] or None,
        **fields,
    )
    db.session.add(project)
    db.session.flush()
    return project


def _list_of_objects(data, key):
    """The list under key (empty when absent).

    Raises:
        ValueError: If it is not a list of JSON objects.
    """
    items = data.get(key)
    if items is None:
        return []
    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        raise ValueError(f"{key} must be a list of objects.")
    return items


def create_project(data, actor):
    """Admin-created project: request fields plus any pipeline fields,
    payment schedule and milestones in one payload.

    Raises:
        SubmissionValidationError: If the request fields are invalid.
        ValueError: If a pipeline field is invalid.
    """
    project = submit_project(data)
    _apply_pipeline_fields(project, data)

    for item in _list_of_objects(data, "paymentSchedule"):
        _build_payment(project, item)
    for item in _list_of_objects(data, "milestones"):
        _build_milestone(project, item)

    recompute_received_payments(project)
    db.session.flush()
    audit_service.record(
        actor, "project.created",
        project_id=project.id, project_name=project.project_name,
    )
    return project


def list_projects(status=None, service_type=None, workflow_stage=None, q=None):
    """All projects, newest first, with optional filters."""
    query = Project.query

    if status:
        if status not in Project.STATUSES:
            raise ValueError(
                f"Invalid status '{status}'. Must be one of: {', '.join(Project.STATUSES)}"
            )
        query = query.filter_by(status=status)

    if service_type:
        if service_type not in Project.SERVICE_TYPES:
            raise ValueError(
                f"Invalid serviceType '{service_type}'. Must be one of: {', '.join(Project.SERVICE_TYPES)}"
            )
        query = query.filter_by(service_type=service_type)

    if workflow_stage:
        if workflow_stage not in Project.WORKFLOW_STAGES:
            raise ValueError(
                f"Invalid workflowStage '{workflow_stage}'. Must be one of: {', '.join(Project.WORKFLOW_STAGES)}"
            )
        query = query.filter_by(workflow_stage=workflow_stage)

    if q:
        pattern = f"%{q.strip()}%"
        query = query.filter(or_(
            Project.project_name.ilike(pattern),
            Project.company_name.ilike(pattern),
            Project.name.ilike(pattern),
            Project.email.ilike(pattern),
        ))

    return query.order_by(Project.created_at.desc()).all()


# ══════════════════════════════════════════════
#  PIPELINE EDITS
# ══════════════════════════════════════════════

def _set_status(project, new_status, actor):
    new_status = clean_text(new_status, "status") or ""
    if new_status not in Project.STATUSES:
        raise ValueError(
            f"Invalid status '{new_status}'. Must be one of: {', '.join(Project.STATUSES)}"
        )
    if new_status == project.status:
        return

    old_status = project.status
    project.status = new_status
    # Accepted projects enter production at the first stage
    if new_status == "accepted" and not project.workflow_stage:
        project.workflow_stage = Project.WORKFLOW_STAGES[0]

    if actor:
        audit_service.record(
            actor, "project.status_changed",
            project_id=project.id, old_status=old_status, new_status=new_status,
        )


def _set_stage(project, stage, actor):
    stage = clean_text(stage, "workflowStage")
    if stage is not None and stage not in Project.WORKFLOW_STAGES:
        raise ValueError(
            f"Invalid workflowStage '{stage}'. Must be one of: {', '.join(Project.WORKFLOW_STAGES)}"
        )
    if stage == project.workflow_stage:
        return

    old_stage = project.workflow_stage
    project.workflow_stage = stage
    if actor:
        audit_service.record(
            actor, "project.stage_changed",
            project_id=project.id, old_stage=old_stage, new_stage=stage,
        )


def _apply_referral(project, referral):
    if referral is None:
        return
    if not isinstance(referral, dict):
        raise ValueError("referredBy must be an object.")

    for key, column in REFERRAL_MAP.items():
        if key in referral:
            setattr(project, column, clean_text(referral.get(key), f"referredBy.{key}"))

    if project.referral_email and not is_valid_email(project.referral_email):
        raise ValueError("Invalid referral email format")

    if "commissionPercentage" in referral:
        pct = parse_amount(referral.get("commissionPercentage") or 0, "commissionPercentage")
        if pct > 100:
            raise ValueError("commissionPercentage cannot exceed 100.")
        project.referral_commission_percentage = pct
    if "commissionPaid" in referral:
        project.referral_commission_paid = bool(referral.get("commissionPaid"))


def _apply_pipeline_fields(project, data, actor=None):
    if "status" in data:
        _set_status(project, data.get("status"), actor)
    if "workflowStage" in data:
        _set_stage(project, data.get("workflowStage"), actor)
    if "notes" in data:
        project.notes = clean_text(data.get("notes"), "notes")
    if "projectValue" in data:
        project.project_value = parse_amount(data.get("projectValue") or 0, "projectValue")
    if "startDate" in data:
        project.start_date = parse_date(data.get("startDate"))
    if "deadline" in data:
        project.deadline = parse_date(data.get("deadline"))
    if "referredBy" in data:
        _apply_referral(project, data.get("referredBy"))


def _apply_request_fields(project, data):
    """Admin edits to the fields originally submitted by the client."""
    for key, column in FIELD_MAP.items():
        if key not in data:
            continue
        if key == "projectGoals":
            goals = _clean_goals(data.get(key))
            if not goals:
                raise ValueError("projectGoals is required")
            project.project_goals = goals
            continue

        value = clean_text(data.get(key), key)
        if key in REQUIRED_FIELDS and not value:
            raise ValueError(f"{key} is required")
        if key == "serviceType" and value not in Project.SERVICE_TYPES:
            raise ValueError(f"serviceType must be one of: {', '.join(Project.SERVICE_TYPES)}")
        if key == "timeline" and value not in Project.TIMELINES:
            raise ValueError(f"timeline must be one of: {', '.join(Project.TIMELINES)}")
        if key == "email" and not is_valid_email(value):
            raise ValueError("Invalid email format")
        if key == "phone" and value and not is_valid_phone(value):
            raise ValueError("Invalid phone number format")
        setattr(project, column, value)


def update_project(project, data, actor):
    """Apply an admin edit. Only keys present in data are touched.

    Raises:
        ValueError: On any invalid value (nothing is committed by the caller).
    """
    _apply_request_fields(project, data)
    _apply_pipeline_fields(project, data, actor)

    db.session.flush()
    audit_service.record(
        actor, "project.updated",
        project_id=project.id, fields=sorted(data.keys()),
    )
    return project


def set_workflow_stage(project, stage, actor):
    """Move a project to a production stage.

    Raises:
        ValueError: If stage is not one of Project.WORKFLOW_STAGES.
    """
    if not stage:
        raise ValueError("workflowStage is required")
    _set_stage(project, stage, actor)
    db.session.flush()
    return project


def delete_project(project, actor):
    """Permanently remove a project with its payments and milestones."""
    audit_service.record(
        actor, "project.deleted",
        project_id=project.id, project_name=project.project_name,
    )
    db.session.delete(project)
    db.session.flush()


# ══════════════════════════════════════════════
#  PAYMENT SCHEDULE
# ══════════════════════════════════════════════

def recompute_received_payments(project):
    """received_payments = sum of schedule entries marked paid."""
    project.received_payments = project.paid_total()
    return project.received_payments


def _apply_payment_status(payment, status, paid_date=None):
    if status not in PaymentScheduleItem.STATUSES:
        raise ValueError(
            f"Invalid payment status '{status}'. Must be one of: {', '.join(PaymentScheduleItem.STATUSES)}"
        )
    payment.status = status
    if status == "paid":
        payment.paid_date = paid_date or payment.paid_date or datetime.now(timezone.utc)
    else:
        payment.paid_date = None


def _build_payment(project, data):
    name = clean_text(data.get("name"), "name")
    if not name:
        raise ValueError("Payment name is required.")
    amount = parse_amount(data.get("amount"), "amount")
    if amount <= 0:
        raise ValueError("amount must be greater than zero.")

    payment = PaymentScheduleItem(
        name=name,
        amount=amount,
        due_date=parse_date(data.get("dueDate")),
    )
    _apply_payment_status(
        payment,
        clean_text(data.get("status"), "status") or "pending",
        parse_datetime(data.get("paidDate")),
    )
    project.payments.append(payment)
    return payment


def add_payment(project, data, actor):
    """Add a scheduled payment line item.

    Raises:
        ValueError: If name is blank or amount isn't a positive number.
    """
    payment = _build_payment(project, data)
    recompute_received_payments(project)
    db.session.flush()
    audit_service.record(
        actor, "project.payment_added",
        project_id=project.id, payment_id=payment.id, amount=payment.amount,
    )
    return payment


def update_payment(project, payment, data, actor):
    """Edit a payment; a status change recomputes the project's received total."""
    if "name" in data:
        name = clean_text(data.get("name"), "name")
        if not name:
            raise ValueError("Payment name is required.")
        payment.name = name
    if "amount" in data:
        amount = parse_amount(data.get("amount"), "amount")
        if amount <= 0:
            raise ValueError("amount must be greater than zero.")
        payment.amount = amount
    if "dueDate" in data:
        payment.due_date = parse_date(data.get("dueDate"))
    if "status" in data:
        old_status = payment.status
        _apply_payment_status(
            payment,
            clean_text(data.get("status"), "status") or "",
            parse_datetime(data.get("paidDate")),
        )
        if payment.status != old_status:
            audit_service.record(
                actor, "project.payment_status_changed",
                project_id=project.id, payment_id=payment.id,
                old_status=old_status, new_status=payment.status,
            )

    recompute_received_payments(project)
    db.session.flush()

    edited = sorted(k for k in data if k in ("name", "amount", "dueDate"))
    if edited:
        audit_service.record(
            actor, "project.payment_updated",
            project_id=project.id, payment_id=payment.id, fields=edited,
        )
    return payment


def delete_payment(project, payment, actor):
    project.payments.remove(payment)
    recompute_received_payments(project)
    db.session.flush()
    audit_service.record(
        actor, "project.payment_deleted",
        project_id=project.id, payment_id=payment.id,
    )


def mark_overdue_payments(today=None, dry_run=False):
    """Flip pending payments whose due date has passed to "overdue".

    Returns:
        The list of affected PaymentScheduleItem objects.
    """
    today = today or date.today()
    overdue = (
        PaymentScheduleItem.query
        .filter(
            PaymentScheduleItem.status == "pending",
            PaymentScheduleItem.due_date.isnot(None),
            PaymentScheduleItem.due_date < today,
        )
        .all()
    )
    if dry_run:
        return overdue

    for payment in overdue:
        payment.status = "overdue"
        recompute_received_payments(payment.project)
    db.session.flush()

    if overdue:
        audit_service.record(
            "system", "project.payments_overdue",
            payment_ids=[p.id for p in overdue],
        )
    return overdue


# ══════════════════════════════════════════════
#  MILESTONES
# ══════════════════════════════════════════════

def _apply_milestone_status(milestone, status, completed_date=None):
    if status not in Milestone.STATUSES:
        raise ValueError(
            f"Invalid milestone status '{status}'. Must be one of: {', '.join(Milestone.STATUSES)}"
        )
    milestone.status = status
    if status == "completed":
        milestone.completed_date = (
            completed_date or milestone.completed_date or datetime.now(timezone.utc)
        )
    else:
        milestone.completed_date = None


def _build_milestone(project, data):
    name = clean_text(data.get("name"), "name")
    if not name:
        raise ValueError("Milestone name is required.")
    milestone = Milestone(
        name=name,
        description=clean_text(data.get("description"), "description"),
        due_date=parse_date(data.get("dueDate")),
    )
    _apply_milestone_status(
        milestone,
        clean_text(data.get("status"), "status") or "pending",
        parse_datetime(data.get("completedDate")),
    )
    project.milestones.append(milestone)
    return milestone


def add_milestone(project, data, actor):
    milestone = _build_milestone(project, data)
    db.session.flush()
    audit_service.record(
        actor, "project.milestone_added",
        project_id=project.id, milestone_id=milestone.id,
    )
    return milestone


def update_milestone(project, milestone, data, actor):
    if "name" in data:
        name = clean_text(data.get("name"), "name")
        if not name:
            raise ValueError("Milestone name is required.")
        milestone.name = name
    if "description" in data:
        milestone.description = clean_text(data.get("description"), "description")
    if "dueDate" in data:
        milestone.due_date = parse_date(data.get("dueDate"))
    if "status" in data:
        old_status = milestone.status
        _apply_milestone_status(
            milestone,
            clean_text(data.get("status"), "status") or "",
            parse_datetime(data.get("completedDate")),
        )
        if milestone.status != old_status:
            audit_service.record(
                actor, "project.milestone_status_changed",
                project_id=project.id, milestone_id=milestone.id,
                old_status=old_status, new_status=milestone.status,
            )

    db.session.flush()

    edited = sorted(k for k in data if k in ("name", "description", "dueDate"))
    if edited:
        audit_service.record(
            actor, "project.milestone_updated",
            project_id=project.id, milestone_id=milestone.id, fields=edited,
        )
    return milestone


def delete_milestone(project, milestone, actor):
    project.milestones.remove(milestone)
    db.session.flush()
    audit_service.record(
        actor, "project.milestone_deleted",
        project_id=project.id, milestone_id=milestone.id,
    )


# ══════════════════════════════════════════════
#  CALENDAR + NOTIFICATIONS
# ══════════════════════════════════════════════

def _in_range(day, start, end):
    if day is None:
        return False
    if start and day < start:
        return False
    if end and day > end:
        return False
    return True


def calendar_events(start=None, end=None):
    """All-day events for project start dates, deadlines, milestones and
    payment due dates falling between start and end (inclusive)."""
    events = []
    for project in Project.query.filter(Project.status != "declined").all():
        base = {"projectId": project.id, "projectName": project.project_name}

        if _in_range(project.start_date, start, end):
            events.append({
                "id": f"{project.id}-start",
                "title": f"🚀 Start: {project.project_name}",
                "start": project.start_date.isoformat(),
                "allDay": True,
                "type": "project_start",
                "color": "#3498db",
                "extendedProps": base,
            })
        if _in_range(project.deadline, start, end):
            events.append({
                "id": f"{project.id}-deadline",
                "title": f"🏁 Deadline: {project.project_name}",
                "start": project.deadline.isoformat(),
                "allDay": True,
                "type": "project_deadline",
                "color": "#e74c3c",
                "extendedProps": base,
            })
        for milestone in project.milestones:
            if _in_range(milestone.due_date, start, end):
                events.append({
                    "id": milestone.id,
                    "title": f"📌 {milestone.name} ({project.project_name})",
                    "start": milestone.due_date.isoformat(),
                    "allDay": True,
                    "type": "milestone",
                    "color": Milestone.STATUS_DISPLAY[milestone.status]["color"],
                    "extendedProps": {**base, "status": milestone.status},
                })
        for payment in project.payments:
            if _in_range(payment.due_date, start, end):
                events.append({
                    "id": payment.id,
                    "title": f"💰 {payment.name} ({project.project_name})",
                    "start": payment.due_date.isoformat(),
                    "allDay": True,
                    "type": "payment",
                    "color": PaymentScheduleItem.STATUS_DISPLAY[payment.status]["color"],
                    "extendedProps": {
                        **base,
                        "amount": payment.amount,
                        "status": payment.status,
                    },
                })

    events.sort(key=lambda e: e["start"])
    return events


def notification_data(project):
    return {
        "projectName": project.project_name,
        "serviceType": project.service_type,
        "projectDescription": project.project_description,
        "projectGoals": list(project.project_goals or []),
        "budget": project.budget,
        "timeline": project.timeline,
        "companyName": project.company_name,
        "name": project.name,
        "email": project.email,
        "phone": project.phone,
    }
