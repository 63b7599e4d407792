"""Pipeline aggregation for the admin dashboard.

Everything is computed on request from the current rows. There is no
cache or materialised view; the project table is small.
"""

from datetime import date, datetime

from app.extensions import db
from app.models.booking import Booking
from app.models.contact import ContactSubmission
from app.models.project import PaymentScheduleItem, Project
from app.serializers import iso, money
from app.services import audit_service

MONTH_NAMES = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def project_stats(projects=None):
    """Group and sum the project collection.

    Returns:
        {
          "byStatus": {status: count},
          "byStage": {stage: count},  # accepted projects only
          "finance": {totalProjectValue, totalReceivedPayments,
                      outstandingPayments, avgProjectValue},
        }
    """
    if projects is None:
        projects = Project.query.all()

    by_status = {}
    by_stage = {}
    total_value = 0.0
    total_received = 0.0

    for project in projects:
        by_status[project.status] = by_status.get(project.status, 0) + 1

        if project.status == "accepted" and project.workflow_stage:
            by_stage[project.workflow_stage] = by_stage.get(project.workflow_stage, 0) + 1

        total_value += money(project.project_value)
        total_received += money(project.received_payments)

    count = len(projects)
    return {
        "byStatus": by_status,
        "byStage": by_stage,
        "finance": {
            "totalProjectValue": total_value,
            "totalReceivedPayments": total_received,
            "outstandingPayments": total_value - total_received,
            "avgProjectValue": total_value / count if count else 0,
        },
    }


def _months_back(today, months):
    """First day of the month `months` before today's month."""
    index = today.year * 12 + (today.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    return value


def finance_overview(today=None):
    """Revenue, received and pending totals plus recent/upcoming payments."""
    today = today or date.today()

    # Total revenue: every non-declined project with a value
    valued = (
        Project.query
        .filter(Project.status != "declined", Project.project_value > 0)
        .all()
    )
    total_revenue = sum(money(p.project_value) for p in valued)

    received = (
        db.session.query(db.func.coalesce(db.func.sum(PaymentScheduleItem.amount), 0))
        .filter(PaymentScheduleItem.status == "paid")
        .scalar()
    )
    received = money(received)

    # Revenue by month over the last six months (current month included)
    since = _months_back(today, 5)
    buckets = {}
    for project in Project.query.filter(Project.project_value > 0).all():
        created = _as_date(project.created_at)
        if created is None or created < since:
            continue
        key = (created.year, created.month)
        buckets[key] = buckets.get(key, 0.0) + money(project.project_value)
    revenue_by_month = [
        {"month": MONTH_NAMES[month - 1], "year": year, "revenue": buckets[(year, month)]}
        for year, month in sorted(buckets)
    ]

    recent = (
        PaymentScheduleItem.query
        .filter_by(status="paid")
        .order_by(PaymentScheduleItem.paid_date.desc())
        .limit(5)
        .all()
    )
    upcoming = (
        PaymentScheduleItem.query
        .filter(
            PaymentScheduleItem.status == "pending",
            PaymentScheduleItem.due_date.isnot(None),
        )
        .order_by(PaymentScheduleItem.due_date.asc())
        .limit(5)
        .all()
    )

    return {
        "financials": {
            "totalRevenue": total_revenue,
            "receivedPayments": received,
            "pendingPayments": total_revenue - received,
            "revenueByMonth": revenue_by_month,
        },
        "recentPayments": [
            {
                "projectId": p.project_id,
                "projectName": p.project.project_name,
                "clientName": p.project.name,
                "paymentName": p.name,
                "amount": money(p.amount),
                "date": iso(p.paid_date),
                "status": p.status,
            }
            for p in recent
        ],
        "upcomingPayments": [
            {
                "projectId": p.project_id,
                "projectName": p.project.project_name,
                "clientName": p.project.name,
                "paymentName": p.name,
                "amount": money(p.amount),
                "dueDate": iso(p.due_date),
                "status": p.status,
            }
            for p in upcoming
        ],
    }


def dashboard_summary():
    """Counts and latest items for the admin home screen."""
    return {
        "counts": {
            "contacts": ContactSubmission.query.count(),
            "newContacts": ContactSubmission.query.filter_by(status="new").count(),
            "bookings": Booking.query.count(),
            "upcomingBookings": Booking.query.filter(
                Booking.status == "scheduled", Booking.date >= date.today()
            ).count(),
            "projects": Project.query.count(),
            "newProjects": Project.query.filter_by(status="new").count(),
        },
        "recentContacts": [
            c.to_dict() for c in
            ContactSubmission.query.order_by(ContactSubmission.created_at.desc()).limit(5)
        ],
        "recentBookings": [
            b.to_dict() for b in
            Booking.query.order_by(Booking.created_at.desc()).limit(5)
        ],
        "recentProjects": [
            p.to_dict() for p in
            Project.query.order_by(Project.created_at.desc()).limit(5)
        ],
        "recentActivity": [e.to_dict() for e in audit_service.recent(20)],
    }
