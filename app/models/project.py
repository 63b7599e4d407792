"""Project pipeline models.

- Project: a project request from the "Get Started" wizard, worked through
  the sales pipeline (new -> contacted -> quoted -> accepted/declined) and,
  once accepted, through production workflow stages.
- PaymentScheduleItem: scheduled payment line item on a project.
- Milestone: delivery milestone on a project.

received_payments is a stored total of the paid schedule entries. It is
recomputed by project_service whenever the schedule changes, not enforced
by the database.
"""

import uuid

from app.extensions import db
from app.serializers import iso, money


class Project(db.Model):
    __tablename__ = "projects"

    # -- Valid service types --
    SERVICE_TYPES = ["ecommerce", "blog", "portfolio", "landing", "custom"]

    # -- Valid timelines --
    TIMELINES = ["urgent", "standard", "relaxed", "not-sure"]

    # -- Valid pipeline statuses --
    STATUSES = ["new", "contacted", "in-progress", "quoted", "accepted", "declined"]

    # -- Production stages (meaningful once status == accepted) --
    WORKFLOW_STAGES = [
        "discussion",
        "design",
        "content_collection",
        "development",
        "revisions",
        "deployment",
        "knowledge_sharing",
        "completed",
    ]

    STATUS_DISPLAY = {
        "new": {"label": "New", "color": "#3498db"},
        "contacted": {"label": "Contacted", "color": "#9b59b6"},
        "in-progress": {"label": "In Progress", "color": "#f39c12"},
        "quoted": {"label": "Quoted", "color": "#1abc9c"},
        "accepted": {"label": "Accepted", "color": "#2ecc71"},
        "declined": {"label": "Declined", "color": "#e74c3c"},
    }

    STAGE_DISPLAY = {
        "discussion": {"label": "Discussion", "color": "#3498db"},
        "design": {"label": "Design", "color": "#9b59b6"},
        "content_collection": {"label": "Content Collection", "color": "#e67e22"},
        "development": {"label": "Development", "color": "#f1c40f"},
        "revisions": {"label": "Revisions", "color": "#e74c3c"},
        "deployment": {"label": "Deployment", "color": "#1abc9c"},
        "knowledge_sharing": {"label": "Knowledge Sharing", "color": "#34495e"},
        "completed": {"label": "Completed", "color": "#2ecc71"},
    }

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # --- Request (public form) ---
    service_type = db.Column(db.String(20), nullable=False)
    project_name = db.Column(db.String(255), nullable=False)
    project_description = db.Column(db.Text, nullable=False)
    project_goals = db.Column(db.JSON, default=list, nullable=False)
    budget = db.Column(db.String(100), nullable=False)  # range label, e.g. "₹50k-1L"
    timeline = db.Column(db.String(20), nullable=False)
    company_name = db.Column(db.String(255), nullable=False)
    company_website = db.Column(db.String(500), nullable=True)
    industry = db.Column(db.String(255), nullable=False)
    target_audience = db.Column(db.Text, nullable=False)
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=True)

    # --- Pipeline (admin) ---
    status = db.Column(db.String(20), default="new", nullable=False, index=True)
    workflow_stage = db.Column(db.String(30), nullable=True, index=True)
    notes = db.Column(db.Text, nullable=True)
    project_value = db.Column(db.Float, default=0, nullable=False)
    received_payments = db.Column(db.Float, default=0, nullable=False)
    start_date = db.Column(db.Date, nullable=True)
    deadline = db.Column(db.Date, nullable=True)

    # --- Referral ---
    referral_name = db.Column(db.String(200), nullable=True)
    referral_email = db.Column(db.String(255), nullable=True)
    referral_phone = db.Column(db.String(50), nullable=True)
    referral_commission_percentage = db.Column(db.Float, default=0, nullable=False)
    referral_commission_paid = db.Column(db.Boolean, default=False, nullable=False)
    referral_notes = db.Column(db.Text, nullable=True)

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

    # --- Relationships ---
    payments = db.relationship(
        "PaymentScheduleItem",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="PaymentScheduleItem.due_date",
    )
    milestones = db.relationship(
        "Milestone",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="Milestone.due_date",
    )

    @property
    def commission_amount(self):
        """projectValue × commissionPercentage / 100."""
        pct = self.referral_commission_percentage or 0
        return money(self.project_value) * pct / 100

    @property
    def outstanding_payments(self):
        return money(self.project_value) - money(self.received_payments)

    def paid_total(self):
        """Sum of the schedule entries currently marked paid."""
        return sum(money(p.amount) for p in self.payments if p.status == "paid")

    def to_dict(self):
        return {
            "id": self.id,
            "serviceType": self.service_type,
            "projectName": self.project_name,
            "projectDescription": self.project_description,
            "projectGoals": list(self.project_goals or []),
            "budget": self.budget,
            "timeline": self.timeline,
            "companyName": self.company_name,
            "companyWebsite": self.company_website,
            "industry": self.industry,
            "targetAudience": self.target_audience,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "status": self.status,
            "workflowStage": self.workflow_stage,
            "notes": self.notes,
            "projectValue": money(self.project_value),
            "receivedPayments": money(self.received_payments),
            "outstandingPayments": self.outstanding_payments,
            "startDate": iso(self.start_date),
            "deadline": iso(self.deadline),
            "paymentSchedule": [p.to_dict() for p in self.payments],
            "milestones": [m.to_dict() for m in self.milestones],
            "referredBy": {
                "name": self.referral_name,
                "email": self.referral_email,
                "phone": self.referral_phone,
                "commissionPercentage": money(self.referral_commission_percentage),
                "commissionAmount": self.commission_amount,
                "commissionPaid": bool(self.referral_commission_paid),
                "notes": self.referral_notes,
            },
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Project {self.project_name} ({self.status})>"


class PaymentScheduleItem(db.Model):
    __tablename__ = "project_payments"

    STATUSES = ["pending", "paid", "overdue"]

    STATUS_DISPLAY = {
        "pending": {"label": "Pending", "color": "#f39c12"},
        "paid": {"label": "Paid", "color": "#2ecc71"},
        "overdue": {"label": "Overdue", "color": "#e74c3c"},
    }

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    project_id = db.Column(
        db.String(36),
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(255), nullable=False)  # e.g. "Advance 50%"
    amount = db.Column(db.Float, nullable=False)
    due_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(20), default="pending", nullable=False)
    paid_date = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    project = db.relationship("Project", back_populates="payments")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "amount": money(self.amount),
            "dueDate": iso(self.due_date),
            "status": self.status,
            "paidDate": iso(self.paid_date),
        }

    def __repr__(self):
        return f"<PaymentScheduleItem {self.name} {self.amount} ({self.status})>"


class Milestone(db.Model):
    __tablename__ = "project_milestones"

    STATUSES = ["pending", "in_progress", "completed", "delayed"]

    STATUS_DISPLAY = {
        "pending": {"label": "Pending", "color": "#95a5a6"},
        "in_progress": {"label": "In Progress", "color": "#3498db"},
        "completed": {"label": "Completed", "color": "#2ecc71"},
        "delayed": {"label": "Delayed", "color": "#e74c3c"},
    }

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    project_id = db.Column(
        db.String(36),
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    due_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(20), default="pending", nullable=False)
    completed_date = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    project = db.relationship("Project", back_populates="milestones")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "dueDate": iso(self.due_date),
            "status": self.status,
            "completedDate": iso(self.completed_date),
        }

    def __repr__(self):
        return f"<Milestone {self.name} ({self.status})>"
