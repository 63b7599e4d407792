"""Tests for project requests — POST /api/projects and project_service.

Covers:
- Public wizard submission (status "new", zero value, goals list)
- Validation of required fields, serviceType, timeline
- Status/stage rules: accepted enters "discussion", invalid values rejected
- Payment schedule keeps received_payments in sync
- Overdue payment sweep
"""

from datetime import date, timedelta

import pytest

from app.extensions import db
from app.models.audit import AuditEvent
from app.models.project import PaymentScheduleItem, Project
from app.services import project_service


class TestSubmitProject:

    def test_valid_request_created(self, client, project_payload, sent_emails):
        resp = client.post("/api/projects", json=project_payload)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["message"] == (
            "Your project request has been received. We'll contact you shortly."
        )

        project = db.session.get(Project, body["data"]["id"])
        assert project.status == "new"
        assert project.workflow_stage is None
        assert project.project_value == 0
        assert project.received_payments == 0
        assert project.project_goals == ["Sell online", "Reach new customers"]

    def test_notifications_sent(self, client, project_payload, sent_emails):
        client.post("/api/projects", json=project_payload)
        assert sent_emails[0]["Subject"] == "New Project Request - Mehta Online Store"
        assert sent_emails[1]["To"] == "arjun@example.com"

    def test_missing_fields(self, client):
        resp = client.post("/api/projects", json={"serviceType": "blog"})
        assert resp.status_code == 400
        errors = resp.get_json()["errors"]
        assert "projectName is required" in errors
        assert "projectGoals is required" in errors
        assert "targetAudience is required" in errors
        assert "serviceType is required" not in errors

    def test_blank_goals_count_as_missing(self, client, project_payload):
        project_payload["projectGoals"] = ["", "   "]
        resp = client.post("/api/projects", json=project_payload)
        assert resp.status_code == 400
        assert "projectGoals is required" in resp.get_json()["errors"]

    def test_invalid_service_type_and_timeline(self, client, project_payload):
        project_payload["serviceType"] = "spaceship"
        project_payload["timeline"] = "yesterday"
        resp = client.post("/api/projects", json=project_payload)
        errors = resp.get_json()["errors"]
        assert any(e.startswith("serviceType must be one of") for e in errors)
        assert any(e.startswith("timeline must be one of") for e in errors)

    @pytest.mark.parametrize("field, value", [
        ("name", 123),
        ("email", ["a@b.co"]),
        ("budget", 50000),
        ("serviceType", {"kind": "ecommerce"}),
    ])
    def test_non_string_field_rejected(self, client, project_payload, field, value):
        project_payload[field] = value
        resp = client.post("/api/projects", json=project_payload)
        assert resp.status_code == 400
        assert resp.get_json()["errors"] == [f"{field} must be a string"]
        assert Project.query.count() == 0

    def test_pipeline_fields_ignored_on_public_form(self, client, project_payload, sent_emails):
        project_payload["status"] = "accepted"
        project_payload["projectValue"] = 999999
        resp = client.post("/api/projects", json=project_payload)

        project = db.session.get(Project, resp.get_json()["data"]["id"])
        assert project.status == "new"
        assert project.project_value == 0


class TestPipelineRules:

    def test_accepting_sets_discussion_stage(self, app, project_payload):
        project = project_service.submit_project(project_payload)
        project_service.update_project(project, {"status": "accepted"}, "admin")
        assert project.status == "accepted"
        assert project.workflow_stage == "discussion"

    def test_accepting_keeps_existing_stage(self, seed_data):
        project = seed_data["project"]
        project_service.update_project(project, {"status": "quoted"}, "admin")
        project_service.update_project(project, {"status": "accepted"}, "admin")
        assert project.workflow_stage == "design"

    def test_free_form_transitions(self, seed_data):
        project = seed_data["project"]
        for status in ("declined", "new", "contacted", "accepted"):
            project_service.update_project(project, {"status": status}, "admin")
            assert project.status == status

    def test_invalid_status_rejected(self, seed_data):
        with pytest.raises(ValueError):
            project_service.update_project(seed_data["project"], {"status": "won"}, "admin")

    def test_invalid_stage_rejected(self, seed_data):
        with pytest.raises(ValueError):
            project_service.set_workflow_stage(seed_data["project"], "party", "admin")

    def test_status_change_is_audited(self, seed_data):
        project_service.update_project(seed_data["project"], {"status": "declined"}, "admin")
        event = AuditEvent.query.filter_by(action="project.status_changed").one()
        assert event.actor == "admin"
        assert event.metadata_["old_status"] == "accepted"
        assert event.metadata_["new_status"] == "declined"

    def test_referral_commission(self, seed_data):
        project = seed_data["project"]
        project_service.update_project(project, {
            "referredBy": {"name": "Kiran", "email": "kiran@example.com",
                           "commissionPercentage": 10},
        }, "admin")
        data = project.to_dict()["referredBy"]
        assert data["name"] == "Kiran"
        assert data["commissionAmount"] == 10000

    def test_commission_over_100_rejected(self, seed_data):
        with pytest.raises(ValueError):
            project_service.update_project(
                seed_data["project"], {"referredBy": {"commissionPercentage": 150}}, "admin",
            )

    def test_admin_create_with_schedule(self, app, project_payload):
        project_payload.update({
            "status": "accepted",
            "projectValue": 50000,
            "paymentSchedule": [
                {"name": "Advance", "amount": 20000, "status": "paid"},
                {"name": "Final", "amount": 30000},
            ],
            "milestones": [{"name": "Kickoff"}],
        })
        project = project_service.create_project(project_payload, "admin")
        assert project.received_payments == 20000
        assert project.outstanding_payments == 30000
        assert project.workflow_stage == "discussion"
        assert len(project.milestones) == 1


class TestPaymentSchedule:

    def test_marking_paid_updates_received(self, seed_data):
        project = seed_data["project"]
        final = db.session.get(PaymentScheduleItem, seed_data["final_id"])

        project_service.update_payment(project, final, {"status": "paid"}, "admin")
        assert project.received_payments == 100000
        assert final.paid_date is not None

    def test_unpaying_clears_paid_date(self, seed_data):
        project = seed_data["project"]
        advance = db.session.get(PaymentScheduleItem, seed_data["advance_id"])

        project_service.update_payment(project, advance, {"status": "pending"}, "admin")
        assert project.received_payments == 0
        assert advance.paid_date is None

    def test_add_paid_payment(self, seed_data):
        project = seed_data["project"]
        project_service.add_payment(
            project, {"name": "Bonus", "amount": 5000, "status": "paid"}, "admin",
        )
        assert project.received_payments == 45000

    def test_delete_paid_payment(self, seed_data):
        project = seed_data["project"]
        advance = db.session.get(PaymentScheduleItem, seed_data["advance_id"])
        project_service.delete_payment(project, advance, "admin")
        assert project.received_payments == 0
        assert db.session.get(PaymentScheduleItem, seed_data["advance_id"]) is None

    @pytest.mark.parametrize("amount", [0, -10, "lots"])
    def test_bad_amount_rejected(self, seed_data, amount):
        with pytest.raises(ValueError):
            project_service.add_payment(
                seed_data["project"], {"name": "Bad", "amount": amount}, "admin",
            )

    def test_unknown_payment_status_rejected(self, seed_data):
        final = db.session.get(PaymentScheduleItem, seed_data["final_id"])
        with pytest.raises(ValueError):
            project_service.update_payment(
                seed_data["project"], final, {"status": "refunded"}, "admin",
            )


class TestOverduePayments:

    def _add_late_payment(self, project):
        payment = PaymentScheduleItem(
            name="Late", amount=1000, due_date=date.today() - timedelta(days=3),
        )
        project.payments.append(payment)
        db.session.commit()
        return payment

    def test_marks_past_due_pending(self, seed_data):
        late = self._add_late_payment(seed_data["project"])

        overdue = project_service.mark_overdue_payments()
        assert [p.id for p in overdue] == [late.id]
        assert late.status == "overdue"
        assert AuditEvent.query.filter_by(action="project.payments_overdue").count() == 1

    def test_paid_and_future_untouched(self, seed_data):
        project_service.mark_overdue_payments()
        advance = db.session.get(PaymentScheduleItem, seed_data["advance_id"])
        final = db.session.get(PaymentScheduleItem, seed_data["final_id"])
        assert advance.status == "paid"
        assert final.status == "pending"

    def test_dry_run_changes_nothing(self, seed_data):
        late = self._add_late_payment(seed_data["project"])
        overdue = project_service.mark_overdue_payments(dry_run=True)
        assert len(overdue) == 1
        assert late.status == "pending"
        assert AuditEvent.query.count() == 0
