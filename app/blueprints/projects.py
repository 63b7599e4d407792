"""
Projects blueprint — /api/projects

Public "Get Started" project request wizard submission.
"""

import logging

from flask import Blueprint

from app.extensions import db, form_limit, limiter
from app.responses import (
    client_info,
    get_json_payload,
    success_response,
    validation_error_response,
)
from app.services import project_service
from app.services.notification_service import confirm_user, notify_admin
from app.services.validation import SubmissionValidationError

projects_bp = Blueprint("projects", __name__, url_prefix="/api/projects")

logger = logging.getLogger(__name__)


@projects_bp.route("", methods=["POST"])
@limiter.limit(form_limit)
def submit_project():
    """
    Accept a project request.

    Expects: { serviceType, projectName, projectDescription, projectGoals[],
               budget, timeline, companyName, industry, targetAudience,
               name, email, phone?, companyWebsite? }
    Returns: 201 { success, message, data: { id } }
    """
    data = get_json_payload()

    try:
        project = project_service.submit_project(data, **client_info())
    except SubmissionValidationError as e:
        return validation_error_response(e.errors)
    db.session.commit()

    email_data = project_service.notification_data(project)
    notified = notify_admin("new_project", email_data)
    confirmed = confirm_user("project_received", project.email, email_data)

    logger.info(
        f"Project request '{project.project_name}' from {project.email} "
        f"(id={project.id}, admin_email={notified}, confirmation={confirmed})"
    )

    return success_response(
        {"id": project.id},
        message="Your project request has been received. We'll contact you shortly.",
        status_code=201,
    )
