# Models package — import all models here so Alembic can discover them.

from app.models.contact import ContactSubmission  # noqa: F401
from app.models.booking import Booking  # noqa: F401
from app.models.project import Project, PaymentScheduleItem, Milestone  # noqa: F401
from app.models.audit import AuditEvent  # noqa: F401
