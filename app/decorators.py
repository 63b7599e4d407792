"""
Custom route decorators for access control.

- admin_required: ensures the request carries valid admin Basic credentials.
"""

from functools import wraps

from flask import abort
from flask_login import current_user, login_required


def admin_required(f):
    """Require Basic auth + is_admin flag."""

    @wraps(f)
    @login_required
    def decorated(*args, **kwargs):
        if not getattr(current_user, "is_admin", False):
            abort(403)
        return f(*args, **kwargs)

    return decorated
