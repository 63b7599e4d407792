"""Admin identity for HTTP Basic auth.

There is a single admin account configured through ADMIN_USERNAME /
ADMIN_PASSWORD. Credentials are checked on every request and never stored
in the session. Flask-Login integration via UserMixin.
"""

import hmac

from flask import current_app
from flask_login import UserMixin


class AdminUser(UserMixin):
    """The authenticated admin for the current request."""

    is_admin = True

    def __init__(self, username):
        self.id = username
        self.username = username

    def __repr__(self):
        return f"<AdminUser {self.username}>"


def check_admin_credentials(username, password):
    """Constant-time comparison against the configured admin credentials."""
    expected_user = current_app.config.get("ADMIN_USERNAME") or ""
    expected_pass = current_app.config.get("ADMIN_PASSWORD") or ""
    if not expected_pass or not username or password is None:
        return False
    user_ok = hmac.compare_digest(username.encode(), expected_user.encode())
    pass_ok = hmac.compare_digest(password.encode(), expected_pass.encode())
    return user_ok and pass_ok
