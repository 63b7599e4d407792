"""
Deferred extension instances.

Created here, bound to the app in create_app() via init_app().
"""

from flask import current_app, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],  # No global limit — we apply per-route
    storage_uri="memory://",
)


def general_limit():
    """Rate limit string for ordinary API calls, e.g. "100 per 15 minutes"."""
    cfg = current_app.config
    return f"{cfg['RATE_LIMIT_MAX']} per {cfg['RATE_LIMIT_WINDOW_MINUTES']} minutes"


def form_limit():
    """Stricter limit for public form submissions (a tenth of the general one)."""
    cfg = current_app.config
    count = max(1, cfg["RATE_LIMIT_MAX"] // 10)
    return f"{count} per {cfg['RATE_LIMIT_WINDOW_MINUTES']} minutes"


@login_manager.request_loader
def load_admin_from_request(request):
    """Resolve the admin from HTTP Basic credentials on every request.

    Nothing is stored in the session; each call carries its own credentials.
    """
    from app.auth import AdminUser, check_admin_credentials

    auth = request.authorization
    if auth is None or auth.type != "basic":
        return None
    if check_admin_credentials(auth.username, auth.password):
        return AdminUser(auth.username)
    return None


@login_manager.unauthorized_handler
def unauthorized():
    response = jsonify(success=False, error="Authentication required.")
    response.status_code = 401
    response.headers["WWW-Authenticate"] = 'Basic realm="Veloria Admin"'
    return response
