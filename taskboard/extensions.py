"""
Deferred extension instances.

Created here, bound to the app in create_app() via init_app().
"""

from flask import jsonify
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
)


@login_manager.request_loader
def load_user_from_request(req):
    """Resolve `Authorization: Bearer <jwt>` to a User.

    Imports lazily to avoid circular deps. Returns None for a missing,
    malformed or expired token so the request proceeds as anonymous.
    """
    from taskboard.models.user import User
    from taskboard.services import token_service

    auth_header = req.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None

    user_id = token_service.decode_access_token(auth_header[7:].strip())
    if user_id is None:
        return None

    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


@login_manager.unauthorized_handler
def unauthorized():
    """JSON 401 instead of the default login-page redirect."""
    return jsonify({"error": "Authentication required"}), 401
