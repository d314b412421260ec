"""Auth blueprint — /api/auth/*

Registration, login, logout, the current-user lookup, profile edits and
password changes. Login and register hand back a JWT access token; every
other route reads it from the `Authorization: Bearer <token>` header (see
extensions.load_user_from_request).
"""

import logging
import re

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required
from werkzeug.security import check_password_hash, generate_password_hash

from taskboard.extensions import db, limiter
from taskboard.models.user import User
from taskboard.serializers import user_dict
from taskboard.services import token_service
from taskboard.utils import sanitize

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# ──────────────────────────────────────────────
# POST /api/auth/register
# ──────────────────────────────────────────────

@auth_bp.route("/register", methods=["POST"])
@limiter.limit("10 per minute")
def register():
    data = _json_body()
    email = (data.get("email") or "").lower().strip()
    password = data.get("password") or ""
    name = sanitize(data.get("name")) or ""

    # --- Validation ---
    errors = []
    if not email or not EMAIL_RE.match(email):
        errors.append("A valid email is required.")
    if len(password) < 8:
        errors.append("Password must be at least 8 characters.")
    if not name:
        errors.append("Name is required.")
    elif len(name) > 100:
        errors.append("Name cannot be more than 100 characters.")
    if email and User.query.filter_by(email=email).first():
        errors.append("An account with this email already exists.")

    if errors:
        return jsonify({"error": errors[0], "errors": errors}), 400

    user = User(
        email=email,
        password_hash=generate_password_hash(password),
        name=name,
    )
    db.session.add(user)
    db.session.commit()

    logger.info(f"User registered: {user.id}")
    return jsonify({
        "token": token_service.create_access_token(user.id),
        "user": user_dict(user),
    }), 201


# ──────────────────────────────────────────────
# POST /api/auth/login
# ──────────────────────────────────────────────

@auth_bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    data = _json_body()
    email = (data.get("email") or "").lower().strip()
    password = data.get("password") or ""

    user = User.query.filter_by(email=email).first()
    if user is None or not check_password_hash(user.password_hash, password):
        logger.info("Failed login attempt")
        return jsonify({"error": "Invalid email or password."}), 401
    if not user.is_active:
        return jsonify({"error": "This account has been deactivated."}), 401

    logger.info(f"User logged in: {user.id}")
    return jsonify({
        "token": token_service.create_access_token(user.id),
        "user": user_dict(user),
    })


# ──────────────────────────────────────────────
# GET /api/auth/me
# ──────────────────────────────────────────────

@auth_bp.route("/me")
@login_required
def me():
    return jsonify({"user": user_dict(current_user)})


# ──────────────────────────────────────────────
# POST /api/auth/logout
# ──────────────────────────────────────────────

@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    # Tokens are stateless; the client discards its copy.
    logger.info(f"User logged out: {current_user.id}")
    return jsonify({"success": True})


# ──────────────────────────────────────────────
# PUT /api/auth/profile
# ──────────────────────────────────────────────

@auth_bp.route("/profile", methods=["PUT"])
@login_required
def update_profile():
    data = _json_body()

    errors = []
    if "name" in data:
        name = sanitize(data.get("name")) or ""
        if len(name) < 2 or len(name) > 100:
            errors.append("Name must be between 2 and 100 characters.")
    if "avatar" in data:
        avatar = sanitize(data.get("avatar")) or None
        if avatar and len(avatar) > 500:
            errors.append("Avatar URL cannot be more than 500 characters.")

    if errors:
        return jsonify({"error": errors[0], "errors": errors}), 400

    if "name" in data:
        current_user.name = name
    if "avatar" in data:
        current_user.avatar = avatar
    db.session.commit()

    logger.info(f"User profile updated: {current_user.id}")
    return jsonify({"user": user_dict(current_user)})


# ──────────────────────────────────────────────
# PUT /api/auth/password
# ──────────────────────────────────────────────

@auth_bp.route("/password", methods=["PUT"])
@login_required
@limiter.limit("10 per minute")
def change_password():
    data = _json_body()
    current_password = data.get("current_password") or ""
    new_password = data.get("new_password") or ""

    if not isinstance(current_password, str) or not check_password_hash(
        current_user.password_hash, current_password
    ):
        return jsonify({"error": "Current password is incorrect."}), 400
    if not isinstance(new_password, str) or len(new_password) < 8:
        return jsonify({"error": "New password must be at least 8 characters."}), 400

    current_user.password_hash = generate_password_hash(new_password)
    db.session.commit()

    logger.info(f"Password changed: {current_user.id}")
    return jsonify({"success": True})
