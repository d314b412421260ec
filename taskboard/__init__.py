import os
import logging

import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from werkzeug.security import generate_password_hash

from taskboard.config import config_by_name
from taskboard.errors import (
    AuthorizationError,
    CrossBoardMoveNotAllowed,
    InvalidRole,
    OrderingConflict,
    OrderingMismatch,
)
from taskboard.extensions import db, migrate, login_manager, limiter

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """Application factory."""

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # --- Validate required env vars (skip in testing) ---
    if config_name != "testing":
        try:
            config_by_name[config_name].validate()
        except RuntimeError as e:
            app.logger.warning(f"Config validation: {e}")

    # --- Init extensions ---
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    # --- Import models so Alembic can discover them ---
    with app.app_context():
        from taskboard import models  # noqa: F401

    # --- Register blueprints ---
    from taskboard.blueprints.auth import auth_bp
    from taskboard.blueprints.boards import boards_bp
    from taskboard.blueprints.lists import lists_bp
    from taskboard.blueprints.cards import cards_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(boards_bp)
    app.register_blueprint(lists_bp)
    app.register_blueprint(cards_bp)

    @app.route("/api/health")
    def health():
        return jsonify({"status": "ok"})

    register_error_handlers(app)

    # --- CLI commands ---
    register_cli(app)

    # --- Security headers ---
    @app.after_request
    def add_security_headers(response):
        """Add security headers to every response."""
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = (
            "camera=(), microphone=(), geolocation=(), payment=()"
        )
        # JSON only: nothing to load, nothing to frame
        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; frame-ancestors 'none'; base-uri 'none';"
        )
        if not app.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response

    # --- Logging ---
    if not app.debug:
        logging.basicConfig(level=logging.INFO)

    return app


def register_error_handlers(app):
    """Map domain errors and HTTP errors to JSON bodies.

    Every handler rolls the session back so a failed request leaves no
    partial writes behind.
    """

    @app.errorhandler(AuthorizationError)
    def authorization_error(e):
        db.session.rollback()
        # The kind (AccessDenied / InsufficientPermission) is for logs only.
        logger.info(f"{type(e).__name__}: {e.context}")
        return jsonify({"error": "Not authorized"}), 403

    @app.errorhandler(InvalidRole)
    def invalid_role(e):
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(OrderingMismatch)
    def ordering_mismatch(e):
        db.session.rollback()
        return jsonify({
            "error": str(e),
            "item_ids": e.context.get("item_ids", []),
        }), 400

    @app.errorhandler(CrossBoardMoveNotAllowed)
    def cross_board_move(e):
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(OrderingConflict)
    def ordering_conflict(e):
        db.session.rollback()
        return jsonify({"error": str(e)}), 409

    @app.errorhandler(HTTPException)
    def http_error(e):
        db.session.rollback()
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(500)
    def server_error(e):
        db.session.rollback()
        logger.error("Unhandled error", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500


def register_cli(app):
    """Register custom CLI commands with the Flask app."""

    @app.cli.command("seed-demo")
    @click.option("--password", default="Password123!", help="Password for every demo user")
    def seed_demo(password):
        """Create demo users and a board with one member per role.

        Usage:
            flask seed-demo
            flask seed-demo --password s3cret-pass
        """
        from taskboard.models.user import User
        from taskboard.services import (
            board_service,
            card_service,
            list_service,
            membership_service,
        )

        users = {}
        for name, email in [
            ("Demo Owner", "owner@taskboard.local"),
            ("John Doe", "john@example.com"),
            ("Jane Smith", "jane@example.com"),
            ("Bob Wilson", "bob@example.com"),
        ]:
            user = User.query.filter_by(email=email).first()
            if user:
                click.echo(f"User already exists: {email}")
            else:
                user = User(
                    email=email,
                    password_hash=generate_password_hash(password),
                    name=name,
                )
                db.session.add(user)
                db.session.flush()
                click.echo(f"Created user: {email}")
            users[email] = user

        owner = users["owner@taskboard.local"]
        board = board_service.create_board(
            owner_id=owner.id,
            title="Project Alpha",
            description="Main project board for Alpha development",
            background="#3B82F6",
        )
        for email, role in [
            ("john@example.com", "admin"),
            ("jane@example.com", "editor"),
            ("bob@example.com", "viewer"),
        ]:
            membership_service.invite_member(board, email, role, invited_by_id=owner.id)

        for list_title, card_titles in [
            ("To Do", ["Write project brief", "Collect requirements"]),
            ("In Progress", ["Design database schema"]),
            ("Done", ["Kickoff meeting"]),
        ]:
            board_list = list_service.create_list(board, list_title, owner.id)
            for card_title in card_titles:
                card_service.create_card(board_list, card_title, owner.id)

        board_service.create_board(
            owner_id=owner.id,
            title="Marketing Campaign",
            description="Marketing team collaboration board",
            background="#10B981",
            is_public=True,
        )

        db.session.commit()

        click.echo("")
        click.echo("=" * 60)
        click.echo("Demo data created successfully!")
        click.echo("=" * 60)
        click.echo(f"  Board:   {board.title} (id: {board.id})")
        click.echo(f"  Owner:   owner@taskboard.local / {password}")
        click.echo("  Admin:   john@example.com")
        click.echo("  Editor:  jane@example.com")
        click.echo("  Viewer:  bob@example.com")
        click.echo("=" * 60)
