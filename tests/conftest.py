"""Shared test fixtures for the taskboard test suite.

Provides:
- app: Flask app configured for testing (in-memory SQLite, rate limits off)
- client: Flask test client
- db_session: clean database per test (tables created/dropped)
- seed_data: users of every kind, a private and a public board, lists and cards
- auth_headers: bearer-token headers for a seeded user
"""

import pytest
from flask import g
from flask.testing import FlaskClient
from werkzeug.security import generate_password_hash

from taskboard import create_app
from taskboard.extensions import db as _db
from taskboard.models.user import User
from taskboard.services import (
    board_service,
    card_service,
    list_service,
    membership_service,
    token_service,
)


@pytest.fixture(scope="session")
def app():
    """Create the Flask application configured for testing."""
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def db_session(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield _db.session
        _db.session.rollback()
        _db.drop_all()


class FreshUserClient(FlaskClient):
    """Test client that authenticates every request from its own headers.

    Requests reuse the app context held by db_session, so Flask-Login's
    cached g._login_user has to be dropped between requests.
    """

    def open(self, *args, **kwargs):
        g.pop("_login_user", None)
        return super().open(*args, **kwargs)


@pytest.fixture
def client(app):
    """Flask test client."""
    app.test_client_class = FreshUserClient
    return app.test_client()


def _make_user(name, email, password="password123"):
    user = User(
        email=email,
        password_hash=generate_password_hash(password),
        name=name,
    )
    _db.session.add(user)
    _db.session.flush()
    return user


@pytest.fixture
def seed_data(db_session):
    """Seed users, boards, members, lists and cards.

    Private board "Project Alpha" (owned by owner):
        members admin, editor, viewer (active) and former (inactive)
        list "To Do" with cards A(0), C(1), D(2)
        list "Done" (empty)
    Public board "Marketing" (owned by owner, no members)
        list "Ideas" with card "Launch post"
    Other board (owned by outsider)
        list "Elsewhere"

    Returns a dict with all created objects for easy access in tests.
    """
    owner = _make_user("Olivia Owner", "owner@example.com")
    admin = _make_user("Adam Admin", "admin@example.com")
    editor = _make_user("Eddie Editor", "editor@example.com")
    viewer = _make_user("Vera Viewer", "viewer@example.com")
    former = _make_user("Fred Former", "former@example.com")
    outsider = _make_user("Oscar Outsider", "outsider@example.com")

    board = board_service.create_board(owner.id, "Project Alpha", "Main board")
    memberships = {
        role: membership_service.invite_member(board, user.email, role, owner.id)
        for user, role in [(admin, "admin"), (editor, "editor"), (viewer, "viewer")]
    }
    memberships["former"] = membership_service.invite_member(
        board, former.email, "editor", owner.id
    )
    membership_service.set_active(memberships["former"], False, owner.id)

    todo = list_service.create_list(board, "To Do", owner.id)
    done = list_service.create_list(board, "Done", owner.id)
    card_a = card_service.create_card(todo, "A", owner.id)
    card_c = card_service.create_card(todo, "C", owner.id)
    card_d = card_service.create_card(todo, "D", owner.id)

    public_board = board_service.create_board(
        owner.id, "Marketing", is_public=True
    )
    ideas = list_service.create_list(public_board, "Ideas", owner.id)
    public_card = card_service.create_card(ideas, "Launch post", owner.id)

    other_board = board_service.create_board(outsider.id, "Other Board")
    elsewhere = list_service.create_list(other_board, "Elsewhere", outsider.id)

    _db.session.commit()

    return {
        "owner": owner,
        "admin": admin,
        "editor": editor,
        "viewer": viewer,
        "former": former,
        "outsider": outsider,
        "board": board,
        "memberships": memberships,
        "todo": todo,
        "done": done,
        "card_a": card_a,
        "card_c": card_c,
        "card_d": card_d,
        "public_board": public_board,
        "ideas": ideas,
        "public_card": public_card,
        "other_board": other_board,
        "elsewhere": elsewhere,
    }


@pytest.fixture
def auth_headers(app):
    """Return a function building Authorization headers for a user."""

    def _headers(user):
        return {"Authorization": f"Bearer {token_service.create_access_token(user.id)}"}

    return _headers
