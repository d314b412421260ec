"""
Route decorators and helpers for board access control.

- board_required(capability): loads the board named by the `board_id` URL
  parameter, authorizes the current user through the access evaluator and
  stores g.board / g.role.
- authorize(board, capability): same check for routes that reach the board
  through a list or card.

Mutating capabilities need a logged-in user (401 otherwise). READ is
evaluated for anonymous callers too, so public boards are readable without
a token.
"""

from functools import wraps

from flask import abort, g
from flask_login import current_user

from taskboard.extensions import db
from taskboard.models.board import Board
from taskboard.services import access_service


def current_user_id():
    """Id of the authenticated user, or None for anonymous requests."""
    if current_user.is_authenticated:
        return current_user.id
    return None


def authorize(board, capability):
    """Authorize the current user for capability on board.

    Sets g.board and g.role ("owner", the member's role, or "viewer" for
    a non-member reading a public board).

    Returns:
        The effective role.

    Raises:
        AuthorizationError: Rendered as a generic 403 by the app.
    """
    if capability == access_service.READ:
        role = access_service.require_access(current_user_id(), board)
    else:
        if not current_user.is_authenticated:
            abort(401)
        actor = access_service.check_access(current_user_id(), board, capability)
        role = access_service.effective_role(actor)
    g.board = board
    g.role = role
    return role


def board_required(capability):
    """Load board_id from the URL and require capability on it."""

    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            board = db.session.get(Board, kwargs.get("board_id"))
            if board is None:
                abort(404)
            authorize(board, capability)
            return f(*args, **kwargs)

        return decorated

    return decorator
