"""Access evaluator — the single answer to "can user X do Y on board Z".

Every read and mutating route authorizes through check_access() (usually
via taskboard.decorators). Nothing else compares owner ids or roles.

The acting user is resolved once per request into one of three actors:

    Owner      the board's owner; every capability, no membership row
    Member     an active BoardMember; capabilities from its permission set
    Anonymous  no token, or no active membership on this board

Evaluation order (first match wins):
    1. Owner                              -> allow
    2. capability == READ, board public   -> allow (read-only, viewer-equivalent)
    3. not a Member                       -> AccessDenied
    4. membership grants capability       -> allow, else InsufficientPermission

READ is held by every active member regardless of role. The public-board
bypass never extends to mutating capabilities.
"""

from dataclasses import dataclass
from typing import Optional

from taskboard.errors import AccessDenied, AuthorizationError, InsufficientPermission
from taskboard.models.board import Board, BoardMember
from taskboard.services.permission_service import CAPABILITIES

READ = "read"


@dataclass(frozen=True)
class Owner:
    user_id: str

    role = "owner"


@dataclass(frozen=True)
class Member:
    membership: BoardMember

    @property
    def user_id(self) -> str:
        return self.membership.user_id

    @property
    def role(self) -> str:
        return self.membership.role


@dataclass(frozen=True)
class Anonymous:
    user_id: Optional[str] = None

    role = None


def resolve_actor(user_id: Optional[str], board: Board):
    """Classify user_id relative to board as Owner, Member or Anonymous."""
    if user_id is None:
        return Anonymous()
    if board.owner_id == user_id:
        return Owner(user_id)

    membership = BoardMember.query.filter_by(
        board_id=board.id,
        user_id=user_id,
        is_active=True,
    ).first()
    if membership is None:
        return Anonymous(user_id)
    return Member(membership)


def authorize_actor(actor, board: Board, capability: str) -> None:
    """Raise unless actor may perform capability on board."""
    _check_capability_name(capability)

    if isinstance(actor, Owner):
        return
    if capability == READ and board.is_public:
        return
    if not isinstance(actor, Member):
        raise AccessDenied(
            board_id=board.id, user_id=actor.user_id, capability=capability
        )
    if capability == READ or actor.membership.has_permission(capability):
        return
    raise InsufficientPermission(
        board_id=board.id,
        user_id=actor.user_id,
        capability=capability,
        role=actor.role,
    )


def check_access(user_id: Optional[str], board: Board, capability: str):
    """Resolve the actor and authorize it.

    Returns:
        The resolved actor (Owner, Member or Anonymous).

    Raises:
        AccessDenied: No relationship to the board.
        InsufficientPermission: Member without the capability.
        ValueError: Unknown capability name.
    """
    actor = resolve_actor(user_id, board)
    authorize_actor(actor, board, capability)
    return actor


def can_act(user_id: Optional[str], board: Board, capability: str) -> bool:
    try:
        check_access(user_id, board, capability)
    except AuthorizationError:
        return False
    return True


def require_access(user_id: Optional[str], board: Board) -> str:
    """Read access check that also reports the effective role.

    Returns "owner", the member's role, or "viewer" for a non-member
    reading a public board.
    """
    actor = check_access(user_id, board, READ)
    return effective_role(actor)


def effective_role(actor) -> str:
    if isinstance(actor, Anonymous):
        return "viewer"
    return actor.role


def _check_capability_name(capability):
    if capability != READ and capability not in CAPABILITIES:
        raise ValueError(f"Unknown capability '{capability}'.")
