"""Membership service — invite, role change, activation, removal.

Role and permissions are always written together through assign_role(),
so a membership row never holds a permission set that disagrees with its
role. Authorization of the acting user happens in the route (via the access
evaluator) before any of these are called.

Functions flush but do NOT commit — the caller commits.
"""

import logging
from datetime import datetime, timezone

from taskboard.extensions import db
from taskboard.models.board import BoardMember
from taskboard.models.user import User
from taskboard.services import permission_service

logger = logging.getLogger(__name__)


def assign_role(membership, role):
    """Set role and its derived permissions on a membership in one write.

    Raises:
        InvalidRole: If role is unknown. The membership is left untouched.
    """
    permissions = permission_service.resolve(role)
    membership.role = role
    membership.permissions = permissions
    return membership


def invite_member(board, email, role, invited_by_id):
    """Add the user with this email to board with role.

    Args:
        board: Board to add the member to.
        email: Email of an existing user.
        role: One of permission_service.ROLES.
        invited_by_id: User performing the invite.

    Returns:
        The created BoardMember.

    Raises:
        InvalidRole: If role is unknown.
        LookupError: If no user has this email.
        ValueError: If the user owns the board or is already a member.
    """
    email = (email or "").lower().strip()
    user = User.query.filter_by(email=email).first()
    if user is None:
        raise LookupError("User not found.")

    if user.id == board.owner_id:
        raise ValueError("The board owner cannot be invited as a member.")

    existing = BoardMember.query.filter_by(
        board_id=board.id, user_id=user.id
    ).first()
    if existing is not None:
        raise ValueError("User is already a member of this board.")

    now = datetime.now(timezone.utc)
    membership = BoardMember(
        board_id=board.id,
        user_id=user.id,
        invited_by_id=invited_by_id,
        invited_at=now,
        joined_at=now,
        is_active=True,
    )
    assign_role(membership, role)
    db.session.add(membership)
    board.touch()
    db.session.flush()

    logger.info(
        f"Member invited: board={board.id} user={user.id} role={role} "
        f"by={invited_by_id}"
    )
    return membership


def change_role(membership, role, actor_user_id):
    """Change a member's role; permissions are re-derived in the same flush."""
    old_role = membership.role
    if old_role == role:
        return membership  # no-op

    assign_role(membership, role)
    membership.board.touch()
    db.session.flush()

    logger.info(
        f"Member role changed: board={membership.board_id} "
        f"user={membership.user_id} {old_role} -> {role} by={actor_user_id}"
    )
    return membership


def set_active(membership, is_active, actor_user_id):
    """Soft-enable or soft-disable a membership without deleting it."""
    is_active = bool(is_active)
    if membership.is_active == is_active:
        return membership

    membership.is_active = is_active
    membership.board.touch()
    db.session.flush()

    logger.info(
        f"Member {'activated' if is_active else 'deactivated'}: "
        f"board={membership.board_id} user={membership.user_id} by={actor_user_id}"
    )
    return membership


def remove_member(membership, actor_user_id):
    board = membership.board
    db.session.delete(membership)
    board.touch()
    db.session.flush()

    logger.info(
        f"Member removed: board={board.id} user={membership.user_id} "
        f"by={actor_user_id}"
    )


def list_members(board, include_inactive=False):
    """Members of a board, admins first, then by invite time."""
    query = BoardMember.query.filter_by(board_id=board.id)
    if not include_inactive:
        query = query.filter_by(is_active=True)
    members = query.order_by(BoardMember.invited_at.asc()).all()
    rank = {role: i for i, role in enumerate(permission_service.ROLES)}
    return sorted(members, key=lambda m: rank.get(m.role, len(rank)))
