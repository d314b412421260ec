"""Board service — create, update, delete and list boards.

The creator becomes the board's owner. No membership row is written for
the owner; the access evaluator recognises ownership directly.

Functions flush but do NOT commit — the caller commits.
"""

import logging

from taskboard.extensions import db
from taskboard.models.board import Board, BoardMember
from taskboard.utils import sanitize

logger = logging.getLogger(__name__)

SORT_FIELDS = ("created_at", "updated_at", "title", "last_activity")


def _clean_title(title):
    title = sanitize(title)
    if not title:
        raise ValueError("Title is required.")
    if len(title) > 100:
        raise ValueError("Title cannot be more than 100 characters.")
    return title


def _clean_description(description):
    description = sanitize(description)
    if description and len(description) > 500:
        raise ValueError("Description cannot be more than 500 characters.")
    return description or None


def _clean_tags(tags):
    if tags is None:
        return []
    if not isinstance(tags, list):
        raise ValueError("Tags must be a list.")
    cleaned = []
    for tag in tags:
        tag = sanitize(tag)
        if not tag:
            continue
        if len(tag) > 20:
            raise ValueError("Tag cannot be more than 20 characters.")
        cleaned.append(tag)
    return cleaned


def create_board(owner_id, title, description=None, background=None,
                 is_public=False, tags=None):
    """Create a board owned by owner_id.

    Raises:
        ValueError: If a field fails validation.
    """
    board = Board(
        owner_id=owner_id,
        title=_clean_title(title),
        description=_clean_description(description),
        background=sanitize(background) or "#0079bf",
        is_public=bool(is_public),
        tags=_clean_tags(tags),
    )
    board.touch()
    db.session.add(board)
    db.session.flush()

    logger.info(f"Board created: {board.id} owner={owner_id}")
    return board


def update_board(board, actor_user_id, **fields):
    """Apply the provided fields to a board.

    Accepted keys: title, description, background, is_public, is_archived,
    tags. Unknown keys are ignored.
    """
    if "title" in fields:
        board.title = _clean_title(fields["title"])
    if "description" in fields:
        board.description = _clean_description(fields["description"])
    if "background" in fields:
        board.background = sanitize(fields["background"]) or "#0079bf"
    if "is_public" in fields:
        board.is_public = bool(fields["is_public"])
    if "is_archived" in fields:
        board.is_archived = bool(fields["is_archived"])
    if "tags" in fields:
        board.tags = _clean_tags(fields["tags"])

    board.touch()
    db.session.flush()

    logger.info(f"Board updated: {board.id} by={actor_user_id}")
    return board


def delete_board(board, actor_user_id):
    """Delete a board with its lists, cards and memberships."""
    board_id = board.id
    db.session.delete(board)
    db.session.flush()
    logger.info(f"Board deleted: {board_id} by={actor_user_id}")


def list_boards_for_user(user_id, search=None, page=1, limit=10,
                         sort="last_activity", order="desc",
                         include_archived=False):
    """Boards the user owns or is an active member of.

    Returns:
        Tuple of (boards, total_count).
    """
    if sort not in SORT_FIELDS:
        raise ValueError(
            f"Invalid sort field '{sort}'. Must be one of: {', '.join(SORT_FIELDS)}"
        )
    if order not in ("asc", "desc"):
        raise ValueError("Order must be asc or desc.")

    member_board_ids = db.select(BoardMember.board_id).where(
        BoardMember.user_id == user_id, BoardMember.is_active.is_(True)
    )
    query = Board.query.filter(
        db.or_(Board.owner_id == user_id, Board.id.in_(member_board_ids))
    )
    if not include_archived:
        query = query.filter(Board.is_archived.is_(False))
    if search:
        query = query.filter(Board.title.ilike(f"%{search}%"))

    total = query.count()
    column = getattr(Board, sort)
    query = query.order_by(column.desc() if order == "desc" else column.asc(), Board.id)
    boards = query.offset((page - 1) * limit).limit(limit).all()
    return boards, total
