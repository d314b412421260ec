"""List service — create, update, archive and delete lists.

New lists are appended after the board's last list. Positions are never
written here except through ordering_service; deleting a list leaves a gap.

Functions flush but do NOT commit — the caller commits.
"""

import logging

from taskboard.extensions import db
from taskboard.models.board_list import BoardList
from taskboard.services import ordering_service
from taskboard.utils import sanitize

logger = logging.getLogger(__name__)


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


def create_list(board, title, created_by_id, description=None, color=None):
    """Append a new list to board.

    Raises:
        ValueError: If a field fails validation.
        OrderingConflict: If the board's lists were reordered concurrently.
    """
    title = _clean_title(title)
    description = _clean_description(description)

    position = ordering_service.append(board)
    board_list = BoardList(
        board_id=board.id,
        title=title,
        description=description,
        color=sanitize(color) or "#0079bf",
        position=position,
        created_by_id=created_by_id,
    )
    db.session.add(board_list)
    board.touch()
    db.session.flush()

    logger.info(f"List created: {board_list.id} board={board.id} position={position}")
    return board_list


def update_list(board_list, actor_user_id, **fields):
    """Apply title, description, color and is_archived changes."""
    if "title" in fields:
        board_list.title = _clean_title(fields["title"])
    if "description" in fields:
        board_list.description = _clean_description(fields["description"])
    if "color" in fields:
        board_list.color = sanitize(fields["color"]) or "#0079bf"
    if "is_archived" in fields:
        board_list.is_archived = bool(fields["is_archived"])

    board_list.board.touch()
    db.session.flush()

    logger.info(f"List updated: {board_list.id} by={actor_user_id}")
    return board_list


def delete_list(board_list, actor_user_id):
    """Delete a list and its cards. Sibling positions are left as they are."""
    board = board_list.board
    list_id = board_list.id
    db.session.delete(board_list)
    board.touch()
    db.session.flush()
    logger.info(f"List deleted: {list_id} board={board.id} by={actor_user_id}")
