"""Card service — CRUD, assignees, comments and votes.

All card text (title, description, label names, comments) is sanitized
with bleach.clean() to strip HTML tags. Cards are appended at the end of
their list; moving and reordering live in ordering_service.

Functions flush but do NOT commit — the caller commits.
"""

import logging
from datetime import datetime, timezone

from taskboard.extensions import db
from taskboard.models.board import BoardMember
from taskboard.models.card import Card
from taskboard.services import ordering_service
from taskboard.utils import parse_datetime, sanitize

logger = logging.getLogger(__name__)


def _clean_title(title):
    title = sanitize(title)
    if not title:
        raise ValueError("Title is required.")
    if len(title) > 200:
        raise ValueError("Title cannot be more than 200 characters.")
    return title


def _clean_description(description):
    description = sanitize(description) or ""
    if len(description) > 2000:
        raise ValueError("Description cannot be more than 2000 characters.")
    return description


def _clean_priority(priority):
    if priority not in Card.PRIORITIES:
        raise ValueError(
            f"Invalid priority '{priority}'. Must be one of: {', '.join(Card.PRIORITIES)}"
        )
    return priority


def _clean_labels(labels):
    if labels is None:
        return []
    if not isinstance(labels, list):
        raise ValueError("Labels must be a list.")
    cleaned = []
    for label in labels:
        if not isinstance(label, dict):
            raise ValueError("Each label must be an object with a name.")
        name = sanitize(label.get("name"))
        if not name:
            raise ValueError("Label name is required.")
        if len(name) > 20:
            raise ValueError("Label name cannot be more than 20 characters.")
        cleaned.append({"name": name, "color": sanitize(label.get("color")) or "#0079bf"})
    return cleaned


def _clean_assignees(board, user_ids):
    """Validate assignee ids: each must be the owner or an active member."""
    if user_ids is None:
        return []
    if not isinstance(user_ids, list) or not all(isinstance(u, str) for u in user_ids):
        raise ValueError("Assignees must be a list of user ids.")
    user_ids = list(dict.fromkeys(user_ids))

    allowed = {board.owner_id}
    members = BoardMember.query.filter(
        BoardMember.board_id == board.id,
        BoardMember.user_id.in_(user_ids),
        BoardMember.is_active.is_(True),
    ).all()
    allowed.update(m.user_id for m in members)

    unknown = [u for u in user_ids if u not in allowed]
    if unknown:
        raise ValueError(f"Assignees must be members of this board: {', '.join(unknown)}")
    return user_ids


def create_card(board_list, title, created_by_id, description=None,
                color=None, priority="medium", due_date=None, labels=None):
    """Append a new card to board_list.

    Raises:
        ValueError: If a field fails validation.
        OrderingConflict: If the list's cards were reordered concurrently.
    """
    title = _clean_title(title)
    description = _clean_description(description)
    priority = _clean_priority(priority or "medium")
    due_date = parse_datetime(due_date)
    labels = _clean_labels(labels)

    position = ordering_service.append(board_list)
    card = Card(
        list_id=board_list.id,
        board_id=board_list.board_id,
        title=title,
        description=description,
        color=sanitize(color) or None,
        priority=priority,
        due_date=due_date,
        labels=labels,
        comments=[],
        assignees=[],
        votes=[],
        position=position,
        created_by_id=created_by_id,
    )
    db.session.add(card)
    board_list.board.touch()
    db.session.flush()

    logger.info(f"Card created: {card.id} list={board_list.id} position={position}")
    return card


def update_card(card, actor_user_id, **fields):
    """Apply field changes to a card.

    Accepted keys: title, description, color, priority, due_date,
    is_completed, is_archived, labels, assignees. list and position are not
    editable here; use ordering_service.
    """
    if "title" in fields:
        card.title = _clean_title(fields["title"])
    if "description" in fields:
        card.description = _clean_description(fields["description"])
    if "color" in fields:
        card.color = sanitize(fields["color"]) or None
    if "priority" in fields:
        card.priority = _clean_priority(fields["priority"])
    if "due_date" in fields:
        card.due_date = parse_datetime(fields["due_date"])
    if "is_completed" in fields:
        card.is_completed = bool(fields["is_completed"])
    if "is_archived" in fields:
        card.is_archived = bool(fields["is_archived"])
    if "labels" in fields:
        card.labels = _clean_labels(fields["labels"])
    if "assignees" in fields:
        card.assignees = _clean_assignees(card.board, fields["assignees"])

    card.updated_at = datetime.now(timezone.utc)
    card.board.touch()
    db.session.flush()

    logger.info(f"Card updated: {card.id} by={actor_user_id}")
    return card


def delete_card(card, actor_user_id):
    """Delete a card. Sibling positions are left as they are."""
    board = card.board
    card_id = card.id
    db.session.delete(card)
    board.touch()
    db.session.flush()
    logger.info(f"Card deleted: {card_id} by={actor_user_id}")


def add_comment(card, author_id, text):
    """Append a comment to the card's thread.

    Returns:
        The comment dict that was stored.

    Raises:
        ValueError: If the comment is empty or too long.
    """
    text = sanitize(text)
    if not text:
        raise ValueError("Comment text required.")
    if len(text) > 1000:
        raise ValueError("Comment cannot be more than 1000 characters.")

    comment = {
        "author_id": author_id,
        "text": text,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    # Reassign so the JSON column is marked dirty.
    card.comments = list(card.comments or []) + [comment]
    card.updated_at = datetime.now(timezone.utc)
    card.board.touch()
    db.session.flush()

    logger.info(f"Comment added: card={card.id} author={author_id}")
    return comment


VOTE_VALUES = (-1, 0, 1)


def add_vote(card, user_id, value):
    """Record user_id's vote on the card, replacing any earlier vote.

    Returns:
        The card's vote total.

    Raises:
        ValueError: If value is not -1, 0 or 1.
    """
    if type(value) is not int or value not in VOTE_VALUES:
        raise ValueError("Vote value must be -1, 0, or 1.")

    vote = {
        "user_id": user_id,
        "value": value,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    others = [v for v in (card.votes or []) if v.get("user_id") != user_id]
    card.votes = others + [vote]
    card.board.touch()
    db.session.flush()

    logger.info(f"Vote recorded: card={card.id} user={user_id} value={value}")
    return vote_count(card)


def vote_count(card):
    return sum(v.get("value", 0) for v in (card.votes or []))
