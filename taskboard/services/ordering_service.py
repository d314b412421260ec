"""Ordering service — integer positions for lists within a board and cards
within a list.

Positions are unique-per-parent comparison keys, not dense indices. Gaps
left by deletes and cross-list moves are never closed. Display order is
(position, created_at, id), so the rare tie after a cross-list move still
sorts deterministically.

Every operation that reads-then-writes a parent's positions first claims
the parent with a compare-and-set on its order_version column:

    UPDATE <parent> SET order_version = order_version + 1
     WHERE id = :id AND order_version = :seen

If another request changed the parent's ordering since this one loaded it,
no row matches and OrderingConflict is raised; nothing has been written and
the caller may reload and retry. On PostgreSQL the UPDATE also row-locks
the parent until commit, so concurrent appends queue instead of colliding.

Functions flush but do NOT commit — the caller commits, so all position
changes of one call become visible together or not at all.
"""

import logging

from taskboard.errors import CrossBoardMoveNotAllowed, OrderingConflict, OrderingMismatch
from taskboard.extensions import db
from taskboard.models.board import Board
from taskboard.models.board_list import BoardList
from taskboard.models.card import Card

logger = logging.getLogger(__name__)


# ─── Parent / sibling lookup ────────────────────────────────────

def _sibling_query_parts(parent):
    """(child model, foreign-key column) for the children of parent."""
    if isinstance(parent, Board):
        return BoardList, BoardList.board_id
    if isinstance(parent, BoardList):
        return Card, Card.list_id
    raise TypeError(f"{type(parent).__name__} does not order children.")


def parent_of(item):
    if isinstance(item, BoardList):
        return item.board
    if isinstance(item, Card):
        return item.list
    raise TypeError(f"{type(item).__name__} is not an ordered item.")


def _max_position(parent):
    model, parent_fk = _sibling_query_parts(parent)
    return (
        db.session.query(db.func.max(model.position))
        .filter(parent_fk == parent.id)
        .scalar()
    )


def _claim(parent):
    """Compare-and-set the parent's order_version, or raise OrderingConflict."""
    model = type(parent)
    seen = parent.order_version
    result = db.session.execute(
        db.update(model)
        .where(model.id == parent.id, model.order_version == seen)
        .values(order_version=model.order_version + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.warning(
            f"Ordering conflict on {model.__tablename__} {parent.id} "
            f"(seen version {seen})"
        )
        raise OrderingConflict(parent_id=parent.id, seen_version=seen)
    db.session.expire(parent, ["order_version"])


def _check_position(position):
    if isinstance(position, bool) or not isinstance(position, int):
        raise ValueError("Position must be an integer.")
    if position < 0:
        raise ValueError("Position must be a non-negative integer.")


# ─── Operations ─────────────────────────────────────────────────

def append(parent):
    """Claim the parent and return the position for a new last child.

    1 + the highest position among all children (archived included), or 0
    when the parent has none.
    """
    _claim(parent)
    current_max = _max_position(parent)
    return 0 if current_max is None else current_max + 1


def move_within_parent(item, new_position):
    """Move item to new_position among its siblings, shifting those between.

    Moving forward decrements siblings in (old, new]; moving backward
    increments siblings in [new, old). A target at or beyond the current
    maximum lands the item at the end. Same position is a no-op.

    Returns:
        The item.

    Raises:
        ValueError: If new_position is not a non-negative integer.
        OrderingConflict: If the parent's ordering changed concurrently.
    """
    _check_position(new_position)
    old_position = item.position
    if new_position == old_position:
        return item

    parent = parent_of(item)
    _claim(parent)

    current_max = _max_position(parent)
    if current_max is not None and new_position > current_max:
        new_position = current_max
    if new_position == old_position:
        return item

    model, parent_fk = _sibling_query_parts(parent)
    siblings = db.update(model).where(
        parent_fk == parent.id,
        model.id != item.id,
    )
    if new_position > old_position:
        shift = siblings.where(
            model.position > old_position,
            model.position <= new_position,
        ).values(position=model.position - 1)
    else:
        shift = siblings.where(
            model.position >= new_position,
            model.position < old_position,
        ).values(position=model.position + 1)
    db.session.execute(shift.execution_options(synchronize_session="fetch"))

    item.position = new_position
    item.board.touch()
    db.session.flush()

    logger.info(
        f"{model.__name__} {item.id} moved {old_position} -> {new_position} "
        f"in {parent.id}"
    )
    return item


def move_across_parent(card, new_list, new_position=None):
    """Move a card to another list of the same board.

    The card takes new_position (default 0) in the new list. Neither list is
    renumbered: the old list keeps its gap and a collision in the new list
    is tolerated (display order breaks the tie). Moving to the card's own
    list is a move_within_parent.

    Raises:
        CrossBoardMoveNotAllowed: If new_list belongs to another board.
        ValueError: If new_position is not a non-negative integer.
        OrderingConflict: If the new list's ordering changed concurrently.
    """
    if new_list.board_id != card.board_id:
        raise CrossBoardMoveNotAllowed(
            card_id=card.id,
            board_id=card.board_id,
            target_board_id=new_list.board_id,
        )

    if new_position is None:
        new_position = 0
    _check_position(new_position)

    if new_list.id == card.list_id:
        return move_within_parent(card, new_position)

    _claim(new_list)
    old_list_id = card.list_id
    card.list = new_list
    card.position = new_position
    card.board.touch()
    db.session.flush()

    logger.info(
        f"Card {card.id} moved {old_list_id} -> {new_list.id} at {new_position}"
    )
    return card


def bulk_reorder(parent, assignments):
    """Apply several (item_id, position) assignments to children of parent.

    Everything is validated before anything is written: one foreign item
    rejects the whole batch.

    Args:
        parent: Board (orders its lists) or BoardList (orders its cards).
        assignments: Iterable of (item_id, position) pairs.

    Returns:
        The reordered items, in display order.

    Raises:
        OrderingMismatch: If any item is missing or belongs to another parent.
        ValueError: If an id is not a string, an item or a position repeats,
            or a position is invalid.
        OrderingConflict: If the parent's ordering changed concurrently.
    """
    assignments = [(item_id, position) for item_id, position in assignments]
    item_ids = [item_id for item_id, _ in assignments]
    positions = [position for _, position in assignments]

    for position in positions:
        _check_position(position)
    if not all(isinstance(item_id, str) for item_id in item_ids):
        raise ValueError("Item ids must be strings.")
    if len(set(item_ids)) != len(item_ids):
        raise ValueError("Each item may appear only once in a reorder.")
    if len(set(positions)) != len(positions):
        raise ValueError("Each position may appear only once in a reorder.")

    model, parent_fk = _sibling_query_parts(parent)
    items = []
    if item_ids:
        items = model.query.filter(
            model.id.in_(item_ids), parent_fk == parent.id
        ).all()
    if len(items) != len(item_ids):
        found = {item.id for item in items}
        missing = [item_id for item_id in item_ids if item_id not in found]
        raise OrderingMismatch(parent_id=parent.id, item_ids=missing)

    if not items:
        return []

    _claim(parent)
    by_id = {item.id: item for item in items}
    for item_id, position in assignments:
        by_id[item_id].position = position

    board = parent if isinstance(parent, Board) else parent.board
    board.touch()
    db.session.flush()

    logger.info(
        f"Bulk reorder of {len(items)} {model.__tablename__} in {parent.id}"
    )
    return sorted(items, key=_display_key)


def sorted_siblings(parent, include_archived=False):
    """Children of parent in display order."""
    model, parent_fk = _sibling_query_parts(parent)
    query = model.query.filter(parent_fk == parent.id)
    if not include_archived:
        query = query.filter(model.is_archived.is_(False))
    return query.order_by(
        model.position.asc(), model.created_at.asc(), model.id.asc()
    ).all()


def _display_key(item):
    return (item.position, item.created_at is None, item.created_at, item.id)
