"""Cards blueprint — /api/cards/*

Route Map:
  POST   /api/cards                 — Create card in a list     (create_cards)
  PUT    /api/cards/reorder         — Bulk reorder one list     (move_cards)
  GET    /api/cards/<id>            — Card detail with comments (read)
  PUT    /api/cards/<id>            — Update, assign, archive   (edit_cards)
  DELETE /api/cards/<id>            — Delete card               (delete_cards)
  PATCH  /api/cards/<id>/move       — Move within or across lists (move_cards)
  POST   /api/cards/<id>/comments   — Add comment               (comment)
  POST   /api/cards/<id>/vote       — Vote -1, 0 or 1           (comment)
"""

from flask import Blueprint, abort, jsonify, request
from flask_login import current_user

from taskboard.decorators import authorize
from taskboard.extensions import db
from taskboard.models.board_list import BoardList
from taskboard.models.card import Card
from taskboard.serializers import card_dict
from taskboard.services import access_service, card_service, ordering_service

cards_bp = Blueprint("cards", __name__, url_prefix="/api/cards")

CARD_FIELDS = (
    "title", "description", "color", "priority", "due_date",
    "is_completed", "is_archived", "labels", "assignees",
)


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description="Request body must be a JSON object.")
    return data


def _get_card_or_404(card_id):
    card = db.session.get(Card, card_id)
    if card is None:
        abort(404, description="Card not found.")
    return card


def _get_list_or_404(list_id):
    if list_id is not None and not isinstance(list_id, str):
        abort(400, description="list_id must be a string.")
    board_list = db.session.get(BoardList, list_id) if list_id else None
    if board_list is None:
        abort(404, description="List not found.")
    return board_list


# ──────────────────────────────────────────────
# Create / bulk reorder
# ──────────────────────────────────────────────

@cards_bp.route("", methods=["POST"])
def create_card():
    data = _json_body()
    board_list = _get_list_or_404(data.get("list_id"))
    authorize(board_list.board, "create_cards")

    try:
        card = card_service.create_card(
            board_list,
            title=data.get("title"),
            created_by_id=current_user.id,
            description=data.get("description"),
            color=data.get("color"),
            priority=data.get("priority"),
            due_date=data.get("due_date"),
            labels=data.get("labels"),
        )
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    db.session.commit()
    return jsonify({"card": card_dict(card)}), 201


@cards_bp.route("/reorder", methods=["PUT"])
def reorder_cards():
    """Assign positions to several cards of one list in a single batch."""
    data = _json_body()
    board_list = _get_list_or_404(data.get("list_id"))
    authorize(board_list.board, "move_cards")

    entries = data.get("card_orders")
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        return jsonify({"error": "card_orders must be a list of {card_id, position}."}), 400

    assignments = [(e.get("card_id"), e.get("position")) for e in entries]
    try:
        cards = ordering_service.bulk_reorder(board_list, assignments)
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    db.session.commit()
    return jsonify({"cards": [card_dict(c) for c in cards]})


# ──────────────────────────────────────────────
# Single card
# ──────────────────────────────────────────────

@cards_bp.route("/<card_id>", methods=["GET"])
def get_card(card_id):
    card = _get_card_or_404(card_id)
    authorize(card.board, access_service.READ)
    data = card_dict(card)
    data["comments"] = list(card.comments or [])
    return jsonify({"card": data})


@cards_bp.route("/<card_id>", methods=["PUT"])
def update_card(card_id):
    card = _get_card_or_404(card_id)
    authorize(card.board, "edit_cards")
    data = _json_body()
    fields = {key: data[key] for key in CARD_FIELDS if key in data}
    try:
        card_service.update_card(card, current_user.id, **fields)
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    db.session.commit()
    return jsonify({"card": card_dict(card)})


@cards_bp.route("/<card_id>", methods=["DELETE"])
def delete_card(card_id):
    card = _get_card_or_404(card_id)
    authorize(card.board, "delete_cards")
    card_service.delete_card(card, current_user.id)
    db.session.commit()
    return jsonify({"success": True})


@cards_bp.route("/<card_id>/move", methods=["PATCH"])
def move_card(card_id):
    """Move a card to a position in its own list or in another list.

    Body: {"list_id": optional target list, "position": int}. Without a
    list_id the card moves within its current list and position is
    required; with one, position defaults to 0.
    """
    card = _get_card_or_404(card_id)
    authorize(card.board, "move_cards")
    data = _json_body()

    try:
        target_list_id = data.get("list_id")
        if target_list_id and target_list_id != card.list_id:
            new_list = _get_list_or_404(target_list_id)
            ordering_service.move_across_parent(card, new_list, data.get("position"))
        else:
            ordering_service.move_within_parent(card, data.get("position"))
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    db.session.commit()
    return jsonify({"card": card_dict(card)})


@cards_bp.route("/<card_id>/comments", methods=["POST"])
def add_comment(card_id):
    card = _get_card_or_404(card_id)
    authorize(card.board, "comment")
    data = _json_body()
    try:
        comment = card_service.add_comment(card, current_user.id, data.get("text"))
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    db.session.commit()
    return jsonify({"comment": comment, "card": card_dict(card)}), 201


@cards_bp.route("/<card_id>/vote", methods=["POST"])
def vote(card_id):
    card = _get_card_or_404(card_id)
    authorize(card.board, "comment")
    data = _json_body()
    try:
        total = card_service.add_vote(card, current_user.id, data.get("value"))
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    db.session.commit()
    return jsonify({"vote_count": total, "card": card_dict(card)})
