"""Lists blueprint — /api/lists/*

Lists are reached by id, so each route loads the list first and then
authorizes against its board.
"""

from flask import Blueprint, abort, jsonify, request
from flask_login import current_user

from taskboard.decorators import authorize
from taskboard.extensions import db
from taskboard.models.board import Board
from taskboard.models.board_list import BoardList
from taskboard.serializers import card_dict, list_dict
from taskboard.services import access_service, list_service, ordering_service
from taskboard.utils import parse_bool

lists_bp = Blueprint("lists", __name__, url_prefix="/api/lists")

LIST_FIELDS = ("title", "description", "color", "is_archived")


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description="Request body must be a JSON object.")
    return data


def _get_list_or_404(list_id):
    if list_id is not None and not isinstance(list_id, str):
        abort(400, description="list_id must be a string.")
    board_list = db.session.get(BoardList, list_id) if list_id else None
    if board_list is None:
        abort(404, description="List not found.")
    return board_list


@lists_bp.route("", methods=["POST"])
def create_list():
    data = _json_body()
    board_id = data.get("board_id")
    if board_id is not None and not isinstance(board_id, str):
        abort(400, description="board_id must be a string.")
    board = db.session.get(Board, board_id) if board_id else None
    if board is None:
        abort(404, description="Board not found.")
    authorize(board, "create_lists")

    try:
        board_list = list_service.create_list(
            board,
            title=data.get("title"),
            created_by_id=current_user.id,
            description=data.get("description"),
            color=data.get("color"),
        )
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    db.session.commit()
    return jsonify({"list": list_dict(board_list, cards=[])}), 201


@lists_bp.route("/<list_id>", methods=["GET"])
def get_list(list_id):
    board_list = _get_list_or_404(list_id)
    authorize(board_list.board, access_service.READ)
    cards = ordering_service.sorted_siblings(
        board_list, include_archived=parse_bool(request.args.get("include_archived"))
    )
    return jsonify({"list": list_dict(board_list, cards=cards)})


@lists_bp.route("/<list_id>", methods=["PUT"])
def update_list(list_id):
    board_list = _get_list_or_404(list_id)
    authorize(board_list.board, "edit_lists")
    data = _json_body()
    fields = {key: data[key] for key in LIST_FIELDS if key in data}
    try:
        list_service.update_list(board_list, current_user.id, **fields)
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    db.session.commit()
    return jsonify({"list": list_dict(board_list)})


@lists_bp.route("/<list_id>", methods=["DELETE"])
def delete_list(list_id):
    board_list = _get_list_or_404(list_id)
    authorize(board_list.board, "delete_lists")
    list_service.delete_list(board_list, current_user.id)
    db.session.commit()
    return jsonify({"success": True})


@lists_bp.route("/<list_id>/reorder", methods=["PUT"])
def reorder_list(list_id):
    """Move one list to a new position within its board."""
    board_list = _get_list_or_404(list_id)
    authorize(board_list.board, "edit_lists")
    data = _json_body()
    try:
        ordering_service.move_within_parent(board_list, data.get("position"))
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    db.session.commit()
    lists = ordering_service.sorted_siblings(board_list.board)
    return jsonify({"list": list_dict(board_list), "lists": [list_dict(lst) for lst in lists]})


@lists_bp.route("/<list_id>/cards", methods=["GET"])
def list_cards(list_id):
    board_list = _get_list_or_404(list_id)
    authorize(board_list.board, access_service.READ)
    cards = ordering_service.sorted_siblings(
        board_list, include_archived=parse_bool(request.args.get("include_archived"))
    )
    return jsonify({"cards": [card_dict(c) for c in cards]})
