"""Boards blueprint — /api/boards/*

Every route authorizes through taskboard.decorators (which delegates to the
access evaluator). Read routes also serve anonymous callers for public
boards.

Route Map:
  GET    /api/boards                               — My boards (owned + member)
  POST   /api/boards                               — Create board
  GET    /api/boards/<id>                          — Board with lists and cards
  PUT    /api/boards/<id>                          — Update board       (edit_board)
  DELETE /api/boards/<id>                          — Delete board       (delete_board)
  GET    /api/boards/<id>/lists                    — Lists of a board
  PUT    /api/boards/<id>/lists/reorder            — Bulk reorder lists (edit_lists)
  GET    /api/boards/<id>/members                  — Active members
  POST   /api/boards/<id>/members                  — Invite member      (invite_members)
  PUT    /api/boards/<id>/members/<member_id>      — Role / activation  (invite_members)
  DELETE /api/boards/<id>/members/<member_id>      — Remove member      (remove_members)
"""

from flask import Blueprint, abort, current_app, g, jsonify, request
from flask_login import current_user, login_required

from taskboard.decorators import board_required
from taskboard.extensions import db
from taskboard.models.board import BoardMember
from taskboard.serializers import board_dict, list_dict, member_dict
from taskboard.services import (
    access_service,
    board_service,
    membership_service,
    ordering_service,
)
from taskboard.utils import parse_bool

boards_bp = Blueprint("boards", __name__, url_prefix="/api/boards")

BOARD_FIELDS = ("title", "description", "background", "is_public", "is_archived", "tags")


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description="Request body must be a JSON object.")
    return data


def _int_arg(name, default, minimum, maximum=None):
    raw = request.args.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        abort(400, description=f"{name} must be an integer.")
    if value < minimum or (maximum is not None and value > maximum):
        abort(400, description=f"{name} is out of range.")
    return value


def _get_membership(board_id, member_id):
    membership = BoardMember.query.filter_by(id=member_id, board_id=board_id).first()
    if membership is None:
        abort(404, description="Member not found.")
    return membership


# ─── Boards ──────────────────────────────────────────────────────

@boards_bp.route("", methods=["GET"])
@login_required
def list_boards():
    page = _int_arg("page", 1, 1)
    limit = _int_arg(
        "limit",
        current_app.config["BOARDS_PAGE_SIZE"],
        1,
        current_app.config["BOARDS_MAX_PAGE_SIZE"],
    )
    try:
        boards, total = board_service.list_boards_for_user(
            current_user.id,
            search=request.args.get("search"),
            page=page,
            limit=limit,
            sort=request.args.get("sort", "last_activity"),
            order=request.args.get("order", "desc"),
            include_archived=parse_bool(request.args.get("include_archived")),
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({
        "boards": [board_dict(b) for b in boards],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": (total + limit - 1) // limit,
        },
    })


@boards_bp.route("", methods=["POST"])
@login_required
def create_board():
    data = _json_body()
    try:
        board = board_service.create_board(
            owner_id=current_user.id,
            title=data.get("title"),
            description=data.get("description"),
            background=data.get("background"),
            is_public=parse_bool(data.get("is_public")),
            tags=data.get("tags"),
        )
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    db.session.commit()
    return jsonify({"board": board_dict(board, my_role="owner")}), 201


@boards_bp.route("/<board_id>", methods=["GET"])
@board_required(access_service.READ)
def get_board(board_id):
    board = g.board
    include_archived = parse_bool(request.args.get("include_archived"))
    lists = ordering_service.sorted_siblings(board, include_archived=include_archived)
    return jsonify({
        "board": board_dict(board, my_role=g.role),
        "lists": [
            list_dict(
                lst,
                cards=ordering_service.sorted_siblings(lst, include_archived=include_archived),
            )
            for lst in lists
        ],
    })


@boards_bp.route("/<board_id>", methods=["PUT"])
@board_required("edit_board")
def update_board(board_id):
    data = _json_body()
    fields = {key: data[key] for key in BOARD_FIELDS if key in data}
    try:
        board = board_service.update_board(g.board, current_user.id, **fields)
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    db.session.commit()
    return jsonify({"board": board_dict(board, my_role=g.role)})


@boards_bp.route("/<board_id>", methods=["DELETE"])
@board_required("delete_board")
def delete_board(board_id):
    board_service.delete_board(g.board, current_user.id)
    db.session.commit()
    return jsonify({"success": True})


# ─── Lists of a board ────────────────────────────────────────────

@boards_bp.route("/<board_id>/lists", methods=["GET"])
@board_required(access_service.READ)
def board_lists(board_id):
    include_archived = parse_bool(request.args.get("include_archived"))
    lists = ordering_service.sorted_siblings(g.board, include_archived=include_archived)
    return jsonify({"lists": [list_dict(lst) for lst in lists]})


@boards_bp.route("/<board_id>/lists/reorder", methods=["PUT"])
@board_required("edit_lists")
def reorder_lists(board_id):
    data = _json_body()
    entries = data.get("list_orders")
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        return jsonify({"error": "list_orders must be a list of {list_id, position}."}), 400

    assignments = [(e.get("list_id"), e.get("position")) for e in entries]
    try:
        lists = ordering_service.bulk_reorder(g.board, assignments)
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    db.session.commit()
    return jsonify({"lists": [list_dict(lst) for lst in lists]})


# ─── Members ─────────────────────────────────────────────────────

@boards_bp.route("/<board_id>/members", methods=["GET"])
@board_required(access_service.READ)
def list_members(board_id):
    members = membership_service.list_members(g.board)
    return jsonify({"members": [member_dict(m) for m in members]})


@boards_bp.route("/<board_id>/members", methods=["POST"])
@board_required("invite_members")
def invite_member(board_id):
    data = _json_body()
    try:
        membership = membership_service.invite_member(
            g.board,
            email=data.get("email"),
            role=data.get("role"),
            invited_by_id=current_user.id,
        )
    except LookupError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    db.session.commit()
    return jsonify({"member": member_dict(membership)}), 201


@boards_bp.route("/<board_id>/members/<member_id>", methods=["PUT"])
@board_required("invite_members")
def update_member(board_id, member_id):
    membership = _get_membership(board_id, member_id)
    data = _json_body()
    try:
        if "role" in data:
            membership_service.change_role(membership, data["role"], current_user.id)
        if "is_active" in data:
            membership_service.set_active(
                membership, parse_bool(data["is_active"]), current_user.id
            )
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    db.session.commit()
    return jsonify({"member": member_dict(membership)})


@boards_bp.route("/<board_id>/members/<member_id>", methods=["DELETE"])
@board_required("remove_members")
def remove_member(board_id, member_id):
    membership = _get_membership(board_id, member_id)
    membership_service.remove_member(membership, current_user.id)
    db.session.commit()
    return jsonify({"success": True})
