"""JSON-safe dicts for API responses."""

from taskboard.services import card_service, permission_service
from taskboard.utils import isoformat


def user_dict(user):
    if user is None:
        return None
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "avatar": user.avatar,
    }


def board_dict(board, my_role=None):
    data = {
        "id": board.id,
        "title": board.title,
        "description": board.description,
        "background": board.background,
        "tags": board.tags or [],
        "is_public": board.is_public,
        "is_archived": board.is_archived,
        "owner": user_dict(board.owner),
        "last_activity": isoformat(board.last_activity),
        "created_at": isoformat(board.created_at),
        "updated_at": isoformat(board.updated_at),
    }
    if my_role is not None:
        data["my_role"] = my_role
    if my_role == "owner":
        data["my_permissions"] = permission_service.owner_permissions()
    return data


def list_dict(board_list, cards=None):
    data = {
        "id": board_list.id,
        "board_id": board_list.board_id,
        "title": board_list.title,
        "description": board_list.description,
        "color": board_list.color,
        "position": board_list.position,
        "is_archived": board_list.is_archived,
        "created_by_id": board_list.created_by_id,
        "created_at": isoformat(board_list.created_at),
        "updated_at": isoformat(board_list.updated_at),
    }
    if cards is not None:
        data["cards"] = [card_dict(c) for c in cards]
    return data


def card_dict(card):
    return {
        "id": card.id,
        "list_id": card.list_id,
        "board_id": card.board_id,
        "title": card.title,
        "description": card.description or "",
        "color": card.color,
        "priority": card.priority,
        "due_date": isoformat(card.due_date),
        "is_completed": card.is_completed,
        "labels": card.labels or [],
        "assignees": list(card.assignees or []),
        "comments_count": len(card.comments or []),
        "vote_count": card_service.vote_count(card),
        "position": card.position,
        "is_archived": card.is_archived,
        "created_by_id": card.created_by_id,
        "created_at": isoformat(card.created_at),
        "updated_at": isoformat(card.updated_at),
    }


def member_dict(membership):
    return {
        "id": membership.id,
        "board_id": membership.board_id,
        "user": user_dict(membership.user),
        "role": membership.role,
        "permissions": dict(membership.permissions or {}),
        "is_active": membership.is_active,
        "invited_by": user_dict(membership.invited_by),
        "invited_at": isoformat(membership.invited_at),
        "joined_at": isoformat(membership.joined_at),
    }
