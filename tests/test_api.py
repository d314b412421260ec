"""HTTP API tests — auth, boards, members, lists and cards.

Every route authorizes through the access evaluator; these tests check the
status codes and JSON bodies a client sees.
"""

from unittest.mock import patch

from taskboard.errors import OrderingConflict
from taskboard.models.board import Board, BoardMember
from taskboard.models.card import Card
from taskboard.services import access_service, ordering_service, permission_service


def _card_titles(client, list_id, headers):
    response = client.get(f"/api/lists/{list_id}/cards", headers=headers)
    assert response.status_code == 200
    return [(c["title"], c["position"]) for c in response.get_json()["cards"]]


# ──────────────────────────────────────────────
# Auth
# ──────────────────────────────────────────────

class TestAuth:

    def test_register(self, client):
        response = client.post("/api/auth/register", json={
            "email": "New@Example.com",
            "password": "longenough",
            "name": "<b>New</b> User",
        })
        assert response.status_code == 201
        data = response.get_json()
        assert data["token"]
        assert data["user"]["email"] == "new@example.com"
        assert data["user"]["name"] == "New User"

    def test_register_duplicate_email(self, client, seed_data):
        response = client.post("/api/auth/register", json={
            "email": "owner@example.com",
            "password": "longenough",
            "name": "Again",
        })
        assert response.status_code == 400
        assert "already exists" in response.get_json()["error"]

    def test_register_short_password(self, client):
        response = client.post("/api/auth/register", json={
            "email": "short@example.com",
            "password": "short",
            "name": "Short",
        })
        assert response.status_code == 400

    def test_login_and_me(self, client, seed_data):
        response = client.post("/api/auth/login", json={
            "email": "editor@example.com",
            "password": "password123",
        })
        assert response.status_code == 200
        token = response.get_json()["token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.get_json()["user"]["email"] == "editor@example.com"

    def test_login_wrong_password(self, client, seed_data):
        response = client.post("/api/auth/login", json={
            "email": "editor@example.com",
            "password": "wrong-password",
        })
        assert response.status_code == 401
        assert response.get_json()["error"] == "Invalid email or password."

    def test_me_without_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.get_json()["error"] == "Authentication required"

    def test_me_with_garbage_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
        assert response.status_code == 401

    def test_logout(self, client, seed_data, auth_headers):
        response = client.post("/api/auth/logout", headers=auth_headers(seed_data["editor"]))
        assert response.status_code == 200
        assert response.get_json() == {"success": True}

    def test_logout_without_token(self, client):
        response = client.post("/api/auth/logout")
        assert response.status_code == 401

    def test_update_profile(self, client, seed_data, auth_headers):
        headers = auth_headers(seed_data["editor"])
        response = client.put("/api/auth/profile", json={
            "name": "<b>Edward</b> Editor",
            "avatar": "https://example.com/eddie.png",
        }, headers=headers)
        assert response.status_code == 200
        assert response.get_json()["user"]["name"] == "Edward Editor"

        me = client.get("/api/auth/me", headers=headers).get_json()["user"]
        assert me["name"] == "Edward Editor"
        assert me["avatar"] == "https://example.com/eddie.png"
        assert me["email"] == "editor@example.com"

    def test_update_profile_name_too_short(self, client, seed_data, auth_headers):
        response = client.put(
            "/api/auth/profile", json={"name": "E"}, headers=auth_headers(seed_data["editor"])
        )
        assert response.status_code == 400
        assert seed_data["editor"].name == "Eddie Editor"

    def test_update_profile_without_token(self, client):
        response = client.put("/api/auth/profile", json={"name": "Nobody"})
        assert response.status_code == 401

    def test_change_password(self, client, seed_data, auth_headers):
        response = client.put("/api/auth/password", json={
            "current_password": "password123",
            "new_password": "brand-new-secret",
        }, headers=auth_headers(seed_data["editor"]))
        assert response.status_code == 200

        old = client.post("/api/auth/login", json={
            "email": "editor@example.com", "password": "password123",
        })
        assert old.status_code == 401
        new = client.post("/api/auth/login", json={
            "email": "editor@example.com", "password": "brand-new-secret",
        })
        assert new.status_code == 200

    def test_change_password_wrong_current(self, client, seed_data, auth_headers):
        response = client.put("/api/auth/password", json={
            "current_password": "not-my-password",
            "new_password": "brand-new-secret",
        }, headers=auth_headers(seed_data["editor"]))
        assert response.status_code == 400
        assert response.get_json()["error"] == "Current password is incorrect."

    def test_change_password_too_short(self, client, seed_data, auth_headers):
        response = client.put("/api/auth/password", json={
            "current_password": "password123",
            "new_password": "short",
        }, headers=auth_headers(seed_data["editor"]))
        assert response.status_code == 400


# ──────────────────────────────────────────────
# Boards
# ──────────────────────────────────────────────

class TestBoards:

    def test_list_my_boards(self, client, seed_data, auth_headers):
        response = client.get("/api/boards", headers=auth_headers(seed_data["viewer"]))
        assert response.status_code == 200
        data = response.get_json()
        assert [b["title"] for b in data["boards"]] == ["Project Alpha"]
        assert data["pagination"]["total"] == 1

    def test_list_boards_owner_sees_owned(self, client, seed_data, auth_headers):
        response = client.get(
            "/api/boards?sort=title&order=asc",
            headers=auth_headers(seed_data["owner"]),
        )
        titles = [b["title"] for b in response.get_json()["boards"]]
        assert titles == ["Marketing", "Project Alpha"]

    def test_list_boards_search_and_paging(self, client, seed_data, auth_headers):
        headers = auth_headers(seed_data["owner"])
        response = client.get("/api/boards?search=alpha", headers=headers)
        assert [b["title"] for b in response.get_json()["boards"]] == ["Project Alpha"]

        response = client.get("/api/boards?limit=1&page=2&sort=title&order=asc", headers=headers)
        data = response.get_json()
        assert [b["title"] for b in data["boards"]] == ["Project Alpha"]
        assert data["pagination"]["pages"] == 2

    def test_list_boards_bad_sort(self, client, seed_data, auth_headers):
        response = client.get("/api/boards?sort=owner", headers=auth_headers(seed_data["owner"]))
        assert response.status_code == 400

    def test_inactive_member_does_not_see_board(self, client, seed_data, auth_headers):
        response = client.get("/api/boards", headers=auth_headers(seed_data["former"]))
        assert response.get_json()["boards"] == []

    def test_create_board(self, client, seed_data, auth_headers):
        response = client.post(
            "/api/boards",
            json={"title": "Roadmap", "tags": ["q3"], "is_public": True},
            headers=auth_headers(seed_data["outsider"]),
        )
        assert response.status_code == 201
        board = response.get_json()["board"]
        assert board["my_role"] == "owner"
        assert board["tags"] == ["q3"]
        assert board["is_public"] is True
        # Owner is not stored as a member row.
        assert BoardMember.query.filter_by(board_id=board["id"]).count() == 0

    def test_create_board_requires_title(self, client, seed_data, auth_headers):
        response = client.post("/api/boards", json={"title": "  "},
                               headers=auth_headers(seed_data["owner"]))
        assert response.status_code == 400
        assert response.get_json()["error"] == "Title is required."

    def test_create_board_requires_token(self, client):
        response = client.post("/api/boards", json={"title": "Nope"})
        assert response.status_code == 401

    def test_get_board_with_lists_and_cards(self, client, seed_data, auth_headers):
        board_id = seed_data["board"].id
        response = client.get(f"/api/boards/{board_id}", headers=auth_headers(seed_data["editor"]))
        assert response.status_code == 200
        data = response.get_json()
        assert data["board"]["my_role"] == "editor"
        assert "my_permissions" not in data["board"]
        assert [lst["title"] for lst in data["lists"]] == ["To Do", "Done"]
        assert [c["title"] for c in data["lists"][0]["cards"]] == ["A", "C", "D"]

    def test_get_board_as_owner_lists_permissions(self, client, seed_data, auth_headers):
        response = client.get(
            f"/api/boards/{seed_data['board'].id}", headers=auth_headers(seed_data["owner"])
        )
        assert response.status_code == 200
        board = response.get_json()["board"]
        assert board["my_role"] == "owner"
        assert board["my_permissions"] == permission_service.owner_permissions()
        assert board["my_permissions"]["delete_board"] is True

    def test_read_routes_go_through_require_access(self, client, seed_data, auth_headers):
        with patch.object(
            access_service, "require_access", wraps=access_service.require_access
        ) as require_access:
            response = client.get(
                f"/api/boards/{seed_data['board'].id}/lists",
                headers=auth_headers(seed_data["viewer"]),
            )
        assert response.status_code == 200
        require_access.assert_called_once_with(seed_data["viewer"].id, seed_data["board"])

    def test_get_private_board_as_outsider(self, client, seed_data, auth_headers):
        response = client.get(
            f"/api/boards/{seed_data['board'].id}",
            headers=auth_headers(seed_data["outsider"]),
        )
        assert response.status_code == 403
        assert response.get_json() == {"error": "Not authorized"}

    def test_get_private_board_anonymously(self, client, seed_data):
        response = client.get(f"/api/boards/{seed_data['board'].id}")
        assert response.status_code == 403
        assert response.get_json() == {"error": "Not authorized"}

    def test_get_public_board_anonymously(self, client, seed_data):
        response = client.get(f"/api/boards/{seed_data['public_board'].id}")
        assert response.status_code == 200
        data = response.get_json()
        assert data["board"]["my_role"] == "viewer"
        assert data["lists"][0]["cards"][0]["title"] == "Launch post"

    def test_mutating_public_board_without_token(self, client, seed_data):
        response = client.put(
            f"/api/boards/{seed_data['public_board'].id}", json={"title": "Hijacked"}
        )
        assert response.status_code == 401

    def test_mutating_public_board_as_outsider(self, client, seed_data, auth_headers):
        response = client.put(
            f"/api/boards/{seed_data['public_board'].id}",
            json={"title": "Hijacked"},
            headers=auth_headers(seed_data["outsider"]),
        )
        assert response.status_code == 403

    def test_update_board_as_admin(self, client, seed_data, auth_headers):
        response = client.put(
            f"/api/boards/{seed_data['board'].id}",
            json={"title": "Project Beta", "description": "<script>x</script>Notes"},
            headers=auth_headers(seed_data["admin"]),
        )
        assert response.status_code == 200
        board = response.get_json()["board"]
        assert board["title"] == "Project Beta"
        assert "<script>" not in board["description"]

    def test_update_board_as_editor_denied(self, client, seed_data, auth_headers):
        response = client.put(
            f"/api/boards/{seed_data['board'].id}",
            json={"title": "Nope"},
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 403

    def test_delete_board_admin_denied_owner_allowed(self, client, seed_data, auth_headers):
        board_id = seed_data["board"].id
        response = client.delete(f"/api/boards/{board_id}", headers=auth_headers(seed_data["admin"]))
        assert response.status_code == 403

        response = client.delete(f"/api/boards/{board_id}", headers=auth_headers(seed_data["owner"]))
        assert response.status_code == 200
        assert Board.query.filter_by(id=board_id).first() is None
        assert Card.query.filter_by(board_id=board_id).count() == 0

    def test_unknown_board(self, client, seed_data, auth_headers):
        response = client.get("/api/boards/does-not-exist", headers=auth_headers(seed_data["owner"]))
        assert response.status_code == 404
        assert "error" in response.get_json()

    def test_archived_lists_hidden(self, client, seed_data, auth_headers):
        headers = auth_headers(seed_data["editor"])
        done_id = seed_data["done"].id
        response = client.put(f"/api/lists/{done_id}", json={"is_archived": True}, headers=headers)
        assert response.status_code == 200

        board_id = seed_data["board"].id
        response = client.get(f"/api/boards/{board_id}/lists", headers=headers)
        assert [lst["title"] for lst in response.get_json()["lists"]] == ["To Do"]

        response = client.get(f"/api/boards/{board_id}/lists?include_archived=1", headers=headers)
        assert [lst["title"] for lst in response.get_json()["lists"]] == ["To Do", "Done"]


# ──────────────────────────────────────────────
# Members
# ──────────────────────────────────────────────

class TestMembers:

    def test_list_members(self, client, seed_data, auth_headers):
        response = client.get(
            f"/api/boards/{seed_data['board'].id}/members",
            headers=auth_headers(seed_data["viewer"]),
        )
        assert response.status_code == 200
        roles = [m["role"] for m in response.get_json()["members"]]
        assert roles == ["admin", "editor", "viewer"]

    def test_invite_member_as_admin(self, client, seed_data, auth_headers):
        response = client.post(
            f"/api/boards/{seed_data['board'].id}/members",
            json={"email": "outsider@example.com", "role": "editor"},
            headers=auth_headers(seed_data["admin"]),
        )
        assert response.status_code == 201
        member = response.get_json()["member"]
        assert member["role"] == "editor"
        assert member["permissions"]["move_cards"] is True
        assert member["permissions"]["delete_cards"] is False
        assert member["joined_at"] is not None

    def test_invite_invalid_role(self, client, seed_data, auth_headers):
        response = client.post(
            f"/api/boards/{seed_data['board'].id}/members",
            json={"email": "outsider@example.com", "role": "owner"},
            headers=auth_headers(seed_data["owner"]),
        )
        assert response.status_code == 400
        assert "Invalid role" in response.get_json()["error"]

    def test_invite_unknown_user(self, client, seed_data, auth_headers):
        response = client.post(
            f"/api/boards/{seed_data['board'].id}/members",
            json={"email": "ghost@example.com", "role": "viewer"},
            headers=auth_headers(seed_data["owner"]),
        )
        assert response.status_code == 404

    def test_invite_as_editor_denied(self, client, seed_data, auth_headers):
        response = client.post(
            f"/api/boards/{seed_data['board'].id}/members",
            json={"email": "outsider@example.com", "role": "viewer"},
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 403

    def test_promote_viewer_to_admin(self, client, seed_data, auth_headers):
        board_id = seed_data["board"].id
        membership_id = seed_data["memberships"]["viewer"].id
        viewer_headers = auth_headers(seed_data["viewer"])

        response = client.delete(f"/api/lists/{seed_data['done'].id}", headers=viewer_headers)
        assert response.status_code == 403

        response = client.put(
            f"/api/boards/{board_id}/members/{membership_id}",
            json={"role": "admin"},
            headers=auth_headers(seed_data["owner"]),
        )
        assert response.status_code == 200
        member = response.get_json()["member"]
        assert member["role"] == "admin"
        assert member["permissions"]["delete_lists"] is True

        response = client.delete(f"/api/lists/{seed_data['done'].id}", headers=viewer_headers)
        assert response.status_code == 200

    def test_deactivate_member(self, client, seed_data, auth_headers):
        board_id = seed_data["board"].id
        membership_id = seed_data["memberships"]["editor"].id
        response = client.put(
            f"/api/boards/{board_id}/members/{membership_id}",
            json={"is_active": False},
            headers=auth_headers(seed_data["admin"]),
        )
        assert response.status_code == 200
        assert response.get_json()["member"]["is_active"] is False

        response = client.get(f"/api/boards/{board_id}", headers=auth_headers(seed_data["editor"]))
        assert response.status_code == 403

    def test_remove_member(self, client, seed_data, auth_headers):
        board_id = seed_data["board"].id
        membership_id = seed_data["memberships"]["viewer"].id
        response = client.delete(
            f"/api/boards/{board_id}/members/{membership_id}",
            headers=auth_headers(seed_data["admin"]),
        )
        assert response.status_code == 200
        assert BoardMember.query.filter_by(id=membership_id).first() is None

    def test_member_of_other_board_not_found(self, client, seed_data, auth_headers):
        membership_id = seed_data["memberships"]["viewer"].id
        response = client.delete(
            f"/api/boards/{seed_data['public_board'].id}/members/{membership_id}",
            headers=auth_headers(seed_data["owner"]),
        )
        assert response.status_code == 404


# ──────────────────────────────────────────────
# Lists
# ──────────────────────────────────────────────

class TestLists:

    def test_create_list_as_editor(self, client, seed_data, auth_headers):
        response = client.post(
            "/api/lists",
            json={"board_id": seed_data["board"].id, "title": "Review"},
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 201
        data = response.get_json()["list"]
        assert data["position"] == 2
        assert data["cards"] == []

    def test_create_list_as_viewer_denied(self, client, seed_data, auth_headers):
        response = client.post(
            "/api/lists",
            json={"board_id": seed_data["board"].id, "title": "Review"},
            headers=auth_headers(seed_data["viewer"]),
        )
        assert response.status_code == 403

    def test_create_list_unknown_board(self, client, seed_data, auth_headers):
        response = client.post(
            "/api/lists", json={"title": "Review"}, headers=auth_headers(seed_data["owner"])
        )
        assert response.status_code == 404

    def test_get_list(self, client, seed_data, auth_headers):
        response = client.get(
            f"/api/lists/{seed_data['todo'].id}", headers=auth_headers(seed_data["viewer"])
        )
        assert response.status_code == 200
        assert [c["title"] for c in response.get_json()["list"]["cards"]] == ["A", "C", "D"]

    def test_move_list(self, client, seed_data, auth_headers):
        response = client.put(
            f"/api/lists/{seed_data['done'].id}/reorder",
            json={"position": 0},
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 200
        lists = response.get_json()["lists"]
        assert [(lst["title"], lst["position"]) for lst in lists] == [("Done", 0), ("To Do", 1)]

    def test_move_list_bad_position(self, client, seed_data, auth_headers):
        response = client.put(
            f"/api/lists/{seed_data['done'].id}/reorder",
            json={"position": -1},
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 400

    def test_bulk_reorder_lists(self, client, seed_data, auth_headers):
        response = client.put(
            f"/api/boards/{seed_data['board'].id}/lists/reorder",
            json={"list_orders": [
                {"list_id": seed_data["todo"].id, "position": 1},
                {"list_id": seed_data["done"].id, "position": 0},
            ]},
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 200
        assert [lst["title"] for lst in response.get_json()["lists"]] == ["Done", "To Do"]

    def test_bulk_reorder_foreign_list(self, client, seed_data, auth_headers):
        response = client.put(
            f"/api/boards/{seed_data['board'].id}/lists/reorder",
            json={"list_orders": [
                {"list_id": seed_data["todo"].id, "position": 1},
                {"list_id": seed_data["ideas"].id, "position": 0},
            ]},
            headers=auth_headers(seed_data["owner"]),
        )
        assert response.status_code == 400
        assert response.get_json()["item_ids"] == [seed_data["ideas"].id]
        assert seed_data["todo"].position == 0

    def test_bulk_reorder_malformed(self, client, seed_data, auth_headers):
        response = client.put(
            f"/api/boards/{seed_data['board'].id}/lists/reorder",
            json={"list_orders": "nope"},
            headers=auth_headers(seed_data["owner"]),
        )
        assert response.status_code == 400

    def test_bulk_reorder_non_string_list_id(self, client, seed_data, auth_headers):
        response = client.put(
            f"/api/boards/{seed_data['board'].id}/lists/reorder",
            json={"list_orders": [{"list_id": ["x"], "position": 0}]},
            headers=auth_headers(seed_data["owner"]),
        )
        assert response.status_code == 400
        assert response.get_json()["error"] == "Item ids must be strings."

    def test_create_list_non_string_board_id(self, client, seed_data, auth_headers):
        response = client.post(
            "/api/lists",
            json={"board_id": {"a": 1}, "title": "Backlog"},
            headers=auth_headers(seed_data["owner"]),
        )
        assert response.status_code == 400

    def test_delete_list_as_editor_denied(self, client, seed_data, auth_headers):
        response = client.delete(
            f"/api/lists/{seed_data['todo'].id}", headers=auth_headers(seed_data["editor"])
        )
        assert response.status_code == 403

    def test_delete_list_removes_cards(self, client, seed_data, auth_headers):
        todo_id = seed_data["todo"].id
        response = client.delete(f"/api/lists/{todo_id}", headers=auth_headers(seed_data["admin"]))
        assert response.status_code == 200
        assert Card.query.filter_by(list_id=todo_id).count() == 0


# ──────────────────────────────────────────────
# Cards
# ──────────────────────────────────────────────

class TestCards:

    def test_create_card(self, client, seed_data, auth_headers):
        response = client.post(
            "/api/cards",
            json={
                "list_id": seed_data["todo"].id,
                "title": "E",
                "priority": "high",
                "due_date": "2026-11-01T12:00:00Z",
                "labels": [{"name": "bug", "color": "#ff0000"}],
            },
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 201
        card = response.get_json()["card"]
        assert card["position"] == 3
        assert card["priority"] == "high"
        assert card["labels"] == [{"name": "bug", "color": "#ff0000"}]
        assert card["board_id"] == seed_data["board"].id

    def test_create_card_bad_priority(self, client, seed_data, auth_headers):
        response = client.post(
            "/api/cards",
            json={"list_id": seed_data["todo"].id, "title": "E", "priority": "asap"},
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 400

    def test_create_card_as_viewer_denied(self, client, seed_data, auth_headers):
        response = client.post(
            "/api/cards",
            json={"list_id": seed_data["todo"].id, "title": "E"},
            headers=auth_headers(seed_data["viewer"]),
        )
        assert response.status_code == 403

    def test_update_card(self, client, seed_data, auth_headers):
        response = client.put(
            f"/api/cards/{seed_data['card_a'].id}",
            json={"title": "A2", "is_completed": True, "position": 99},
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 200
        card = response.get_json()["card"]
        assert card["title"] == "A2"
        assert card["is_completed"] is True
        # Positions only change through the move endpoints.
        assert card["position"] == 0

    def test_delete_card_as_editor_denied(self, client, seed_data, auth_headers):
        response = client.delete(
            f"/api/cards/{seed_data['card_a'].id}", headers=auth_headers(seed_data["editor"])
        )
        assert response.status_code == 403

    def test_delete_card_leaves_gap(self, client, seed_data, auth_headers):
        headers = auth_headers(seed_data["admin"])
        response = client.delete(f"/api/cards/{seed_data['card_c'].id}", headers=headers)
        assert response.status_code == 200
        assert _card_titles(client, seed_data["todo"].id, headers) == [("A", 0), ("D", 2)]

    def test_move_within_list(self, client, seed_data, auth_headers):
        headers = auth_headers(seed_data["editor"])
        response = client.patch(
            f"/api/cards/{seed_data['card_d'].id}/move", json={"position": 0}, headers=headers
        )
        assert response.status_code == 200
        assert _card_titles(client, seed_data["todo"].id, headers) == [
            ("D", 0), ("A", 1), ("C", 2),
        ]

    def test_move_to_other_list(self, client, seed_data, auth_headers):
        headers = auth_headers(seed_data["editor"])
        response = client.patch(
            f"/api/cards/{seed_data['card_c'].id}/move",
            json={"list_id": seed_data["done"].id},
            headers=headers,
        )
        assert response.status_code == 200
        card = response.get_json()["card"]
        assert card["list_id"] == seed_data["done"].id
        assert card["position"] == 0
        assert _card_titles(client, seed_data["todo"].id, headers) == [("A", 0), ("D", 2)]

    def test_move_to_other_board_rejected(self, client, seed_data, auth_headers):
        response = client.patch(
            f"/api/cards/{seed_data['card_c'].id}/move",
            json={"list_id": seed_data["elsewhere"].id, "position": 0},
            headers=auth_headers(seed_data["owner"]),
        )
        assert response.status_code == 400
        assert seed_data["card_c"].list_id == seed_data["todo"].id

    def test_move_without_position(self, client, seed_data, auth_headers):
        response = client.patch(
            f"/api/cards/{seed_data['card_c'].id}/move",
            json={},
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 400

    def test_move_as_viewer_denied(self, client, seed_data, auth_headers):
        response = client.patch(
            f"/api/cards/{seed_data['card_d'].id}/move",
            json={"position": 0},
            headers=auth_headers(seed_data["viewer"]),
        )
        assert response.status_code == 403

    def test_move_conflict_returns_409(self, client, seed_data, auth_headers):
        conflict = OrderingConflict(parent_id=seed_data["todo"].id, seen_version=0)
        with patch.object(ordering_service, "_claim", side_effect=conflict):
            response = client.patch(
                f"/api/cards/{seed_data['card_d'].id}/move",
                json={"position": 0},
                headers=auth_headers(seed_data["editor"]),
            )
        assert response.status_code == 409
        assert _card_titles(client, seed_data["todo"].id, auth_headers(seed_data["editor"])) == [
            ("A", 0), ("C", 1), ("D", 2),
        ]

    def test_bulk_reorder_cards(self, client, seed_data, auth_headers):
        headers = auth_headers(seed_data["editor"])
        response = client.put(
            "/api/cards/reorder",
            json={
                "list_id": seed_data["todo"].id,
                "card_orders": [
                    {"card_id": seed_data["card_a"].id, "position": 2},
                    {"card_id": seed_data["card_d"].id, "position": 0},
                    {"card_id": seed_data["card_c"].id, "position": 1},
                ],
            },
            headers=headers,
        )
        assert response.status_code == 200
        assert [c["title"] for c in response.get_json()["cards"]] == ["D", "C", "A"]

    def test_bulk_reorder_cards_mismatch(self, client, seed_data, auth_headers):
        headers = auth_headers(seed_data["owner"])
        response = client.put(
            "/api/cards/reorder",
            json={
                "list_id": seed_data["todo"].id,
                "card_orders": [
                    {"card_id": seed_data["card_a"].id, "position": 2},
                    {"card_id": seed_data["public_card"].id, "position": 0},
                ],
            },
            headers=headers,
        )
        assert response.status_code == 400
        assert _card_titles(client, seed_data["todo"].id, headers) == [
            ("A", 0), ("C", 1), ("D", 2),
        ]

    def test_comment(self, client, seed_data, auth_headers):
        card_id = seed_data["card_a"].id
        response = client.post(
            f"/api/cards/{card_id}/comments",
            json={"text": "<i>Looks</i> good"},
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 201
        assert response.get_json()["comment"]["text"] == "Looks good"

        response = client.get(f"/api/cards/{card_id}", headers=auth_headers(seed_data["viewer"]))
        card = response.get_json()["card"]
        assert card["comments_count"] == 1
        assert card["comments"][0]["author_id"] == seed_data["editor"].id

    def test_comment_as_viewer_denied(self, client, seed_data, auth_headers):
        response = client.post(
            f"/api/cards/{seed_data['card_a'].id}/comments",
            json={"text": "hi"},
            headers=auth_headers(seed_data["viewer"]),
        )
        assert response.status_code == 403

    def test_public_card_readable_anonymously(self, client, seed_data):
        response = client.get(f"/api/cards/{seed_data['public_card'].id}")
        assert response.status_code == 200

    def test_unknown_card(self, client, seed_data, auth_headers):
        response = client.get("/api/cards/nope", headers=auth_headers(seed_data["owner"]))
        assert response.status_code == 404

    def test_create_card_non_string_list_id(self, client, seed_data, auth_headers):
        response = client.post(
            "/api/cards",
            json={"list_id": [seed_data["todo"].id], "title": "Nope"},
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 400

    def test_move_with_non_string_list_id(self, client, seed_data, auth_headers):
        response = client.patch(
            f"/api/cards/{seed_data['card_c'].id}/move",
            json={"list_id": {"a": 1}, "position": 0},
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 400
        assert response.get_json()["error"] == "list_id must be a string."
        assert seed_data["card_c"].list_id == seed_data["todo"].id

    def test_bulk_reorder_cards_non_string_id(self, client, seed_data, auth_headers):
        response = client.put(
            "/api/cards/reorder",
            json={
                "list_id": seed_data["todo"].id,
                "card_orders": [{"card_id": 7, "position": 0}],
            },
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 400

    # --- Assignees ---

    def test_assign_members(self, client, seed_data, auth_headers):
        editor, owner = seed_data["editor"], seed_data["owner"]
        response = client.put(
            f"/api/cards/{seed_data['card_a'].id}",
            json={"assignees": [editor.id, owner.id, editor.id]},
            headers=auth_headers(editor),
        )
        assert response.status_code == 200
        assert response.get_json()["card"]["assignees"] == [editor.id, owner.id]

        listed = client.get(
            f"/api/lists/{seed_data['todo'].id}/cards", headers=auth_headers(seed_data["viewer"])
        ).get_json()["cards"]
        assert listed[0]["assignees"] == [editor.id, owner.id]

    def test_assign_clears_with_empty_list(self, client, seed_data, auth_headers):
        headers = auth_headers(seed_data["editor"])
        url = f"/api/cards/{seed_data['card_a'].id}"
        client.put(url, json={"assignees": [seed_data["viewer"].id]}, headers=headers)
        response = client.put(url, json={"assignees": []}, headers=headers)
        assert response.status_code == 200
        assert response.get_json()["card"]["assignees"] == []

    def test_assign_outsider_rejected(self, client, seed_data, auth_headers):
        response = client.put(
            f"/api/cards/{seed_data['card_a'].id}",
            json={"assignees": [seed_data["outsider"].id]},
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 400
        assert seed_data["card_a"].assignees == []

    def test_assign_inactive_member_rejected(self, client, seed_data, auth_headers):
        response = client.put(
            f"/api/cards/{seed_data['card_a'].id}",
            json={"assignees": [seed_data["former"].id]},
            headers=auth_headers(seed_data["owner"]),
        )
        assert response.status_code == 400

    def test_assign_malformed(self, client, seed_data, auth_headers):
        response = client.put(
            f"/api/cards/{seed_data['card_a'].id}",
            json={"assignees": seed_data["editor"].id},
            headers=auth_headers(seed_data["editor"]),
        )
        assert response.status_code == 400

    def test_assign_as_viewer_denied(self, client, seed_data, auth_headers):
        response = client.put(
            f"/api/cards/{seed_data['card_a'].id}",
            json={"assignees": [seed_data["viewer"].id]},
            headers=auth_headers(seed_data["viewer"]),
        )
        assert response.status_code == 403

    # --- Votes ---

    def test_vote(self, client, seed_data, auth_headers):
        url = f"/api/cards/{seed_data['card_a'].id}/vote"
        response = client.post(url, json={"value": 1}, headers=auth_headers(seed_data["editor"]))
        assert response.status_code == 200
        assert response.get_json()["vote_count"] == 1

        response = client.post(url, json={"value": 1}, headers=auth_headers(seed_data["admin"]))
        assert response.get_json()["vote_count"] == 2

        # A second vote from the same user replaces the first.
        response = client.post(url, json={"value": -1}, headers=auth_headers(seed_data["editor"]))
        assert response.get_json()["vote_count"] == 0
        assert response.get_json()["card"]["vote_count"] == 0
        assert len(seed_data["card_a"].votes) == 2

    def test_vote_invalid_value(self, client, seed_data, auth_headers):
        headers = auth_headers(seed_data["editor"])
        url = f"/api/cards/{seed_data['card_a'].id}/vote"
        for value in (2, True, "1", None):
            response = client.post(url, json={"value": value}, headers=headers)
            assert response.status_code == 400

    def test_vote_as_viewer_denied(self, client, seed_data, auth_headers):
        response = client.post(
            f"/api/cards/{seed_data['card_a'].id}/vote",
            json={"value": 1},
            headers=auth_headers(seed_data["viewer"]),
        )
        assert response.status_code == 403

    def test_vote_on_public_board_requires_membership(self, client, seed_data, auth_headers):
        response = client.post(
            f"/api/cards/{seed_data['public_card'].id}/vote",
            json={"value": 1},
            headers=auth_headers(seed_data["outsider"]),
        )
        assert response.status_code == 403
