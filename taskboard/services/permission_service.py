"""Permission resolver — role → canonical capability set.

A membership's permissions are never edited directly: every write of a
role goes through membership_service, which calls resolve() and stores the
result in the same flush. There are no per-member overrides.

Board ownership is not a role. owner_permissions() describes what the owner
can do (everything, including delete_board) for display only (board
responses carry it as my_permissions); the access evaluator implements the
owner bypass on its own.
"""

from taskboard.errors import InvalidRole

ROLES = ("admin", "editor", "viewer")

CAPABILITIES = (
    "edit_board",
    "delete_board",
    "invite_members",
    "remove_members",
    "create_lists",
    "edit_lists",
    "delete_lists",
    "create_cards",
    "edit_cards",
    "delete_cards",
    "move_cards",
    "comment",
)

_GRANTS = {
    "admin": {
        "edit_board",
        "invite_members",
        "remove_members",
        "create_lists",
        "edit_lists",
        "delete_lists",
        "create_cards",
        "edit_cards",
        "delete_cards",
        "move_cards",
        "comment",
    },
    "editor": {
        "create_lists",
        "edit_lists",
        "create_cards",
        "edit_cards",
        "move_cards",
        "comment",
    },
    "viewer": set(),
}


def resolve(role):
    """Return the permission set for a membership role.

    Args:
        role: One of ROLES.

    Returns:
        A new dict mapping every name in CAPABILITIES to a bool.

    Raises:
        InvalidRole: If role is not one of ROLES.
    """
    if not isinstance(role, str) or role not in _GRANTS:
        raise InvalidRole(role)
    granted = _GRANTS[role]
    return {capability: capability in granted for capability in CAPABILITIES}


def owner_permissions():
    """Every capability set to True."""
    return {capability: True for capability in CAPABILITIES}
