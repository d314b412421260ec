"""Error taxonomy for the access-control and ordering core.

Services raise these; create_app() maps them to JSON responses.

- InvalidRole: unknown role handed to the permission resolver.
- AccessDenied: the actor has no relationship to the board at all.
- InsufficientPermission: the actor is a member but lacks the capability.
- OrderingMismatch: a bulk reorder referenced an item of another parent.
- CrossBoardMoveNotAllowed: a card move targeted a list on another board.
- OrderingConflict: a concurrent ordering operation on the same parent won
  the race; the caller may retry.

AccessDenied and InsufficientPermission are distinct only for logging. The
HTTP layer renders both as the same generic 403.
"""


class TaskboardError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message=None, **context):
        super().__init__(message or self.__class__.__doc__)
        self.context = context


class InvalidRole(TaskboardError, ValueError):
    """Unknown membership role."""

    def __init__(self, role):
        super().__init__(f"Invalid role '{role}'.", role=role)
        self.role = role


class AuthorizationError(TaskboardError):
    """Not authorized."""


class AccessDenied(AuthorizationError):
    """Actor has no access to this board."""


class InsufficientPermission(AuthorizationError):
    """Actor lacks the required capability on this board."""


class OrderingMismatch(TaskboardError):
    """One or more items do not belong to the given parent."""


class CrossBoardMoveNotAllowed(TaskboardError):
    """Cards can only be moved between lists of the same board."""


class OrderingConflict(TaskboardError):
    """Ordering changed concurrently; retry the operation."""
