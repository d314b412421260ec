# Models package — import all models here so Alembic can discover them.

from taskboard.models.user import User  # noqa: F401
from taskboard.models.board import Board, BoardMember  # noqa: F401
from taskboard.models.board_list import BoardList  # noqa: F401
from taskboard.models.card import Card  # noqa: F401
