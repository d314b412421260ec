"""Card model.

board_id is denormalized from the list at creation and never changes;
list_id changes only when the card is moved to another list of the same
board (services/ordering_service.py).
"""

import uuid

from taskboard.extensions import db


class Card(db.Model):
    __tablename__ = "cards"

    PRIORITIES = ["low", "medium", "high", "urgent"]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    list_id = db.Column(
        db.String(36),
        db.ForeignKey("board_lists.id", ondelete="CASCADE"),
        nullable=False,
    )
    board_id = db.Column(
        db.String(36),
        db.ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, default="")
    color = db.Column(db.String(20), nullable=True)
    priority = db.Column(db.String(10), nullable=False, default="medium")
    due_date = db.Column(db.DateTime(timezone=True), nullable=True)
    is_completed = db.Column(db.Boolean, nullable=False, default=False)
    labels = db.Column(db.JSON, default=list)  # [{"name": ..., "color": ...}]
    comments = db.Column(db.JSON, default=list)
    assignees = db.Column(db.JSON, default=list)  # user ids
    votes = db.Column(db.JSON, default=list)  # [{"user_id": ..., "value": -1|0|1}]
    position = db.Column(db.Integer, nullable=False, default=0)
    is_archived = db.Column(db.Boolean, nullable=False, default=False, index=True)
    created_by_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=True
    )
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __table_args__ = (
        db.Index("ix_cards_list_position", "list_id", "position"),
    )

    # --- Relationships ---
    list = db.relationship("BoardList", back_populates="cards")
    board = db.relationship("Board", back_populates="cards")
    created_by = db.relationship("User")

    def __repr__(self):
        return f"<Card {self.title[:40]}>"
