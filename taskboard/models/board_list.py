"""List model.

A list (lane) belongs to exactly one board for its whole life. Its
position orders it among the board's other lists; positions are unique
comparison keys, not array indices, so gaps are normal.
"""

import uuid

from taskboard.extensions import db


class BoardList(db.Model):
    __tablename__ = "board_lists"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    board_id = db.Column(
        db.String(36),
        db.ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
    )
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    color = db.Column(db.String(20), nullable=False, default="#0079bf")
    position = db.Column(db.Integer, nullable=False, default=0)
    is_archived = db.Column(db.Boolean, nullable=False, default=False)
    # Bumped by every ordering operation on this list's cards.
    order_version = db.Column(db.Integer, nullable=False, default=0)
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
        db.Index("ix_board_lists_board_position", "board_id", "position"),
        db.Index("ix_board_lists_board_archived", "board_id", "is_archived"),
    )

    # --- Relationships ---
    board = db.relationship("Board", back_populates="lists")
    cards = db.relationship(
        "Card",
        back_populates="list",
        lazy="dynamic",
        cascade="all, delete-orphan",
        order_by="Card.position",
    )
    created_by = db.relationship("User")

    def __repr__(self):
        return f"<BoardList {self.title}>"
