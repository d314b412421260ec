"""Board models.

- Board: the top-level container. Exactly one owner, fixed at creation.
  The owner is never stored as a BoardMember; ownership is a board
  attribute that outranks every role.
- BoardMember: join table linking invited users to boards with a role and
  the permission set derived from it (see services/permission_service.py).
"""

import uuid
from datetime import datetime, timezone

from taskboard.extensions import db


def _utcnow():
    return datetime.now(timezone.utc)


class Board(db.Model):
    __tablename__ = "boards"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    owner_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    background = db.Column(db.String(255), nullable=False, default="#0079bf")
    tags = db.Column(db.JSON, default=list)
    is_public = db.Column(db.Boolean, nullable=False, default=False, index=True)
    is_archived = db.Column(db.Boolean, nullable=False, default=False, index=True)
    last_activity = db.Column(
        db.DateTime(timezone=True), nullable=False, default=_utcnow, index=True
    )
    # Bumped by every ordering operation on this board's lists.
    order_version = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    # --- Relationships ---
    owner = db.relationship("User", back_populates="owned_boards")
    members = db.relationship(
        "BoardMember",
        back_populates="board",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    lists = db.relationship(
        "BoardList",
        back_populates="board",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    cards = db.relationship(
        "Card",
        back_populates="board",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    def touch(self):
        """Bump last_activity; call on every board-level mutation."""
        self.last_activity = _utcnow()

    def __repr__(self):
        return f"<Board {self.title}>"


class BoardMember(db.Model):
    __tablename__ = "board_members"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    board_id = db.Column(
        db.String(36),
        db.ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False
    )
    role = db.Column(db.String(20), nullable=False)  # admin | editor | viewer
    # Always exactly permission_service.resolve(role); written together with role.
    permissions = db.Column(db.JSON, nullable=False, default=dict)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    invited_by_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=True
    )
    invited_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    joined_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __table_args__ = (
        db.UniqueConstraint("board_id", "user_id", name="uq_board_member"),
        db.Index("ix_board_members_user_active", "user_id", "is_active"),
    )

    # --- Relationships ---
    board = db.relationship("Board", back_populates="members")
    user = db.relationship(
        "User", foreign_keys=[user_id], back_populates="board_memberships"
    )
    invited_by = db.relationship("User", foreign_keys=[invited_by_id])

    def has_permission(self, capability):
        return bool((self.permissions or {}).get(capability, False))

    def __repr__(self):
        return f"<BoardMember user={self.user_id} board={self.board_id} role={self.role}>"
