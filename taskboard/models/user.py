"""User model.

Stores authentication credentials and profile info.
Flask-Login integration via UserMixin.
"""

import uuid

from flask_login import UserMixin

from taskboard.extensions import db


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    avatar = db.Column(db.String(500), nullable=True)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    # --- Relationships ---
    owned_boards = db.relationship(
        "Board", back_populates="owner", lazy="dynamic"
    )
    board_memberships = db.relationship(
        "BoardMember",
        foreign_keys="BoardMember.user_id",
        back_populates="user",
        lazy="dynamic",
    )

    def __repr__(self):
        return f"<User {self.email}>"
