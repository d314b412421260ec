"""Token service — JWT access tokens for the API.

Tokens carry the user id in `sub` and expire after JWT_EXPIRES_MINUTES.
Signed with JWT_SECRET_KEY using JWT_ALGORITHM (HS256 by default).
"""

import logging
from datetime import datetime, timedelta, timezone

from flask import current_app
from jose import ExpiredSignatureError, JWTError, jwt

logger = logging.getLogger(__name__)


def create_access_token(user_id, expires_delta=None):
    """Create a signed access token for user_id."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=current_app.config["JWT_EXPIRES_MINUTES"])
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iat": now,
        "exp": now + expires_delta,
        "type": "access",
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET_KEY"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def decode_access_token(token):
    """Return the user id in a valid access token, or None."""
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            current_app.config["JWT_SECRET_KEY"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except ExpiredSignatureError:
        logger.info("Rejected expired access token")
        return None
    except JWTError as e:
        logger.info(f"Rejected invalid access token: {e}")
        return None

    if payload.get("type") != "access":
        return None
    return payload.get("sub")
