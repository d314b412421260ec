"""Small helpers shared by services and blueprints."""

from datetime import datetime

import bleach


def sanitize(text):
    """Strip all HTML tags from user input."""
    if text is None:
        return text
    return bleach.clean(str(text), tags=[], strip=True).strip()


def parse_bool(value, default=False):
    """Interpret query-string / JSON booleans ("1", "true", True, ...)."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def parse_datetime(value):
    """Parse an ISO 8601 string (or None) into a datetime.

    Raises:
        ValueError: If the value is not a valid ISO 8601 date.
    """
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid date '{value}'. Use ISO 8601.") from None


def isoformat(value):
    return value.isoformat() if value else None
