"""Random ID generation for sessions and messages."""

from __future__ import annotations

from uuid import uuid4


def new_id() -> str:
    """Generate a new random UUID v4 string."""
    return str(uuid4())


def new_message_id() -> str:
    """Short unique key for a chat message.  Only used for rendering."""
    return uuid4().hex[:12]
