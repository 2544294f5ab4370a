"""Session aggregate: the single owned state of one advisory run.

A Session bundles phase, conversation, recommendations and the transient
flags the presentation layer reads.  Only the SessionController mutates it.
``generation`` increases on every reset so late oracle responses from a
previous run can be recognised and discarded.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from bimasathi.domain.enums import SessionPhase
from bimasathi.domain.message import Conversation, Message
from bimasathi.domain.policy import FullRecommendation
from bimasathi.foundation.clock import utc_now
from bimasathi.foundation.identifiers import new_id


class SessionSnapshot(BaseModel):
    """Immutable view of a session for rendering."""

    session_id: str
    phase: SessionPhase
    messages: list[Message]
    quick_replies: list[str]
    recommendations: list[FullRecommendation]
    busy: bool
    pending_input: str

    model_config = {"frozen": True}


class Session:
    """Mutable per-user state.  See module docstring."""

    def __init__(self, session_id: str | None = None) -> None:
        self.session_id: str = session_id or new_id()
        self.created_at: datetime = utc_now()
        self.last_activity: datetime = self.created_at
        self.phase: SessionPhase = SessionPhase.LANDING
        self.conversation: Conversation = Conversation()
        self.recommendations: list[FullRecommendation] = []
        self.pending_input: str = ""
        self.busy: bool = False
        self.generation: int = 0

    def touch(self) -> None:
        self.last_activity = utc_now()

    def clear(self) -> None:
        """Back to the initial Landing state, starting a new generation."""
        self.phase = SessionPhase.LANDING
        self.conversation.clear()
        self.recommendations = []
        self.pending_input = ""
        self.busy = False
        self.generation += 1
        self.touch()

    def is_expired(self, ttl: timedelta) -> bool:
        return utc_now() - self.last_activity > ttl

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            phase=self.phase,
            messages=self.conversation.messages,
            quick_replies=self.conversation.quick_replies,
            recommendations=list(self.recommendations),
            busy=self.busy,
            pending_input=self.pending_input,
        )

    def summary(self) -> dict:
        return {
            "session_id": self.session_id,
            "phase": self.phase.value,
            "message_count": len(self.conversation),
            "recommendation_count": len(self.recommendations),
            "busy": self.busy,
            "created_at": self.created_at.isoformat(),
            "last_activity": self.last_activity.isoformat(),
        }
