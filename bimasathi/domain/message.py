"""Messages and the append-only conversation log.

A Message is immutable once created.  The Conversation owns the ordered
log for one session; it only grows, except for an atomic clear on reset.
"""

from __future__ import annotations

from typing import Iterator, Optional

from pydantic import BaseModel, Field

from bimasathi.domain.enums import MessageRole, OracleRole
from bimasathi.foundation.identifiers import new_message_id


class Message(BaseModel):
    """A single chat message.

    ``options`` are quick replies offered alongside an assistant question.
    """

    id: str = Field(default_factory=new_message_id)
    role: MessageRole
    content: str
    options: Optional[list[str]] = None

    model_config = {"frozen": True}

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str, options: Optional[list[str]] = None) -> "Message":
        return cls(role=MessageRole.ASSISTANT, content=content, options=options or None)

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=MessageRole.SYSTEM, content=content)


class OracleTurn(BaseModel):
    """One entry of the history sent to the question oracle."""

    role: OracleRole
    text: str

    model_config = {"frozen": True}


_ORACLE_ROLES = {
    MessageRole.USER: OracleRole.USER,
    MessageRole.ASSISTANT: OracleRole.MODEL,
}


class Conversation:
    """Ordered, append-only log of messages for one session."""

    def __init__(self) -> None:
        self._messages: list[Message] = []

    def append(self, message: Message) -> None:
        self._messages.append(message)

    def clear(self) -> None:
        self._messages = []

    @property
    def messages(self) -> list[Message]:
        """A copy of the log, oldest first."""
        return list(self._messages)

    @property
    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    @property
    def quick_replies(self) -> list[str]:
        """Options the user can act on right now.

        Only the newest message counts, and only when it came from the
        assistant.
        """
        last = self.last
        if last is None or last.role != MessageRole.ASSISTANT or not last.options:
            return []
        return list(last.options)

    def oracle_history(self) -> list[OracleTurn]:
        """User/assistant turns in wire vocabulary.  System messages are dropped."""
        return [
            OracleTurn(role=_ORACLE_ROLES[m.role], text=m.content)
            for m in self._messages
            if m.role in _ORACLE_ROLES
        ]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))


def compile_transcript(history: list[OracleTurn]) -> str:
    """Flatten oracle turns into ``role: text`` lines, oldest first."""
    return "\n".join(f"{turn.role.value}: {turn.text}" for turn in history)
