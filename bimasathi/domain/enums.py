"""Controlled enumerations for the bimasathi domain.

Every categorical field in the domain references an enum defined here.
"""

from __future__ import annotations

from enum import Enum


class SessionPhase(str, Enum):
    """The four states of an advisory session.  Exactly one is active."""

    LANDING = "landing"
    ASSESSMENT = "assessment"
    ANALYSIS = "analysis"
    RESULTS = "results"


class MessageRole(str, Enum):
    """Who authored a message in the conversation."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class OracleRole(str, Enum):
    """Role vocabulary understood by the question oracle."""

    USER = "user"
    MODEL = "model"
