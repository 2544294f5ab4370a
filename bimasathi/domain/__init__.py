from bimasathi.domain.enums import MessageRole, SessionPhase
from bimasathi.domain.message import Conversation, Message
from bimasathi.domain.policy import FullRecommendation, PolicyRecord, RecommendationAnalysis
from bimasathi.domain.session import Session, SessionSnapshot

__all__ = [
    "Conversation",
    "FullRecommendation",
    "Message",
    "MessageRole",
    "PolicyRecord",
    "RecommendationAnalysis",
    "Session",
    "SessionPhase",
    "SessionSnapshot",
]
