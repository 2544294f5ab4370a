"""Question oracle: asks Gemini for the next intake question.

Given the chronological user/model history, the oracle returns either the
next question (optionally with quick replies) or a completion signal.

Failure policy:
    Any error (LLM construction, transport, non-JSON payload, schema
    violation) is absorbed here and replaced by a fixed clarifying
    question.  Callers only ever see a well-formed QuestionReply.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from pydantic import BaseModel, Field, StrictBool, model_validator

from bimasathi.domain.message import OracleTurn
from bimasathi.oracle.llm import (
    LLMFactory,
    default_llm_factory,
    load_json_payload,
    response_text,
)

logger = logging.getLogger(__name__)


class QuestionReply(BaseModel):
    """The question oracle's response contract."""

    text: str = ""
    options: Optional[list[str]] = None
    is_complete: StrictBool = Field(..., alias="isComplete")

    model_config = {"frozen": True, "populate_by_name": True}

    @model_validator(mode="after")
    def text_required_until_complete(self) -> "QuestionReply":
        if not self.is_complete and not self.text.strip():
            raise ValueError("a follow-up question needs non-empty text")
        return self


FALLBACK_REPLY = QuestionReply(
    text="Could you tell me your age and location?",
    options=["20-30, Metro", "30-40, Non-Metro"],
    is_complete=False,
)

_QUESTION_PROMPT = """You are an intelligent insurance assistant for the Indian market.
Your goal is to gather enough information to recommend a health insurance policy.

Required Information to collect:
1. Who is being insured (Self, Spouse, Children, Parents).
2. Age of the eldest member.
3. Pincode or City (to determine zone).
4. Any pre-existing diseases (Diabetes, BP, Thyroid, etc.).
5. Approximate budget or coverage needed.

Current Conversation History:
{history}

Task:
Analyze the history.
If you have enough information to make a recommendation, set "isComplete" to true.
If not, ask the NEXT most important question. Ask one question at a time.
Keep questions short, friendly, and relevant to Indians.
Provide 2-4 quick reply options if applicable.

Respond ONLY with a JSON object of the form:
{{"text": "<next question>", "options": ["<quick reply>", ...], "isComplete": false}}"""


def parse_question_reply(text: str) -> QuestionReply:
    """Decode and validate a raw oracle payload.  Raises on any violation."""
    payload = load_json_payload(text)
    if not isinstance(payload, dict):
        raise ValueError("Expected a JSON object")
    return QuestionReply.model_validate(payload)


class QuestionOracle:
    """Client for the next-question decision."""

    def __init__(
        self,
        llm_factory: LLMFactory | None = None,
        fallback: QuestionReply = FALLBACK_REPLY,
    ) -> None:
        self._llm_factory = llm_factory or default_llm_factory
        self._fallback = fallback

    async def next_question(self, history: list[OracleTurn]) -> QuestionReply:
        """Return the next question, a completion signal, or the fallback."""
        prompt = _QUESTION_PROMPT.format(
            history=json.dumps([turn.model_dump(mode="json") for turn in history]),
        )

        try:
            llm = self._llm_factory()
            response = await llm.ainvoke(prompt)
            reply = parse_question_reply(response_text(response))
        except Exception as exc:
            logger.error("Question oracle failed, using fallback question: %s", exc)
            return self._fallback

        logger.info(
            "Question oracle reply: complete=%s options=%d",
            reply.is_complete,
            len(reply.options or []),
        )
        return reply

