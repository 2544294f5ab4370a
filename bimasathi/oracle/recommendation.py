"""Recommendation oracle: asks Gemini to score catalog policies for a user.

The oracle sees the flattened conversation transcript and a summary of the
catalog, and returns its top picks as RecommendationAnalysis items.  The
result is untrusted: it may hold fewer or more than three items and may
name policies that do not exist.  Joining against the catalog is the
merger's job.

Failure policy:
    Any error (LLM construction, transport, non-JSON payload, schema
    violation) is absorbed here and yields an empty list.
"""

from __future__ import annotations

import json
import logging

from pydantic import TypeAdapter

from bimasathi.catalog.policies import DEFAULT_CATALOG, PolicyCatalog
from bimasathi.domain.policy import RecommendationAnalysis
from bimasathi.oracle.llm import (
    LLMFactory,
    default_llm_factory,
    load_json_payload,
    response_text,
)

logger = logging.getLogger(__name__)

_ANALYSES = TypeAdapter(list[RecommendationAnalysis])

_RECOMMENDATION_PROMPT = """You are an expert Indian Health Insurance Underwriter.

User Profile extracted from conversation:
{transcript}

Available Policies (Aggregator Data):
{policies}

Task:
1. Analyze the user's risk profile (age, location, diseases).
2. Compare against the available policies.
3. Select the Top 3 best matching policies.
4. Provide a match score (0-100) and specific reasoning for this user.
5. List simplified pros and cons relevant to the user's specific answers
   (e.g., if they have parents, mention waiting periods).

Respond ONLY with a JSON array.  Each element must be:
{{"policyId": "<id from the list>", "matchScore": <integer 0-100>,
  "reasoning": "<text>", "pros": ["<text>", ...], "cons": ["<text>", ...]}}"""


def parse_recommendations(text: str) -> list[RecommendationAnalysis]:
    """Decode and validate a raw oracle payload.  Raises on any violation."""
    payload = load_json_payload(text)
    if not isinstance(payload, list):
        raise ValueError("Expected a JSON array")
    return _ANALYSES.validate_python(payload)


class RecommendationOracle:
    """Client for the policy scoring decision."""

    def __init__(
        self,
        llm_factory: LLMFactory | None = None,
        catalog: PolicyCatalog = DEFAULT_CATALOG,
    ) -> None:
        self._llm_factory = llm_factory or default_llm_factory
        self._catalog = catalog

    def build_prompt(self, transcript: str) -> str:
        policies = json.dumps([
            summary.model_dump(mode="json", by_alias=True)
            for summary in self._catalog.summaries()
        ])
        return _RECOMMENDATION_PROMPT.format(transcript=transcript, policies=policies)

    async def recommend(self, transcript: str) -> list[RecommendationAnalysis]:
        """Return the oracle's analyses, or an empty list on any failure."""
        try:
            llm = self._llm_factory()
            response = await llm.ainvoke(self.build_prompt(transcript))
            analyses = parse_recommendations(response_text(response))
        except Exception as exc:
            logger.error("Recommendation oracle failed, returning no recommendations: %s", exc)
            return []

        logger.info("Recommendation oracle returned %d analyses", len(analyses))
        return analyses
