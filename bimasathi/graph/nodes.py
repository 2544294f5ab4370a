"""LangGraph nodes for the Analysis phase.

Each node:
    - Receives the full AnalysisState
    - Returns a partial dict update
    - Has no side effects beyond the oracle call in ``recommend``
"""

from __future__ import annotations

import logging

from bimasathi.catalog.policies import PolicyCatalog
from bimasathi.core.merger import merge_recommendations
from bimasathi.domain.message import compile_transcript as _compile
from bimasathi.graph.state import AnalysisState
from bimasathi.oracle.recommendation import RecommendationOracle

logger = logging.getLogger(__name__)


# ── 1. compile_transcript ───────────────────────────────────────────────────

def compile_transcript(state: AnalysisState) -> dict:
    """Flatten the intake history into the transcript the oracle reads."""
    history = state.get("history", [])
    transcript = _compile(history)
    logger.debug("Compiled transcript from %d turns", len(history))
    return {"transcript": transcript}


# ── 2. recommend ────────────────────────────────────────────────────────────

def make_recommend(oracle: RecommendationOracle):
    """Create the recommend node bound to a recommendation oracle."""

    async def recommend(state: AnalysisState) -> dict:
        analyses = await oracle.recommend(state.get("transcript", ""))
        return {"analyses": analyses}

    return recommend


# ── 3. merge ────────────────────────────────────────────────────────────────

def make_merge(catalog: PolicyCatalog):
    """Create the merge node bound to a policy catalog."""

    def merge(state: AnalysisState) -> dict:
        analyses = state.get("analyses", [])
        recommendations = merge_recommendations(analyses, catalog)
        logger.info(
            "Merged %d analyses into %d recommendations",
            len(analyses),
            len(recommendations),
        )
        return {"recommendations": recommendations}

    return merge
