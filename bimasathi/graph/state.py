"""AnalysisState: the sole state object the analysis graph nodes read and write.

Every node receives the full state and returns a partial update.
"""

from __future__ import annotations

from typing import TypedDict

from bimasathi.domain.message import OracleTurn
from bimasathi.domain.policy import FullRecommendation, RecommendationAnalysis


class AnalysisState(TypedDict, total=False):
    """LangGraph state for the Analysis phase.

    Fields:
        history: Chronological user/model turns of the finished intake.
        transcript: ``role: text`` lines compiled from history.
        analyses: Raw oracle output, in oracle order.
        recommendations: Catalog-joined analyses, best match first.
    """

    history: list[OracleTurn]
    transcript: str
    analyses: list[RecommendationAnalysis]
    recommendations: list[FullRecommendation]
