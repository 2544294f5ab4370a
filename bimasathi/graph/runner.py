"""Graph runner: clean interface for invoking the analysis graph.

Usage:
    runner = AnalysisRunner(RecommendationOracle(), DEFAULT_CATALOG)
    recommendations = await runner.run(history)
"""

from __future__ import annotations

import logging

from bimasathi.catalog.policies import DEFAULT_CATALOG, PolicyCatalog
from bimasathi.domain.message import OracleTurn
from bimasathi.domain.policy import FullRecommendation
from bimasathi.graph.builder import build_analysis_graph
from bimasathi.graph.state import AnalysisState
from bimasathi.oracle.recommendation import RecommendationOracle

logger = logging.getLogger(__name__)


class AnalysisRunner:
    """Runs the Analysis phase for a finished intake conversation."""

    def __init__(
        self,
        oracle: RecommendationOracle | None = None,
        catalog: PolicyCatalog = DEFAULT_CATALOG,
    ) -> None:
        self._catalog = catalog
        self._graph = build_analysis_graph(oracle or RecommendationOracle(catalog=catalog), catalog)

    @property
    def catalog(self) -> PolicyCatalog:
        return self._catalog

    async def run(self, history: list[OracleTurn]) -> list[FullRecommendation]:
        """Return catalog-joined recommendations, best match first."""
        initial_state: AnalysisState = {
            "history": list(history),
            "transcript": "",
            "analyses": [],
            "recommendations": [],
        }

        logger.info("Running analysis graph over %d turns", len(history))
        final_state = await self._graph.ainvoke(initial_state)

        recommendations = final_state.get("recommendations", [])
        logger.info("Analysis complete: %d recommendations", len(recommendations))
        return recommendations
