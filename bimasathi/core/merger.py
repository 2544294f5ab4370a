"""Recommendation merger: joins oracle analyses with the policy catalog.

Pure function: no side effects, no I/O.  Analyses naming an unknown policy
id are dropped.  Survivors are ordered by match score, highest first;
equal scores keep the oracle's order (Python's sort is stable).
"""

from __future__ import annotations

import logging
from typing import Iterable

from bimasathi.catalog.policies import PolicyCatalog
from bimasathi.domain.policy import FullRecommendation, RecommendationAnalysis

logger = logging.getLogger(__name__)


def merge_recommendations(
    analyses: Iterable[RecommendationAnalysis],
    catalog: PolicyCatalog,
) -> list[FullRecommendation]:
    merged: list[FullRecommendation] = []
    for analysis in analyses:
        policy = catalog.get(analysis.policy_id)
        if policy is None:
            logger.debug("Dropping analysis for unknown policy %s", analysis.policy_id)
            continue
        merged.append(FullRecommendation(policy=policy, analysis=analysis))

    merged.sort(key=lambda rec: rec.analysis.match_score, reverse=True)
    return merged
