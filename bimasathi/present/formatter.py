"""ResultsFormatter: deterministic plain-text rendering of recommendations.

Produces consistent, structured output suitable for logs, APIs, terminals
or debugging.  No LLM is involved: every line comes straight from the
catalog record or the oracle's analysis.
"""

from __future__ import annotations

from typing import Sequence

from bimasathi.domain.policy import FullRecommendation

DISCLAIMER = (
    "Disclaimer: BimaSathi is an AI advisor. Insurance premiums and features "
    "are subject to change by the insurer. Please read the policy wording "
    "document carefully before purchasing."
)


class ResultsFormatter:
    """Renders ranked recommendations as text."""

    @staticmethod
    def score_band(score: int) -> str:
        if score >= 90:
            return "excellent"
        if score >= 75:
            return "good"
        return "fair"

    @staticmethod
    def format_card(rec: FullRecommendation, rank: int) -> str:
        policy, analysis = rec.policy, rec.analysis
        band = ResultsFormatter.score_band(analysis.match_score)

        lines = [f"#{rank} {policy.policy_name} by {policy.insurer_name}"]
        lines.append(f"Match: {analysis.match_score}% ({band})")
        lines.append(
            f"Cover: {policy.sum_insured} | Premium/m: ₹{policy.premium:g} "
            f"| Waiting Period: {policy.ped_waiting_period}"
        )
        lines.append("")
        lines.append("Why this fits you:")
        lines.append(f"  {analysis.reasoning}")
        lines.append("")
        lines.append("Key Features:")
        for feature in policy.features:
            lines.append(f"  ✓ {feature}")
        lines.append(f"  Room Rent: {policy.room_rent_limit}")
        lines.append(f"  Co-Pay: {policy.copay}")

        if analysis.pros:
            lines.append("Pros:")
            lines.extend(f"  + {p}" for p in analysis.pros)
        if analysis.cons:
            lines.append("Cons:")
            lines.extend(f"  - {c}" for c in analysis.cons)

        return "\n".join(lines)

    @staticmethod
    def format_plain(recommendations: Sequence[FullRecommendation]) -> str:
        lines = ["Recommended for you"]
        lines.append("=" * 50)

        if not recommendations:
            lines.append("No matching policies")
            lines.append("")
        for rank, rec in enumerate(recommendations, start=1):
            lines.append(ResultsFormatter.format_card(rec, rank))
            lines.append("")

        lines.append(DISCLAIMER)
        return "\n".join(lines)
