"""Policy records and the recommendation contract.

PolicyRecord is supplied externally and never mutated.  A
RecommendationAnalysis is what the recommendation oracle claims about one
policy; it is untrusted until joined against the catalog.  Field names
follow the camelCase wire format through aliases.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, StrictInt
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class PolicyRecord(_WireModel):
    """One health-insurance policy from the aggregator catalog."""

    id: str = Field(..., min_length=1)
    insurer_name: str
    policy_name: str
    sum_insured: str
    premium: float = Field(..., ge=0, description="Monthly premium estimate (INR)")
    copay: str
    room_rent_limit: str
    waiting_period: str
    ped_waiting_period: str = Field(..., description="Pre-existing disease waiting period")
    network_hospitals: int = Field(..., ge=0)
    claim_settlement_ratio: float = Field(..., ge=0.0, le=100.0)
    features: list[str] = Field(default_factory=list)


class PolicySummary(_WireModel):
    """The slice of a policy the recommendation oracle gets to see."""

    id: str
    name: str
    insurer: str
    features: list[str]
    copay: str
    waiting_period: str
    room_rent: str


class RecommendationAnalysis(_WireModel):
    """The oracle's verdict on a single policy."""

    policy_id: str
    match_score: StrictInt = Field(..., ge=0, le=100)
    reasoning: str
    pros: list[str]
    cons: list[str]


class FullRecommendation(_WireModel):
    """A catalog policy joined with the oracle's analysis of it."""

    policy: PolicyRecord
    analysis: RecommendationAnalysis
