"""Static policy catalog: read-only aggregator data.

The catalog is an ordered, immutable table of PolicyRecord.  It has no
logic beyond lookup and producing the summary the recommendation oracle
is shown.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from bimasathi.domain.policy import PolicyRecord, PolicySummary


class PolicyCatalog:
    """Immutable, ordered collection of policies keyed by id."""

    def __init__(self, policies: Iterable[PolicyRecord]) -> None:
        self._policies: tuple[PolicyRecord, ...] = tuple(policies)
        self._by_id: dict[str, PolicyRecord] = {}
        for policy in self._policies:
            if policy.id in self._by_id:
                raise ValueError(f"duplicate policy id: {policy.id}")
            self._by_id[policy.id] = policy

    def get(self, policy_id: str) -> PolicyRecord | None:
        """Exact-match lookup, or None."""
        return self._by_id.get(policy_id)

    def summaries(self) -> list[PolicySummary]:
        """Oracle-facing view.  ``waiting_period`` carries the PED waiting period."""
        return [
            PolicySummary(
                id=p.id,
                name=p.policy_name,
                insurer=p.insurer_name,
                features=list(p.features),
                copay=p.copay,
                waiting_period=p.ped_waiting_period,
                room_rent=p.room_rent_limit,
            )
            for p in self._policies
        ]

    @property
    def policies(self) -> tuple[PolicyRecord, ...]:
        return self._policies

    def __iter__(self) -> Iterator[PolicyRecord]:
        return iter(self._policies)

    def __len__(self) -> int:
        return len(self._policies)

    def __contains__(self, policy_id: object) -> bool:
        return policy_id in self._by_id


# Simulates data fetched from an aggregator API
DEFAULT_CATALOG = PolicyCatalog([
    PolicyRecord(
        id="pol_001",
        insurer_name="HDFC Ergo",
        policy_name="Optima Secure",
        sum_insured="10 Lakhs",
        premium=1250,
        copay="No Co-pay",
        room_rent_limit="No Limit (Single Private AC)",
        waiting_period="30 Days Initial",
        ped_waiting_period="3 Years",
        network_hospitals=13000,
        claim_settlement_ratio=98.2,
        features=["4X Cover Benefit", "Restoration Benefit", "Annual Health Checkup"],
    ),
    PolicyRecord(
        id="pol_002",
        insurer_name="Star Health",
        policy_name="Assure Plan",
        sum_insured="10 Lakhs",
        premium=1050,
        copay="10% if age > 60",
        room_rent_limit="Single Private Room",
        waiting_period="30 Days Initial",
        ped_waiting_period="2 Years (Buyback available)",
        network_hospitals=14000,
        claim_settlement_ratio=99.1,
        features=["Auto Restoration", "Ayush Treatment", "Wellness Program"],
    ),
    PolicyRecord(
        id="pol_003",
        insurer_name="Niva Bupa",
        policy_name="ReAssure 2.0",
        sum_insured="15 Lakhs",
        premium=1380,
        copay="No Co-pay",
        room_rent_limit="Any Room",
        waiting_period="30 Days Initial",
        ped_waiting_period="3 Years",
        network_hospitals=10000,
        claim_settlement_ratio=96.5,
        features=["ReAssure Forever", "Lock the Clock (Age)", "Booster Benefit"],
    ),
    PolicyRecord(
        id="pol_004",
        insurer_name="Care Insurance",
        policy_name="Supreme",
        sum_insured="7 Lakhs",
        premium=850,
        copay="20% Zone 2",
        room_rent_limit="1% of SI",
        waiting_period="30 Days Initial",
        ped_waiting_period="4 Years",
        network_hospitals=9500,
        claim_settlement_ratio=95.8,
        features=["Unlimited Recharge", "OPD Cover", "No Claim Bonus Super"],
    ),
    PolicyRecord(
        id="pol_005",
        insurer_name="Acko",
        policy_name="Platinum Health",
        sum_insured="1 Crore",
        premium=1600,
        copay="No Co-pay",
        room_rent_limit="No Limit",
        waiting_period="0 Days",
        ped_waiting_period="0 Days (Disclosed PED covered)",
        network_hospitals=7000,
        claim_settlement_ratio=94.5,
        features=["Zero Waiting Period", "Full Cashless", "Inflation Protect"],
    ),
])
