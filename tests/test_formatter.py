"""Tests for the plain-text results formatter."""

from bimasathi.catalog.policies import DEFAULT_CATALOG
from bimasathi.core.merger import merge_recommendations
from bimasathi.present.formatter import DISCLAIMER, ResultsFormatter

from tests.fakes import analysis


def _recommendations():
    return merge_recommendations(
        [analysis("pol_002", 78, "Lowest premium"), analysis("pol_001", 92, "No co-pay")],
        DEFAULT_CATALOG,
    )


class TestScoreBand:
    def test_bands(self) -> None:
        assert ResultsFormatter.score_band(100) == "excellent"
        assert ResultsFormatter.score_band(90) == "excellent"
        assert ResultsFormatter.score_band(89) == "good"
        assert ResultsFormatter.score_band(75) == "good"
        assert ResultsFormatter.score_band(74) == "fair"
        assert ResultsFormatter.score_band(0) == "fair"


class TestFormatCard:
    def test_card_contents(self) -> None:
        card = ResultsFormatter.format_card(_recommendations()[0], rank=1)
        assert card.startswith("#1 Optima Secure by HDFC Ergo")
        assert "Match: 92% (excellent)" in card
        assert "Premium/m: ₹1250" in card
        assert "Waiting Period: 3 Years" in card
        assert "No co-pay" in card
        assert "✓ Restoration Benefit" in card
        assert "Room Rent: No Limit (Single Private AC)" in card
        assert "+ Good cover" in card
        assert "- Higher premium" in card


class TestFormatPlain:
    def test_ranked_output(self) -> None:
        text = ResultsFormatter.format_plain(_recommendations())
        assert text.index("#1 Optima Secure") < text.index("#2 Assure Plan")
        assert text.endswith(DISCLAIMER)

    def test_empty_results(self) -> None:
        text = ResultsFormatter.format_plain([])
        assert "No matching policies" in text
        assert text.startswith("Recommended for you")
        assert text.endswith(DISCLAIMER)
