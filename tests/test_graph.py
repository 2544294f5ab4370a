"""Tests for the LangGraph analysis pipeline.

The recommendation oracle is faked at the client level so the graph
topology, transcript compilation and merge step run for real.
"""

from __future__ import annotations

import pytest

from bimasathi.catalog.policies import DEFAULT_CATALOG
from bimasathi.domain.enums import OracleRole
from bimasathi.domain.message import OracleTurn
from bimasathi.graph.builder import build_analysis_graph
from bimasathi.graph.nodes import compile_transcript, make_merge
from bimasathi.graph.runner import AnalysisRunner

from tests.fakes import FakeRecommendationOracle, analysis

_HISTORY = [
    OracleTurn(role=OracleRole.MODEL, text="Who are you looking to insure?"),
    OracleTurn(role=OracleRole.USER, text="Myself"),
    OracleTurn(role=OracleRole.MODEL, text="What is your age?"),
    OracleTurn(role=OracleRole.USER, text="29"),
]


class TestNodes:
    def test_compile_transcript(self) -> None:
        update = compile_transcript({"history": _HISTORY})
        assert update["transcript"] == (
            "model: Who are you looking to insure?\n"
            "user: Myself\n"
            "model: What is your age?\n"
            "user: 29"
        )

    def test_compile_transcript_without_history(self) -> None:
        assert compile_transcript({}) == {"transcript": ""}

    def test_merge_node(self) -> None:
        merge = make_merge(DEFAULT_CATALOG)
        update = merge({"analyses": [analysis("pol_003", 60), analysis("pol_005", 88)]})
        assert [r.policy.id for r in update["recommendations"]] == ["pol_005", "pol_003"]


class TestGraph:
    def test_graph_compiles(self) -> None:
        graph = build_analysis_graph(FakeRecommendationOracle(), DEFAULT_CATALOG)
        assert graph is not None

    @pytest.mark.asyncio
    async def test_full_pipeline(self) -> None:
        oracle = FakeRecommendationOracle([
            analysis("pol_002", 80),
            analysis("pol_001", 95),
            analysis("pol_999", 99),
        ])
        runner = AnalysisRunner(oracle, DEFAULT_CATALOG)
        recommendations = await runner.run(_HISTORY)

        assert [(r.policy.id, r.analysis.match_score) for r in recommendations] == [
            ("pol_001", 95),
            ("pol_002", 80),
        ]
        assert oracle.transcripts == [
            "model: Who are you looking to insure?\nuser: Myself\nmodel: What is your age?\nuser: 29"
        ]

    @pytest.mark.asyncio
    async def test_empty_oracle_result(self) -> None:
        runner = AnalysisRunner(FakeRecommendationOracle([]), DEFAULT_CATALOG)
        assert await runner.run(_HISTORY) == []

    @pytest.mark.asyncio
    async def test_runner_is_reusable(self) -> None:
        runner = AnalysisRunner(FakeRecommendationOracle([analysis("pol_004", 70)]), DEFAULT_CATALOG)
        first = await runner.run(_HISTORY)
        second = await runner.run(_HISTORY[:2])
        assert first == second
        assert runner.catalog is DEFAULT_CATALOG
