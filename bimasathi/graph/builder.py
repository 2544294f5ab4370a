"""Graph builder: constructs the LangGraph analysis topology.

Topology:

    START → compile_transcript → recommend → merge_recommendations → END

The graph is compiled once and can be invoked many times.
"""

from __future__ import annotations

from langgraph.graph import END, START, StateGraph

from bimasathi.catalog.policies import PolicyCatalog
from bimasathi.graph.nodes import compile_transcript, make_merge, make_recommend
from bimasathi.graph.state import AnalysisState
from bimasathi.oracle.recommendation import RecommendationOracle


def build_analysis_graph(oracle: RecommendationOracle, catalog: PolicyCatalog):
    """Construct and compile the analysis graph.

    Args:
        oracle: Recommendation oracle used by the ``recommend`` node.
        catalog: Policy catalog the oracle output is joined against.

    Returns:
        A compiled LangGraph application.
    """
    graph = StateGraph(AnalysisState)

    # ── Register nodes ───────────────────────────────────────────────────
    graph.add_node("compile_transcript", compile_transcript)
    graph.add_node("recommend", make_recommend(oracle))
    graph.add_node("merge_recommendations", make_merge(catalog))

    # ── Edges ────────────────────────────────────────────────────────────
    graph.add_edge(START, "compile_transcript")
    graph.add_edge("compile_transcript", "recommend")
    graph.add_edge("recommend", "merge_recommendations")
    graph.add_edge("merge_recommendations", END)

    return graph.compile()
