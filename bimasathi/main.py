"""bimasathi: conversational health-insurance advisor.

This is the application entry point.  It wires the policy catalog, the two
Gemini oracles, the analysis graph, the SessionStore and the HTTP /
WebSocket endpoints together.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import FastAPI

from bimasathi.api.sessions import create_session_router
from bimasathi.api.ws_session import create_ws_session_router
from bimasathi.catalog.policies import DEFAULT_CATALOG, PolicyCatalog
from bimasathi.config import settings
from bimasathi.core.controller import SessionController
from bimasathi.domain.session import Session
from bimasathi.graph.runner import AnalysisRunner
from bimasathi.oracle.question import QuestionOracle
from bimasathi.oracle.recommendation import RecommendationOracle
from bimasathi.store.session_store import SessionStore

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)


def create_app(
    question_oracle: QuestionOracle | None = None,
    recommendation_oracle: RecommendationOracle | None = None,
    catalog: PolicyCatalog = DEFAULT_CATALOG,
) -> FastAPI:
    """Build the application.  Oracles default to Gemini-backed clients."""

    # ── Oracles ──────────────────────────────────────────────────────────
    question_oracle = question_oracle or QuestionOracle()
    analysis_runner = AnalysisRunner(
        recommendation_oracle or RecommendationOracle(catalog=catalog),
        catalog,
    )

    # ── State ────────────────────────────────────────────────────────────
    def controller_factory(session: Session) -> SessionController:
        return SessionController(
            question_oracle=question_oracle,
            analysis_runner=analysis_runner,
            session=session,
        )

    store = SessionStore(
        controller_factory,
        ttl=timedelta(minutes=settings.session_ttl_minutes),
    )

    # ── App ──────────────────────────────────────────────────────────────
    app = FastAPI(
        title=settings.app_name,
        description="Conversational health-insurance intake and policy recommendations",
        version="0.1.0",
    )
    app.state.store = store
    app.state.catalog = catalog

    # ── Routes ───────────────────────────────────────────────────────────
    app.include_router(create_session_router(store, catalog))
    app.include_router(create_ws_session_router(store))

    # ── Health ───────────────────────────────────────────────────────────
    @app.get("/health")
    async def health() -> dict:
        summary = await store.summary()
        return {
            "status": "ok",
            "policies": len(catalog),
            **summary,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
