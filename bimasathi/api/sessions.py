"""REST endpoints for advisory sessions and the policy catalog.

Paths (prefix /api):
    GET    /policies
    POST   /sessions
    GET    /sessions/{id}
    POST   /sessions/{id}/start
    POST   /sessions/{id}/messages
    POST   /sessions/{id}/quick-replies
    PUT    /sessions/{id}/draft
    POST   /sessions/{id}/reset
    GET    /sessions/{id}/results/text
    DELETE /sessions/{id}

Every mutating endpoint returns the resulting session snapshot.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from bimasathi.catalog.policies import PolicyCatalog
from bimasathi.core.controller import (
    SessionBusyError,
    SessionController,
    SessionPhaseError,
)
from bimasathi.present.formatter import ResultsFormatter
from bimasathi.store.session_store import SessionStore

logger = logging.getLogger(__name__)


class SubmitMessage(BaseModel):
    text: str = Field(..., max_length=2000)


class SelectQuickReply(BaseModel):
    option: str = Field(..., max_length=2000)


def ensure_idle(controller: SessionController) -> None:
    """Refuse new submissions while an oracle call is in flight."""
    if controller.busy:
        raise SessionBusyError("a previous answer is still being processed")


def create_session_router(store: SessionStore, catalog: PolicyCatalog) -> APIRouter:
    """Factory that wires the session endpoints to a store and catalog."""

    router = APIRouter(prefix="/api", tags=["sessions"])

    async def _controller(session_id: str) -> SessionController:
        controller = await store.get(session_id)
        if controller is None:
            raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
        return controller

    def _snapshot(controller: SessionController) -> dict[str, Any]:
        return controller.snapshot().model_dump(mode="json", by_alias=True)

    @router.get("/policies")
    async def list_policies() -> dict[str, Any]:
        policies = [p.model_dump(mode="json", by_alias=True) for p in catalog]
        return {"policies": policies, "count": len(policies)}

    @router.post("/sessions", status_code=201)
    async def create_session() -> dict[str, Any]:
        controller = await store.create()
        return _snapshot(controller)

    @router.get("/sessions/{session_id}")
    async def get_session(session_id: str) -> dict[str, Any]:
        return _snapshot(await _controller(session_id))

    @router.post("/sessions/{session_id}/start")
    async def start_session(session_id: str) -> dict[str, Any]:
        controller = await _controller(session_id)
        try:
            await controller.start()
        except SessionPhaseError as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        return _snapshot(controller)

    @router.post("/sessions/{session_id}/messages")
    async def submit_message(session_id: str, body: SubmitMessage) -> dict[str, Any]:
        controller = await _controller(session_id)
        try:
            ensure_idle(controller)
            await controller.submit(body.text)
        except (SessionPhaseError, SessionBusyError) as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        return _snapshot(controller)

    @router.post("/sessions/{session_id}/quick-replies")
    async def select_quick_reply(session_id: str, body: SelectQuickReply) -> dict[str, Any]:
        controller = await _controller(session_id)
        try:
            ensure_idle(controller)
            await controller.select_quick_reply(body.option)
        except (SessionPhaseError, SessionBusyError) as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        return _snapshot(controller)

    @router.put("/sessions/{session_id}/draft")
    async def update_draft(session_id: str, body: SubmitMessage) -> dict[str, Any]:
        controller = await _controller(session_id)
        controller.set_pending_input(body.text)
        return _snapshot(controller)

    @router.post("/sessions/{session_id}/reset")
    async def reset_session(session_id: str) -> dict[str, Any]:
        controller = await _controller(session_id)
        await controller.reset()
        return _snapshot(controller)

    @router.get("/sessions/{session_id}/results/text", response_class=PlainTextResponse)
    async def results_text(session_id: str) -> str:
        controller = await _controller(session_id)
        return ResultsFormatter.format_plain(controller.session.recommendations)

    @router.delete("/sessions/{session_id}", status_code=204)
    async def delete_session(session_id: str) -> None:
        if not await store.remove(session_id):
            raise HTTPException(status_code=404, detail=f"Session {session_id} not found")

    return router
