"""WebSocket endpoint for a live advisory session.

Path: /ws/session

Each connection owns one new session.  The client sends actions:

    {"action": "start"}
    {"action": "submit", "text": "..."}
    {"action": "quick_reply", "text": "..."}
    {"action": "draft", "text": "..."}
    {"action": "reset"}

and the server pushes a ``session_snapshot`` after every state change,
including the transient Analysis phase.  "ping" is answered with "pong".
Answers are processed in the background: while one is in flight another
answer is refused with an error, and a reset discards its late result.
The session is discarded when the client disconnects.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from bimasathi.api.sessions import ensure_idle
from bimasathi.core.controller import (
    SessionBusyError,
    SessionController,
    SessionPhaseError,
)
from bimasathi.domain.enums import SessionPhase
from bimasathi.domain.session import SessionSnapshot
from bimasathi.store.session_store import SessionStore

logger = logging.getLogger(__name__)


def _snapshot_message(snapshot: SessionSnapshot) -> dict[str, Any]:
    return {
        "type": "session_snapshot",
        "session": snapshot.model_dump(mode="json", by_alias=True),
    }


def create_ws_session_router(store: SessionStore) -> APIRouter:
    """Factory that wires the live session endpoint to a SessionStore."""

    router = APIRouter()

    @router.websocket("/ws/session")
    async def live_session(websocket: WebSocket) -> None:
        await websocket.accept()
        controller = await store.create()
        turn: Optional[asyncio.Task] = None

        async def push(snapshot: SessionSnapshot) -> None:
            await websocket.send_json(_snapshot_message(snapshot))

        controller.set_listener(push)
        logger.info("Live client connected to session %s", controller.session_id)
        await push(controller.snapshot())

        try:
            while True:
                raw = await websocket.receive_text()
                if raw.strip().lower() == "ping":
                    await websocket.send_text("pong")
                    continue

                try:
                    started = await dispatch_action(controller, raw)
                except (SessionPhaseError, SessionBusyError, ValueError) as exc:
                    await websocket.send_json({"status": "error", "detail": str(exc)})
                    continue
                if started is not None:
                    turn = started

        except WebSocketDisconnect:
            logger.info("Live client disconnected from session %s", controller.session_id)
        finally:
            if turn is not None and not turn.done():
                turn.cancel()
            controller.set_listener(None)
            await store.remove(controller.session_id)

    return router


async def dispatch_action(controller: SessionController, raw: str) -> Optional[asyncio.Task]:
    """Apply one client action.

    Answers run as a background task, returned to the caller, so the
    receive loop stays free to refuse overlapping answers and to reset
    mid-call.  Every other action completes before this returns.
    """
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        raise ValueError("messages must be JSON objects")
    if not isinstance(message, dict):
        raise ValueError("messages must be JSON objects")

    action = message.get("action")
    text = str(message.get("text") or "")

    if action in ("submit", "quick_reply"):
        if not text.strip():
            return None
        ensure_idle(controller)
        if controller.phase != SessionPhase.ASSESSMENT:
            raise SessionPhaseError(f"cannot submit answers during {controller.phase.value}")
        if action == "submit":
            task = asyncio.create_task(controller.submit(text))
        else:
            task = asyncio.create_task(controller.select_quick_reply(text))
        # Let the turn mark the session busy before the next action is read
        await asyncio.sleep(0)
        return task

    if action == "start":
        await controller.start()
    elif action == "draft":
        controller.set_pending_input(text)
    elif action == "reset":
        await controller.reset()
    else:
        raise ValueError(f"unknown action: {action!r}")
    return None
