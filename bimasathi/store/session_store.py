"""In-memory session store with async-safe access and TTL-based expiry.

Design notes:
    - An asyncio.Lock guards the registry so concurrent HTTP and WebSocket
      handlers never corrupt it.  Session contents are guarded by their own
      controller, not by this lock.
    - Controllers are built by an injected factory so tests can wire fake
      oracles.
    - Sessions idle for longer than the TTL are dropped when a new session
      is created, and an expired session is never handed out by get().
      Nothing is shared between sessions.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Callable

from bimasathi.core.controller import SessionController
from bimasathi.domain.enums import SessionPhase
from bimasathi.domain.session import Session

logger = logging.getLogger(__name__)

ControllerFactory = Callable[[Session], SessionController]


class SessionStore:
    """Async-safe, in-memory registry of session controllers.

    Args:
        controller_factory: Builds a controller around a fresh Session.
        ttl: How long a session may stay idle before it is discarded.
    """

    def __init__(
        self,
        controller_factory: ControllerFactory,
        ttl: timedelta = timedelta(minutes=60),
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")

        self._controller_factory = controller_factory
        self._ttl = ttl
        self._lock = asyncio.Lock()
        self._controllers: dict[str, SessionController] = {}

    # ── Public API ───────────────────────────────────────────────────────

    async def create(self) -> SessionController:
        """Open a new session in the Landing phase."""
        async with self._lock:
            self._expire_stale_locked()
            controller = self._controller_factory(Session())
            self._controllers[controller.session_id] = controller
            logger.info("Created session %s", controller.session_id)
            return controller

    async def get(self, session_id: str) -> SessionController | None:
        """Retrieve a session controller by ID, or None if unknown / expired."""
        async with self._lock:
            controller = self._controllers.get(session_id)
            if controller is None:
                return None
            if not controller.busy and controller.session.is_expired(self._ttl):
                del self._controllers[session_id]
                logger.info("Expired session %s on lookup", session_id)
                return None
            return controller

    async def remove(self, session_id: str) -> bool:
        async with self._lock:
            removed = self._controllers.pop(session_id, None) is not None
            if removed:
                logger.info("Removed session %s", session_id)
            return removed

    async def expire_stale(self) -> list[str]:
        """Drop every idle session past the TTL.  Busy sessions are kept."""
        async with self._lock:
            return self._expire_stale_locked()

    async def active_count(self) -> int:
        async with self._lock:
            return len(self._controllers)

    async def summary(self) -> dict:
        """Session counts by phase.  Observability only; mutates nothing."""
        async with self._lock:
            by_phase = {phase.value: 0 for phase in SessionPhase}
            busy = 0
            for controller in self._controllers.values():
                by_phase[controller.phase.value] += 1
                if controller.busy:
                    busy += 1
            return {
                "total_sessions": len(self._controllers),
                "busy_sessions": busy,
                "sessions_by_phase": by_phase,
            }

    # ── Internals ────────────────────────────────────────────────────────

    def _expire_stale_locked(self) -> list[str]:
        """Must be called while holding self._lock."""
        expired_ids = [
            sid
            for sid, controller in self._controllers.items()
            if not controller.busy and controller.session.is_expired(self._ttl)
        ]
        for sid in expired_ids:
            self._controllers.pop(sid, None)
        if expired_ids:
            logger.info("Expired %d stale session(s)", len(expired_ids))
        return expired_ids
