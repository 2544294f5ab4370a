"""SessionController: the Landing → Assessment → Analysis → Results machine.

Design notes:
    - The controller owns one Session and is the only writer to it.
    - The two oracle calls are the only suspension points; every other
      transition happens synchronously within a single triggering event.
    - ``busy`` is set while an oracle call is in flight.  The controller
      does not serialise overlapping submissions itself; the API boundary
      refuses them while busy.
    - Each submission captures the session generation.  If a reset happens
      while an oracle call is in flight, the late response is discarded.
    - Failures escaping the oracle clients become a single system message
      and the session stays in the phase it had before the submission.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from bimasathi.domain.enums import SessionPhase
from bimasathi.domain.message import Message
from bimasathi.domain.session import Session, SessionSnapshot
from bimasathi.graph.runner import AnalysisRunner
from bimasathi.oracle.question import QuestionOracle

logger = logging.getLogger(__name__)

ChangeListener = Callable[[SessionSnapshot], Awaitable[None]]

# ── Scripted content ─────────────────────────────────────────────────────────

GREETING = "Hello! I'm BimaSathi. I can help you find the perfect health insurance."
FIRST_QUESTION = "To start, who are you looking to insure? (e.g., Yourself, Family, Parents)"
FIRST_QUICK_REPLIES = ["Myself", "My Family (Wife & Kids)", "Parents", "Everyone"]

RETRY_MESSAGE = "I'm having trouble connecting to the server. Please try again."


class SessionPhaseError(RuntimeError):
    """An action was requested in a phase that does not accept it."""


class SessionBusyError(RuntimeError):
    """A submission arrived while an oracle call was still in flight."""


class SessionController:
    """Drives one Session through the advisory flow.

    Args:
        session: The session to own.  A fresh one is created if omitted.
        question_oracle: Decides the next intake question.
        analysis_runner: Produces ranked recommendations once intake is done.
        on_change: Optional async callback receiving a snapshot after every
            observable state change.
    """

    def __init__(
        self,
        question_oracle: QuestionOracle,
        analysis_runner: AnalysisRunner,
        session: Session | None = None,
        on_change: Optional[ChangeListener] = None,
    ) -> None:
        self._session = session or Session()
        self._question_oracle = question_oracle
        self._analysis_runner = analysis_runner
        self._on_change = on_change

    # ── Read side ────────────────────────────────────────────────────────

    @property
    def session(self) -> Session:
        return self._session

    @property
    def session_id(self) -> str:
        return self._session.session_id

    @property
    def phase(self) -> SessionPhase:
        return self._session.phase

    @property
    def busy(self) -> bool:
        return self._session.busy

    def snapshot(self) -> SessionSnapshot:
        return self._session.snapshot()

    def set_listener(self, on_change: Optional[ChangeListener]) -> None:
        self._on_change = on_change

    # ── Actions ──────────────────────────────────────────────────────────

    async def start(self) -> None:
        """Leave Landing and seed the scripted opening of the intake."""
        s = self._session
        if s.phase != SessionPhase.LANDING:
            raise SessionPhaseError(f"cannot start from {s.phase.value}")

        s.phase = SessionPhase.ASSESSMENT
        s.conversation.append(Message.assistant(GREETING))
        s.conversation.append(Message.assistant(FIRST_QUESTION, FIRST_QUICK_REPLIES))
        s.touch()
        logger.info("Session %s started assessment", s.session_id)
        await self._notify()

    def set_pending_input(self, text: str) -> None:
        self._session.pending_input = text
        self._session.touch()

    async def select_quick_reply(self, option: str) -> bool:
        """Equivalent to typing *option* and submitting it."""
        return await self.submit(option)

    async def submit(self, text: str) -> bool:
        """Process one user answer.

        Returns False when *text* is blank (nothing changes), True otherwise.
        """
        if not text or not text.strip():
            return False

        s = self._session
        if s.phase != SessionPhase.ASSESSMENT:
            raise SessionPhaseError(f"cannot submit answers during {s.phase.value}")

        generation = s.generation
        phase_before = s.phase

        s.conversation.append(Message.user(text))
        s.pending_input = ""
        s.busy = True
        s.touch()
        await self._notify()

        try:
            history = s.conversation.oracle_history()
            reply = await self._question_oracle.next_question(history)
            if self._is_stale(generation):
                return self._discard(generation)

            if reply.is_complete:
                s.phase = SessionPhase.ANALYSIS
                logger.info("Session %s intake complete, analysing", s.session_id)
                await self._notify()

                recommendations = await self._analysis_runner.run(history)
                if self._is_stale(generation):
                    return self._discard(generation)

                s.recommendations = recommendations
                s.phase = SessionPhase.RESULTS
                logger.info(
                    "Session %s has %d recommendations",
                    s.session_id,
                    len(recommendations),
                )
            else:
                s.conversation.append(Message.assistant(reply.text, reply.options))
        except Exception as exc:
            logger.error("Session %s turn failed: %s", s.session_id, exc, exc_info=True)
            if not self._is_stale(generation):
                s.phase = phase_before
                s.conversation.append(Message.system(RETRY_MESSAGE))
        finally:
            if not self._is_stale(generation):
                s.busy = False
                s.touch()

        await self._notify()
        return True

    async def reset(self) -> None:
        """Return to Landing from any phase, discarding all session content."""
        self._session.clear()
        logger.info(
            "Session %s reset (generation %d)",
            self._session.session_id,
            self._session.generation,
        )
        await self._notify()

    # ── Internals ────────────────────────────────────────────────────────

    def _is_stale(self, generation: int) -> bool:
        return self._session.generation != generation

    def _discard(self, generation: int) -> bool:
        logger.info(
            "Discarding oracle response for session %s from generation %d",
            self._session.session_id,
            generation,
        )
        return True

    async def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            await self._on_change(self._session.snapshot())
        except Exception as exc:
            logger.warning("Session change listener failed: %s", exc)
