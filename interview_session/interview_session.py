from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from uuid import uuid4

from agents.followup_composer import FollowUpComposer
from agents.messages import closing, opener
from agents.signal_extractor import extract
from agents.termination_policy import TerminationPolicy
from agents.types import (
    ContinueResult,
    ConversationTurn,
    FinalizeResult,
    InvalidInput,
    InvalidState,
    SessionSnapshot,
    SessionState,
    Speaker,
    StartResult,
    TerminationReason,
    TranscriptionFailed,
)
from observability import log_event, span
from services.clock import SessionClock
from services.transcription import TranscriptionError, TranscriptionService, current_transcription

logger = logging.getLogger(__name__)

DEFAULT_BUDGET_SECONDS = 900
VOICE_UNAVAILABLE = "Voice input is not available right now. Please type your response."

RespondResult = Union[ContinueResult, FinalizeResult, InvalidInput, InvalidState]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversationStateMachine:  # One interview session: idle -> active -> finalizing -> done
    """Drive a single bounded interview.

    Each respondent turn recomputes signals over the whole transcript, asks the
    termination policy, then either composes a follow-up or closes the session.
    Callers serialize calls per session; instances share no state.
    """

    def __init__(
        self,
        *,
        session_id: Optional[str] = None,
        prior_context: Optional[str] = None,
        role: Optional[str] = None,
        budget_seconds: int = DEFAULT_BUDGET_SECONDS,
        clock: Optional[SessionClock] = None,
        now: Optional[Callable[[], float]] = None,
        policy: Optional[TerminationPolicy] = None,
        composer: Optional[FollowUpComposer] = None,
        wall_now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.session_id = session_id or uuid4().hex
        self.prior_context = prior_context
        self.role = role
        self.budget_seconds = budget_seconds
        self.clock = clock
        self._now = now
        self.policy = policy or TerminationPolicy()
        self.composer = composer or FollowUpComposer()
        self._wall_now = wall_now
        self._state: SessionState = "idle"
        self._transcript: List[ConversationTurn] = []
        self.events: List[Dict[str, Any]] = []
        self.final_reason: Optional[TerminationReason] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def transcript(self) -> Tuple[ConversationTurn, ...]:
        return tuple(self._transcript)

    def start(self, prior_context: Optional[str] = None) -> Union[StartResult, InvalidState]:  # Open session
        if self._state != "idle":
            return self._invalid_state("Session has already been started")
        if prior_context is not None:
            self.prior_context = prior_context
        if self.clock is None:
            self.clock = SessionClock(self.budget_seconds, now=self._now)
        message = opener(self.prior_context)
        self._append("interviewer", message)
        self._state = "active"
        log_event(
            "session_started",
            self.session_id,
            state=self._state,
            personalized=bool((self.prior_context or "").strip()),
            budget_s=self.clock.budget_seconds,
        )
        return StartResult(message=message)

    def submit_response(self, text: Any) -> RespondResult:  # Apply one respondent turn
        if self._state != "active":
            detail = "Session has not been started" if self._state == "idle" else "Session is already finished"
            return self._invalid_state(detail)
        if not isinstance(text, str) or not text.strip():
            log_event("input_rejected", self.session_id, level=logging.WARNING, state=self._state, detail="empty response")
            return InvalidInput(detail="Please share a response before continuing.")

        clock = self.clock
        if clock is None:
            raise RuntimeError(f"active session {self.session_id} has no clock")
        self._append("respondent", text.strip())
        signals = extract(self._transcript)
        log_event(
            "turn_received",
            self.session_id,
            turn=signals.respondent_turn_count,
            chars=len(text),
            elapsed_s=round(clock.elapsed(), 1),
        )
        decision = self.policy.decide(signals, clock)
        log_event(
            "decision",
            self.session_id,
            turn=signals.respondent_turn_count,
            decision=decision.action,
            reason=decision.reason,
            signals=signals.model_dump(),
        )

        if decision.reason is not None:
            return self._finalize(decision.reason, clock)

        with span(self.events, "compose_followup") as entry:
            draft = self.composer.draft(self._transcript, signals, self.prior_context)
            entry.update(source=draft.source, target=draft.target)
        self._append("interviewer", draft.text)
        log_event(
            "followup_composed",
            self.session_id,
            turn=signals.respondent_turn_count,
            source=draft.source,
            ms=entry["ms"],
            target=draft.target,
            route=draft.route,
            failure=draft.failure,
        )
        return ContinueResult(message=draft.text)

    def submit_audio(
        self, audio: bytes, transcriber: Optional[TranscriptionService] = None
    ) -> Union[RespondResult, TranscriptionFailed]:  # Voice path: transcribe then respond
        if self._state != "active":
            return self._invalid_state("Session is not accepting responses")
        transcriber = transcriber or current_transcription()
        if transcriber is None:
            log_event("input_rejected", self.session_id, level=logging.WARNING, state=self._state, detail="no transcriber bound")
            return TranscriptionFailed(detail=VOICE_UNAVAILABLE)
        try:
            text = transcriber.transcribe(audio)
        except TranscriptionError as exc:
            log_event("input_rejected", self.session_id, level=logging.WARNING, state=self._state, detail=f"transcription: {exc}")
            return TranscriptionFailed()
        if not isinstance(text, str) or not text.strip():
            log_event("input_rejected", self.session_id, level=logging.WARNING, state=self._state, detail="empty transcription")
            return TranscriptionFailed()
        return self.submit_response(text)

    def snapshot(self) -> SessionSnapshot:  # Read-only view
        return SessionSnapshot(
            state=self._state,
            transcript=list(self._transcript),
            elapsed_seconds=self.clock.elapsed() if self.clock is not None else 0.0,
            respondent_turn_count=sum(1 for turn in self._transcript if turn.speaker == "respondent"),
        )

    def _finalize(self, reason: TerminationReason, clock: SessionClock) -> FinalizeResult:
        self._state = "finalizing"
        message = closing(reason)
        self._append("interviewer", message)
        self.final_reason = reason
        self._state = "done"
        log_event(
            "session_finalized",
            self.session_id,
            state=self._state,
            reason=reason,
            turns=len(self._transcript),
            elapsed_s=round(clock.elapsed(), 1),
        )
        return FinalizeResult(reason=reason, message=message, transcript=list(self._transcript))

    def _append(self, speaker: Speaker, text: str) -> None:
        self._transcript.append(ConversationTurn(speaker=speaker, text=text, produced_at=self._wall_now()))

    def _invalid_state(self, detail: str) -> InvalidState:
        logger.warning("Rejected call in state=%s session=%s: %s", self._state, self.session_id, detail)
        return InvalidState(detail=detail, state=self._state)


__all__ = ["ConversationStateMachine", "DEFAULT_BUDGET_SECONDS", "RespondResult"]
