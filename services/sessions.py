"""Helpers for creating and holding live interview sessions."""
from __future__ import annotations

from threading import Lock, RLock
from typing import Dict, Optional

from agents.followup_composer import FollowUpComposer
from agents.termination_policy import TerminationPolicy
from config.settings import settings
from interview_session.interview_session import ConversationStateMachine
from services.generation import GenerationService, current_generation


def new_session(
    prior_context: Optional[str] = None,
    *,
    role: Optional[str] = None,
    budget_seconds: Optional[int] = None,
    generator: Optional[GenerationService] = None,
) -> ConversationStateMachine:
    """Build an unstarted session wired from settings and the model registry."""

    composer = FollowUpComposer.from_settings(generator or current_generation(), settings)
    return ConversationStateMachine(
        prior_context=prior_context,
        role=role,
        budget_seconds=budget_seconds or settings.SESSION_BUDGET_SECONDS,
        policy=TerminationPolicy.from_settings(settings),
        composer=composer,
    )


class SessionNotFoundError(KeyError):  # Raised when session missing
    pass


class InMemorySessionStore:  # Thread-safe in-memory store
    def __init__(self) -> None:
        self._sessions: Dict[str, ConversationStateMachine] = {}
        self._turn_locks: Dict[str, Lock] = {}
        self._lock = RLock()

    def create(self, session: ConversationStateMachine) -> None:
        with self._lock:
            self._sessions[session.session_id] = session

    def get(self, session_id: str) -> ConversationStateMachine:
        with self._lock:
            stored = self._sessions.get(session_id)
        if stored is None:
            raise SessionNotFoundError(session_id)
        return stored

    def delete(self, session_id: str) -> None:  # Discard finished session
        with self._lock:
            self._sessions.pop(session_id, None)
            self._turn_locks.pop(session_id, None)

    def turn_lock(self, session_id: str) -> Lock:  # Serializes calls into one session
        with self._lock:
            if session_id not in self._sessions:
                raise SessionNotFoundError(session_id)
            return self._turn_locks.setdefault(session_id, Lock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


store = InMemorySessionStore()


__all__ = ["InMemorySessionStore", "SessionNotFoundError", "new_session", "store"]
