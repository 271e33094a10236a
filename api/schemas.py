"""Pydantic schemas for the interview session API."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from agents.types import ConversationTurn, ResumeBullet, SessionState, TerminationReason


class StartReq(BaseModel):
    prior_context: Optional[str] = None
    role: Optional[str] = None
    budget_seconds: Optional[int] = Field(default=None, ge=1)


class TurnReq(BaseModel):
    session_id: str
    text: Optional[str] = None


class AudioTurnReq(BaseModel):
    session_id: str
    audio_b64: str


class ApiResp(BaseModel):
    session_id: str
    status: Literal["started", "continue", "finalize"]
    message: str
    reason: Optional[TerminationReason] = None
    transcript: List[ConversationTurn] = Field(default_factory=list)
    bullets: List[ResumeBullet] = Field(default_factory=list)


class SnapshotResp(BaseModel):
    session_id: str
    state: SessionState
    elapsed_seconds: float
    respondent_turn_count: int
    transcript: List[ConversationTurn] = Field(default_factory=list)
