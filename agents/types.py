"""Shared type definitions for the interview engine."""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Speaker = Literal["interviewer", "respondent"]
SessionState = Literal["idle", "active", "finalizing", "done"]
TerminationReason = Literal["time_exceeded", "turn_cap_reached", "quality_sufficient"]
FollowUpTarget = Literal["metrics", "team", "technology", "business_impact", "depth"]


class ConversationTurn(BaseModel):
    """One immutable message in the dialogue."""

    model_config = ConfigDict(frozen=True)

    speaker: Speaker
    text: str
    produced_at: datetime


Transcript = List[ConversationTurn]


class SignalSet(BaseModel):
    """Information-sufficiency signals derived from respondent text."""

    model_config = ConfigDict(frozen=True)

    mentions_technology: bool = False
    mentions_metric: bool = False
    mentions_team: bool = False
    mentions_timeframe: bool = False
    mentions_business_impact: bool = False
    respondent_turn_count: int = 0


class TerminationDecision(BaseModel):
    """Continue, or finalize with a reason."""

    model_config = ConfigDict(frozen=True)

    action: Literal["continue", "finalize"]
    reason: Optional[TerminationReason] = None

    @classmethod
    def proceed(cls) -> "TerminationDecision":
        return cls(action="continue")

    @classmethod
    def finalize(cls, reason: TerminationReason) -> "TerminationDecision":
        return cls(action="finalize", reason=reason)

    @property
    def is_terminal(self) -> bool:
        return self.action == "finalize"


class StartResult(BaseModel):
    status: Literal["started"] = "started"
    message: str


class ContinueResult(BaseModel):
    status: Literal["continue"] = "continue"
    message: str


class FinalizeResult(BaseModel):
    status: Literal["finalize"] = "finalize"
    reason: TerminationReason
    message: str
    transcript: List[ConversationTurn]


class InvalidInput(BaseModel):
    status: Literal["invalid_input"] = "invalid_input"
    detail: str


class InvalidState(BaseModel):
    status: Literal["invalid_state"] = "invalid_state"
    detail: str
    state: SessionState


class TranscriptionFailed(BaseModel):
    status: Literal["transcription_failed"] = "transcription_failed"
    detail: str = "We couldn't catch that. Please try again."


class SessionSnapshot(BaseModel):
    state: SessionState
    transcript: List[ConversationTurn] = Field(default_factory=list)
    elapsed_seconds: float = 0.0
    respondent_turn_count: int = 0


class ResumeBullet(BaseModel):
    text: str
    context: str = "Professional experience"
    format: Literal["XYZ", "STAR"] = "XYZ"
    impact_level: Literal["low", "medium", "high"] = "medium"
    technologies: List[str] = Field(default_factory=list)
