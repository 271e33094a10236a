"""Rules deciding when the interview has gathered enough."""
from __future__ import annotations

from typing import Optional, Protocol

from pydantic import BaseModel, Field

from agents.types import SignalSet, TerminationDecision
from config.settings import Settings, settings as default_settings


class BudgetClock(Protocol):
    def remaining(self) -> float: ...


class TerminationPolicy(BaseModel):
    """Priority-ordered stop rules; the first matching rule wins.

    1. time left at or under ``wrapup_margin_seconds`` -> time_exceeded
    2. ``turn_cap`` respondent turns -> turn_cap_reached
    3. ``quality_min_turns`` turns with technology and metric signals -> quality_sufficient
    4. otherwise continue
    """

    wrapup_margin_seconds: float = Field(default=180, ge=0)
    turn_cap: int = Field(default=10, ge=1)
    quality_min_turns: int = Field(default=6, ge=1)

    @classmethod
    def from_settings(cls, cfg: Optional[Settings] = None) -> "TerminationPolicy":
        cfg = cfg or default_settings
        return cls(
            wrapup_margin_seconds=cfg.WRAPUP_MARGIN_SECONDS,
            turn_cap=cfg.TURN_CAP,
            quality_min_turns=cfg.QUALITY_MIN_TURNS,
        )

    def decide(self, signals: SignalSet, clock: BudgetClock) -> TerminationDecision:
        if clock.remaining() <= self.wrapup_margin_seconds:
            return TerminationDecision.finalize("time_exceeded")
        if signals.respondent_turn_count >= self.turn_cap:
            return TerminationDecision.finalize("turn_cap_reached")
        if (
            signals.respondent_turn_count >= self.quality_min_turns
            and signals.mentions_technology
            and signals.mentions_metric
        ):
            return TerminationDecision.finalize("quality_sufficient")
        return TerminationDecision.proceed()


def decide(signals: SignalSet, clock: BudgetClock) -> TerminationDecision:
    """Evaluate with thresholds from the current settings."""

    return TerminationPolicy.from_settings().decide(signals, clock)


__all__ = ["TerminationPolicy", "decide"]
