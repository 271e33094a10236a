"""Next interviewer message: generated when possible, rule-based otherwise."""
from __future__ import annotations

import logging
from typing import Literal, Optional, Sequence

from pydantic import BaseModel

from agents.messages import fallback_followup, trim_words
from agents.signal_extractor import respondent_texts
from agents.types import ConversationTurn, FollowUpTarget, SignalSet
from config.settings import Settings, settings as default_settings
from llm_gateway import LlmGatewayError
from services.generation import GenerationConstraints, GenerationService, bounded_generate

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a warm, encouraging career coach interviewing someone about their work so their "
    "answers can become strong resume bullets. Ask exactly one short follow-up question. "
    "Reply with the question only: no preamble, no lists, no quotes."
)

TARGET_ASKS = {
    "metrics": "measurable results: numbers, percentages, scale, users or time saved",
    "team": "the team: how many people were involved and what their own role was",
    "technology": "the specific technologies, languages or tools they used",
    "business_impact": "the business impact: revenue, customers, costs or efficiency",
    "depth": "a deeper detail of the hardest problem they solved and how",
}

_SPEAKER_LABEL = {"interviewer": "INTERVIEWER", "respondent": "RESPONDENT"}


class FollowUpDraft(BaseModel):
    """Composed message plus where it came from."""

    text: str
    source: Literal["generated", "fallback"]
    target: FollowUpTarget
    route: Optional[str] = None
    failure: Optional[str] = None


def pick_target(signals: SignalSet) -> FollowUpTarget:
    """First signal not yet covered: metrics, team, technology, business impact."""

    if not signals.mentions_metric:
        return "metrics"
    if not signals.mentions_team:
        return "team"
    if not signals.mentions_technology:
        return "technology"
    if not signals.mentions_business_impact:
        return "business_impact"
    return "depth"


def render_transcript(transcript: Sequence[ConversationTurn], max_chars: int) -> str:
    """``SPEAKER: text`` lines, keeping only the most recent ``max_chars``."""

    lines = "\n".join(f"{_SPEAKER_LABEL[turn.speaker]}: {turn.text.strip()}" for turn in transcript)
    if len(lines) <= max_chars:
        return lines
    tail = lines[-max_chars:]
    cut = tail.find("\n")
    if 0 <= cut < len(tail) - 1:
        tail = tail[cut + 1:]
    return "[earlier conversation omitted]\n" + tail


def _signal_summary(signals: SignalSet) -> str:
    flags = {
        "technology": signals.mentions_technology,
        "metrics": signals.mentions_metric,
        "team": signals.mentions_team,
        "timeframe": signals.mentions_timeframe,
        "business impact": signals.mentions_business_impact,
    }
    covered = ", ".join(name for name, seen in flags.items() if seen) or "none yet"
    return f"Covered so far: {covered}. Answers given: {signals.respondent_turn_count}."


class FollowUpComposer:
    """Two-tier composer: one bounded generation call, then keyword templates."""

    def __init__(
        self,
        generator: Optional[GenerationService] = None,
        *,
        timeout_s: float = 5.0,
        max_words: int = 50,
        min_chars: int = 10,
        transcript_chars: int = 6000,
        prior_context_chars: int = 500,
    ):
        self.generator = generator
        self.timeout_s = timeout_s
        self.max_words = max_words
        self.min_chars = min_chars
        self.transcript_chars = transcript_chars
        self.prior_context_chars = prior_context_chars

    @classmethod
    def from_settings(cls, generator: Optional[GenerationService], cfg: Optional[Settings] = None) -> "FollowUpComposer":
        cfg = cfg or default_settings
        return cls(
            generator,
            timeout_s=cfg.GENERATION_TIMEOUT_S,
            max_words=cfg.FOLLOWUP_MAX_WORDS,
            min_chars=cfg.MIN_GENERATED_CHARS,
            transcript_chars=cfg.PROMPT_TRANSCRIPT_CHARS,
            prior_context_chars=cfg.PRIOR_CONTEXT_CHARS,
        )

    def compose(
        self,
        transcript: Sequence[ConversationTurn],
        signals: SignalSet,
        prior_context: Optional[str] = None,
    ) -> str:
        return self.draft(transcript, signals, prior_context).text

    def draft(
        self,
        transcript: Sequence[ConversationTurn],
        signals: SignalSet,
        prior_context: Optional[str] = None,
    ) -> FollowUpDraft:
        target = pick_target(signals)
        generated, failure = self._try_generate(self.build_prompt(transcript, signals, target, prior_context))
        if generated is not None:
            return FollowUpDraft(text=generated, source="generated", target=target)

        texts = respondent_texts(transcript)
        route, message = fallback_followup(texts[-1] if texts else None)
        return FollowUpDraft(text=message, source="fallback", target=target, route=route, failure=failure)

    def build_prompt(
        self,
        transcript: Sequence[ConversationTurn],
        signals: SignalSet,
        target: FollowUpTarget,
        prior_context: Optional[str] = None,
    ) -> str:
        parts = []
        excerpt = (prior_context or "").strip()
        if excerpt:
            parts.append("Resume excerpt:\n" + excerpt[: self.prior_context_chars])
        parts.append("Conversation so far:\n" + render_transcript(transcript, self.transcript_chars))
        parts.append(_signal_summary(signals))
        parts.append(
            f"Ask one encouraging follow-up question of at most {self.max_words} words "
            f"about {TARGET_ASKS[target]}."
        )
        return "\n\n".join(parts)

    def _try_generate(self, prompt: str) -> tuple[Optional[str], Optional[str]]:
        """Return ``(text, None)`` on success or ``(None, failure)``."""

        if self.generator is None:
            return None, "no_generator"
        constraints = GenerationConstraints(
            max_words=self.max_words,
            max_tokens=self.max_words * 3,
            system=SYSTEM_PROMPT,
        )
        try:
            raw = bounded_generate(self.generator, prompt, constraints, self.timeout_s)
        except LlmGatewayError as exc:
            logger.warning("Follow-up generation failed: %s", exc)
            return None, type(exc).__name__
        if not isinstance(raw, str):
            return None, "malformed"
        text = raw.strip().strip('"').strip()
        if len(text) < self.min_chars:
            return None, "too_short"
        return trim_words(text, self.max_words), None


__all__ = ["FollowUpComposer", "FollowUpDraft", "SYSTEM_PROMPT", "pick_target", "render_transcript"]
