"""Deterministic signal extraction over respondent text."""
from __future__ import annotations

import re
from typing import Iterable, List, Sequence

from agents.types import ConversationTurn, SignalSet

TECHNOLOGY_TERMS: Sequence[str] = (
    "react", "react.js", "reactjs", "angular", "angularjs", "angular.js", "vue", "vue.js", "vuejs", "svelte", "next.js", "javascript", "typescript", "node", "node.js",
    "python", "java", "kotlin", "golang", "rust", "ruby", "rails", "php", "c++", "c#", ".net", "asp.net", "vb.net",
    "django", "flask", "fastapi", "graphql", "api", "apis",
    "microservice", "microservices", "docker", "kubernetes", "k8s", "terraform", "aws", "gcp",
    "azure", "lambda", "sql", "nosql", "postgres", "postgresql", "mysql", "mongodb", "redis",
    "kafka", "spark", "airflow", "tensorflow", "pytorch", "pandas", "html", "css", "linux", "git",
    "ci/cd", "jenkins",
)


def _term_pattern(terms: Iterable[str]) -> re.Pattern[str]:
    ordered = sorted(terms, key=len, reverse=True)
    words = "|".join(re.escape(term) for term in ordered if not term.startswith("."))
    dotted = "|".join(re.escape(term) for term in ordered if term.startswith("."))
    # Dotted terms (".net") may follow a letter, as in "ADO.NET"; a ".js" suffix is allowed after any term.
    branches = [rf"(?<![\w.#+/])(?:{words})"] if words else []
    if dotted:
        branches.append(rf"(?<![.#+/])(?:{dotted})")
    return re.compile(rf"(?:{'|'.join(branches)})(?![\w#+/]|\.(?!js\b)\w)", re.IGNORECASE)


TECHNOLOGY_RE = _term_pattern(TECHNOLOGY_TERMS)

_OUTCOME_VERB = r"\b(?:improved|increased|reduced|saved|decreased|cut|boosted|grew|lowered|doubled|tripled)\b"
_COUNTED_UNIT = (
    r"(?:ms|secs?|seconds?|mins?|minutes?|hrs?|hours?|days?|weeks?|users?|customers?|requests?|"
    r"queries|transactions?|tickets?|bugs?|errors?|incidents?|servers?|points?|gb|mb|tb)"
)

# Quantified outcomes: percentages, multipliers, currency, large figures and
# magnitude words, or an outcome verb followed closely by a counted figure.
# A bare number after a verb ("grew into the role in 2020") is not a metric.
METRIC_RE = re.compile(
    rf"""
    \d+(?:\.\d+)?\s?(?:%|percent\b)
    | \b\d+(?:\.\d+)?x\b
    | [$€£]\s?\d
    | \b\d{{1,3}}(?:,\d{{3}})+\b
    | \b\d+(?:\.\d+)?\s?(?:k|m|bn)\b
    | \b(?:thousand|thousands|million|millions|billion|billions)\b
    | {_OUTCOME_VERB}[^.!?\n]{{0,40}}?
      (?:\b\d+(?:\.\d+)?\s?{_COUNTED_UNIT}\b | \bby\s+\d | \bfrom\s+\d+\S*\s+to\s+\d)
    """,
    re.IGNORECASE | re.VERBOSE,
)

TEAM_RE = re.compile(
    r"\b(?:team|teams|teammates?|engineers?|colleagues?|developers?|solo|pair|paired|pairing|squad|by myself)\b",
    re.IGNORECASE,
)

TIMEFRAME_RE = re.compile(
    r"\b(?:weeks?|months?|sprints?|quarters?|deadlines?|years?)\b",
    re.IGNORECASE,
)

BUSINESS_RE = re.compile(
    r"\b(?:revenue|customers?|clients?|costs?|profits?|efficiency|sales|conversions?|retention|churn|roi|budget)\b",
    re.IGNORECASE,
)


def respondent_texts(transcript: Sequence[ConversationTurn]) -> List[str]:
    """Respondent-authored text in conversational order."""

    return [turn.text for turn in transcript if turn.speaker == "respondent"]


def extract(transcript: Sequence[ConversationTurn]) -> SignalSet:
    """Recompute the full signal set from the transcript.

    Interviewer turns are ignored so the engine's own questions cannot satisfy
    the signals they ask about.
    """

    texts = respondent_texts(transcript)
    return SignalSet(
        mentions_technology=any(TECHNOLOGY_RE.search(text) for text in texts),
        mentions_metric=any(METRIC_RE.search(text) for text in texts),
        mentions_team=any(TEAM_RE.search(text) for text in texts),
        mentions_timeframe=any(TIMEFRAME_RE.search(text) for text in texts),
        mentions_business_impact=any(BUSINESS_RE.search(text) for text in texts),
        respondent_turn_count=len(texts),
    )


def technologies_in(text: str) -> List[str]:
    """Distinct technology terms in first-seen order, lower-cased."""

    seen: List[str] = []
    for match in TECHNOLOGY_RE.finditer(text or ""):
        term = match.group(0).lower()
        if term not in seen:
            seen.append(term)
    return seen


__all__ = ["extract", "respondent_texts", "technologies_in", "TECHNOLOGY_TERMS"]
