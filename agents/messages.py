"""Fixed interviewer copy: openers, closings and fallback follow-ups."""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence, Tuple

from agents.types import TerminationReason

GENERIC_OPENER = (
    "Hi! Let's talk about your recent work experience. Can you tell me about a specific "
    "project you've worked on recently? I'd love to hear about what you built and what "
    "technologies you used."
)

_OPENER_GREETING = "Hi! I've reviewed your resume and I'm excited to learn more about your experience. "
_OPENER_ASK = (
    "let's dive into a specific project you've worked on recently. Can you tell me about one "
    "project you're particularly proud of and what technologies you used to build it?"
)

# (pattern, display name) in the order they are named in the opener.
_OPENER_TECH: Sequence[Tuple[re.Pattern[str], str]] = (
    (re.compile(r"\breact\b", re.IGNORECASE), "React"),
    (re.compile(r"\bnode(?:\.js)?\b", re.IGNORECASE), "Node.js"),
    (re.compile(r"\bpython\b", re.IGNORECASE), "Python"),
    (re.compile(r"\baws\b", re.IGNORECASE), "AWS"),
    (re.compile(r"\bkubernetes\b", re.IGNORECASE), "Kubernetes"),
    (re.compile(r"\bdocker\b", re.IGNORECASE), "Docker"),
)

_OPENER_ROLES: Sequence[Tuple[re.Pattern[str], str]] = (
    (re.compile(r"\bsenior\b", re.IGNORECASE), "senior"),
    (re.compile(r"\blead\b", re.IGNORECASE), "lead"),
    (re.compile(r"\bfull[\s-]?stack\b", re.IGNORECASE), "full-stack"),
    (re.compile(r"\bfront[\s-]?end\b", re.IGNORECASE), "frontend"),
    (re.compile(r"\bback[\s-]?end\b", re.IGNORECASE), "backend"),
)

MAX_OPENER_TECHNOLOGIES = 2


def opener(prior_context: Optional[str] = None) -> str:
    """First interviewer message, personalised when resume text is available."""

    text = (prior_context or "").strip()
    if not text:
        return GENERIC_OPENER

    techs = [name for pattern, name in _OPENER_TECH if pattern.search(text)][:MAX_OPENER_TECHNOLOGIES]
    role = next((name for pattern, name in _OPENER_ROLES if pattern.search(text)), None)

    message = _OPENER_GREETING
    if techs:
        message += f"I see you work with {' and '.join(techs)}. "
    if role:
        message += f"As a {role} developer, {_OPENER_ASK}"
    else:
        message += _OPENER_ASK[0].upper() + _OPENER_ASK[1:]
    return message


CLOSINGS: Dict[TerminationReason, str] = {
    "quality_sufficient": (
        "Perfect! I have excellent material from our conversation. "
        "Let me generate your professional resume bullets now."
    ),
    "turn_cap_reached": (
        "Thank you for sharing your experience! I have great material to work with for your resume bullets."
    ),
    "time_exceeded": (
        "We're almost out of time, so let's wrap up here. Thank you for sharing your experience! "
        "Let me generate some professional bullet points from our conversation."
    ),
}


def closing(reason: TerminationReason) -> str:
    return CLOSINGS[reason]


# Fallback routes, first match wins. Matched against the latest respondent message.
FALLBACK_ROUTES: Sequence[Tuple[str, re.Pattern[str], str]] = (
    (
        "frontend",
        re.compile(r"\b(?:react|frontend|front-end|front end)\b", re.IGNORECASE),
        "What specific React features did you implement and how many users does it serve?",
    ),
    (
        "backend",
        re.compile(r"\b(?:apis?|backend|back-end|back end)\b", re.IGNORECASE),
        "What was the scale of this API and how did you optimize its performance?",
    ),
    (
        "database",
        re.compile(r"\b(?:database|databases|sql|postgres|postgresql|mysql|mongodb)\b", re.IGNORECASE),
        "How did you design the database schema and what performance improvements did you achieve?",
    ),
    (
        "team",
        re.compile(r"\b(?:team|teams|collaborat\w*)\b", re.IGNORECASE),
        "How big was the team and what was your specific role in the project?",
    ),
    (
        "improvement",
        re.compile(r"\b(?:improv\w*|optimi[sz]\w*)\b", re.IGNORECASE),
        "What specific metrics improved and by how much?",
    ),
    (
        "project",
        re.compile(r"\bprojects?\b", re.IGNORECASE),
        "What specific technologies did you use in that project?",
    ),
)

GENERIC_FOLLOWUP = "That's interesting! Can you tell me more about that?"


def fallback_followup(latest_reply: Optional[str]) -> Tuple[str, str]:
    """Return ``(route, message)`` for the latest respondent message. Never empty."""

    text = latest_reply or ""
    for route, pattern, message in FALLBACK_ROUTES:
        if pattern.search(text):
            return route, message
    return "generic", GENERIC_FOLLOWUP


def trim_words(text: str, max_words: int) -> str:
    """Clip ``text`` to ``max_words`` whitespace-separated words."""

    words: List[str] = text.split()
    if len(words) <= max_words:
        return " ".join(words)
    return " ".join(words[:max_words]).rstrip(",;:") + "..."


__all__ = [
    "CLOSINGS",
    "FALLBACK_ROUTES",
    "GENERIC_FOLLOWUP",
    "GENERIC_OPENER",
    "closing",
    "fallback_followup",
    "opener",
    "trim_words",
]
