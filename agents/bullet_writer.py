"""Turn a finished interview transcript into resume bullets."""
from __future__ import annotations

import json
import logging
from textwrap import dedent
from typing import Any, List, Optional

from agents.signal_extractor import respondent_texts, technologies_in
from agents.types import FinalizeResult, ResumeBullet
from llm_gateway import LlmGatewayError, strip_code_fences
from services.generation import GenerationConstraints, GenerationService, bounded_generate

logger = logging.getLogger(__name__)

MAX_BULLETS = 4
DEFAULT_ROLE = "Software Engineer"
FALLBACK_BULLET = "Led technical initiative resulting in improved system performance and user experience"

SYSTEM_PROMPT = (
    "You are an expert resume writer. Write achievement bullets in the XYZ format "
    "(accomplished X as measured by Y by doing Z) or STAR format. Reply with JSON only."
)


def write_bullets(
    result: FinalizeResult,
    generator: Optional[GenerationService],
    *,
    role: Optional[str] = None,
    timeout_s: float = 20.0,
) -> List[ResumeBullet]:  # Never raises; falls back to one generic bullet
    role = (role or "").strip() or DEFAULT_ROLE
    answers = respondent_texts(result.transcript)
    if generator is None or not answers:
        return [_fallback(answers, role)]

    constraints = GenerationConstraints(max_tokens=1000, temperature=0.3, system=SYSTEM_PROMPT, json_reply=True)
    try:
        raw = bounded_generate(generator, _build_task(answers, role), constraints, timeout_s)
        if not isinstance(raw, str):
            raise TypeError(f"expected text reply, got {type(raw).__name__}")
        data = json.loads(strip_code_fences(raw))
    except (LlmGatewayError, json.JSONDecodeError, TypeError) as exc:
        logger.warning("Bullet generation failed: %s", exc)
        return [_fallback(answers, role)]

    items = data.get("bullets") if isinstance(data, dict) else data
    if not isinstance(items, list):
        logger.warning("Bullet reply had no bullet list")
        return [_fallback(answers, role)]

    bullets = [_normalize(item, index, role) for index, item in enumerate(items[:MAX_BULLETS])]
    return bullets or [_fallback(answers, role)]


def _build_task(answers: List[str], role: str) -> str:  # Compose bullet prompt
    numbered = "\n".join(f"Response {index}: {text}" for index, text in enumerate(answers, start=1))
    return dedent(
        f"""
        Target role: {role}

        Interview responses:
        {{answers}}

        Write 3-4 resume bullets grounded only in these responses. Quantify impact where numbers were given.
        Return a JSON object: {{"bullets": [{{"text": str, "context": str, "format": "XYZ" | "STAR",
        "impact_level": "low" | "medium" | "high", "technologies": [str]}}]}}
        """
    ).strip().replace("{answers}", numbered)


def _normalize(item: Any, index: int, role: str) -> ResumeBullet:
    if not isinstance(item, dict):
        item = {"text": str(item)} if isinstance(item, str) else {}
    text = str(item.get("text") or "").strip() or f"Professional achievement from interview response {index + 1}"
    context = str(item.get("context") or "").strip() or role or "Professional experience"
    fmt = item.get("format") if item.get("format") in ("XYZ", "STAR") else "XYZ"
    impact = item.get("impact_level") if item.get("impact_level") in ("low", "medium", "high") else "medium"
    techs = item.get("technologies")
    technologies = [str(tech) for tech in techs if str(tech).strip()] if isinstance(techs, list) else []
    return ResumeBullet(text=text, context=context, format=fmt, impact_level=impact, technologies=technologies)


def _fallback(answers: List[str], role: str) -> ResumeBullet:
    technologies: List[str] = []
    for text in answers:
        for term in technologies_in(text):
            if term not in technologies:
                technologies.append(term)
    return ResumeBullet(text=FALLBACK_BULLET, context=role or "Professional experience", technologies=technologies)


__all__ = ["DEFAULT_ROLE", "FALLBACK_BULLET", "MAX_BULLETS", "write_bullets"]
