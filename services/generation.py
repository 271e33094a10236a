"""Text generation service used for follow-ups and bullet extraction."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Dict, Optional, Protocol

from pydantic import BaseModel, Field

from config import GENERATION_KEY, LlmRoute, bind_model, default_route, get_model, has_model
from llm_gateway import HttpClient, LlmGatewayError, call

logger = logging.getLogger(__name__)


class GenerationTimeout(LlmGatewayError):
    """The generation call did not finish inside its ceiling."""


class GenerationConstraints(BaseModel):
    """Per-call limits passed alongside the prompt."""

    max_words: Optional[int] = Field(default=None, ge=1)
    max_tokens: int = Field(default=200, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    system: Optional[str] = None
    json_reply: bool = False


class GenerationService(Protocol):
    def generate(self, prompt: str, constraints: GenerationConstraints) -> str: ...


class TextReply(BaseModel):
    """Free-text completion; accepts ``{"text": ...}`` or the bare reply."""

    text: str

    @classmethod
    def from_raw_content(cls, content: str) -> "TextReply":
        return cls(text=content.strip())


class GatewayGenerationService:
    """GenerationService backed by the chat-completions gateway."""

    def __init__(self, route: LlmRoute, client: Optional[HttpClient] = None):
        self.route = route
        self.client = client

    def generate(self, prompt: str, constraints: GenerationConstraints) -> str:
        options: Dict[str, Any] = {
            "temperature": constraints.temperature,
            "max_tokens": constraints.max_tokens,
        }
        if constraints.json_reply:
            options["response_format"] = {"type": "json_object"}
        reply = call(
            prompt,
            TextReply,
            cfg=self.route,
            system=constraints.system,
            client=self.client,
            options=options,
        )
        return reply.text


def bounded_generate(
    service: GenerationService,
    prompt: str,
    constraints: GenerationConstraints,
    timeout_s: float,
) -> str:
    """Run ``service.generate`` with a hard ceiling.

    Raises:
        GenerationTimeout: when ``timeout_s`` elapses first.
        LlmGatewayError: for any other failure of the call.
    """

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="generation")
    try:
        future = executor.submit(service.generate, prompt, constraints)
        try:
            return future.result(timeout=timeout_s)
        except FutureTimeout as exc:
            future.cancel()
            logger.warning("Generation exceeded %.1fs ceiling", timeout_s)
            raise GenerationTimeout(f"generation exceeded {timeout_s}s") from exc
        except LlmGatewayError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise LlmGatewayError(f"generation failed: {exc}") from exc
    finally:
        # Never join a straggling worker.
        executor.shutdown(wait=False, cancel_futures=True)


def bind_default_generation(route: Optional[LlmRoute] = None) -> GatewayGenerationService:
    """Bind a gateway-backed service under ``GENERATION_KEY``."""

    service = GatewayGenerationService(route or default_route())
    bind_model(GENERATION_KEY, service)
    return service


def current_generation() -> GenerationService:
    """Bound generation backend, binding the default route on first use."""

    if has_model(GENERATION_KEY):
        return get_model(GENERATION_KEY)
    return bind_default_generation()


__all__ = [
    "GatewayGenerationService",
    "GenerationConstraints",
    "GenerationService",
    "GenerationTimeout",
    "TextReply",
    "bind_default_generation",
    "bounded_generate",
    "current_generation",
]
