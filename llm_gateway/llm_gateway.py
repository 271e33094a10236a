from __future__ import annotations  # Chat-completions gateway for the generation service

import json
import logging
import os
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from config import LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


T = TypeVar("T", bound=BaseModel)


def call(
    task: str,
    schema: Type[T],
    *,
    cfg: LlmRoute,
    system: Optional[str] = None,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:  # Single-prompt convenience over chat()
    messages: list[Dict[str, str]] = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": task})
    return chat(messages, schema, cfg=cfg, client=client, options=options)


def chat(
    messages: Sequence[Dict[str, str]],
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:
    base_messages = _normalize_messages(messages)
    payload: Dict[str, Any] = {"model": cfg.model, "messages": base_messages}
    if options:
        payload.update(options)
    if cfg.response_format:
        payload["response_format"] = {"type": cfg.response_format}
    headers = _headers(cfg)
    attempts = cfg.max_retries + 1
    logger.info(
        "LLM request start route=%s model=%s attempts=%d preview=%s",
        cfg.name,
        cfg.model,
        attempts,
        _preview(base_messages),
    )
    last_error: Optional[LlmGatewayError] = None
    for attempt in range(attempts):
        try:
            response, close_cb = _post(f"{cfg.base_url}{cfg.endpoint}", payload, headers, cfg.timeout_s, client)
        except Exception as exc:  # noqa: BLE001
            logger.warning("LLM transport failure route=%s attempt=%d: %s", cfg.name, attempt + 1, exc)
            last_error = LlmGatewayError("LLM transport failed")
            last_error.__cause__ = exc
            continue
        try:
            if response.status_code >= 500:  # Upstream fault; try again
                logger.warning("LLM server error route=%s status=%s attempt=%d", cfg.name, response.status_code, attempt + 1)
                last_error = LlmGatewayError(f"LLM returned status {response.status_code}")
                continue
            if response.status_code >= 400:
                logger.error("LLM error status route=%s status=%s", cfg.name, response.status_code)
                raise LlmGatewayError(f"LLM returned status {response.status_code}")
            try:
                data = response.json()
            except Exception as exc:  # noqa: BLE001
                logger.error("Invalid JSON payload from LLM: %s", exc)
                raise LlmGatewayError("LLM payload was not JSON") from exc
            content = _extract_content(data)
            try:
                parsed = _validate(schema, content)
            except (json.JSONDecodeError, ValidationError) as exc:
                logger.error("LLM output validation failed route=%s: %s", cfg.name, exc)
                raise LlmGatewayError("LLM output validation failed") from exc
        finally:
            _close_safely(close_cb)
        logger.info("LLM request done route=%s model=%s attempt=%d", cfg.name, cfg.model, attempt + 1)
        return parsed
    logger.error("LLM request gave up route=%s after %d attempts", cfg.name, attempts)
    raise last_error or LlmGatewayError("LLM request failed")


def _headers(cfg: LlmRoute) -> Dict[str, str]:  # Compose request headers including bearer auth
    headers = {"Content-Type": "application/json"}
    if cfg.api_key_env:
        api_key = os.getenv(cfg.api_key_env)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    return headers


def _post(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float, client: Optional[HttpClient]) -> Tuple[HttpResponse, Optional[Callable[[], None]]]:  # Dispatch HTTP request
    if client is not None:
        return client.post(url, json=payload, headers=headers, timeout=timeout), None
    import httpx

    http_client = httpx.Client(timeout=timeout)
    try:
        response = http_client.post(url, json=payload, headers=headers)
    except Exception:
        http_client.close()
        raise
    return response, http_client.close


def _close_safely(close_cb: Optional[Callable[[], None]]) -> None:  # Close HTTP client callback when provided
    if close_cb is not None:
        close_cb()


def _normalize_messages(messages: Sequence[Dict[str, str]]) -> list[Dict[str, str]]:  # Ensure message payload shape
    normalized: list[Dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": str(item.get("content", ""))})
    return normalized


def _preview(messages: Sequence[Dict[str, str]]) -> str:  # First non-empty line, clipped for logs
    for message in messages:
        text = message.get("content", "").strip()
        if text:
            line = text.splitlines()[0]
            return line if len(line) <= 120 else line[:117] + "..."
    return ""


def _extract_content(data: Any) -> str:  # Extract message content from LLM response
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmGatewayError("LLM response missing content")


def _validate(schema: Type[T], content: str) -> T:  # Parse JSON content with schema, then the raw-text adapter
    cleaned = strip_code_fences(content)
    try:
        return schema.model_validate_json(cleaned)
    except (json.JSONDecodeError, ValidationError):
        adapter = getattr(schema, "from_raw_content", None)
        if not callable(adapter):
            raise
        return adapter(cleaned)  # type: ignore[return-value]


def strip_code_fences(content: str) -> str:  # Remove common markdown fences from LLM output
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()[1:]
        while lines and lines[0].strip() == "":
            lines = lines[1:]
        while lines and lines[-1].strip() == "":
            lines = lines[:-1]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines).strip()
    return text

