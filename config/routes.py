"""LLM route configuration loaded from JSON or derived from settings."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field

from .settings import Settings, settings as default_settings


class LlmRoute(BaseModel):
    """LLM endpoint configuration."""

    name: str
    base_url: str
    endpoint: str
    model: str
    timeout_s: float = Field(ge=0.1)
    max_retries: int = Field(default=2, ge=0)
    api_key_env: str | None = None
    response_format: str | None = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)


class AppConfig(BaseModel):
    """Route table keyed by route name."""

    llm_routes: Dict[str, LlmRoute]


def load_config(path: Path) -> AppConfig:
    """Load configuration from disk."""

    data = path.read_text(encoding="utf-8")
    return AppConfig.model_validate_json(data)


def default_route(cfg: Optional[Settings] = None) -> LlmRoute:
    """Build the follow-up route from settings, preferring the JSON file when set."""

    cfg = cfg or default_settings
    if cfg.LLM_CONFIG_PATH:
        app_cfg = load_config(Path(cfg.LLM_CONFIG_PATH))
        if cfg.LLM_ROUTE_NAME not in app_cfg.llm_routes:
            raise KeyError(f"Route '{cfg.LLM_ROUTE_NAME}' missing from {cfg.LLM_CONFIG_PATH}")
        return app_cfg.llm_routes[cfg.LLM_ROUTE_NAME]
    return LlmRoute(
        name=cfg.LLM_ROUTE_NAME,
        base_url=cfg.LLM_BASE_URL,
        endpoint=cfg.LLM_ENDPOINT,
        model=cfg.LLM_MODEL,
        timeout_s=cfg.GENERATION_TIMEOUT_S,
        max_retries=cfg.LLM_MAX_RETRIES,
        api_key_env=cfg.LLM_API_KEY_ENV,
    )
