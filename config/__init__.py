"""Configuration package for the interview engine."""
from .registry import GENERATION_KEY, TRANSCRIPTION_KEY, bind_model, get_model, has_model, unbind_model
from .routes import AppConfig, LlmRoute, default_route, load_config
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "default_route",
    "load_config",
    "GENERATION_KEY",
    "TRANSCRIPTION_KEY",
    "bind_model",
    "get_model",
    "has_model",
    "unbind_model",
    "Settings",
    "settings",
]
