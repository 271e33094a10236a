"""In-memory model registry for generation and transcription backends."""
from typing import Any, Dict

_REGISTRY: Dict[str, Any] = {}


def bind_model(key: str, impl: Any) -> None:
    """Bind a backend implementation to a registry key."""
    _REGISTRY[key] = impl


def get_model(key: str) -> Any:
    """Retrieve a backend from the registry.

    Raises:
        KeyError: If nothing has been bound for ``key``.
    """

    if key not in _REGISTRY:
        raise KeyError(f"Model not bound in registry: {key}")
    return _REGISTRY[key]


def has_model(key: str) -> bool:
    return key in _REGISTRY


def unbind_model(key: str) -> None:
    """Drop whatever is bound for ``key``; missing keys are ignored."""
    _REGISTRY.pop(key, None)


GENERATION_KEY = "models.generation"
TRANSCRIPTION_KEY = "models.transcription"
