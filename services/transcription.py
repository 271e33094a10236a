"""Speech-to-text collaborator interface for the voice path."""
from __future__ import annotations

from typing import Optional, Protocol

from config import TRANSCRIPTION_KEY, get_model, has_model


class TranscriptionError(RuntimeError):
    """Audio could not be turned into text."""


class TranscriptionService(Protocol):
    def transcribe(self, audio: bytes) -> str:
        """Return the transcript, raising ``TranscriptionError`` on failure."""
        ...


def current_transcription() -> Optional[TranscriptionService]:
    """Transcriber bound under ``TRANSCRIPTION_KEY``, or None when voice is disabled."""

    if has_model(TRANSCRIPTION_KEY):
        return get_model(TRANSCRIPTION_KEY)
    return None


__all__ = ["TranscriptionError", "TranscriptionService", "current_transcription"]
