import os
import sys
import time
from pathlib import Path

import pytest

os.environ.setdefault("ENABLE_FILE_LOGS", "false")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.registry import GENERATION_KEY, TRANSCRIPTION_KEY, bind_model, unbind_model
from llm_gateway import LlmGatewayError


class FakeClock:
    """Manually advanced monotonic source."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedGenerator:
    """GenerationService fake returning a fixed reply, raising, or stalling."""

    def __init__(self, reply=None, *, error=None, delay_s: float = 0.0):
        self.reply = reply
        self.error = error
        self.delay_s = delay_s
        self.prompts = []

    def generate(self, prompt, constraints):
        self.prompts.append((prompt, constraints))
        if self.delay_s:
            time.sleep(self.delay_s)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeTranscriber:
    """TranscriptionService fake that returns a fixed transcript or raises."""

    def __init__(self, transcript="", *, error=None):
        self.transcript = transcript
        self.error = error
        self.calls = []

    def transcribe(self, audio):
        self.calls.append(audio)
        if self.error is not None:
            raise self.error
        return self.transcript


@pytest.fixture(autouse=True)
def failing_generation():
    """Bind a generator that always fails so nothing reaches the network."""

    generator = ScriptedGenerator(error=LlmGatewayError("offline"))
    bind_model(GENERATION_KEY, generator)
    return generator


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def scripted_generator():
    return ScriptedGenerator


@pytest.fixture(autouse=True)
def no_transcriber():
    """Voice input starts disabled in every test."""

    unbind_model(TRANSCRIPTION_KEY)
    yield
    unbind_model(TRANSCRIPTION_KEY)


@pytest.fixture
def fake_transcriber():
    return FakeTranscriber
