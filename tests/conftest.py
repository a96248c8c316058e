"""Pytest configuration and fixtures for podbuddy tests."""

import asyncio
import logging
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from rich.console import Console

from podbuddy.config import PodBuddyConfig
from podbuddy.context import AppContext
from podbuddy.errors import AIBackendError
from podbuddy.models.events import TranscriptEvent
from podbuddy.storage.session_store import SessionStore
from podbuddy.transcription.listener import Listener
from podbuddy.transcription.publisher import EventBus


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class FakeBackend:
    """AI backend double: records calls, answers per model, fails on demand."""

    def __init__(self, responses: Optional[Dict[str, str]] = None, default: str = "ok"):
        self.responses = responses or {}
        self.default = default
        self.fail_models = set()
        self.fail_speech = False
        self.calls: List[dict] = []
        self.speech_calls: List[str] = []
        self.release: Optional[asyncio.Event] = None

    async def complete(self, messages, model=None, max_tokens=500, **options):
        self.calls.append({"messages": messages, "model": model, "max_tokens": max_tokens, **options})
        if self.release is not None:
            await self.release.wait()
        await asyncio.sleep(0)
        if model in self.fail_models:
            raise AIBackendError(500, f"{model} is down")
        return self.responses.get(model, self.default)

    async def speech(self, text, **options):
        self.speech_calls.append(text)
        if self.fail_speech:
            raise AIBackendError(500, "tts is down")
        return b"ID3-fake-audio"


class FakeAudioService:
    """Audio service double that records what would be spoken."""

    def __init__(self):
        self.spoken: List[str] = []
        self.played: List[Path] = []

    async def text_to_speech(self, text, output_path):
        self.spoken.append(text)
        Path(output_path).write_bytes(b"ID3-fake-audio")
        return Path(output_path)

    async def play_audio(self, path):
        self.played.append(Path(path))


class ManualClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def config(temp_data_dir):
    config = PodBuddyConfig()
    config.set('storage.data_directory', temp_data_dir)
    config.set('actions.buddyfile', str(Path(temp_data_dir) / "Buddyfile"))
    return config


@pytest.fixture
def session(temp_data_dir):
    return SessionStore(temp_data_dir, name="test-session", console=Console(quiet=True))


@pytest.fixture
def backend():
    return FakeBackend(responses={
        "gpt-4o": "The hosts are talking about Python.",
        "gpt-4o-mini": "- **Python**: a programming language",
    })


@pytest.fixture
def audio():
    return FakeAudioService()


@pytest.fixture
def ctx(config, backend, session):
    return AppContext(config=config, backend=backend, session=session, console=Console(quiet=True))


@pytest.fixture
def bus():
    return EventBus(topic="transcript_test", max_size=100)


@pytest.fixture
def listener(session, bus):
    """A listener that is never started; tests feed its bus directly."""
    return Listener(["true"], session, bus)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def make_event():
    def _make(text: str, started_at: float = 0.0) -> TranscriptEvent:
        return TranscriptEvent(text=text, started_at=started_at)
    return _make
