"""Event and state models for the transcript pub/sub pipeline."""

from dataclasses import dataclass, field
from typing import List, Union


@dataclass(frozen=True)
class TranscriptEvent:
    """One recognized, non-empty utterance."""
    text: str
    started_at: float  # time.monotonic() when the line was recognized


@dataclass(frozen=True)
class Idle:
    """No question is being collected."""


@dataclass
class Listening:
    """Collecting a question since `started_at`."""
    started_at: float
    buffer: List[str] = field(default_factory=list)

    def accepts(self, event: TranscriptEvent) -> bool:
        # Events recognized before the operator edge belong to the discussion.
        return event.started_at >= self.started_at

    @property
    def question(self) -> str:
        return "".join(self.buffer)


QuestionState = Union[Idle, Listening]
