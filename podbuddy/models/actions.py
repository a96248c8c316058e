"""Buffered post-processing actions configured in a Buddyfile."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator

DISCUSSION_PLACEHOLDER = "{discussion}"


class WriteMode(str, Enum):
    """How an action writes its output file."""
    APPEND = "append"
    OVERWRITE = "overwrite"


class ActionConfig(BaseModel):
    """One entry under `actions:` in a Buddyfile."""
    name: str
    llm_options: Dict[str, Any]
    output_file: str
    mode: WriteMode = WriteMode.APPEND
    interval: int = Field(default=0, ge=0)

    @field_validator("llm_options")
    @classmethod
    def _require_messages(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        messages = value.get("messages")
        if not isinstance(messages, list) or not messages:
            raise ValueError("llm_options.messages must be a non-empty list")
        for message in messages:
            if not isinstance(message, dict) or "role" not in message or "content" not in message:
                raise ValueError("each message needs a 'role' and a 'content'")
        return value


@dataclass
class Action:
    """Runtime state of a configured action."""
    config: ActionConfig
    output_path: Path
    last_flushed_at: float
    buffer: str = ""
    in_flight: bool = False

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def interval(self) -> int:
        return self.config.interval

    def buffer_text(self, text: str) -> None:
        self.buffer += text

    def is_eligible(self, now: float) -> bool:
        """True when the action may flush its buffer at `now`."""
        if self.in_flight or not self.buffer:
            return False
        if self.interval == 0:
            return True
        return now - self.last_flushed_at >= self.interval

    def messages_for(self, discussion: str) -> List[Dict[str, Any]]:
        """Render the configured messages with the buffered discussion."""
        return [
            {**message, "content": str(message["content"]).replace(DISCUSSION_PLACEHOLDER, discussion)}
            for message in self.config.llm_options["messages"]
        ]

    def completion_options(self) -> Dict[str, Any]:
        return {key: value for key, value in self.config.llm_options.items() if key != "messages"}

    def mark_flushed(self, flushed: str, now: float) -> None:
        """Drop the flushed prefix; text buffered during the call is kept."""
        self.buffer = self.buffer[len(flushed):]
        self.last_flushed_at = now
