"""Data models for the podbuddy application."""

from .events import TranscriptEvent, QuestionState, Idle, Listening
from .actions import Action, ActionConfig, WriteMode

__all__ = [
    "TranscriptEvent",
    "QuestionState",
    "Idle",
    "Listening",
    "Action",
    "ActionConfig",
    "WriteMode",
]
