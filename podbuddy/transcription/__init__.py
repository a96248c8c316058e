"""Transcript ingestion: recognizer subprocess, line parsing and event fan-out."""

from .transcriber import Transcriber
from .publisher import EventBus, OverflowPolicy
from .listener import Listener

__all__ = [
    "Transcriber",
    "EventBus",
    "OverflowPolicy",
    "Listener",
]
