"""AI backend for completions and speech."""

from .base import AIBackend, Message
from .openai_backend import OpenAIBackend

__all__ = [
    "AIBackend",
    "Message",
    "OpenAIBackend",
]
