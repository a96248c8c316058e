"""Interface of the AI backend used by the co-host services."""

from typing import Any, Dict, List, Protocol

Message = Dict[str, Any]


class AIBackend(Protocol):
    """Protocol for backends that complete chats and synthesize speech."""

    async def complete(self, messages: List[Message], **options) -> str:
        """Send role-tagged messages and return the completion text."""
        ...

    async def speech(self, text: str, **options) -> bytes:
        """Convert text to encoded audio."""
        ...
