"""Exceptions raised by podbuddy components."""


class PodBuddyError(Exception):
    """Base class for podbuddy errors."""


class ConfigurationError(PodBuddyError):
    """Missing or invalid configuration; fatal at startup."""


class AIBackendError(PodBuddyError):
    """The AI backend returned an error response."""

    def __init__(self, status: int, body: str):
        super().__init__(f"AI backend error: {status} - {body}")
        self.status = status
        self.body = body


class EventBusFull(PodBuddyError):
    """A synchronous trigger found the bus full under the BLOCK policy."""
