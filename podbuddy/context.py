"""Shared application context passed to every component."""

import asyncio
from dataclasses import dataclass, field

from rich.console import Console

from .ai.base import AIBackend
from .config import PodBuddyConfig
from .storage.session_store import SessionStore


@dataclass
class AppContext:
    """Everything a component needs from the running session."""
    config: PodBuddyConfig
    backend: AIBackend
    session: SessionStore
    console: Console = field(default_factory=Console)
    shutdown: asyncio.Event = field(default_factory=asyncio.Event)

    @property
    def shutting_down(self) -> bool:
        return self.shutdown.is_set()

    def request_shutdown(self) -> None:
        self.shutdown.set()

    async def wait_for_shutdown(self, timeout: float) -> bool:
        """Sleep up to `timeout` seconds; return True as soon as shutdown is requested."""
        try:
            await asyncio.wait_for(self.shutdown.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True
