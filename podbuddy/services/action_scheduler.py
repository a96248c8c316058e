"""Buffered, independently timed post-processing actions."""

import asyncio
import logging
import time
from typing import Callable, List, Set

from ..context import AppContext
from ..models.actions import Action, WriteMode
from ..models.events import TranscriptEvent
from ..transcription.listener import Listener

logger = logging.getLogger(__name__)


class ActionScheduler:
    """Buffers every event into every action and flushes the eligible ones.

    Ticks happen once per event and on a periodic timer, so actions with an
    interval still flush when the room goes quiet.
    """

    def __init__(self,
                 ctx: AppContext,
                 listener: Listener,
                 actions: List[Action],
                 clock: Callable[[], float] = time.monotonic):
        self.ctx = ctx
        self.actions = actions
        self.clock = clock
        self.tick_interval = float(ctx.config.get('actions.tick_interval', 5))
        self._tasks: Set[asyncio.Task] = set()

        listener.subscribe(self.handle_transcription)
        logger.info(f"ActionScheduler initialized with {len(actions)} actions")

    def handle_transcription(self, event: TranscriptEvent) -> None:
        for action in self.actions:
            action.buffer_text(event.text)
        self.tick()

    def tick(self) -> List[asyncio.Task]:
        """Start a flush for every eligible action."""
        now = self.clock()
        started = []
        for action in self.actions:
            if action.is_eligible(now):
                # Claimed before the task runs so the next tick skips it.
                action.in_flight = True
                task = asyncio.create_task(self._flush(action), name=f"action:{action.name}")
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
                started.append(task)
        return started

    async def start(self) -> None:
        """Periodic tick loop; ends on shutdown."""
        if not self.actions:
            return
        while not await self.ctx.wait_for_shutdown(self.tick_interval):
            self.tick()
        logger.debug("Shutdown: action scheduler")

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def flush_due(self) -> None:
        """Final tick at shutdown: flush the actions whose interval has elapsed.

        Text buffered for an action that is not due yet is not sent.
        """
        await self.drain()
        await asyncio.gather(*self.tick())

    async def _flush(self, action: Action) -> bool:
        flushed = action.buffer
        try:
            output = await self.ctx.backend.complete(action.messages_for(flushed),
                                                     **action.completion_options())
            self._write(action, output)
            action.mark_flushed(flushed, self.clock())
            logger.debug(f"[{action.name}] flushed {len(flushed)} chars to {action.output_path}")
            return True
        except Exception as e:
            logger.warning(f"[{action.name}] action failed: {e}")
            return False
        finally:
            action.in_flight = False

    @staticmethod
    def _write(action: Action, output: str) -> None:
        action.output_path.parent.mkdir(parents=True, exist_ok=True)
        mode = "a" if action.config.mode is WriteMode.APPEND else "w"
        with open(action.output_path, mode, encoding="utf-8") as f:
            f.write(output.strip() + "\n")
