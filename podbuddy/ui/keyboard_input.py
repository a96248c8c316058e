"""Line-buffered operator input delivered into the event loop."""

import sys
import asyncio
import threading
import logging
from typing import Optional, TextIO

logger = logging.getLogger(__name__)


class OperatorInput:
    """Reads operator lines on a background thread and queues them for coroutines.

    Each newline the operator types is one edge. `readline` blocks, so it runs
    on a daemon thread and hands lines to the loop with call_soon_threadsafe.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        """Initialize operator input.

        Args:
            stream: Line source; defaults to standard input
        """
        self.stream = stream or sys.stdin
        self.running = False
        self.exhausted = False
        self.thread: Optional[threading.Thread] = None
        self._queue: asyncio.Queue = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def start(self) -> None:
        """Start reading on a background thread. Must be called from the event loop."""
        if self.running:
            return

        self._loop = asyncio.get_running_loop()
        self.running = True
        self.thread = threading.Thread(target=self._input_loop, name="operator-input", daemon=True)
        self.thread.start()
        logger.info("Operator input handler started")

    def stop(self) -> None:
        """Stop delivering lines. A read already blocked on the stream is abandoned."""
        self.running = False
        logger.info("Operator input handler stopped")

    def push(self, line: str) -> None:
        """Queue one line. Must be called on the event loop thread."""
        self._queue.put_nowait(line)

    def _input_loop(self) -> None:
        try:
            while self.running:
                line = self.stream.readline()
                if not line:
                    logger.info("Operator input reached end of stream")
                    break
                if self.running:
                    self._loop.call_soon_threadsafe(self.push, line)
        except (OSError, ValueError, RuntimeError) as e:
            # RuntimeError: the loop closed while we were blocked on readline.
            logger.error(f"Operator input error: {e}")
        finally:
            self.exhausted = True
            self.running = False

    async def next_line(self, timeout: float) -> Optional[str]:
        """Return the next operator line, or None if none arrives within `timeout`."""
        try:
            return await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None
