"""Drives the speech recognizer subprocess and publishes transcript events."""

import asyncio
import logging
import shlex
import shutil
import time
from typing import Callable, Optional, Sequence, Set, Union

from ..errors import ConfigurationError
from ..models.events import TranscriptEvent
from ..storage.session_store import SessionStore
from .publisher import EventBus, Subscriber
from .transcriber import Transcriber

logger = logging.getLogger(__name__)
whisper_logger = logging.getLogger("podbuddy.whisper")

# Recognizer lines are short, but a stuck model can emit very long ones.
STREAM_LIMIT = 1024 * 1024


class Listener:
    """Reads recognizer output, feeds it through the Transcriber and publishes events."""

    def __init__(self,
                 command: Union[str, Sequence[str]],
                 session: SessionStore,
                 bus: EventBus,
                 transcriber: Optional[Transcriber] = None,
                 stop_timeout: float = 5.0,
                 clock: Callable[[], float] = time.monotonic):
        """Initialize listener.

        Args:
            command: Recognizer command line, as a string or argument list
            session: Store receiving every non-empty transcript line
            bus: Event bus receiving one TranscriptEvent per non-empty line
            transcriber: Line parser; a fresh one is created if omitted
            stop_timeout: Seconds to wait for the recognizer to exit before killing it
            clock: Monotonic clock stamping events
        """
        self.command = shlex.split(command) if isinstance(command, str) else list(command)
        self.session = session
        self.bus = bus
        self.transcriber = transcriber or Transcriber()
        self.stop_timeout = stop_timeout
        self.clock = clock

        self.process: Optional[asyncio.subprocess.Process] = None
        self.echo = True
        self._shutdown = False
        self._line_tasks: Set[asyncio.Task] = set()

    def subscribe(self, callback: Subscriber) -> None:
        self.bus.subscribe(callback)

    def ensure_available(self) -> None:
        """Fail fast when the recognizer executable is missing.

        Raises:
            ConfigurationError: If the command cannot be found or run
        """
        executable = self.command[0] if self.command else ""
        if not executable or shutil.which(executable) is None:
            raise ConfigurationError(
                f"Recognizer not found: {executable!r}. Build whisper.cpp's stream example "
                f"or point whisper.command at an installed recognizer.")

    def suppress_echo(self) -> None:
        self.echo = False

    def resume_echo(self) -> None:
        self.echo = True

    async def start(self) -> None:
        """Run the recognizer until it exits or stop() is called."""
        if self._shutdown:
            logger.debug("Listener stopped before start; not spawning recognizer")
            return

        logger.info(f"Starting recognizer: {' '.join(self.command)}")
        self.process = await asyncio.create_subprocess_exec(
            *self.command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            limit=STREAM_LIMIT,
        )
        error_task = asyncio.create_task(self._drain_errors(), name="recognizer-stderr")
        logger.info("Listening...")

        try:
            await self._read_output()
        finally:
            await self._ensure_exited()
            await error_task
            if self._line_tasks:
                logger.debug(f"Waiting for {len(self._line_tasks)} transcript lines to finish")
                await asyncio.gather(*self._line_tasks, return_exceptions=True)
            logger.info(f"Listener finished (recognizer exit code {self.process.returncode})")

    def stop(self) -> None:
        """Request shutdown and terminate the recognizer. Safe to call repeatedly."""
        if self._shutdown:
            return
        self._shutdown = True
        logger.debug("Shutdown: listener")
        if self.process is not None and self.process.returncode is None:
            try:
                self.process.terminate()
            except ProcessLookupError:
                pass

    async def _read_output(self) -> None:
        while not self._shutdown:
            raw = await self.process.stdout.readline()
            if not raw:
                break

            started_at = self.clock()
            line = raw.decode("utf-8", errors="replace")
            whisper_logger.debug(line.rstrip())

            task = asyncio.create_task(self._process_line(line, started_at))
            self._line_tasks.add(task)
            task.add_done_callback(self._line_tasks.discard)

    async def _drain_errors(self) -> None:
        async for raw in self.process.stderr:
            whisper_logger.error(raw.decode("utf-8", errors="replace").rstrip())

    async def _process_line(self, line: str, started_at: float) -> None:
        # Tasks run in creation order; nothing here yields before publish, so
        # the transcript and the event stream keep recognition order.
        text = self.transcriber.process(line)
        if not text:
            return

        if self.echo:
            logger.info(f"Heard: {text}")

        try:
            self.session.append_transcript(text)
        except OSError as e:
            logger.error(f"Failed to persist transcript line: {e}")

        await self.bus.publish(TranscriptEvent(text=text, started_at=started_at))

    async def _ensure_exited(self) -> None:
        if self.process.returncode is not None:
            return
        # Covers stdout closing while the process lingers, and stop() landing
        # while the process was still being spawned.
        try:
            self.process.terminate()
        except ProcessLookupError:
            pass
        try:
            await asyncio.wait_for(self.process.wait(), timeout=self.stop_timeout)
        except asyncio.TimeoutError:
            logger.warning("Recognizer did not exit after terminate; killing it")
            self.process.kill()
            await self.process.wait()
