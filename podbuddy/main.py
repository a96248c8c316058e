"""Main application entry point for podbuddy."""

import sys
import signal
import asyncio
import argparse
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from rich.console import Console

from . import __version__
from .ai.openai_backend import OpenAIBackend
from .config import PodBuddyConfig
from .config.buddyfile import load_buddyfile
from .context import AppContext
from .errors import ConfigurationError
from .services.action_scheduler import ActionScheduler
from .services.audio_service import AudioService
from .services.co_host import CoHost
from .services.show_assistant import ShowAssistant
from .storage.session_store import SessionStore
from .transcription.listener import Listener
from .transcription.publisher import EventBus
from .ui.display import Tone, to_human
from .ui.keyboard_input import OperatorInput

logger = logging.getLogger(__name__)


class PodBuddy:
    """Wires the listener, co-host, show assistant and actions into one session."""

    def __init__(self, config_path: Optional[str] = None, name: Optional[str] = None,
                 whisper_model: Optional[str] = None, debug: bool = False):
        self.config = PodBuddyConfig(config_path)
        if whisper_model:
            self.config.set('whisper.model', whisper_model)
        self.name = name
        self.console = Console()

        log_level = 'DEBUG' if debug else self.config.get('logging.level', 'INFO')
        setup_logging(self.config, log_level)
        if debug:
            self.console.print(to_human("Turning on debug mode...", Tone.INFO))

    def init(self) -> None:
        """Build every component. Raises ConfigurationError before anything starts."""
        logger.info("Initializing services...")
        config = self.config

        api_key = config.get_openai_api_key()
        session = SessionStore(config.get_data_directory(), self.name, console=self.console)
        setup_whisper_logging(session.whisper_log_path)

        backend = OpenAIBackend(
            api_key=api_key,
            base_url=config.get('openai.base_url'),
            model=config.get('openai.answer_model'),
            tts_model=config.get('openai.tts_model'),
            voice=config.get('openai.voice'),
            timeout=float(config.get('openai.timeout', 60)),
        )
        self.ctx = AppContext(config=config, backend=backend, session=session, console=self.console)

        self.bus = EventBus(
            max_size=int(config.get('event_bus.max_size', 1000)),
            overflow=config.get('event_bus.overflow', 'block'),
        )
        self.listener = Listener(config.get_whisper_command(), session, self.bus)
        self.listener.ensure_available()
        self.show_assistant = ShowAssistant(self.ctx, self.listener)
        self.action_scheduler = ActionScheduler(
            self.ctx, self.listener, load_buddyfile(config.get('actions.buddyfile'), session))
        self.co_host = CoHost(
            self.ctx, self.listener,
            AudioService(backend, config.get('audio.player_command', 'afplay')),
            OperatorInput(),
            show_assistant=self.show_assistant,
        )

        self.console.print(to_human(f"Using whisper model: {config.get('whisper.model')}", Tone.INFO))
        self.console.print(to_human(f"Saving files to: {session.base_path}", Tone.INFO))

    async def run(self) -> None:
        """Run until the operator interrupts or the session times out, then shut down."""
        self._install_signal_handlers()
        self.bus.start()

        tasks = [
            ("Listener and periodic summarizer", asyncio.create_task(self.show_assistant.start())),
            ("Action scheduler", asyncio.create_task(self.action_scheduler.start())),
            ("Question listener", asyncio.create_task(self.co_host.start())),
        ]

        timeout = float(self.config.get('session.timeout', 2 * 60 * 60))
        if not await self.ctx.wait_for_shutdown(timeout):
            logger.warning(f"Session timeout of {timeout:.0f}s reached")

        await self.shutdown(tasks)

    async def shutdown(self, tasks: List[Tuple[str, asyncio.Task]]) -> None:
        """Stop every loop, let in-flight work finish, then write show notes."""
        self.console.print(to_human("\nShutting down streams...", Tone.WAIT))
        self.ctx.request_shutdown()
        self.listener.stop()
        self.co_host.stop()

        for name, task in tasks:
            self.console.print(to_human(f"Waiting for {name} to shutdown...", Tone.WAIT))
            try:
                await task
            except Exception:
                logger.exception(f"{name} failed")

        await self.bus.join()
        await self.show_assistant.stop()
        try:
            await self.action_scheduler.flush_due()
        except Exception as e:
            logger.error(f"Final action flush failed: {e}")
        await self.bus.close()

        self.console.print(to_human("Generating show notes...", Tone.WAIT))
        await self.show_assistant.generate_show_notes()

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.ctx.request_shutdown)
            except (NotImplementedError, RuntimeError):
                logger.debug(f"Signal handler for {sig.name} not supported here")


class ConsoleFormatter(logging.Formatter):
    """Plain messages at INFO, level-tagged messages otherwise."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno == logging.INFO:
            return message
        return f"[{record.levelname}] {message}"


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'tmp/podbuddy.log')
    console_output = config.get('logging.console_output', True)

    Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    ))
    handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, level.upper()))
        console_handler.setFormatter(ConsoleFormatter('%(message)s'))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.debug("=" * 50)
    logger.debug(f"podbuddy {__version__} starting up")
    logger.debug(f"Log file: {log_file_path}")
    logger.debug(f"Log level set to: {level}")
    logger.debug("=" * 50)


def setup_whisper_logging(log_path: Path) -> None:
    """Send recognizer output to the session's own log file."""
    whisper_logger = logging.getLogger("podbuddy.whisper")
    whisper_logger.handlers.clear()
    whisper_logger.propagate = False
    whisper_logger.setLevel(logging.DEBUG)

    handler = logging.FileHandler(log_path)
    handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
    whisper_logger.addHandler(handler)


def main() -> None:
    """Main entry point for podbuddy."""
    parser = argparse.ArgumentParser(
        description="podbuddy - a live AI co-host for your podcast",
        epilog="Press Enter to start a question and Enter again to end it; Ctrl-C ends the show."
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in defaults)"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Run in debug mode"
    )

    parser.add_argument(
        "-w", "--whisper",
        type=str,
        metavar="MODEL",
        help="Use specific whisper model (default: small.en-q5_1)"
    )

    parser.add_argument(
        "-n", "--name",
        type=str,
        help="A name for the session to label all log files"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"podbuddy v{__version__}"
    )

    args = parser.parse_args()

    try:
        app = PodBuddy(args.config, name=args.name, whisper_model=args.whisper, debug=args.debug)
        app.init()
        asyncio.run(app.run())
    except ConfigurationError as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")


if __name__ == "__main__":
    main()
