"""Per-session file storage for transcript, summary, topics and show notes."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

logger = logging.getLogger(__name__)


class SessionStore:
    """Owns the files of one podcast session.

    Transcript and topics are append-only; the summary is replaced wholesale,
    so concurrent writers only ever race on which summary wins.
    """

    def __init__(self, data_dir: str = "./tmp", name: Optional[str] = None,
                 console: Optional[Console] = None):
        """Initialize the session directory.

        Args:
            data_dir: Base directory for all sessions
            name: Session name; defaults to the current timestamp
            console: Console used to announce new topics
        """
        self.name = name or datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        self.base_path = Path(data_dir) / self.name
        self.console = console or Console()
        self.base_path.mkdir(parents=True, exist_ok=True)

        logger.info(f"Session '{self.name}' stored in: {self.base_path}")

    @property
    def transcript_path(self) -> Path:
        return self.base_path / "transcript.log"

    @property
    def summary_path(self) -> Path:
        return self.base_path / "summary.log"

    @property
    def topics_path(self) -> Path:
        return self.base_path / "topics.log"

    @property
    def latest_topics_path(self) -> Path:
        return self.base_path / "latest-topics.md"

    @property
    def show_notes_path(self) -> Path:
        return self.base_path / "show-notes.md"

    @property
    def whisper_log_path(self) -> Path:
        return self.base_path / "whisper.log"

    @property
    def answer_audio_path(self) -> Path:
        return self.base_path / "response.mp3"

    def resolve(self, path: str) -> Path:
        """Resolve a user-supplied path against the session directory."""
        candidate = Path(path).expanduser()
        return candidate if candidate.is_absolute() else self.base_path / candidate

    def append_transcript(self, text: str) -> None:
        self._append(self.transcript_path, text)

    def current_transcript(self) -> str:
        return self._read(self.transcript_path)

    def current_summary(self) -> str:
        return self._read(self.summary_path)

    def replace_summary(self, text: str) -> None:
        self.summary_path.write_text(text, encoding="utf-8")
        logger.debug(f"Summary replaced ({len(text)} chars)")

    def current_topics(self) -> str:
        return self._read(self.topics_path)

    def append_topics(self, topics: str) -> None:
        self._append(self.topics_path, topics)

    def announce_topics(self, topics: str) -> None:
        """Persist the latest batch of topics and pretty-print it."""
        self.latest_topics_path.write_text(topics, encoding="utf-8")
        self.console.print(Panel(Markdown(topics), title="Topics", border_style="blue"))

    def write_show_notes(self, notes: str) -> Path:
        self.show_notes_path.write_text(notes + "\n", encoding="utf-8")
        logger.info(f"Show notes saved: {self.show_notes_path}")
        return self.show_notes_path

    @staticmethod
    def _append(path: Path, text: str) -> None:
        with open(path, "a", encoding="utf-8") as f:
            f.write(text + "\n")

    @staticmethod
    def _read(path: Path) -> str:
        return path.read_text(encoding="utf-8") if path.exists() else ""
