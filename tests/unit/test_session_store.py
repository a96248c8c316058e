"""Unit tests for the SessionStore."""

from pathlib import Path

import pytest
from rich.console import Console

from podbuddy.storage.session_store import SessionStore


@pytest.mark.unit
class TestSessionStore:
    """Test cases for session file handling."""

    def test_creates_session_directory(self, temp_data_dir):
        store = SessionStore(temp_data_dir, name="episode-1", console=Console(quiet=True))

        assert store.base_path == Path(temp_data_dir) / "episode-1"
        assert store.base_path.is_dir()

    def test_default_name_is_timestamp(self, temp_data_dir):
        store = SessionStore(temp_data_dir, console=Console(quiet=True))

        assert len(store.name) == len("2024-01-01_12-00-00")
        assert store.base_path.exists()

    def test_reads_are_empty_before_writes(self, session):
        assert session.current_transcript() == ""
        assert session.current_summary() == ""
        assert session.current_topics() == ""

    def test_transcript_is_append_only(self, session):
        session.append_transcript("Hello there. ")
        session.append_transcript("How are you? ")

        assert session.current_transcript() == "Hello there. \nHow are you? \n"

    def test_summary_is_replaced(self, session):
        session.replace_summary("first")
        session.replace_summary("second")

        assert session.current_summary() == "second"

    def test_topics_log_and_latest_topics(self, session):
        session.announce_topics("- **One**")
        session.append_topics("- **One**")
        session.announce_topics("- **Two**")
        session.append_topics("- **Two**")

        assert session.current_topics() == "- **One**\n- **Two**\n"
        assert session.latest_topics_path.read_text() == "- **Two**"

    def test_show_notes(self, session):
        path = session.write_show_notes("# Notes")

        assert path == session.show_notes_path
        assert path.read_text() == "# Notes\n"

    def test_resolve(self, session):
        assert session.resolve("notes.md") == session.base_path / "notes.md"
        assert session.resolve("/var/out.md") == Path("/var/out.md")
