"""End-to-end session: scripted recognizer, fake AI backend, real wiring."""

import asyncio
import io
import sys

import pytest
from rich.console import Console

from podbuddy.main import PodBuddy
from podbuddy.ui.keyboard_input import OperatorInput


RECOGNIZER_SCRIPT = r"""
print("[00:00:00.000 --> 00:00:02.000]  Welcome to the show.")
print("[00:00:02.000 --> 00:00:04.000]  [BLANK_AUDIO]")
print("[00:00:04.000 --> 00:00:06.000]  Today we talk about Python.")
"""

CONFIG = """
whisper:
  command: PYTHON -V
storage:
  data_directory: sessions
logging:
  file_path: podbuddy.log
  console_output: false
session:
  timeout: 1
show_assistant:
  summary_interval: 0.2
actions:
  tick_interval: 0.1
"""

BUDDYFILE = """
actions:
  notes:
    name: Notes
    output_file: notes.md
    llm_options:
      model: notes-model
      messages:
        - role: user
          content: "Notes for: {discussion}"
"""


@pytest.fixture
def app(tmp_path, monkeypatch, backend):
    monkeypatch.setenv("OPENAI_ACCESS_TOKEN", "sk-test")
    (tmp_path / "config.yaml").write_text(CONFIG.replace("PYTHON", sys.executable))
    (tmp_path / "Buddyfile").write_text(BUDDYFILE)

    app = PodBuddy(str(tmp_path / "config.yaml"), name="episode-1")
    app.console = Console(quiet=True)
    app.init()

    app.ctx.backend = backend
    app.listener.command = [sys.executable, "-u", "-c", RECOGNIZER_SCRIPT]
    app.co_host.operator = OperatorInput(io.StringIO(""))
    return app


@pytest.mark.integration
class TestSession:
    """Test cases for a full session run."""

    @pytest.mark.asyncio
    async def test_session_produces_all_artifacts(self, app, backend, tmp_path):
        backend.responses["notes-model"] = "- welcome\n- python"

        await asyncio.wait_for(app.run(), timeout=10)

        session_dir = tmp_path / "sessions" / "episode-1"
        assert (session_dir / "transcript.log").read_text() == (
            "Welcome to the show. \nToday we talk about Python. \n")
        assert (session_dir / "summary.log").read_text() == "The hosts are talking about Python."
        assert "Python" in (session_dir / "topics.log").read_text()
        assert (session_dir / "show-notes.md").read_text() == "The hosts are talking about Python.\n"
        assert "- welcome" in (session_dir / "notes.md").read_text()
        assert app.listener.process.returncode is not None

        note_prompts = [call["messages"][0]["content"] for call in backend.calls
                        if call["model"] == "notes-model"]
        assert "".join(p.replace("Notes for: ", "") for p in note_prompts) == (
            "Welcome to the show. Today we talk about Python. ")

    @pytest.mark.asyncio
    async def test_shutdown_request_ends_session_early(self, app):
        app.config.set('session.timeout', 60)

        run = asyncio.create_task(app.run())
        await asyncio.sleep(0.3)
        app.ctx.request_shutdown()

        await asyncio.wait_for(run, timeout=5)
        assert app.ctx.shutting_down
