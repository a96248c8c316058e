"""Text-to-speech and playback of co-host answers."""

import asyncio
import logging
import shlex
from pathlib import Path

from ..ai.base import AIBackend

logger = logging.getLogger(__name__)


class AudioService:
    """Turns answers into audio files and plays them with an external player."""

    def __init__(self, backend: AIBackend, player_command: str = "afplay"):
        self.backend = backend
        self.player_command = shlex.split(player_command)

    async def text_to_speech(self, text: str, output_path: Path) -> Path:
        audio = await self.backend.speech(text)
        Path(output_path).write_bytes(audio)
        logger.debug(f"Answer converted to speech: {output_path} ({len(audio)} bytes)")
        return Path(output_path)

    async def play_audio(self, path: Path) -> None:
        """Play an audio file and wait for the player to exit."""
        logger.debug(f"Playing {path}...")
        process = await asyncio.create_subprocess_exec(*self.player_command, str(path))
        return_code = await process.wait()
        if return_code != 0:
            logger.warning(f"Audio player exited with code {return_code}")
