"""Parsing and accumulation of recognizer output lines."""

import re
import logging

logger = logging.getLogger(__name__)

# "[00:00:00.000 --> 00:00:05.000]  Hello, world!"
LINE_PATTERN = re.compile(r"\[.*?(\d{2}:\d{2}:\d{2}\.\d{3}).*?\]\s{1,3}(.+)")
NOISE_PATTERN = re.compile(r'\[BLANK_AUDIO\]|\A\["\s?|"\]\Z')
TRAILING_PUNCTUATION = re.compile(r"[^\w\s]\Z")


class Transcriber:
    """Turns raw recognizer lines into cleaned text and keeps the full transcript."""

    def __init__(self):
        self.full_transcript = ""

    def process(self, line: str) -> str:
        """Clean one recognizer line and add it to the transcript.

        Args:
            line: Raw line from the recognizer's standard output

        Returns:
            Cleaned text; empty when the line carried no speech
        """
        text = self._parse_line(line)
        if text:
            self.full_transcript += text
        return text

    def latest(self, limit: int = 200) -> str:
        """Return the last `limit` characters of the transcript."""
        if limit < 0:
            raise ValueError(f"negative limit: {limit}")
        if limit == 0:
            return ""
        return self.full_transcript[-limit:]

    @staticmethod
    def _parse_line(line: str) -> str:
        match = LINE_PATTERN.search(line.rstrip("\r\n"))
        if not match:
            return ""

        text = NOISE_PATTERN.sub("", match.group(2).strip()).strip()
        # Sentences join with a space for summaries and TTS.
        if TRAILING_PUNCTUATION.search(text):
            text += " "
        return text
