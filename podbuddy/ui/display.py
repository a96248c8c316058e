"""Human-readable status lines for the terminal."""

from enum import Enum
from typing import Dict, Tuple, Union

from rich.text import Text


class Tone(Enum):
    """Kinds of status text shown to the host."""
    INFO = "info"
    WAIT = "wait"
    INPUT = "input"
    SUCCESS = "success"


TONE_STYLES: Dict[Tone, str] = {
    Tone.INFO: "blue",
    Tone.WAIT: "yellow",
    Tone.INPUT: "black on yellow",
    Tone.SUCCESS: "green",
}


def to_human(text: str, tone: Tone = Tone.INFO) -> Text:
    """Style `text` for display according to its tone."""
    return Text(text, style=TONE_STYLES[tone])


def compose(*parts: Union[str, Tuple[str, Tone]]) -> Text:
    """Join plain strings and (text, tone) pairs into one line."""
    line = Text()
    for part in parts:
        if isinstance(part, tuple):
            line.append_text(to_human(*part))
        else:
            line.append(part)
    return line


def question_start_prompt() -> Text:
    return compose(("Press ", Tone.INFO), ("Enter", Tone.INPUT), (" to signal a question start...", Tone.INFO))


def question_end_prompt() -> Text:
    return compose(("🎙️ Listening for question. Press ", Tone.WAIT), ("Enter", Tone.INPUT),
                   (" to signal the end of the question...", Tone.WAIT))
