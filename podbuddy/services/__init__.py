"""Services layer for podbuddy application logic."""

from .audio_service import AudioService
from .co_host import CoHost
from .show_assistant import ShowAssistant
from .action_scheduler import ActionScheduler

__all__ = [
    "AudioService",
    "CoHost",
    "ShowAssistant",
    "ActionScheduler",
]
