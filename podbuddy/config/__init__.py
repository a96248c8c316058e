"""YAML configuration loader for podbuddy."""

import copy
import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

from . import prompts
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_WHISPER_COMMAND = (
    "./whisper.cpp/stream -m ./whisper.cpp/models/ggml-{model}.bin -t 8 --step 0 "
    "--length 5000 --keep 500 --vad-thold 0.75 --audio-ctx 0 --keep-context -c 1 -l en"
)

API_KEY_ENV_VARS = ("OPENAI_ACCESS_TOKEN", "OPENAI_API_KEY")

DEFAULTS: Dict[str, Any] = {
    "logging": {
        "level": "INFO",
        "file_path": "tmp/podbuddy.log",
        "console_output": True,
    },
    "storage": {
        "data_directory": "tmp",
    },
    "session": {
        "timeout": 2 * 60 * 60,
    },
    "whisper": {
        "model": "small.en-q5_1",
        "command": DEFAULT_WHISPER_COMMAND,
    },
    "openai": {
        "base_url": "https://api.openai.com/v1",
        "summary_model": "gpt-4o",
        "topics_model": "gpt-4o-mini",
        "answer_model": "gpt-4o-mini",
        "show_notes_model": "gpt-4o",
        "tts_model": "tts-1",
        "voice": "onyx",
        "timeout": 60,
    },
    "show_assistant": {
        "summary_interval": 15,
    },
    "co_host": {
        "input_timeout": 5,
        "context_topics": 10,
        "context_characters": 1000,
    },
    "actions": {
        "buddyfile": "Buddyfile",
        "tick_interval": 5,
    },
    "event_bus": {
        "max_size": 1000,
        "overflow": "block",
    },
    "audio": {
        "player_command": "afplay",
    },
    "prompts": {
        "topic_extraction_system": prompts.TOPIC_EXTRACTION_SYSTEM_PROMPT,
        "topic_extraction_user": prompts.TOPIC_EXTRACTION_USER_PROMPT,
        "discussion_system": prompts.DISCUSSION_SYSTEM_PROMPT,
        "discussion_user": prompts.DISCUSSION_USER_PROMPT,
        "show_notes_system": prompts.SHOW_NOTES_SYSTEM_PROMPT,
        "show_notes_user": prompts.SHOW_NOTES_USER_PROMPT,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class PodBuddyConfig:
    """podbuddy configuration: built-in defaults overlaid with an optional YAML file."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, only the built-in
                        defaults are used and relative paths resolve against
                        the current directory.
        """
        self.config_file = Path(config_path) if config_path else None

        if self.config_file is not None and not self.config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_file}")

        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse the YAML configuration file, if any."""
        if self.config_file is None:
            config = copy.deepcopy(DEFAULTS)
            self._resolve_paths(config, Path.cwd())
            return config

        logger.info(f"Loading configuration from: {self.config_file}")
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                overrides = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

        if not isinstance(overrides, dict):
            raise ConfigurationError("Configuration file must contain a mapping")

        config = _deep_merge(DEFAULTS, overrides)
        self._resolve_paths(config, self.config_file.parent)
        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any], base_dir: Path) -> None:
        """Resolve relative paths against the config file location."""
        for section, key in (("storage", "data_directory"),
                             ("logging", "file_path"),
                             ("actions", "buddyfile")):
            value = config.get(section, {}).get(key)
            if value and not os.path.isabs(value):
                config[section][key] = str(base_dir / value)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'openai.voice').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self.config
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation."""
        keys = key_path.split('.')
        config_dict = self.config
        for key in keys[:-1]:
            config_dict = config_dict.setdefault(key, {})
        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_openai_api_key(self) -> str:
        """Get the OpenAI key from the environment or config - CRASHES if not found."""
        for name in API_KEY_ENV_VARS:
            key = os.environ.get(name, "").strip()
            if key:
                return key
        key = str(self.get('openai.api_key') or "").strip()
        if not key:
            raise ConfigurationError("Please set an OPENAI_ACCESS_TOKEN environment variable.")
        return key

    def get_data_directory(self) -> str:
        """Get data directory path."""
        return str(Path(self.get('storage.data_directory', 'tmp')).absolute())

    def get_whisper_command(self) -> str:
        """Get the recognizer command with the configured model filled in."""
        command = self.get('whisper.command', DEFAULT_WHISPER_COMMAND)
        return command.format(model=self.get('whisper.model'))

    def prompt(self, name: str) -> str:
        value = self.get(f'prompts.{name}')
        if not value:
            raise ConfigurationError(f"Prompt not configured: prompts.{name}")
        return value
