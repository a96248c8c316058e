"""Loads user-defined actions from a Buddyfile.

A Buddyfile is YAML::

    actions:
      notes:
        name: Running notes
        interval: 60          # seconds between flushes, 0 = every event
        mode: append          # or overwrite
        output_file: notes.md # relative paths land in the session directory
        llm_options:
          model: gpt-4o-mini
          max_tokens: 300
          messages:
            - role: system
              content: Keep terse notes.
            - role: user
              content: "Discussion: {discussion}"
"""

import logging
import time
from pathlib import Path
from typing import Callable, List

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from ..models.actions import Action, ActionConfig
from ..storage.session_store import SessionStore

logger = logging.getLogger(__name__)


def load_buddyfile(path: str, session: SessionStore,
                   clock: Callable[[], float] = time.monotonic) -> List[Action]:
    """Parse a Buddyfile into actions; a missing file means no actions.

    Raises:
        ConfigurationError: If the file is not valid YAML or an action is malformed
    """
    buddyfile = Path(path)
    if not buddyfile.exists():
        logger.info(f"No Buddyfile at {buddyfile}; no actions configured")
        return []

    try:
        with open(buddyfile, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in Buddyfile {buddyfile}: {e}")

    actions_config = config.get("actions") or {}
    if not isinstance(actions_config, dict):
        raise ConfigurationError("Buddyfile 'actions' must be a mapping")

    now = clock()
    actions = []
    for key, raw in actions_config.items():
        try:
            action_config = ActionConfig.model_validate(raw)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid Buddyfile action '{key}': {e}")

        actions.append(Action(
            config=action_config,
            output_path=session.resolve(action_config.output_file),
            last_flushed_at=now,
        ))
        logger.info(f"Loaded action '{action_config.name}' "
                    f"(interval={action_config.interval}s, mode={action_config.mode.value})")
    return actions
