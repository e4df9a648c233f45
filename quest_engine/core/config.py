"""
Engine configuration.

Holds the text the engine synthesizes on its own (root dialogue menu,
task choice labels) and the logging level.
"""

from __future__ import annotations

import logging

from pydantic import field_validator

from quest_engine.core.model import Model


class EngineConfig(Model):
    """
    Configuration for the dialogue and progression engine.

    Attributes:
        root_greeting: Line shown on a synthesized root dialogue node
        talk_choice_template: Text of the "talk" root choice ({name} = NPC name)
        goodbye_text: Text of the "goodbye" root choice
        task_choice_max_length: Maximum length of a formatted task choice
        in_progress_label: Status label for the active task
        available_label: Status label for tasks that can be accepted
        log_level: Level name passed to configure_logging()
    """
    root_greeting: str = "Hello! What would you like to do?"
    talk_choice_template: str = "Talk to {name}..."
    goodbye_text: str = "Goodbye"
    task_choice_max_length: int = 43
    in_progress_label: str = "In Progress"
    available_label: str = "Available"
    log_level: str = "INFO"

    @field_validator('task_choice_max_length')
    @classmethod
    def _check_max_length(cls, value: int) -> int:
        # Room for at least one character plus the ellipsis
        if value < 4:
            raise ValueError("task_choice_max_length must be at least 4")
        return value

    @field_validator('log_level')
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


DEFAULT_CONFIG = EngineConfig()


def configure_logging(config: EngineConfig = DEFAULT_CONFIG) -> None:
    """Apply the configured log level to the root logger."""
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("quest_framework").setLevel(config.log_level)
