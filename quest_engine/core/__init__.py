"""
Core engine module.

Exports:
- Model: Pydantic base for validated records
- EngineConfig, DEFAULT_CONFIG, configure_logging: Configuration
- EventBus, Event, DialogueEvent, ProgressionEvent: Event system
- EngineError, DialogueBuildError, UnknownModuleError: Errors
"""

from quest_engine.core.model import Model
from quest_engine.core.config import EngineConfig, DEFAULT_CONFIG, configure_logging
from quest_engine.core.events import EventBus, Event, DialogueEvent, ProgressionEvent
from quest_engine.core.errors import EngineError, DialogueBuildError, UnknownModuleError

__all__ = [
    # Models
    "Model",
    # Config
    "EngineConfig",
    "DEFAULT_CONFIG",
    "configure_logging",
    # Events
    "EventBus",
    "Event",
    "DialogueEvent",
    "ProgressionEvent",
    # Errors
    "EngineError",
    "DialogueBuildError",
    "UnknownModuleError",
]
