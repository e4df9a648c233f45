"""
Quest Engine

Infrastructure shared by the conversation and progression framework:
validated records, configuration, the typed event bus and engine errors.

Quick Start:
    from quest_engine import EventBus, EngineConfig
    from quest_framework.dialogue import create_dialogue_tree, dialogue_node

    greeting = dialogue_node(id="greeting", lines=["Hello!"])
    tree = create_dialogue_tree().node(greeting).build()
"""

__version__ = "0.1.0"

from quest_engine.core import (
    Model,
    EngineConfig,
    DEFAULT_CONFIG,
    configure_logging,
    EventBus,
    Event,
    DialogueEvent,
    ProgressionEvent,
    EngineError,
    DialogueBuildError,
    UnknownModuleError,
)

__all__ = [
    "Model",
    "EngineConfig",
    "DEFAULT_CONFIG",
    "configure_logging",
    "EventBus",
    "Event",
    "DialogueEvent",
    "ProgressionEvent",
    "EngineError",
    "DialogueBuildError",
    "UnknownModuleError",
]
