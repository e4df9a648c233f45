"""
State module - progress store and module contexts.
"""

from quest_framework.state.store import ModuleProgression, ModuleProgress, ProgressStore
from quest_framework.state.context import (
    ModuleContext,
    StoreModuleContext,
    create_module_context,
    open_task_submission,
)

__all__ = [
    "ModuleProgression",
    "ModuleProgress",
    "ProgressStore",
    "ModuleContext",
    "StoreModuleContext",
    "create_module_context",
    "open_task_submission",
]
