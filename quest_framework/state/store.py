"""
Progress store - per-module progression, tasks and persisted state.

The store is the single owner of mutable progress data. Everything else
reads and writes through it (usually via a ModuleContext), at the moment
of evaluation, without caching.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional

from pydantic import Field

from quest_engine.core.model import Model

logger = logging.getLogger(__name__)


class ModuleProgression(str, Enum):
    """Module progression state."""
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    COMPLETED = "completed"


class ModuleProgress(Model):
    """
    Progress record for one module.

    Attributes:
        progression: Locked/unlocked/completed
        completed_tasks: Ids of solved tasks, in completion order
        current_task_id: Id of the accepted task, if any
        state: Module-scoped persisted fields
        interactable_state: Per-interactable persisted fields
    """
    progression: ModuleProgression = ModuleProgression.LOCKED
    completed_tasks: list[str] = Field(default_factory=list)
    current_task_id: Optional[str] = None
    state: dict[str, Any] = Field(default_factory=dict)
    interactable_state: dict[str, dict[str, Any]] = Field(default_factory=dict)


class ProgressStore:
    """
    In-memory progress store.

    Records are created on first write; reads of unknown modules return
    defaults without creating anything.
    """

    def __init__(self):
        self._progress: dict[str, ModuleProgress] = {}

    def get_progress(self, module_id: str) -> Optional[ModuleProgress]:
        """Get the progress record of a module, if one exists."""
        return self._progress.get(module_id)

    def _ensure(self, module_id: str) -> ModuleProgress:
        progress = self._progress.get(module_id)
        if progress is None:
            progress = ModuleProgress()
            self._progress[module_id] = progress
        return progress

    def module_ids(self) -> list[str]:
        return list(self._progress)

    # Progression

    def get_module_progression(self, module_id: str) -> ModuleProgression:
        progress = self._progress.get(module_id)
        return progress.progression if progress else ModuleProgression.LOCKED

    def set_module_progression(self, module_id: str, progression: ModuleProgression) -> None:
        self._ensure(module_id).progression = progression

    def unlock_module(self, module_id: str) -> bool:
        """
        Mark a module unlocked.

        Returns:
            True if the state changed (locked -> unlocked)
        """
        progress = self._ensure(module_id)
        if progress.progression is not ModuleProgression.LOCKED:
            return False
        progress.progression = ModuleProgression.UNLOCKED
        logger.info(f"Module unlocked: {module_id}")
        return True

    def complete_module(self, module_id: str) -> bool:
        """
        Mark a module completed.

        Returns:
            True if the state changed
        """
        progress = self._ensure(module_id)
        if progress.progression is ModuleProgression.COMPLETED:
            return False
        progress.progression = ModuleProgression.COMPLETED
        logger.info(f"Module completed: {module_id}")
        return True

    def is_module_completed(self, module_id: str) -> bool:
        return self.get_module_progression(module_id) is ModuleProgression.COMPLETED

    # Tasks

    def accept_task(self, module_id: str, task_id: str) -> None:
        """Make a task the module's current task."""
        self._ensure(module_id).current_task_id = task_id

    def complete_task(self, module_id: str, task_id: str) -> None:
        """Record a solved task and clear it as current task."""
        progress = self._ensure(module_id)
        if task_id not in progress.completed_tasks:
            progress.completed_tasks = [*progress.completed_tasks, task_id]
        if progress.current_task_id == task_id:
            progress.current_task_id = None

    def is_task_completed(self, module_id: str, task_id: str) -> bool:
        progress = self._progress.get(module_id)
        return progress is not None and task_id in progress.completed_tasks

    def get_completed_tasks(self, module_id: str) -> set[str]:
        progress = self._progress.get(module_id)
        return set(progress.completed_tasks) if progress else set()

    def get_current_task_id(self, module_id: str) -> Optional[str]:
        progress = self._progress.get(module_id)
        return progress.current_task_id if progress else None

    # Persisted fields

    def get_module_state_field(self, module_id: str, key: str) -> Any:
        progress = self._progress.get(module_id)
        return progress.state.get(key) if progress else None

    def set_module_state_field(self, module_id: str, key: str, value: Any) -> None:
        progress = self._ensure(module_id)
        progress.state = {**progress.state, key: value}

    def get_interactable_state_field(self, module_id: str, interactable_id: str, key: str) -> Any:
        progress = self._progress.get(module_id)
        if progress is None:
            return None
        return progress.interactable_state.get(interactable_id, {}).get(key)

    def set_interactable_state_field(
        self,
        module_id: str,
        interactable_id: str,
        key: str,
        value: Any,
    ) -> None:
        progress = self._ensure(module_id)
        fields = {**progress.interactable_state.get(interactable_id, {}), key: value}
        progress.interactable_state = {**progress.interactable_state, interactable_id: fields}
