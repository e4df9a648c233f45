"""
Module context - the state capability handed to conditions and actions.

Evaluators never reach into a global store. They receive a ModuleContext
and read or write through it, so tests can pass any object that has these
methods.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from quest_engine.core.events import EventBus, ProgressionEvent
from quest_framework.progression.tasks import TaskRef, task_id_of
from quest_framework.state.store import ProgressStore

logger = logging.getLogger(__name__)


@runtime_checkable
class ModuleContext(Protocol):
    """State access for one module."""

    def get_current_task_id(self) -> Optional[str]: ...

    def is_task_completed(self, task: TaskRef) -> bool: ...

    def get_module_state_field(self, key: str) -> Any: ...

    def set_module_state_field(self, key: str, value: Any) -> None: ...

    def get_interactable_state(self, interactable_id: str, key: str) -> Any: ...

    def set_interactable_state(self, interactable_id: str, key: str, value: Any) -> None: ...

    def accept_task(self, task: TaskRef) -> None: ...

    def is_module_completed(self, module_id: str) -> bool: ...


def open_task_submission(context: Any, task: TaskRef) -> bool:
    """
    Ask the context's UI hand-off to open a task submission view.

    Contexts without the hand-off are left alone.

    Returns:
        True if a hand-off was called
    """
    opener = getattr(context, 'open_task_submission', None)
    if opener is None:
        return False
    opener(task)
    return True


class StoreModuleContext:
    """
    ModuleContext backed by a ProgressStore, scoped to one module.

    Args:
        module_id: Module this context reads and writes
        store: Progress store
        events: Bus for TASK_ACCEPTED notifications (optional)
        on_task_submission: UI hand-off for opening a task view (optional)
    """

    def __init__(
        self,
        module_id: str,
        store: ProgressStore,
        events: Optional[EventBus] = None,
        on_task_submission: Optional[Callable[[str], None]] = None,
    ):
        self.module_id = module_id
        self.store = store
        self.events = events
        self._on_task_submission = on_task_submission

    def get_current_task_id(self) -> Optional[str]:
        return self.store.get_current_task_id(self.module_id)

    def is_task_completed(self, task: TaskRef) -> bool:
        return self.store.is_task_completed(self.module_id, task_id_of(task))

    def complete_task(self, task: TaskRef) -> None:
        self.store.complete_task(self.module_id, task_id_of(task))

    def get_module_state_field(self, key: str) -> Any:
        return self.store.get_module_state_field(self.module_id, key)

    def set_module_state_field(self, key: str, value: Any) -> None:
        self.store.set_module_state_field(self.module_id, key, value)

    def get_interactable_state(self, interactable_id: str, key: str) -> Any:
        return self.store.get_interactable_state_field(self.module_id, interactable_id, key)

    def set_interactable_state(self, interactable_id: str, key: str, value: Any) -> None:
        self.store.set_interactable_state_field(self.module_id, interactable_id, key, value)

    def accept_task(self, task: TaskRef) -> None:
        task_id = task_id_of(task)
        self.store.accept_task(self.module_id, task_id)
        logger.debug(f"Task accepted in {self.module_id}: {task_id}")
        if self.events:
            self.events.publish(
                ProgressionEvent.TASK_ACCEPTED,
                module_id=self.module_id,
                task_id=task_id,
            )

    def is_module_completed(self, module_id: str) -> bool:
        return self.store.is_module_completed(module_id)

    def open_task_submission(self, task: TaskRef) -> None:
        """Hand the task to the UI; no-op when no hand-off is set."""
        if self._on_task_submission is None:
            return
        self._on_task_submission(task_id_of(task))


def create_module_context(
    module_id: str,
    store: ProgressStore,
    events: Optional[EventBus] = None,
    on_task_submission: Optional[Callable[[str], None]] = None,
) -> StoreModuleContext:
    """Create a context for a module."""
    return StoreModuleContext(module_id, store, events, on_task_submission)
