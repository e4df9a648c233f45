"""
Task definitions and availability.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Optional, Union

from quest_framework.progression.requirements import UnlockRequirement, is_requirement_satisfied

if TYPE_CHECKING:
    from quest_framework.module import ModuleDefinition
    from quest_framework.state.context import ModuleContext


class TaskStatus(Enum):
    """Task progress status as seen by one module context."""
    LOCKED = auto()       # Unlock requirement not met
    AVAILABLE = auto()    # Can be accepted
    ACTIVE = auto()       # Currently accepted
    COMPLETED = auto()    # Solved


@dataclass
class Task:
    """A task the player can accept and solve."""
    id: str
    name: str
    description: str = ""

    # Gating
    unlock_requirement: Optional[UnlockRequirement] = None


TaskRef = Union[Task, str]


def task_id_of(task: TaskRef) -> str:
    """Get the id of a task or task id."""
    return task if isinstance(task, str) else task.id


def is_task_active(task: TaskRef, context: ModuleContext) -> bool:
    """Check if the task is the module's currently accepted task."""
    current = context.get_current_task_id()
    return current is not None and current == task_id_of(task)


def is_task_available(
    task: Task,
    context: ModuleContext,
    module_data: Optional[ModuleDefinition] = None,
) -> bool:
    """
    Check if a task can be offered.

    A task is available when it is not completed and its unlock
    requirement (if any) is met. Password requirements never count as met.
    """
    if context.is_task_completed(task):
        return False

    if task.unlock_requirement is None:
        return True

    return is_requirement_satisfied(task.unlock_requirement, context)


def get_task_status(
    task: Task,
    context: ModuleContext,
    module_data: Optional[ModuleDefinition] = None,
) -> TaskStatus:
    """Classify a task for the given context."""
    if context.is_task_completed(task):
        return TaskStatus.COMPLETED
    if is_task_active(task, context):
        return TaskStatus.ACTIVE
    if is_task_available(task, context, module_data):
        return TaskStatus.AVAILABLE
    return TaskStatus.LOCKED


def get_active_tasks(tasks: list[Task], context: ModuleContext) -> list[Task]:
    """Get tasks that are currently accepted."""
    return [task for task in tasks if is_task_active(task, context)]


def get_available_tasks(
    tasks: list[Task],
    context: ModuleContext,
    module_data: Optional[ModuleDefinition] = None,
) -> list[Task]:
    """Get tasks that could be accepted now (active tasks excluded)."""
    return [
        task for task in tasks
        if not is_task_active(task, context)
        and is_task_available(task, context, module_data)
    ]
