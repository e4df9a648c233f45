"""
Dialogue conditions - predicates over module state.

Conditions gate choices and entry nodes. They only read state through the
module context and never change it.

Usage:
    ready = and_conditions(task_active(intro), state_check("door", "open"))
    if evaluate_condition(ready, context):
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Optional, Union

from quest_framework.progression.tasks import TaskRef, task_id_of

if TYPE_CHECKING:
    from quest_framework.module import ModuleDefinition
    from quest_framework.state.context import ModuleContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskComplete:
    kind: ClassVar[str] = "task-complete"
    task: TaskRef


@dataclass(frozen=True)
class TaskActive:
    kind: ClassVar[str] = "task-active"
    task: TaskRef


@dataclass(frozen=True)
class StateCheck:
    """Module state field equals a value."""
    kind: ClassVar[str] = "state-check"
    key: str
    value: Any


@dataclass(frozen=True)
class InteractableState:
    kind: ClassVar[str] = "interactable-state"
    interactable_id: str
    key: str
    value: Any


@dataclass(frozen=True)
class ModuleState:
    """Same check as StateCheck; the name used by progression content."""
    kind: ClassVar[str] = "module-state"
    key: str
    value: Any


@dataclass(frozen=True)
class AndCondition:
    kind: ClassVar[str] = "and"
    conditions: tuple[Condition, ...]


@dataclass(frozen=True)
class OrCondition:
    kind: ClassVar[str] = "or"
    conditions: tuple[Condition, ...]


@dataclass(frozen=True)
class CustomCondition:
    kind: ClassVar[str] = "custom"
    check: Callable[[Any], bool]


Condition = Union[
    TaskComplete,
    TaskActive,
    StateCheck,
    InteractableState,
    ModuleState,
    AndCondition,
    OrCondition,
    CustomCondition,
]

CONDITION_TYPES = (
    TaskComplete,
    TaskActive,
    StateCheck,
    InteractableState,
    ModuleState,
    AndCondition,
    OrCondition,
    CustomCondition,
)

ConditionLike = Union[Condition, Callable[[Any], bool]]


# Constructors

def task_complete(task: TaskRef) -> Condition:
    return TaskComplete(task)


def task_active(task: TaskRef) -> Condition:
    return TaskActive(task)


def state_check(key: str, value: Any) -> Condition:
    return StateCheck(key, value)


def interactable_state_check(interactable_id: str, key: str, value: Any) -> Condition:
    return InteractableState(interactable_id, key, value)


def module_state_check(key: str, value: Any) -> Condition:
    return ModuleState(key, value)


def and_conditions(*conditions: ConditionLike) -> Condition:
    return AndCondition(tuple(as_condition(c) for c in conditions))


def or_conditions(*conditions: ConditionLike) -> Condition:
    return OrCondition(tuple(as_condition(c) for c in conditions))


def custom_condition(check: Callable[[Any], bool]) -> Condition:
    return CustomCondition(check)


def as_condition(condition: ConditionLike) -> Condition:
    """Wrap a bare predicate in a CustomCondition; pass conditions through."""
    if isinstance(condition, CONDITION_TYPES):
        return condition
    if callable(condition):
        return CustomCondition(condition)
    raise TypeError(f"Not a dialogue condition: {condition!r}")


# Evaluation

def evaluate_condition(
    condition: ConditionLike,
    context: ModuleContext,
    module_data: Optional[ModuleDefinition] = None,
) -> bool:
    """
    Evaluate a condition against a module context.

    AND/OR children are evaluated left to right. Conditions are expected
    to be side-effect free, so whether a child runs after the result is
    already decided is not guaranteed.

    Args:
        condition: Condition variant or bare predicate
        context: State access
        module_data: Module the dialogue belongs to (optional)

    Raises:
        TypeError: If the condition is not a known variant
    """
    condition = as_condition(condition)

    if isinstance(condition, TaskComplete):
        return context.is_task_completed(condition.task)

    if isinstance(condition, TaskActive):
        return context.get_current_task_id() == task_id_of(condition.task)

    if isinstance(condition, (StateCheck, ModuleState)):
        return context.get_module_state_field(condition.key) == condition.value

    if isinstance(condition, InteractableState):
        value = context.get_interactable_state(condition.interactable_id, condition.key)
        return value == condition.value

    if isinstance(condition, AndCondition):
        return all(evaluate_condition(c, context, module_data) for c in condition.conditions)

    if isinstance(condition, OrCondition):
        return any(evaluate_condition(c, context, module_data) for c in condition.conditions)

    # CustomCondition
    return bool(condition.check(context))
