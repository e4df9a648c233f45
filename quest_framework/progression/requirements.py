"""
Unlock requirements - gating rules for modules and tasks.

Requirements share the condition vocabulary of dialogue (task completion,
persisted state, AND/OR, custom predicates) and add module completion and
passwords. A password can never be satisfied by looking at state; it is
only satisfied by comparing user input, which the unlock service does.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, ClassVar, Optional, Union

if TYPE_CHECKING:
    from quest_framework.module import ModuleRegistry
    from quest_framework.progression.tasks import Task
    from quest_framework.state.context import ModuleContext
    from quest_framework.state.store import ProgressStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskCompleteRequirement:
    kind: ClassVar[str] = "task-complete"
    task: Task


@dataclass(frozen=True)
class ModuleCompleteRequirement:
    kind: ClassVar[str] = "module-complete"
    module_id: str


@dataclass(frozen=True)
class StateCheckRequirement:
    kind: ClassVar[str] = "state-check"
    key: str
    value: Any


@dataclass(frozen=True)
class PasswordRequirement:
    kind: ClassVar[str] = "password"
    password: str
    hint: Optional[str] = field(default=None, compare=False)


@dataclass(frozen=True)
class AndRequirement:
    kind: ClassVar[str] = "and"
    requirements: tuple[UnlockRequirement, ...]


@dataclass(frozen=True)
class OrRequirement:
    kind: ClassVar[str] = "or"
    requirements: tuple[UnlockRequirement, ...]


@dataclass(frozen=True)
class CustomRequirement:
    """Check receives the context it is evaluated with; may be async."""
    kind: ClassVar[str] = "custom"
    check: Callable[[Any], Union[bool, Awaitable[bool]]]


UnlockRequirement = Union[
    TaskCompleteRequirement,
    ModuleCompleteRequirement,
    StateCheckRequirement,
    PasswordRequirement,
    AndRequirement,
    OrRequirement,
    CustomRequirement,
]


@dataclass
class UnlockContext:
    """
    State access for requirement checks.

    Attributes:
        store: Progress store holding every module's progress
        module_id: Module the check is made for (scopes state checks)
        registry: Used to find which module owns a task
    """
    store: ProgressStore
    module_id: Optional[str] = None
    registry: Optional[ModuleRegistry] = None


@dataclass
class RequirementDisplayInfo:
    """One leaf requirement, flattened for display."""
    type: str
    module_id: Optional[str] = None
    task_name: Optional[str] = None
    hint: Optional[str] = None


# Builders

def require_task(task: Task) -> UnlockRequirement:
    """Require a task to be completed."""
    return TaskCompleteRequirement(task)


def require_module(module_id: str) -> UnlockRequirement:
    """Require a module to be completed."""
    return ModuleCompleteRequirement(module_id)


def require_state(key: str, value: Any) -> UnlockRequirement:
    """Require a module state field to equal a value."""
    return StateCheckRequirement(key, value)


def require_password(password: str, hint: Optional[str] = None) -> UnlockRequirement:
    """Require the player to enter a password."""
    return PasswordRequirement(password, hint)


def require_all(*requirements: UnlockRequirement) -> UnlockRequirement:
    return AndRequirement(tuple(requirements))


def require_any(*requirements: UnlockRequirement) -> UnlockRequirement:
    return OrRequirement(tuple(requirements))


def require_custom(check: Callable[[Any], Union[bool, Awaitable[bool]]]) -> UnlockRequirement:
    return CustomRequirement(check)


# Evaluation

def _task_id(task: Task | str) -> str:
    return task if isinstance(task, str) else task.id


def _unknown(requirement: Any) -> TypeError:
    return TypeError(f"Not an unlock requirement: {requirement!r}")


async def check_unlock_requirement(
    requirement: UnlockRequirement,
    context: UnlockContext,
) -> bool:
    """
    Check if an unlock requirement is met.

    Children of AND/OR are awaited one after another, left to right.
    Password requirements always return False.
    """
    if isinstance(requirement, TaskCompleteRequirement):
        task_id = _task_id(requirement.task)
        module_id = None
        if context.registry is not None:
            module_id = context.registry.find_task_module(task_id)
        module_id = module_id or context.module_id
        if not module_id:
            logger.debug(f"No module known for task {task_id}; requirement not met")
            return False
        return context.store.is_task_completed(module_id, task_id)

    if isinstance(requirement, ModuleCompleteRequirement):
        return context.store.is_module_completed(requirement.module_id)

    if isinstance(requirement, StateCheckRequirement):
        if not context.module_id:
            return False
        value = context.store.get_module_state_field(context.module_id, requirement.key)
        return value == requirement.value

    if isinstance(requirement, PasswordRequirement):
        return False

    if isinstance(requirement, AndRequirement):
        for child in requirement.requirements:
            if not await check_unlock_requirement(child, context):
                return False
        return True

    if isinstance(requirement, OrRequirement):
        for child in requirement.requirements:
            if await check_unlock_requirement(child, context):
                return True
        return False

    if isinstance(requirement, CustomRequirement):
        result = requirement.check(context)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)

    raise _unknown(requirement)


def is_requirement_satisfied(requirement: UnlockRequirement, context: ModuleContext) -> bool:
    """
    Synchronous requirement check against a module context.

    Used for task availability, where no I/O is allowed. An async custom
    check cannot be awaited here and counts as not met.
    """
    if isinstance(requirement, TaskCompleteRequirement):
        return context.is_task_completed(requirement.task)

    if isinstance(requirement, ModuleCompleteRequirement):
        return context.is_module_completed(requirement.module_id)

    if isinstance(requirement, StateCheckRequirement):
        return context.get_module_state_field(requirement.key) == requirement.value

    if isinstance(requirement, PasswordRequirement):
        return False

    if isinstance(requirement, AndRequirement):
        return all(is_requirement_satisfied(r, context) for r in requirement.requirements)

    if isinstance(requirement, OrRequirement):
        return any(is_requirement_satisfied(r, context) for r in requirement.requirements)

    if isinstance(requirement, CustomRequirement):
        result = requirement.check(context)
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            logger.debug("Async custom requirement skipped in synchronous check")
            return False
        return bool(result)

    raise _unknown(requirement)


# Introspection

def requires_user_interaction(requirement: UnlockRequirement) -> bool:
    """True if the requirement is, or contains, a password."""
    if isinstance(requirement, PasswordRequirement):
        return True
    if isinstance(requirement, (AndRequirement, OrRequirement)):
        return any(requires_user_interaction(r) for r in requirement.requirements)
    return False


def extract_module_dependencies(requirement: UnlockRequirement) -> list[str]:
    """
    Get the module ids a requirement depends on.

    Only module-complete leaves count. Duplicates are dropped, keeping the
    first-seen order.
    """
    found: list[str] = []

    def walk(req: UnlockRequirement) -> None:
        if isinstance(req, ModuleCompleteRequirement):
            if req.module_id not in found:
                found.append(req.module_id)
        elif isinstance(req, (AndRequirement, OrRequirement)):
            for child in req.requirements:
                walk(child)

    walk(requirement)
    return found


def extract_requirement_types(requirement: UnlockRequirement) -> list[str]:
    """Get the leaf requirement kinds in declaration order."""
    if isinstance(requirement, (AndRequirement, OrRequirement)):
        types: list[str] = []
        for child in requirement.requirements:
            types.extend(extract_requirement_types(child))
        return types
    return [requirement.kind]


def extract_requirement_details(requirement: UnlockRequirement) -> list[RequirementDisplayInfo]:
    """Flatten a requirement into one display entry per leaf."""
    if isinstance(requirement, (AndRequirement, OrRequirement)):
        details: list[RequirementDisplayInfo] = []
        for child in requirement.requirements:
            details.extend(extract_requirement_details(child))
        return details

    if isinstance(requirement, PasswordRequirement):
        return [RequirementDisplayInfo(type=requirement.kind, hint=requirement.hint)]
    if isinstance(requirement, ModuleCompleteRequirement):
        return [RequirementDisplayInfo(type=requirement.kind, module_id=requirement.module_id)]
    if isinstance(requirement, TaskCompleteRequirement):
        name = requirement.task if isinstance(requirement.task, str) else requirement.task.name
        return [RequirementDisplayInfo(type=requirement.kind, task_name=name)]
    return [RequirementDisplayInfo(type=requirement.kind)]
