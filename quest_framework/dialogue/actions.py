"""
Dialogue actions - side effects of taking a choice.

Actions are descriptions. execute_actions is the only place that applies
them, one after another, through the module context. GoTo and
CloseDialogue are navigation hints read by the caller.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, ClassVar, Iterable, Optional, Union

from quest_framework.progression.tasks import TaskRef

if TYPE_CHECKING:
    from quest_framework.dialogue.nodes import DialogueNode
    from quest_framework.state.context import ModuleContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcceptTask:
    kind: ClassVar[str] = "accept-task"
    task: TaskRef


@dataclass(frozen=True)
class SetState:
    kind: ClassVar[str] = "set-state"
    key: str
    value: Any


@dataclass(frozen=True)
class SetInteractableState:
    kind: ClassVar[str] = "set-interactable-state"
    interactable_id: str
    key: str
    value: Any


@dataclass(frozen=True)
class SetModuleState:
    kind: ClassVar[str] = "set-module-state"
    key: str
    value: Any


@dataclass(frozen=True)
class CallFunction:
    """Handler receives the context; may be a coroutine function."""
    kind: ClassVar[str] = "call-function"
    handler: Callable[[Any], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class GoTo:
    """Jump to a node, or close when node is None."""
    kind: ClassVar[str] = "go-to"
    node: Optional[DialogueNode]


@dataclass(frozen=True)
class CloseDialogue:
    kind: ClassVar[str] = "close-dialogue"


Action = Union[
    AcceptTask,
    SetState,
    SetInteractableState,
    SetModuleState,
    CallFunction,
    GoTo,
    CloseDialogue,
]


# Constructors

def accept_task(task: TaskRef) -> Action:
    return AcceptTask(task)


def set_state(key: str, value: Any) -> Action:
    return SetState(key, value)


def set_interactable_state(interactable_id: str, key: str, value: Any) -> Action:
    return SetInteractableState(interactable_id, key, value)


def set_module_state(key: str, value: Any) -> Action:
    return SetModuleState(key, value)


def call_function(handler: Callable[[Any], Union[None, Awaitable[None]]]) -> Action:
    return CallFunction(handler)


def go_to_node(node: Optional[DialogueNode]) -> Action:
    return GoTo(node)


def close_dialogue() -> Action:
    return CloseDialogue()


# Execution

async def execute_action(action: Action, context: ModuleContext) -> None:
    """Apply a single action."""
    if isinstance(action, AcceptTask):
        context.accept_task(action.task)
    elif isinstance(action, (SetState, SetModuleState)):
        context.set_module_state_field(action.key, action.value)
    elif isinstance(action, SetInteractableState):
        context.set_interactable_state(action.interactable_id, action.key, action.value)
    elif isinstance(action, CallFunction):
        result = action.handler(context)
        if inspect.isawaitable(result):
            await result
    elif isinstance(action, (GoTo, CloseDialogue)):
        pass  # Read by the caller
    else:
        raise TypeError(f"Not a dialogue action: {action!r}")


async def execute_actions(actions: Iterable[Action], context: ModuleContext) -> None:
    """
    Apply actions in order, awaiting each before the next.

    Errors from handlers propagate. Actions applied before the failure
    stay applied.
    """
    for action in actions:
        logger.debug(f"Executing action: {getattr(action, 'kind', action)!r}")
        await execute_action(action, context)
