"""
Dialogue nodes and choices.

A node is the unit of conversation: a few lines, an optional task binding
and the choices offered after the lines. Nodes are immutable; the
authored NodeDefinition is kept on the node so dynamic fields (callables
of the module context) can be resolved while the conversation runs.

Choice.next forms:
    DialogueNode      go to that node
    str               id of a node in the same tree (may be declared later)
    None              close the conversation
    NO_TRANSITION     stay; the choice leads nowhere (default)
    callable          ctx -> node, id or None, resolved when taken
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Union

if TYPE_CHECKING:
    from quest_framework.dialogue.actions import Action
    from quest_framework.dialogue.conditions import ConditionLike
    from quest_framework.progression.tasks import Task


class _NoTransition:
    """Marker for an omitted `next`."""

    _instance: Optional[_NoTransition] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_TRANSITION"

    def __bool__(self) -> bool:
        return False


NO_TRANSITION = _NoTransition()

DynamicText = Union[str, Callable[[Any], str]]
DynamicLines = Union[list[str], tuple[str, ...], Callable[[Any], list[str]]]
NextTarget = Any  # DialogueNode | str | None | NO_TRANSITION | callable
ActionsLike = Union[list["Action"], tuple["Action", ...], Callable[[Any], list["Action"]], None]


@dataclass(frozen=True)
class Choice:
    """An option shown after a node's lines."""
    text: DynamicText
    next: NextTarget = NO_TRANSITION
    condition: Optional[ConditionLike] = None
    actions: ActionsLike = None

    @classmethod
    def coerce(cls, value: Union[Choice, Mapping[str, Any], str]) -> Choice:
        """Build a Choice from a Choice, a keyword mapping or plain text."""
        if isinstance(value, Choice):
            return value
        if isinstance(value, str):
            return cls(text=value)
        if isinstance(value, Mapping):
            return cls(**value)
        raise TypeError(f"Not a dialogue choice: {value!r}")


def coerce_choices(choices: Any) -> Any:
    """Normalize a static choice mapping; callables pass through."""
    if choices is None or callable(choices):
        return choices
    return {key: Choice.coerce(choice) for key, choice in choices.items()}


@dataclass(frozen=True, eq=False)
class NodeDefinition:
    """
    Authored form of a node.

    Attributes:
        lines: Lines to show, or ctx -> lines
        choices: Mapping of key -> Choice, or ctx -> mapping
        task: Task this node is bound to (task-ready/submission nodes)
        id: Node id; generated when missing
        next: Node-level auto-advance target (same forms as Choice.next)
    """
    lines: DynamicLines = ()
    choices: Any = None
    task: Optional[Task] = None
    id: Optional[str] = None
    next: NextTarget = NO_TRANSITION

    def __post_init__(self):
        object.__setattr__(self, 'choices', coerce_choices(self.choices))
        if isinstance(self.lines, str):
            object.__setattr__(self, 'lines', (self.lines,))
        elif not callable(self.lines):
            object.__setattr__(self, 'lines', tuple(self.lines))

    @classmethod
    def coerce(cls, value: Union[NodeDefinition, Mapping[str, Any]]) -> NodeDefinition:
        if isinstance(value, NodeDefinition):
            return value
        if isinstance(value, Mapping):
            return cls(**value)
        raise TypeError(f"Not a dialogue node definition: {value!r}")

    @property
    def has_dynamic_choices(self) -> bool:
        return callable(self.choices)

    @property
    def has_dynamic_lines(self) -> bool:
        return callable(self.lines)


@dataclass(frozen=True, eq=False)
class DialogueNode:
    """
    A node in a dialogue tree.

    Static fields mirror the definition. Dynamic lines appear here as an
    empty tuple and dynamic choices as None until resolved against a
    context. A node constructed without a definition gets one built from
    its own lines, choices and task.
    """
    id: str
    lines: DynamicLines = ()
    task: Optional[Task] = None
    choices: Any = None
    definition: Optional[NodeDefinition] = field(default=None, repr=False)
    generated: bool = False

    def __post_init__(self):
        if self.definition is not None:
            return

        definition = NodeDefinition(lines=self.lines, choices=self.choices, task=self.task, id=self.id)
        object.__setattr__(self, 'definition', definition)
        object.__setattr__(self, 'lines', () if definition.has_dynamic_lines else definition.lines)
        object.__setattr__(self, 'choices', None if definition.has_dynamic_choices else definition.choices)

    def __repr__(self) -> str:
        return f"DialogueNode(id={self.id!r})"


def generate_node_id() -> str:
    return f"node_{uuid.uuid4().hex[:9]}"


def node_from_definition(
    definition: Union[NodeDefinition, Mapping[str, Any]],
    generated: bool = False,
) -> DialogueNode:
    """Create a node from its authored definition."""
    definition = NodeDefinition.coerce(definition)
    if definition.id is None:
        definition = NodeDefinition(
            lines=definition.lines,
            choices=definition.choices,
            task=definition.task,
            id=generate_node_id(),
            next=definition.next,
        )

    return DialogueNode(
        id=definition.id,
        lines=() if definition.has_dynamic_lines else definition.lines,
        task=definition.task,
        choices=None if definition.has_dynamic_choices else definition.choices,
        definition=definition,
        generated=generated,
    )


def dialogue_node(
    id: Optional[str] = None,
    lines: DynamicLines = (),
    choices: Any = None,
    task: Optional[Task] = None,
    next: NextTarget = NO_TRANSITION,
    generated: bool = False,
) -> DialogueNode:
    """
    Create a dialogue node.

    Usage:
        offer = dialogue_node(
            id="offer",
            lines=["Can you help me?"],
            choices={
                "yes": Choice("Sure", next="thanks", actions=[accept_task(intro)]),
                "no": {"text": "Not now", "next": None},
            },
        )
    """
    definition = NodeDefinition(lines=lines, choices=choices, task=task, id=id, next=next)
    return node_from_definition(definition, generated=generated)
