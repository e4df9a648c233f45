"""
Dialogue execution - starting conversations, following choices and
listing what the player can pick.

These functions only read state. Applying a choice's actions is left to
the caller (see execute_actions and DialogueSession). Lookup misses return
None or an empty list; they never raise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Optional

from quest_engine.core.config import EngineConfig
from quest_framework.dialogue.actions import Action
from quest_framework.dialogue.conditions import evaluate_condition
from quest_framework.dialogue.nodes import (
    NO_TRANSITION,
    Choice,
    DialogueNode,
    NodeDefinition,
    coerce_choices,
)
from quest_framework.dialogue.root import generate_root_dialogue, generate_root_dialogue_edges
from quest_framework.dialogue.tree import DialogueTree, select_entry_node

if TYPE_CHECKING:
    from quest_framework.module import ModuleDefinition
    from quest_framework.state.context import ModuleContext
    from quest_framework.world.npc import NPC

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailableChoice:
    """A choice the player can pick right now, with resolved text."""
    key: str
    text: str
    actions: tuple[Action, ...] = ()


# Dynamic field resolution

def resolve_lines(lines: Any, context: ModuleContext) -> tuple[str, ...]:
    if callable(lines):
        lines = lines(context)
    if isinstance(lines, str):
        return (lines,)
    return tuple(lines or ())


def resolve_text(text: Any, context: ModuleContext) -> str:
    return text(context) if callable(text) else text


def resolve_choices(choices: Any, context: ModuleContext) -> dict[str, Choice]:
    if callable(choices):
        choices = coerce_choices(choices(context))
    return dict(choices or {})


def resolve_actions(actions: Any, context: ModuleContext) -> tuple[Action, ...]:
    if callable(actions):
        actions = actions(context)
    return tuple(actions or ())


def resolve_target(
    target: Any,
    tree: Optional[DialogueTree],
    context: ModuleContext,
) -> Optional[DialogueNode]:
    """
    Turn a `next` value into a node.

    Ids are looked up in the tree; an unknown id gives None.
    """
    if target is NO_TRANSITION:
        return None
    if callable(target):
        target = target(context)
    if isinstance(target, str):
        node = tree.get_node(target) if tree is not None else None
        if node is None:
            logger.warning(f"Dialogue target not found: {target}")
        return node
    if isinstance(target, DialogueNode):
        return target
    return None


def get_node_definition(
    node: DialogueNode,
    tree: Optional[DialogueTree] = None,
) -> NodeDefinition:
    """Get a node's authored definition, preferring the tree's record."""
    if tree is not None:
        definition = tree.get_definition(node.id)
        if definition is not None:
            return definition
    return node.definition


def resolve_node_at_runtime(
    node: DialogueNode,
    tree: Optional[DialogueTree],
    context: ModuleContext,
) -> DialogueNode:
    """
    Get a copy of the node with lines and choice texts resolved.

    Choices keep their conditions and targets; only the text is resolved.
    """
    definition = get_node_definition(node, tree)

    choices = node.choices
    if definition.choices is not None:
        choices = {
            key: replace(choice, text=resolve_text(choice.text, context))
            for key, choice in resolve_choices(definition.choices, context).items()
        }

    return replace(
        node,
        lines=resolve_lines(definition.lines, context),
        choices=choices,
    )


# Navigation

def get_initial_dialogue_node(
    npc: NPC,
    module_data: Optional[ModuleDefinition],
    context: ModuleContext,
    config: Optional[EngineConfig] = None,
) -> Optional[DialogueNode]:
    """
    Get the node a conversation with an NPC starts at.

    The task menu comes first when the NPC has active or available tasks.
    Otherwise the tree's entry is used.

    Returns:
        Start node, or None if the NPC has nothing to say
    """
    root = generate_root_dialogue(npc, module_data, context, config)
    if root is not None:
        return root

    tree = npc.dialogue_tree
    if tree is None:
        return None
    return select_entry_node(tree, context, module_data)


def get_next_dialogue_node(
    current: DialogueNode,
    choice_key: Optional[str],
    tree: Optional[DialogueTree],
    context: ModuleContext,
    module_data: Optional[ModuleDefinition] = None,
) -> Optional[DialogueNode]:
    """
    Follow a choice from the current node.

    Args:
        current: Node the player is on
        choice_key: Picked choice, or None to auto-advance
        tree: Tree the node belongs to
        context: State access
        module_data: Module the dialogue belongs to (optional)

    Returns:
        Next node, or None when the conversation closes, the choice is
        unknown or its condition is false
    """
    if current.generated:
        for edge in generate_root_dialogue_edges(current, tree, context, module_data):
            if edge.choice_key == choice_key:
                return edge.next
        return None

    definition = get_node_definition(current, tree)

    if choice_key is None:
        return resolve_target(definition.next, tree, context)

    edge = tree.find_edge(current.id, choice_key) if tree is not None else None
    if edge is not None:
        if edge.condition is not None and not evaluate_condition(edge.condition, context, module_data):
            logger.debug(f"Choice '{choice_key}' on {current.id} is not available")
            return None
        return edge.next

    # Dynamic targets and dynamic choice sets have no edge
    choice = resolve_choices(definition.choices, context).get(choice_key)
    if choice is None:
        return None
    if choice.condition is not None and not evaluate_condition(choice.condition, context, module_data):
        return None
    return resolve_target(choice.next, tree, context)


def get_available_choices(
    node: DialogueNode,
    tree: Optional[DialogueTree],
    context: ModuleContext,
    module_data: Optional[ModuleDefinition] = None,
) -> list[AvailableChoice]:
    """
    List the choices of a node that can be picked now, in authored order.

    Choices whose condition is false are left out. Choices that close the
    conversation are included.
    """
    definition = get_node_definition(node, tree)
    if definition.choices is not None:
        choices = resolve_choices(definition.choices, context)
    else:
        choices = dict(node.choices or {})

    available: list[AvailableChoice] = []
    for key, choice in choices.items():
        if choice.condition is not None and not evaluate_condition(choice.condition, context, module_data):
            continue
        available.append(AvailableChoice(
            key=key,
            text=resolve_text(choice.text, context),
            actions=resolve_actions(choice.actions, context),
        ))
    return available
