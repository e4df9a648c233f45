"""
Root dialogue - the task menu synthesized for NPCs that offer tasks.

The root node is built fresh from the NPC and the current task state on
every call. It is never stored in the NPC's tree; its transitions are
computed by generate_root_dialogue_edges when a choice is taken.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from quest_engine.core.config import DEFAULT_CONFIG, EngineConfig
from quest_framework.dialogue.nodes import Choice, DialogueNode, dialogue_node
from quest_framework.dialogue.tree import DialogueEdge, DialogueTree, select_entry_node
from quest_framework.progression.tasks import Task, TaskStatus, get_task_status

if TYPE_CHECKING:
    from quest_framework.module import ModuleDefinition
    from quest_framework.state.context import ModuleContext
    from quest_framework.world.npc import NPC

logger = logging.getLogger(__name__)

TALK_CHOICE = "talk"
GOODBYE_CHOICE = "goodbye"
TASK_CHOICE_PREFIX = "task_"


def task_choice_key(task: Task) -> str:
    return f"{TASK_CHOICE_PREFIX}{task.id}"


def has_dialogue_content(npc: NPC) -> bool:
    """
    Check if the NPC's tree has something to say.

    A tree whose nodes only hold blank lines does not count. Lines given
    as a function count as content.
    """
    tree = npc.dialogue_tree
    if tree is None or not tree.nodes:
        return False

    for node in tree.nodes.values():
        if node.definition.has_dynamic_lines:
            return True
        if any(line.strip() for line in node.lines):
            return True
    return False


def format_task_choice(
    task: Task,
    status_label: str,
    config: Optional[EngineConfig] = None,
) -> str:
    """
    Format the root menu text for a task.

    Text longer than the configured maximum is cut and ends with "...".
    """
    config = config or DEFAULT_CONFIG
    max_length = config.task_choice_max_length

    text = f"{task.name} - {status_label}"
    if len(text) > max_length:
        text = text[:max_length - 3] + "..."
    return text


def generate_root_dialogue(
    npc: NPC,
    module_data: Optional[ModuleDefinition],
    context: ModuleContext,
    config: Optional[EngineConfig] = None,
) -> Optional[DialogueNode]:
    """
    Build the task menu node for an NPC.

    Args:
        npc: NPC being talked to
        module_data: Module the NPC belongs to
        context: State access
        config: Text settings (defaults to DEFAULT_CONFIG)

    Returns:
        Node "<npc id>_root", or None if the NPC has no active or
        available task
    """
    if not npc.tasks:
        return None

    config = config or DEFAULT_CONFIG

    task_choices: dict[str, Choice] = {}
    for task in npc.tasks:
        status = get_task_status(task, context, module_data)
        if status is TaskStatus.ACTIVE:
            label = config.in_progress_label
        elif status is TaskStatus.AVAILABLE:
            label = config.available_label
        else:
            continue
        task_choices[task_choice_key(task)] = Choice(format_task_choice(task, label, config))

    if not task_choices:
        return None

    choices: dict[str, Choice] = {}
    if has_dialogue_content(npc):
        choices[TALK_CHOICE] = Choice(config.talk_choice_template.format(name=npc.name))
    choices.update(task_choices)
    choices[GOODBYE_CHOICE] = Choice(config.goodbye_text, next=None)

    return dialogue_node(
        id=f"{npc.id}_root",
        lines=[config.root_greeting],
        choices=choices,
        generated=True,
    )


def generate_root_dialogue_edges(
    root: DialogueNode,
    tree: Optional[DialogueTree],
    context: ModuleContext,
    module_data: Optional[ModuleDefinition] = None,
) -> list[DialogueEdge]:
    """
    Compute the transitions of a root node into the NPC's tree.

    "talk" leads to the tree's entry, ignoring task-active entry
    conditions so the player gets ordinary dialogue. "task_<id>" leads to
    the first node bound to that task; a task without such a node gets no
    edge. "goodbye" closes the conversation.
    """
    edges: list[DialogueEdge] = []

    for key in root.choices or {}:
        if key == TALK_CHOICE:
            if tree is not None:
                target = select_entry_node(tree, context, module_data, skip_task_active=True)
                edges.append(DialogueEdge(root, key, target))

        elif key.startswith(TASK_CHOICE_PREFIX):
            if tree is None:
                continue
            target = tree.find_task_node(key[len(TASK_CHOICE_PREFIX):])
            if target is not None:
                edges.append(DialogueEdge(root, key, target))

        elif key == GOODBYE_CHOICE:
            edges.append(DialogueEdge(root, key, None))

    return edges
