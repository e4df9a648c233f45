"""
Dialogue module - branching NPC conversations.

Provides:
- Condition and action vocabulary
- Dialogue nodes and the tree builder
- Task menu synthesis for NPCs with tasks
- Navigation and choice filtering
- Conversation sessions
"""

from quest_framework.dialogue.conditions import (
    Condition,
    TaskComplete,
    TaskActive,
    StateCheck,
    InteractableState,
    ModuleState,
    AndCondition,
    OrCondition,
    CustomCondition,
    task_complete,
    task_active,
    state_check,
    interactable_state_check,
    module_state_check,
    and_conditions,
    or_conditions,
    custom_condition,
    evaluate_condition,
)
from quest_framework.dialogue.actions import (
    Action,
    AcceptTask,
    SetState,
    SetInteractableState,
    SetModuleState,
    CallFunction,
    GoTo,
    CloseDialogue,
    accept_task,
    set_state,
    set_interactable_state,
    set_module_state,
    call_function,
    go_to_node,
    close_dialogue,
    execute_actions,
)
from quest_framework.dialogue.nodes import (
    NO_TRANSITION,
    Choice,
    NodeDefinition,
    DialogueNode,
    dialogue_node,
)
from quest_framework.dialogue.tree import (
    DialogueEdge,
    EntryCondition,
    DialogueEntryConfig,
    DialogueTree,
    DialogueTreeBuilder,
    DialogueEntryBuilder,
    create_dialogue_tree,
)
from quest_framework.dialogue.root import (
    generate_root_dialogue,
    generate_root_dialogue_edges,
    format_task_choice,
    has_dialogue_content,
)
from quest_framework.dialogue.execution import (
    AvailableChoice,
    get_initial_dialogue_node,
    get_next_dialogue_node,
    get_available_choices,
    resolve_node_at_runtime,
)
from quest_framework.dialogue.session import DialogueSession

__all__ = [
    # Conditions
    "Condition",
    "TaskComplete",
    "TaskActive",
    "StateCheck",
    "InteractableState",
    "ModuleState",
    "AndCondition",
    "OrCondition",
    "CustomCondition",
    "task_complete",
    "task_active",
    "state_check",
    "interactable_state_check",
    "module_state_check",
    "and_conditions",
    "or_conditions",
    "custom_condition",
    "evaluate_condition",
    # Actions
    "Action",
    "AcceptTask",
    "SetState",
    "SetInteractableState",
    "SetModuleState",
    "CallFunction",
    "GoTo",
    "CloseDialogue",
    "accept_task",
    "set_state",
    "set_interactable_state",
    "set_module_state",
    "call_function",
    "go_to_node",
    "close_dialogue",
    "execute_actions",
    # Nodes
    "NO_TRANSITION",
    "Choice",
    "NodeDefinition",
    "DialogueNode",
    "dialogue_node",
    # Trees
    "DialogueEdge",
    "EntryCondition",
    "DialogueEntryConfig",
    "DialogueTree",
    "DialogueTreeBuilder",
    "DialogueEntryBuilder",
    "create_dialogue_tree",
    # Root dialogue
    "generate_root_dialogue",
    "generate_root_dialogue_edges",
    "format_task_choice",
    "has_dialogue_content",
    # Execution
    "AvailableChoice",
    "get_initial_dialogue_node",
    "get_next_dialogue_node",
    "get_available_choices",
    "resolve_node_at_runtime",
    # Sessions
    "DialogueSession",
]
