"""
Dialogue session - one running conversation with an NPC.

Wraps the execution functions the way a dialogue box uses them: start on
the initial node, show lines and choices, run a choice's actions and then
move on. Lifecycle changes are published as DialogueEvents.

Usage:
    session = DialogueSession(npc, module, context, events)
    session.start()
    for choice in session.choices():
        print(choice.key, choice.text)
    await session.choose("ask")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from quest_engine.core.config import EngineConfig
from quest_engine.core.events import DialogueEvent, EventBus
from quest_framework.dialogue.actions import CloseDialogue, GoTo, execute_actions
from quest_framework.dialogue.execution import (
    AvailableChoice,
    get_available_choices,
    get_initial_dialogue_node,
    get_next_dialogue_node,
    get_node_definition,
    resolve_choices,
    resolve_node_at_runtime,
)
from quest_framework.dialogue.nodes import NO_TRANSITION, DialogueNode
from quest_framework.dialogue.root import TASK_CHOICE_PREFIX
from quest_framework.state.context import open_task_submission

if TYPE_CHECKING:
    from quest_framework.module import ModuleDefinition
    from quest_framework.state.context import ModuleContext
    from quest_framework.world.npc import NPC

logger = logging.getLogger(__name__)

# Marks "no navigation action in the list"
_NOT_SET = object()


class DialogueSession:
    """
    A conversation with one NPC.

    Args:
        npc: NPC being talked to
        module_data: Module the NPC belongs to
        context: State access for conditions and actions
        events: Bus for DialogueEvents (optional)
        config: Text settings for the task menu (optional)
    """

    def __init__(
        self,
        npc: NPC,
        module_data: Optional[ModuleDefinition],
        context: ModuleContext,
        events: Optional[EventBus] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.npc = npc
        self.module_data = module_data
        self.context = context
        self.events = events
        self.config = config

        self._current: Optional[DialogueNode] = None

    @property
    def tree(self):
        return self.npc.dialogue_tree

    @property
    def current(self) -> Optional[DialogueNode]:
        return self._current

    @property
    def active(self) -> bool:
        return self._current is not None

    def _publish(self, event_type: DialogueEvent, **data) -> None:
        if self.events:
            self.events.publish(event_type, npc_id=self.npc.id, **data)

    def _enter(self, node: DialogueNode) -> None:
        self._current = node
        logger.debug(f"Dialogue with {self.npc.id} entered node {node.id}")
        self._publish(DialogueEvent.NODE_ENTERED, node_id=node.id)

    def start(self) -> Optional[DialogueNode]:
        """
        Open the conversation.

        Returns:
            Initial node, or None if the NPC has nothing to say
        """
        node = get_initial_dialogue_node(self.npc, self.module_data, self.context, self.config)
        if node is None:
            logger.debug(f"NPC {self.npc.id} has no dialogue")
            return None

        self._publish(DialogueEvent.STARTED, node_id=node.id)
        self._enter(node)
        return node

    @property
    def lines(self) -> tuple[str, ...]:
        """Resolved lines of the current node."""
        if self._current is None:
            return ()
        return resolve_node_at_runtime(self._current, self.tree, self.context).lines

    def choices(self) -> list[AvailableChoice]:
        """Choices the player can pick on the current node."""
        if self._current is None:
            return []
        return get_available_choices(self._current, self.tree, self.context, self.module_data)

    def _stays_open(self, choice_key: str) -> bool:
        # Choices without a `next` leave the player on the same node
        definition = get_node_definition(self._current, self.tree)
        choice = resolve_choices(definition.choices, self.context).get(choice_key)
        return choice is not None and choice.next is NO_TRANSITION

    async def choose(self, choice_key: str) -> Optional[DialogueNode]:
        """
        Take a choice: run its actions, then navigate.

        A GoTo or CloseDialogue action decides the destination; otherwise
        the choice's own target does. A task menu choice without a node
        for its task hands the task to the context's submission view.

        Returns:
            Node the conversation is on afterwards, or None once closed
        """
        current = self._current
        if current is None:
            return None

        available = {choice.key: choice for choice in self.choices()}
        choice = available.get(choice_key)
        if choice is None:
            logger.warning(f"Choice '{choice_key}' is not available on node {current.id}")
            return current

        self._publish(DialogueEvent.CHOICE_SELECTED, node_id=current.id, choice_key=choice_key)
        await execute_actions(choice.actions, self.context)

        redirect = _NOT_SET
        for action in choice.actions:
            if isinstance(action, GoTo):
                redirect = action.node
            elif isinstance(action, CloseDialogue):
                redirect = None

        if redirect is not _NOT_SET:
            next_node = redirect
        else:
            next_node = get_next_dialogue_node(
                current, choice_key, self.tree, self.context, self.module_data,
            )

        if next_node is None and redirect is _NOT_SET:
            if current.generated and choice_key.startswith(TASK_CHOICE_PREFIX):
                task_id = choice_key[len(TASK_CHOICE_PREFIX):]
                task = next((t for t in self.npc.tasks if t.id == task_id), task_id)
                open_task_submission(self.context, task)
            elif not current.generated and self._stays_open(choice_key):
                return current

        if next_node is None:
            self.end()
            return None

        self._enter(next_node)
        return next_node

    def advance(self) -> Optional[DialogueNode]:
        """
        Follow the current node's auto-advance target.

        Returns:
            Next node; the current node if it has no target; None once closed
        """
        current = self._current
        if current is None:
            return None

        definition = get_node_definition(current, self.tree)
        if definition.next is NO_TRANSITION:
            return current

        next_node = get_next_dialogue_node(current, None, self.tree, self.context, self.module_data)
        if next_node is None:
            self.end()
            return None

        self._enter(next_node)
        return next_node

    def end(self) -> None:
        """Close the conversation."""
        if self._current is None:
            return
        node_id = self._current.id
        self._current = None
        self._publish(DialogueEvent.ENDED, node_id=node_id)
