"""
NPC - characters the player talks to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from quest_engine.core.model import Model

if TYPE_CHECKING:
    from quest_framework.dialogue.tree import DialogueTree
    from quest_framework.progression.tasks import Task


class Position(Model):
    """Tile position on the module map."""
    x: int = 0
    y: int = 0


@dataclass
class NPC:
    """
    A non-player character.

    Tasks and dialogue tree are independent: an NPC with tasks but no tree
    still gets a task menu.
    """
    id: str
    name: str
    position: Position = field(default_factory=Position)
    dialogue_tree: Optional[DialogueTree] = None
    tasks: list[Task] = field(default_factory=list)

    @property
    def has_tasks(self) -> bool:
        return bool(self.tasks)


def create_npc(
    id: str,
    name: str,
    x: int = 0,
    y: int = 0,
    dialogue_tree: Optional[DialogueTree] = None,
    tasks: Optional[list[Task]] = None,
) -> NPC:
    """
    Factory function to create an NPC.

    Args:
        id: Unique NPC id (also the prefix of its task menu node id)
        name: Display name
        x: X position
        y: Y position
        dialogue_tree: Ordinary dialogue (optional)
        tasks: Tasks this NPC offers (optional)

    Returns:
        The created NPC
    """
    return NPC(
        id=id,
        name=name,
        position=Position(x=x, y=y),
        dialogue_tree=dialogue_tree,
        tasks=list(tasks or []),
    )
