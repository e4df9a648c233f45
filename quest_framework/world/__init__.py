"""
World objects the player interacts with.
"""

from quest_framework.world.npc import NPC, Position, create_npc

__all__ = [
    "NPC",
    "Position",
    "create_npc",
]
