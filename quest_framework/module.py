"""
Module definitions and the module registry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from quest_engine.core.errors import UnknownModuleError
from quest_framework.progression.requirements import UnlockRequirement, extract_module_dependencies

if TYPE_CHECKING:
    from quest_framework.progression.tasks import Task
    from quest_framework.world.npc import NPC

logger = logging.getLogger(__name__)


@dataclass
class ModuleDefinition:
    """An authored module: its tasks, NPCs and unlock requirement."""
    id: str
    name: str = ""
    tasks: list[Task] = field(default_factory=list)
    npcs: list[NPC] = field(default_factory=list)
    unlock_requirement: Optional[UnlockRequirement] = None

    def get_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def get_npc(self, npc_id: str) -> Optional[NPC]:
        for npc in self.npcs:
            if npc.id == npc_id:
                return npc
        return None


class ModuleRegistry:
    """
    Lookup of module definitions by id.

    Registration order is kept; it is the order modules are evaluated in
    when progression is initialized.
    """

    def __init__(self, modules: Optional[list[ModuleDefinition]] = None):
        self._modules: dict[str, ModuleDefinition] = {}
        for module in modules or []:
            self.register(module)

    def register(self, module: ModuleDefinition) -> None:
        if module.id in self._modules:
            logger.warning(f"Replacing registered module: {module.id}")
        self._modules[module.id] = module

    def get(self, module_id: str) -> Optional[ModuleDefinition]:
        return self._modules.get(module_id)

    def require(self, module_id: str) -> ModuleDefinition:
        """Get a module, raising UnknownModuleError if missing."""
        module = self._modules.get(module_id)
        if module is None:
            raise UnknownModuleError(module_id)
        return module

    def ids(self) -> list[str]:
        return list(self._modules)

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def find_task_module(self, task_id: str) -> Optional[str]:
        """Get the id of the first module that owns a task."""
        for module in self._modules.values():
            if module.get_task(task_id) is not None:
                return module.id
        return None

    def dependents_of(self, module_id: str) -> list[str]:
        """Get modules whose unlock requirement depends on a module."""
        return [
            module.id for module in self._modules.values()
            if module.unlock_requirement is not None
            and module_id in extract_module_dependencies(module.unlock_requirement)
        ]
