"""
Unlock service - module progression.

Decides when modules unlock, records completion and propagates unlocks to
dependent modules. State lives in the ProgressStore; module definitions
come from the ModuleRegistry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Optional

from quest_engine.core.events import EventBus, ProgressionEvent
from quest_framework.progression.requirements import (
    AndRequirement,
    OrRequirement,
    PasswordRequirement,
    UnlockContext,
    UnlockRequirement,
    check_unlock_requirement,
    requires_user_interaction,
)
from quest_framework.state.store import ModuleProgression, ProgressStore

if TYPE_CHECKING:
    from quest_framework.module import ModuleRegistry

logger = logging.getLogger(__name__)


class UnlockOutcome(Enum):
    """Result of an unlock attempt."""
    UNLOCKED = auto()              # State changed to unlocked
    ALREADY_UNLOCKED = auto()      # Unlocked or completed before; nothing done
    INTERACTION_REQUIRED = auto()  # Password missing or wrong
    REQUIREMENT_NOT_MET = auto()
    UNKNOWN_MODULE = auto()


@dataclass(frozen=True)
class UnlockCheck:
    """Whether a module could be unlocked right now."""
    can_unlock: bool
    requires_interaction: bool


def _passwords(requirement: UnlockRequirement) -> list[str]:
    if isinstance(requirement, PasswordRequirement):
        return [requirement.password]
    if isinstance(requirement, (AndRequirement, OrRequirement)):
        return [secret for child in requirement.requirements for secret in _passwords(child)]
    return []


class UnlockService:
    """
    Module unlocking and completion.

    Usage:
        service = UnlockService(registry, store, events)
        await service.initialize_module_progression()
        outcome = await service.unlock_module("secret", password="opensesame")
    """

    def __init__(
        self,
        registry: ModuleRegistry,
        store: ProgressStore,
        events: Optional[EventBus] = None,
    ):
        self.registry = registry
        self.store = store
        self.events = events

    def _context(self, module_id: str) -> UnlockContext:
        return UnlockContext(store=self.store, module_id=module_id, registry=self.registry)

    def is_module_fully_completed(self, module_id: str) -> bool:
        """
        Check if every task of a module is completed.

        A module without tasks is never fully completed.
        """
        module = self.registry.get(module_id)
        if module is None or not module.tasks:
            return False

        completed = self.store.get_completed_tasks(module_id)
        return all(task.id in completed for task in module.tasks)

    async def _satisfied(
        self,
        requirement: UnlockRequirement,
        context: UnlockContext,
        password: Optional[str],
    ) -> bool:
        # Password leaves compare the supplied secret; everything else is
        # delegated to the passive check.
        if isinstance(requirement, PasswordRequirement):
            return password is not None and password == requirement.password
        if isinstance(requirement, AndRequirement):
            for child in requirement.requirements:
                if not await self._satisfied(child, context, password):
                    return False
            return True
        if isinstance(requirement, OrRequirement):
            for child in requirement.requirements:
                if await self._satisfied(child, context, password):
                    return True
            return False
        return await check_unlock_requirement(requirement, context)

    async def can_unlock_module(
        self,
        module_id: str,
        password: Optional[str] = None,
    ) -> UnlockCheck:
        """Check whether a locked module can be unlocked."""
        module = self.registry.get(module_id)
        if module is None:
            return UnlockCheck(can_unlock=False, requires_interaction=False)

        progression = self.store.get_module_progression(module_id)
        if progression is not ModuleProgression.LOCKED:
            return UnlockCheck(can_unlock=False, requires_interaction=False)

        requirement = module.unlock_requirement
        if requirement is None:
            return UnlockCheck(can_unlock=True, requires_interaction=False)

        context = self._context(module_id)
        if not requires_user_interaction(requirement):
            met = await check_unlock_requirement(requirement, context)
            return UnlockCheck(can_unlock=met, requires_interaction=False)

        if password is None:
            return UnlockCheck(can_unlock=False, requires_interaction=True)

        if await self._satisfied(requirement, context, password):
            return UnlockCheck(can_unlock=True, requires_interaction=False)

        # A correct secret means something other than the password is unmet
        secret_matched = password in _passwords(requirement)
        return UnlockCheck(can_unlock=False, requires_interaction=not secret_matched)

    async def unlock_module(
        self,
        module_id: str,
        password: Optional[str] = None,
    ) -> UnlockOutcome:
        """Attempt to unlock a module."""
        if module_id not in self.registry:
            logger.warning(f"Unlock requested for unknown module: {module_id}")
            return UnlockOutcome.UNKNOWN_MODULE

        if self.store.get_module_progression(module_id) is not ModuleProgression.LOCKED:
            return UnlockOutcome.ALREADY_UNLOCKED

        check = await self.can_unlock_module(module_id, password)
        if not check.can_unlock:
            if check.requires_interaction:
                return UnlockOutcome.INTERACTION_REQUIRED
            return UnlockOutcome.REQUIREMENT_NOT_MET

        self._record_unlock(module_id)
        return UnlockOutcome.UNLOCKED

    def _record_unlock(self, module_id: str) -> None:
        if self.store.unlock_module(module_id) and self.events:
            self.events.publish(ProgressionEvent.MODULE_UNLOCKED, module_id=module_id)

    async def evaluate_module_completion(self, module_id: str) -> list[str]:
        """
        Mark a module completed if all its tasks are done, then unlock
        dependent modules whose requirements are now met.

        Returns:
            Ids of the modules unlocked as a result
        """
        if not self.is_module_fully_completed(module_id):
            return []

        if self.store.complete_module(module_id) and self.events:
            self.events.publish(ProgressionEvent.MODULE_COMPLETED, module_id=module_id)

        unlocked: list[str] = []
        for dependent_id in self.registry.dependents_of(module_id):
            if self.store.get_module_progression(dependent_id) is not ModuleProgression.LOCKED:
                continue
            check = await self.can_unlock_module(dependent_id)
            if check.can_unlock:
                self._record_unlock(dependent_id)
                unlocked.append(dependent_id)

        if unlocked:
            logger.info(f"Completing {module_id} unlocked: {', '.join(unlocked)}")
        return unlocked

    async def initialize_module_progression(
        self,
        module_ids: Optional[list[str]] = None,
    ) -> list[str]:
        """
        Unlock every locked module whose requirement is already met and
        needs no user input. Modules already unlocked or completed keep
        their state.

        Returns:
            Ids of the modules unlocked
        """
        if module_ids is None:
            module_ids = self.registry.ids()

        unlocked: list[str] = []
        for module_id in module_ids:
            check = await self.can_unlock_module(module_id)
            if check.can_unlock and not check.requires_interaction:
                self._record_unlock(module_id)
                unlocked.append(module_id)
        return unlocked
