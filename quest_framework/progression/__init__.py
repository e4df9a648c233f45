"""
Progression module - tasks, unlock requirements and module unlocking.
"""

from quest_framework.progression.requirements import (
    UnlockRequirement,
    TaskCompleteRequirement,
    ModuleCompleteRequirement,
    StateCheckRequirement,
    PasswordRequirement,
    AndRequirement,
    OrRequirement,
    CustomRequirement,
    UnlockContext,
    RequirementDisplayInfo,
    require_task,
    require_module,
    require_state,
    require_password,
    require_all,
    require_any,
    require_custom,
    check_unlock_requirement,
    is_requirement_satisfied,
    requires_user_interaction,
    extract_module_dependencies,
    extract_requirement_types,
    extract_requirement_details,
)
from quest_framework.progression.tasks import (
    Task,
    TaskStatus,
    is_task_active,
    is_task_available,
    get_task_status,
    get_active_tasks,
    get_available_tasks,
)
from quest_framework.progression.unlock import UnlockService, UnlockCheck, UnlockOutcome

__all__ = [
    # Requirements
    "UnlockRequirement",
    "TaskCompleteRequirement",
    "ModuleCompleteRequirement",
    "StateCheckRequirement",
    "PasswordRequirement",
    "AndRequirement",
    "OrRequirement",
    "CustomRequirement",
    "UnlockContext",
    "RequirementDisplayInfo",
    "require_task",
    "require_module",
    "require_state",
    "require_password",
    "require_all",
    "require_any",
    "require_custom",
    "check_unlock_requirement",
    "is_requirement_satisfied",
    "requires_user_interaction",
    "extract_module_dependencies",
    "extract_requirement_types",
    "extract_requirement_details",
    # Tasks
    "Task",
    "TaskStatus",
    "is_task_active",
    "is_task_available",
    "get_task_status",
    "get_active_tasks",
    "get_available_tasks",
    # Unlocking
    "UnlockService",
    "UnlockCheck",
    "UnlockOutcome",
]
