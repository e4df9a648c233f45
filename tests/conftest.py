import os
import sys
import pytest

# Ensure packages can be imported without installing
sys.path.append(os.getcwd())

@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from quest_engine.core.events import EventBus
    return EventBus()

@pytest.fixture
def store():
    """Empty progress store."""
    from quest_framework.state.store import ProgressStore
    return ProgressStore()

@pytest.fixture
def context(store, event_bus):
    """Module context for the "village" module."""
    from quest_framework.state.context import StoreModuleContext
    return StoreModuleContext("village", store, event_bus)

@pytest.fixture
def intro_task():
    """Task with no unlock requirement."""
    from quest_framework.progression.tasks import Task
    return Task(id="intro", name="Introduction", description="Say hello")

@pytest.fixture
def followup_task(intro_task):
    """Task unlocked by completing intro_task."""
    from quest_framework.progression.tasks import Task
    from quest_framework.progression.requirements import require_task
    return Task(id="followup", name="Follow-up", unlock_requirement=require_task(intro_task))

@pytest.fixture
def recorder(event_bus):
    """Collects (event type, data) for every dialogue and progression event."""
    from quest_engine.core.events import DialogueEvent, ProgressionEvent

    received = []

    def handler(event):
        received.append((event.type, dict(event.data)))

    for event_type in [*DialogueEvent, *ProgressionEvent]:
        event_bus.subscribe(event_type, handler, weak=False)
    return received
