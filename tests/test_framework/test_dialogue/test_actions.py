import asyncio
import pytest
from unittest.mock import MagicMock
from quest_engine.core.events import ProgressionEvent
from quest_framework.dialogue.actions import (
    GoTo,
    accept_task,
    call_function,
    close_dialogue,
    execute_actions,
    go_to_node,
    set_interactable_state,
    set_module_state,
    set_state,
)
from quest_framework.dialogue.nodes import dialogue_node

def test_state_actions(context, store):
    asyncio.run(execute_actions([
        set_state("door", "open"),
        set_module_state("lamp", "on"),
        set_interactable_state("chest", "opened", True),
    ], context))

    assert store.get_module_state_field("village", "door") == "open"
    assert store.get_module_state_field("village", "lamp") == "on"
    assert store.get_interactable_state_field("village", "chest", "opened") is True

def test_accept_task(context, store, intro_task, recorder):
    asyncio.run(execute_actions([accept_task(intro_task)], context))

    assert store.get_current_task_id("village") == "intro"
    assert (ProgressionEvent.TASK_ACCEPTED, {"module_id": "village", "task_id": "intro"}) in recorder

def test_actions_run_in_order(context):
    calls = []

    async def slow(ctx):
        await asyncio.sleep(0)
        calls.append("slow")

    def fast(ctx):
        calls.append("fast")

    asyncio.run(execute_actions([call_function(slow), call_function(fast), call_function(slow)], context))

    assert calls == ["slow", "fast", "slow"]

def test_handler_receives_context(context):
    seen = []
    asyncio.run(execute_actions([call_function(seen.append)], context))
    assert seen == [context]

def test_handler_error_propagates_without_rollback(context):
    def boom(ctx):
        raise RuntimeError("boom")

    actions = [set_state("a", 1), call_function(boom), set_state("b", 2)]
    with pytest.raises(RuntimeError, match="boom"):
        asyncio.run(execute_actions(actions, context))

    assert context.get_module_state_field("a") == 1
    assert context.get_module_state_field("b") is None

def test_async_handler_error_propagates(context):
    async def boom(ctx):
        raise ValueError("async boom")

    with pytest.raises(ValueError, match="async boom"):
        asyncio.run(execute_actions([call_function(boom)], context))

def test_navigation_actions_touch_nothing():
    ctx = MagicMock()
    target = dialogue_node(id="target", lines=["Hi"])

    asyncio.run(execute_actions([go_to_node(target), go_to_node(None), close_dialogue()], ctx))

    assert ctx.method_calls == []
    assert go_to_node(target) == GoTo(target)

def test_unknown_action_raises(context):
    with pytest.raises(TypeError):
        asyncio.run(execute_actions(["jump"], context))

def test_empty_action_list(context, store):
    asyncio.run(execute_actions([], context))
    assert store.get_progress("village") is None
