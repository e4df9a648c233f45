import pytest
from quest_framework.dialogue.conditions import (
    CustomCondition,
    StateCheck,
    and_conditions,
    as_condition,
    custom_condition,
    evaluate_condition,
    interactable_state_check,
    module_state_check,
    or_conditions,
    state_check,
    task_active,
    task_complete,
)

TRUE = custom_condition(lambda ctx: True)
FALSE = custom_condition(lambda ctx: False)

def test_task_complete(context, store, intro_task):
    condition = task_complete(intro_task)
    assert not evaluate_condition(condition, context)

    store.complete_task("village", "intro")
    assert evaluate_condition(condition, context)

def test_task_complete_other_module(context, store, intro_task):
    store.complete_task("forest", "intro")
    assert not evaluate_condition(task_complete(intro_task), context)

def test_task_active(context, intro_task):
    condition = task_active(intro_task)
    assert not evaluate_condition(condition, context)

    context.accept_task(intro_task)
    assert evaluate_condition(condition, context)
    assert evaluate_condition(task_active("intro"), context)

def test_state_check_and_module_state(context):
    context.set_module_state_field("door", "open")

    assert evaluate_condition(state_check("door", "open"), context)
    assert not evaluate_condition(state_check("door", "closed"), context)
    assert evaluate_condition(module_state_check("door", "open"), context)
    assert not evaluate_condition(module_state_check("lamp", "on"), context)

def test_interactable_state(context):
    condition = interactable_state_check("chest", "opened", True)
    assert not evaluate_condition(condition, context)

    context.set_interactable_state("chest", "opened", True)
    assert evaluate_condition(condition, context)

def test_and_truth_table(context):
    assert evaluate_condition(and_conditions(TRUE, TRUE), context)
    assert not evaluate_condition(and_conditions(TRUE, FALSE), context)
    assert not evaluate_condition(and_conditions(FALSE, TRUE), context)

def test_or_truth_table(context):
    assert evaluate_condition(or_conditions(FALSE, TRUE), context)
    assert evaluate_condition(or_conditions(TRUE, FALSE), context)
    assert not evaluate_condition(or_conditions(FALSE, FALSE), context)

def test_nested_combinations(context):
    assert evaluate_condition(and_conditions(or_conditions(FALSE, TRUE), TRUE), context)
    assert not evaluate_condition(and_conditions(or_conditions(FALSE, FALSE), TRUE), context)
    assert evaluate_condition(or_conditions(and_conditions(TRUE, FALSE), and_conditions(TRUE, TRUE)), context)

def test_custom_receives_context(context):
    seen = []
    condition = custom_condition(lambda ctx: seen.append(ctx) or True)

    assert evaluate_condition(condition, context)
    assert seen == [context]

def test_custom_result_is_bool(context):
    assert evaluate_condition(custom_condition(lambda ctx: "yes"), context) is True
    assert evaluate_condition(custom_condition(lambda ctx: 0), context) is False

def test_bare_callable_is_custom(context):
    assert evaluate_condition(lambda ctx: True, context)
    assert isinstance(as_condition(lambda ctx: True), CustomCondition)

    combined = and_conditions(lambda ctx: True, state_check("door", None))
    assert evaluate_condition(combined, context)

def test_condition_passes_through_as_condition():
    condition = state_check("door", "open")
    assert as_condition(condition) is condition
    assert condition == StateCheck("door", "open")

def test_unknown_condition_raises(context):
    with pytest.raises(TypeError):
        evaluate_condition("door is open", context)

    with pytest.raises(TypeError):
        and_conditions(42)

def test_evaluation_does_not_mutate(context, store):
    evaluate_condition(and_conditions(state_check("a", 1), interactable_state_check("x", "k", 2)), context)
    assert store.get_progress("village") is None
