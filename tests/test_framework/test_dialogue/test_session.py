import asyncio
import logging
import pytest
from quest_engine.core.events import DialogueEvent, ProgressionEvent
from quest_framework.dialogue.actions import accept_task, close_dialogue, go_to_node, set_state
from quest_framework.dialogue.nodes import Choice, dialogue_node
from quest_framework.dialogue.session import DialogueSession
from quest_framework.dialogue.tree import create_dialogue_tree
from quest_framework.state.context import StoreModuleContext
from quest_framework.world.npc import create_npc

@pytest.fixture
def farewell():
    return dialogue_node(id="farewell", lines=["Safe travels."], choices={"bye": Choice("Bye", next=None)})

@pytest.fixture
def elder(intro_task, farewell):
    tree = (
        create_dialogue_tree()
        .node(dialogue_node(id="greeting", lines=["Welcome, traveller."], choices={
            "ask": Choice("Any work?", next="offer"),
            "leave": Choice("Leave", next="greeting", actions=[go_to_node(farewell)]),
            "vanish": Choice("Vanish", next="offer", actions=[set_state("vanished", True), close_dialogue()]),
        }))
        .node(dialogue_node(id="offer", lines=["Will you help?"], choices={
            "accept": Choice("Sure", next=None, actions=[accept_task(intro_task)]),
            "think": Choice("Let me think"),
        }))
        .node(dialogue_node(id="story", lines=["Long ago..."], next="offer"))
        .node(farewell)
        .build()
    )
    return create_npc("elder", "Elder", dialogue_tree=tree)

def event_types(recorder):
    return [event_type for event_type, _ in recorder]

def test_start_publishes_events(elder, context, event_bus, recorder):
    session = DialogueSession(elder, None, context, event_bus)

    node = session.start()

    assert node.id == "greeting"
    assert session.active
    assert session.lines == ("Welcome, traveller.",)
    assert recorder == [
        (DialogueEvent.STARTED, {"npc_id": "elder", "node_id": "greeting"}),
        (DialogueEvent.NODE_ENTERED, {"npc_id": "elder", "node_id": "greeting"}),
    ]

def test_choose_and_close(elder, context, store, event_bus, recorder):
    session = DialogueSession(elder, None, context, event_bus)
    session.start()

    assert asyncio.run(session.choose("ask")).id == "offer"
    assert [c.key for c in session.choices()] == ["accept", "think"]

    assert asyncio.run(session.choose("accept")) is None
    assert not session.active
    assert store.get_current_task_id("village") == "intro"
    assert event_types(recorder)[-3:] == [
        DialogueEvent.CHOICE_SELECTED,
        ProgressionEvent.TASK_ACCEPTED,
        DialogueEvent.ENDED,
    ]

def test_choice_without_target_stays(elder, context):
    session = DialogueSession(elder, None, context)
    session.start()
    asyncio.run(session.choose("ask"))

    node = asyncio.run(session.choose("think"))

    assert node.id == "offer"
    assert session.active

def test_go_to_action_overrides_target(elder, context):
    session = DialogueSession(elder, None, context)
    session.start()

    assert asyncio.run(session.choose("leave")).id == "farewell"

def test_close_action_ends_dialogue(elder, context, event_bus, recorder):
    session = DialogueSession(elder, None, context, event_bus)
    session.start()

    assert asyncio.run(session.choose("vanish")) is None
    assert context.get_module_state_field("vanished") is True
    assert event_types(recorder)[-1] is DialogueEvent.ENDED

def test_unavailable_choice_is_ignored(elder, context, event_bus, recorder, caplog):
    session = DialogueSession(elder, None, context, event_bus)
    session.start()

    with caplog.at_level(logging.WARNING, logger="quest_framework.dialogue.session"):
        node = asyncio.run(session.choose("dance"))

    assert node.id == "greeting"
    assert DialogueEvent.CHOICE_SELECTED not in event_types(recorder)
    assert "dance" in caplog.text

def test_advance(elder, context):
    session = DialogueSession(elder, None, context)
    session._enter(elder.dialogue_tree.nodes["story"])

    assert session.advance().id == "offer"
    assert session.advance().id == "offer"

def test_end_is_idempotent(elder, context, event_bus, recorder):
    session = DialogueSession(elder, None, context, event_bus)
    session.start()
    session.end()
    session.end()

    assert event_types(recorder).count(DialogueEvent.ENDED) == 1
    assert session.choices() == []
    assert session.lines == ()
    assert asyncio.run(session.choose("ask")) is None

def test_nothing_to_say(context, event_bus, recorder):
    session = DialogueSession(create_npc("mute", "Mute"), None, context, event_bus)

    assert session.start() is None
    assert not session.active
    assert recorder == []

def test_task_menu_hands_off_submission(store, event_bus, intro_task):
    submissions = []
    context = StoreModuleContext("village", store, event_bus, on_task_submission=submissions.append)
    npc = create_npc("clerk", "Clerk", tasks=[intro_task])
    context.accept_task(intro_task)

    session = DialogueSession(npc, None, context, event_bus)
    assert session.start().id == "clerk_root"

    assert asyncio.run(session.choose("task_intro")) is None
    assert submissions == ["intro"]
    assert not session.active

def test_task_menu_talk(elder, context, intro_task):
    elder.tasks.append(intro_task)
    session = DialogueSession(elder, None, context)

    assert session.start().id == "elder_root"
    assert asyncio.run(session.choose("talk")).id == "greeting"

def test_goodbye_from_task_menu(context, intro_task):
    submissions = []
    context.open_task_submission = submissions.append
    session = DialogueSession(create_npc("clerk", "Clerk", tasks=[intro_task]), None, context)
    session.start()

    assert asyncio.run(session.choose("goodbye")) is None
    assert submissions == []
