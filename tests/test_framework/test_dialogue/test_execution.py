import pytest
from quest_framework.dialogue.actions import set_state
from quest_framework.dialogue.conditions import custom_condition, state_check, task_active
from quest_framework.dialogue.execution import (
    AvailableChoice,
    get_available_choices,
    get_initial_dialogue_node,
    get_next_dialogue_node,
    resolve_node_at_runtime,
)
from quest_framework.dialogue.nodes import Choice, DialogueNode, dialogue_node
from quest_framework.dialogue.tree import create_dialogue_tree
from quest_framework.world.npc import create_npc

TRUE = custom_condition(lambda ctx: True)
FALSE = custom_condition(lambda ctx: False)

@pytest.fixture
def simple_tree():
    return (
        create_dialogue_tree()
        .node(dialogue_node(id="greeting", lines=["Hello."], choices={"ask": Choice("Any work?", next="offer")}))
        .node(dialogue_node(id="offer", lines=["I need help."], choices={"close": Choice("Bye", next=None)}))
        .build()
    )

def test_follow_choices_to_close(simple_tree, context):
    greeting = simple_tree.nodes["greeting"]
    offer = get_next_dialogue_node(greeting, "ask", simple_tree, context)

    assert offer is simple_tree.nodes["offer"]
    assert get_next_dialogue_node(offer, "close", simple_tree, context) is None

def test_unknown_choice_returns_none(simple_tree, context):
    greeting = simple_tree.nodes["greeting"]

    assert get_next_dialogue_node(greeting, "dance", simple_tree, context) is None
    assert get_next_dialogue_node(greeting, "ask", None, context) is None

def test_close_edge_with_satisfied_condition(context):
    tree = create_dialogue_tree().node(
        dialogue_node(id="farewell", lines=["Leaving?"], choices={"go": Choice("Yes", next=None, condition=TRUE)})
    ).build()
    node = tree.nodes["farewell"]

    assert get_next_dialogue_node(node, "go", tree, context) is None
    assert [c.key for c in get_available_choices(node, tree, context)] == ["go"]

def test_false_condition_blocks_navigation(context):
    target = dialogue_node(id="secret", lines=["Psst."])
    tree = create_dialogue_tree().node(
        dialogue_node(id="door", lines=["Locked."], choices={"enter": Choice("Enter", next=target, condition=FALSE)})
    ).build()

    assert get_next_dialogue_node(tree.nodes["door"], "enter", tree, context) is None

def test_choice_filtering(context):
    tree = create_dialogue_tree().node(
        dialogue_node(id="menu", lines=["Pick one."], choices={
            "hidden": Choice("Hidden", next=None, condition=FALSE),
            "close": Choice("Close", next=None),
            "open": Choice("Open", next=None, condition=state_check("door", "open")),
            "shown": Choice("Shown", next="menu", condition=TRUE),
        })
    ).build()
    node = tree.nodes["menu"]

    assert [c.key for c in get_available_choices(node, tree, context)] == ["close", "shown"]

    context.set_module_state_field("door", "open")
    assert [c.key for c in get_available_choices(node, tree, context)] == ["close", "open", "shown"]

def test_available_choice_carries_actions(context):
    actions = [set_state("asked", True)]
    tree = create_dialogue_tree().node(
        dialogue_node(id="q", lines=["?"], choices={"ask": Choice("Ask", next=None, actions=actions)})
    ).build()

    choices = get_available_choices(tree.nodes["q"], tree, context)
    assert choices == [AvailableChoice(key="ask", text="Ask", actions=tuple(actions))]

def test_entry_config_picks_first_true_condition(context, intro_task):
    tree = (
        create_dialogue_tree()
        .configure_entry()
            .when(task_active(intro_task)).use(dialogue_node(id="ready", lines=["Done?"]))
            .default(dialogue_node(id="greeting", lines=["Hello."]))
        .build()
    )
    npc = create_npc("guide", "Guide", dialogue_tree=tree)

    assert get_initial_dialogue_node(npc, None, context).id == "greeting"

    context.accept_task(intro_task)
    assert get_initial_dialogue_node(npc, None, context).id == "ready"

def test_initial_node_plain_entry(simple_tree, context):
    npc = create_npc("guide", "Guide", dialogue_tree=simple_tree)
    assert get_initial_dialogue_node(npc, None, context) is simple_tree.nodes["greeting"]

def test_initial_node_without_tree(context):
    assert get_initial_dialogue_node(create_npc("mute", "Mute"), None, context) is None

def test_dynamic_next(context):
    tree = (
        create_dialogue_tree()
        .node(dialogue_node(id="gate", lines=["Halt."], choices={
            "pass": Choice("Let me pass", next=lambda ctx: "inside" if ctx.get_module_state_field("badge") else None),
        }))
        .node(dialogue_node(id="inside", lines=["Welcome."]))
        .build()
    )
    gate = tree.nodes["gate"]

    assert get_next_dialogue_node(gate, "pass", tree, context) is None

    context.set_module_state_field("badge", True)
    assert get_next_dialogue_node(gate, "pass", tree, context) is tree.nodes["inside"]

def test_dynamic_choices(context):
    tree = (
        create_dialogue_tree()
        .node(dialogue_node(id="shop", lines=["Buy?"], choices=lambda ctx: {
            "buy": {"text": "Buy", "next": "thanks"},
            "rich": Choice("Buy all", next=None, condition=state_check("gold", 100)),
        }))
        .node(dialogue_node(id="thanks", lines=["Thanks!"]))
        .build()
    )
    shop = tree.nodes["shop"]

    assert [c.key for c in get_available_choices(shop, tree, context)] == ["buy"]
    assert get_next_dialogue_node(shop, "buy", tree, context) is tree.nodes["thanks"]
    assert get_next_dialogue_node(shop, "rich", tree, context) is None

def test_dynamic_text_and_lines(context):
    tree = create_dialogue_tree().node(
        dialogue_node(
            id="status",
            lines=lambda ctx: [f"The door is {ctx.get_module_state_field('door')}."],
            choices={"ok": Choice(lambda ctx: f"Ok ({ctx.get_module_state_field('door')})", next=None)},
        )
    ).build()
    context.set_module_state_field("door", "open")
    node = tree.nodes["status"]

    resolved = resolve_node_at_runtime(node, tree, context)

    assert node.lines == ()
    assert resolved.lines == ("The door is open.",)
    assert resolved.choices["ok"].text == "Ok (open)"
    assert get_available_choices(node, tree, context)[0].text == "Ok (open)"

def test_dynamic_actions(context):
    tree = create_dialogue_tree().node(
        dialogue_node(id="n", lines=["."], choices={
            "x": Choice("X", next=None, actions=lambda ctx: [set_state("picked", "x")]),
        })
    ).build()

    choice = get_available_choices(tree.nodes["n"], tree, context)[0]
    assert choice.actions == (set_state("picked", "x"),)

def test_auto_advance(context):
    tree = (
        create_dialogue_tree()
        .node(dialogue_node(id="one", lines=["First."], next="two"))
        .node(dialogue_node(id="two", lines=["Second."]))
        .build()
    )

    assert get_next_dialogue_node(tree.nodes["one"], None, tree, context) is tree.nodes["two"]
    assert get_next_dialogue_node(tree.nodes["two"], None, tree, context) is None

def test_queries_do_not_mutate_tree(simple_tree, context):
    nodes = dict(simple_tree.nodes)
    edges = simple_tree.edges
    npc = create_npc("guide", "Guide", dialogue_tree=simple_tree)

    node = get_initial_dialogue_node(npc, None, context)
    get_available_choices(node, simple_tree, context)
    get_next_dialogue_node(node, "ask", simple_tree, context)

    assert simple_tree.nodes == nodes
    assert simple_tree.edges is edges

def test_navigate_constructed_nodes(context):
    offer = DialogueNode(id="offer", lines=("I need help.",), choices={"close": Choice("Bye", next=None)})
    greeting = DialogueNode(id="greeting", lines=("Hello.",), choices={"ask": Choice("Any work?", next=offer)})
    tree = create_dialogue_tree().node(greeting).build()

    assert [c.key for c in get_available_choices(greeting, tree, context)] == ["ask"]
    assert get_next_dialogue_node(greeting, "ask", tree, context) is offer
    assert get_next_dialogue_node(offer, "close", tree, context) is None
