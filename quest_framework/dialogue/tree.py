"""
Dialogue trees and the tree builder.

The builder accepts nodes in any order. Choices may point at nodes by id
before those nodes are added; such references are collected and resolved
in build(), which also validates the finished graph.

Usage:
    tree = (
        create_dialogue_tree()
        .node(dialogue_node(id="greeting", lines=["Hi!"],
                            choices={"ask": Choice("Any work?", next="offer")}))
        .node(dialogue_node(id="offer", lines=["Yes."],
                            choices={"close": Choice("Bye", next=None)}))
        .configure_entry()
            .when(task_active(intro)).use(ready)
            .default(greeting)
        .build()
    )
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from quest_engine.core.errors import DialogueBuildError
from quest_framework.dialogue.conditions import (
    ConditionLike,
    TaskActive,
    as_condition,
    evaluate_condition,
)
from quest_framework.dialogue.nodes import (
    NO_TRANSITION,
    ActionsLike,
    DialogueNode,
    NodeDefinition,
    node_from_definition,
)

if TYPE_CHECKING:
    from quest_framework.module import ModuleDefinition
    from quest_framework.state.context import ModuleContext

logger = logging.getLogger(__name__)

NodeLike = Union[DialogueNode, NodeDefinition, Mapping[str, Any]]


@dataclass(frozen=True)
class DialogueEdge:
    """
    Transition derived from a static choice.

    next is None for choices that close the conversation. choice_key is
    None for node-level auto-advance.
    """
    from_node: DialogueNode
    choice_key: Optional[str]
    next: Optional[DialogueNode]
    condition: Optional[ConditionLike] = None
    actions: ActionsLike = None


@dataclass(frozen=True)
class EntryCondition:
    condition: ConditionLike
    node: DialogueNode


@dataclass(frozen=True)
class DialogueEntryConfig:
    """Conditional entry: first true condition wins, else default."""
    conditions: tuple[EntryCondition, ...]
    default: DialogueNode

    def entry_nodes(self) -> list[DialogueNode]:
        return [c.node for c in self.conditions] + [self.default]


@dataclass(frozen=True, eq=False)
class DialogueTree:
    """
    A validated dialogue graph.

    Attributes:
        nodes: Nodes by id, in the order they were added
        edges: Transitions derived from static choices
        entry: Start node or conditional entry
        definitions: Authored definition of every node by id
    """
    nodes: dict[str, DialogueNode]
    edges: tuple[DialogueEdge, ...]
    entry: Union[DialogueNode, DialogueEntryConfig]
    definitions: dict[str, NodeDefinition] = field(default_factory=dict)

    def get_node(self, node_id: str) -> Optional[DialogueNode]:
        return self.nodes.get(node_id)

    def get_definition(self, node_id: str) -> Optional[NodeDefinition]:
        return self.definitions.get(node_id)

    def find_edge(self, node_id: str, choice_key: Optional[str]) -> Optional[DialogueEdge]:
        for edge in self.edges:
            if edge.from_node.id == node_id and edge.choice_key == choice_key:
                return edge
        return None

    def edges_from(self, node_id: str) -> list[DialogueEdge]:
        return [edge for edge in self.edges if edge.from_node.id == node_id]

    def find_task_node(self, task_id: str) -> Optional[DialogueNode]:
        """Get the first node bound to a task."""
        for node in self.nodes.values():
            if node.task is not None and node.task.id == task_id:
                return node
        return None

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes


def select_entry_node(
    tree: DialogueTree,
    context: ModuleContext,
    module_data: Optional[ModuleDefinition] = None,
    skip_task_active: bool = False,
) -> DialogueNode:
    """
    Pick the node a conversation with this tree starts at.

    Args:
        tree: Dialogue tree
        context: State access for entry conditions
        module_data: Module the dialogue belongs to (optional)
        skip_task_active: Ignore task-active entry conditions, used when
            the player picks "talk" from a task menu

    Returns:
        The entry node, or the first matching conditional entry
    """
    entry = tree.entry
    if isinstance(entry, DialogueNode):
        return entry

    for option in entry.conditions:
        if skip_task_active and isinstance(option.condition, TaskActive):
            continue
        if evaluate_condition(option.condition, context, module_data):
            return option.node
    return entry.default


class DialogueTreeBuilder:
    """
    Assembles a DialogueTree.

    Nodes reachable through node-valued choices are added automatically.
    String references are kept on a worklist and linked in build().
    """

    def __init__(self):
        self._nodes: dict[str, DialogueNode] = {}
        self._definitions: dict[str, NodeDefinition] = {}
        self._edges: list[DialogueEdge] = []
        self._pending: list[tuple[int, str]] = []      # (edge index, target id)
        self._pending_next: list[tuple[str, str]] = []  # (node id, auto-advance target id)
        self._entry: Optional[Union[DialogueNode, DialogueEntryConfig]] = None

    def node(self, item: NodeLike) -> DialogueTreeBuilder:
        """Add a node, a NodeDefinition or a mapping of definition fields."""
        self.add(item)
        return self

    def nodes(self, *items: NodeLike) -> DialogueTreeBuilder:
        for item in items:
            self.add(item)
        return self

    def add(self, item: NodeLike) -> DialogueNode:
        """
        Add a node and everything it links to by value.

        Returns:
            The node registered under that id (the existing one if the id
            was already added)
        """
        if isinstance(item, DialogueNode):
            node = item
        else:
            node = node_from_definition(item)

        existing = self._nodes.get(node.id)
        if existing is not None:
            return existing

        self._nodes[node.id] = node
        self._definitions[node.id] = node.definition
        self._extract_edges(node)
        return node

    def _extract_edges(self, node: DialogueNode) -> None:
        definition = node.definition
        # Nodes linked by value are added after this node's own edges so
        # edge order follows declaration order however targets are given.
        children: dict[str, DialogueNode] = {}
        linked: list[int] = []

        target = definition.next
        if isinstance(target, DialogueNode):
            children.setdefault(target.id, target)
        elif isinstance(target, str):
            self._pending_next.append((node.id, target))

        static_choices = definition.choices if not definition.has_dynamic_choices else None
        for key, choice in (static_choices or {}).items():
            target = choice.next
            if target is NO_TRANSITION or callable(target):
                # Resolved when the choice is taken
                continue

            if isinstance(target, str):
                self._pending.append((len(self._edges), target))
                resolved = None
            elif target is None:
                resolved = None
            elif isinstance(target, DialogueNode):
                resolved = self._nodes.get(target.id)
                if resolved is None:
                    resolved = children.setdefault(target.id, target)
                    linked.append(len(self._edges))
            else:
                raise DialogueBuildError(
                    f"Choice '{key}' of node '{node.id}' has an invalid target: {target!r}",
                    node_id=node.id,
                    choice_key=key,
                )

            self._edges.append(DialogueEdge(
                from_node=node,
                choice_key=key,
                next=resolved,
                condition=choice.condition,
                actions=choice.actions,
            ))

        for child in children.values():
            self.add(child)
        for index in linked:
            edge = self._edges[index]
            self._edges[index] = replace(edge, next=self._nodes[edge.next.id])

    def configure_entry(self) -> DialogueEntryBuilder:
        """Start a conditional entry configuration."""
        return DialogueEntryBuilder(self)

    def set_entry(self, entry: Union[DialogueNode, DialogueEntryConfig]) -> DialogueTreeBuilder:
        self._entry = entry
        return self

    def build(self) -> DialogueTree:
        """
        Link pending references, validate and create the tree.

        Raises:
            DialogueBuildError: Empty tree, unknown node id, or an edge or
                entry pointing outside the tree
        """
        if not self._nodes:
            raise DialogueBuildError("Dialogue tree has no nodes")

        edges = list(self._edges)
        for index, target_id in self._pending:
            edge = edges[index]
            target = self._nodes.get(target_id)
            if target is None:
                raise DialogueBuildError(
                    f"Choice '{edge.choice_key}' of node '{edge.from_node.id}' "
                    f"references unknown node '{target_id}'",
                    node_id=edge.from_node.id,
                    choice_key=edge.choice_key,
                )
            edges[index] = replace(edge, next=target)

        for node_id, target_id in self._pending_next:
            if target_id not in self._nodes:
                raise DialogueBuildError(
                    f"Node '{node_id}' advances to unknown node '{target_id}'",
                    node_id=node_id,
                )

        for edge in edges:
            if edge.next is not None and self._nodes.get(edge.next.id) is not edge.next:
                raise DialogueBuildError(
                    f"Choice '{edge.choice_key}' of node '{edge.from_node.id}' "
                    f"points at node '{edge.next.id}' which is not in the tree",
                    node_id=edge.from_node.id,
                    choice_key=edge.choice_key,
                )

        entry = self._entry if self._entry is not None else next(iter(self._nodes.values()))
        entry_nodes = entry.entry_nodes() if isinstance(entry, DialogueEntryConfig) else [entry]
        for node in entry_nodes:
            if self._nodes.get(node.id) is not node:
                raise DialogueBuildError(
                    f"Entry node '{node.id}' is not in the tree",
                    node_id=node.id,
                )

        logger.debug(f"Built dialogue tree: {len(self._nodes)} nodes, {len(edges)} edges")
        return DialogueTree(
            nodes=dict(self._nodes),
            edges=tuple(edges),
            entry=entry,
            definitions=dict(self._definitions),
        )


class DialogueEntryBuilder:
    """Fluent entry configuration: .when(c).use(node) ... .default(node)."""

    def __init__(self, tree_builder: DialogueTreeBuilder):
        self._tree_builder = tree_builder
        self._conditions: list[EntryCondition] = []

    def when(self, condition: ConditionLike) -> DialogueEntryConditionBuilder:
        return DialogueEntryConditionBuilder(self, as_condition(condition))

    def _add_condition(self, condition: ConditionLike, node: NodeLike) -> DialogueEntryBuilder:
        registered = self._tree_builder.add(node)
        self._conditions.append(EntryCondition(condition, registered))
        return self

    def default(self, node: NodeLike) -> DialogueTreeBuilder:
        """Set the fallback node and finish the entry configuration."""
        registered = self._tree_builder.add(node)
        config = DialogueEntryConfig(tuple(self._conditions), registered)
        return self._tree_builder.set_entry(config)


class DialogueEntryConditionBuilder:

    def __init__(self, entry_builder: DialogueEntryBuilder, condition: ConditionLike):
        self._entry_builder = entry_builder
        self._condition = condition

    def use(self, node: NodeLike) -> DialogueEntryBuilder:
        return self._entry_builder._add_condition(self._condition, node)


def create_dialogue_tree() -> DialogueTreeBuilder:
    """Start building a dialogue tree."""
    return DialogueTreeBuilder()
