"""Shared fixtures for flowtree tests.

This module provides:
1. DictBuilder, a GraphBuilder over a plain adjacency dict
2. QuestFactory, helpers that assemble in-memory quest resources
3. Layout invariant checks shared by the layout tests
"""

from __future__ import annotations

import itertools

import pytest

from flowtree import Graph, InMemoryAccessor, Layout, Node
from flowtree.content import Array, Chunk, LabeledTuple, Name, Pointer

# =============================================================================
# Adjacency-dict graphs
# =============================================================================


class DictBuilder:
    """Children come from ``adjacency[key]``; roots are inserted in order."""

    def __init__(self, adjacency: dict, roots: list | None = None) -> None:
        self.adjacency = adjacency
        self.roots = list(adjacency) if roots is None else roots
        self.visited: list = []

    def get_children(self, node):
        self.visited.append(node.key)
        return [Node(f"content-{k}", key=k) for k in self.adjacency.get(node.key, ())]

    def populate(self, graph):
        for key in self.roots:
            graph.add_node_hierarchy(Node(f"content-{key}", key=key))


@pytest.fixture
def make_graph():
    """Build and populate a Graph from an adjacency dict."""

    def _make(adjacency: dict, roots: list | None = None) -> Graph:
        graph = Graph(DictBuilder(adjacency, roots))
        graph.refresh()
        return graph

    return _make


@pytest.fixture
def chain_graph():
    """Build a single chain n0 -> n1 -> ... of the given length with add_child."""

    def _make(length: int) -> Graph:
        graph = Graph()
        parent = graph.add_node(Node("n0", key=0))
        for i in range(1, length):
            parent = graph.add_child(parent, Node(f"n{i}", key=i))
        return graph

    return _make


# =============================================================================
# Quest resources
# =============================================================================


class QuestFactory:
    """Assembles quest resources in the in-memory resource model."""

    def block(self, key: str, type_name: str = "CQuestPhaseBlock") -> Chunk:
        return Chunk(key=key, type_name=type_name)

    def target(self, chunk: Chunk | None, socket: str | None = None) -> LabeledTuple:
        fields = {"ptr": Pointer(chunk)}
        if socket is not None:
            fields["inputName"] = Name(socket)
        return LabeledTuple(fields)

    def wire(self, socket: str | None, *targets: LabeledTuple) -> LabeledTuple:
        fields = {}
        if socket is not None:
            fields["socketId"] = Name(socket)
        fields["blocks"] = Array(tuple(targets))
        return LabeledTuple(fields)

    def connect(self, chunk: Chunk, *wires: LabeledTuple) -> Chunk:
        chunk.properties["cachedConnections"] = Array(tuple(wires))
        return chunk

    def entry(self, *roots: Chunk | None) -> Chunk:
        graph = Chunk(
            key="graph",
            type_name="CQuestGraph",
            properties={"graphBlocks": Array(tuple(Pointer(r) for r in roots))},
        )
        return Chunk(key="file", type_name="CQuestResource", properties={"graph": Pointer(graph)})


@pytest.fixture
def quest():
    return QuestFactory()


@pytest.fixture
def accessor():
    return InMemoryAccessor()


@pytest.fixture
def sample_quest(quest):
    """start -Out/In-> mid -Out/In-> end, mid -Alt/Cut-> end, plus an orphan root.

    start also has a wire to a null target, which must be dropped.
    """
    start = quest.block("start", "CQuestStartBlock")
    mid = quest.block("mid")
    end = quest.block("end", "CQuestEndBlock")
    orphan = quest.block("orphan")

    quest.connect(start, quest.wire("Out", quest.target(mid, "In"), quest.target(None, "In")))
    quest.connect(
        mid,
        quest.wire("Out", quest.target(end, "In")),
        quest.wire("Alt", quest.target(end, "Cut")),
    )
    return quest.entry(start, orphan)


# =============================================================================
# Layout invariants
# =============================================================================


def assert_no_overlap(graph: Graph, layout: Layout, unit: float = 1.0) -> None:
    """Nodes sharing a depth are at least one unit apart on the y axis."""
    by_depth: dict[int, list] = {}
    for node in graph:
        by_depth.setdefault(graph.depth(node), []).append(node)
    for depth, nodes in by_depth.items():
        for a, b in itertools.combinations(nodes, 2):
            gap = abs(layout.position(a).y - layout.position(b).y)
            assert gap >= unit - 1e-9, f"{a!r} and {b!r} at depth {depth} are {gap} apart"


def assert_parents_centered(graph: Graph, layout: Layout) -> None:
    """Each parent sits at the mean y of its children."""
    for node in graph:
        children = graph.children_of(node)
        if children:
            mean = sum(layout.position(c).y for c in children) / len(children)
            assert layout.position(node).y == pytest.approx(mean)


@pytest.fixture
def layout_invariants():
    def _check(graph: Graph, layout: Layout, unit: float = 1.0) -> None:
        assert_no_overlap(graph, layout, unit)
        assert_parents_centered(graph, layout)

    return _check


@pytest.fixture
def dict_builder():
    """The DictBuilder class, for tests that drive a Graph by hand."""
    return DictBuilder
