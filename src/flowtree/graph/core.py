"""Graph container: a de-duplicated forest of nodes."""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Iterator
from typing import Protocol, runtime_checkable

import networkx as nx

from flowtree.exceptions import CircularGraphError, HierarchyError
from flowtree.nodes import Node

logger = logging.getLogger(__name__)

_DONE = object()


@runtime_checkable
class GraphBuilder(Protocol):
    """Domain strategy plugged into a ``Graph``.

    ``get_children`` derives the children of a node from its content;
    ``populate`` discovers roots and inserts them, usually through
    ``Graph.add_node_hierarchy``.
    """

    def get_children(self, node: Node) -> Iterable[Node] | None: ...

    def populate(self, graph: Graph) -> None: ...


class Graph:
    """A forest of ``Node``s with parent → child edges.

    Nodes are stored once per identity in a ``networkx.DiGraph`` keyed by
    ``Node.key``; successor order is child order and node order is insertion
    order. Each node has at most one parent and is never its own ancestor.

    Attributes:
        builder: Optional ``GraphBuilder`` used by ``add_node_hierarchy`` and
            ``refresh``

    Example:
        >>> g = Graph()
        >>> root = g.add_node(Node("r", key="r"))
        >>> _ = g.add_child(root, Node("c", key="c"))
        >>> [n.key for n in g.children_of(root)]
        ['c']
        >>> g.depth(Node("c", key="c"))
        2
    """

    def __init__(self, builder: GraphBuilder | None = None) -> None:
        self.builder = builder
        self._nx_graph = nx.DiGraph()

    @property
    def nx_graph(self) -> nx.DiGraph:
        """Underlying NetworkX graph (keys are node identities)."""
        return self._nx_graph

    @property
    def nodes(self) -> tuple[Node, ...]:
        """All nodes in insertion order."""
        return tuple(self.iter_nodes())

    def iter_nodes(self) -> Iterator[Node]:
        for _, data in self._nx_graph.nodes(data="node"):
            yield data

    def __iter__(self) -> Iterator[Node]:
        return self.iter_nodes()

    def __len__(self) -> int:
        return self._nx_graph.number_of_nodes()

    def __contains__(self, node: object) -> bool:
        return isinstance(node, Node) and node.key in self._nx_graph

    def is_empty(self) -> bool:
        return len(self) == 0

    # === Lookup ===

    def get(self, node: Node) -> Node | None:
        """Return the stored node with the same identity, or None."""
        if node.key not in self._nx_graph:
            return None
        return self._nx_graph.nodes[node.key]["node"]

    def _stored(self, node: Node) -> Node:
        stored = self.get(node)
        if stored is None:
            raise KeyError(f"Node {node.key!r} is not in the graph")
        return stored

    def _node_at(self, key: Hashable) -> Node:
        return self._nx_graph.nodes[key]["node"]

    def parent_of(self, node: Node) -> Node | None:
        stored = self._stored(node)
        for key in self._nx_graph.predecessors(stored.key):
            return self._node_at(key)
        return None

    def children_of(self, node: Node) -> tuple[Node, ...]:
        stored = self._stored(node)
        return tuple(self._node_at(k) for k in self._nx_graph.successors(stored.key))

    def roots(self) -> tuple[Node, ...]:
        """Nodes without a parent, in insertion order."""
        in_degree = self._nx_graph.in_degree
        return tuple(n for n in self.iter_nodes() if in_degree(n.key) == 0)

    def depth(self, node: Node) -> int:
        """1 for a root, 1 + depth of the parent otherwise."""
        key = self._stored(node).key
        depth = 1
        pred = self._nx_graph.pred
        while pred[key]:
            key = next(iter(pred[key]))
            depth += 1
        return depth

    def subtree(self, node: Node) -> list[Node]:
        """The node and all its descendants, pre-order."""
        stack = [self._stored(node).key]
        result = []
        succ = self._nx_graph.succ
        while stack:
            key = stack.pop()
            result.append(self._node_at(key))
            stack.extend(reversed(list(succ[key])))
        return result

    def _is_ancestor(self, candidate: Hashable, key: Hashable) -> bool:
        pred = self._nx_graph.pred
        while pred[key]:
            key = next(iter(pred[key]))
            if key == candidate:
                return True
        return False

    # === Mutation ===

    def add_node(self, node: Node) -> Node:
        """Insert ``node`` unless its identity is already present.

        Returns:
            The stored node (the earlier wrapper if one existed)
        """
        stored = self.get(node)
        if stored is not None:
            return stored
        self._nx_graph.add_node(node.key, node=node)
        return node

    def add_child(self, parent: Node, child: Node) -> Node:
        """Attach ``child`` under ``parent``, inserting it if needed.

        Re-attaching a child to its current parent is a no-op.

        Raises:
            CircularGraphError: If child is parent itself or one of its ancestors
            HierarchyError: If child already has a different parent
            KeyError: If parent is not in the graph
        """
        parent = self._stored(parent)
        if child == parent:
            raise CircularGraphError(parent.key, child.key)

        stored = self.get(child)
        if stored is not None:
            current = self.parent_of(stored)
            if current == parent:
                return stored
            if current is not None:
                raise HierarchyError(parent.key, child.key)
            if self._is_ancestor(stored.key, parent.key):
                raise CircularGraphError(parent.key, child.key)
            child = stored
        else:
            self.add_node(child)

        self._nx_graph.add_edge(parent.key, child.key)
        return child

    def add_node_hierarchy(self, root: Node) -> Node:
        """Insert ``root`` and everything the builder discovers below it.

        Children are walked depth-first in the order the builder returns
        them. A child whose identity is already in the graph is skipped, so
        a node reached twice keeps its first parent.

        Raises:
            CircularGraphError: If a node lists itself as a child. Every node
                inserted by this call is removed again before raising.

        Returns:
            The stored root node
        """
        graph = self._nx_graph
        added: list[Hashable] = []
        try:
            if root.key not in graph:
                added.append(root.key)
            root = self.add_node(root)

            stack = [(root, iter(self._discover_children(root)))]
            while stack:
                parent, pending = stack[-1]
                child = next(pending, _DONE)
                if child is _DONE:
                    stack.pop()
                    continue
                if child == parent:
                    raise CircularGraphError(parent.key, child.key)
                if child.key in graph:
                    continue

                graph.add_node(child.key, node=child)
                added.append(child.key)
                graph.add_edge(parent.key, child.key)
                stack.append((child, iter(self._discover_children(child))))
        except Exception:
            graph.remove_nodes_from(added)
            raise

        logger.debug("Inserted hierarchy under %r (%d new nodes)", root, len(added))
        return root

    def _discover_children(self, node: Node) -> Iterable[Node]:
        if self.builder is None:
            return ()
        return self.builder.get_children(node) or ()

    def clear(self) -> None:
        self._nx_graph.clear()

    def refresh(self) -> None:
        """Drop all nodes and repopulate from the builder."""
        self.clear()
        if self.builder is not None:
            self.builder.populate(self)
