"""Graph builder for quest-style resource graphs.

A quest resource stores its flow as blocks (chunks) listed under
``graph.graphBlocks``. Each block wires its output sockets to other blocks
through ``cachedConnections``::

    cachedConnections: array of vector
        socketId: name            # output socket on this block
        blocks:   array of vector
            <pointer field>       # destination block
            <name field>          # input socket on the destination

Every wired destination becomes a child of the block in the tree, and every
wire is also kept as a ``Connection`` so a renderer can draw socket labels.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from flowtree.content import ResourceAccessor
from flowtree.nodes import Node

if TYPE_CHECKING:
    from flowtree.graph.core import Graph

logger = logging.getLogger(__name__)

GRAPH_PROPERTY = "graph"
GRAPH_BLOCKS_PROPERTY = "graphBlocks"
CONNECTIONS_PROPERTY = "cachedConnections"
SOCKET_ID_FIELD = "socketId"
BLOCKS_FIELD = "blocks"


@dataclass(frozen=True)
class Connection:
    """Labeled socket-to-socket wire between two nodes.

    Not part of the parent/child hierarchy; an unresolved socket name is "".
    """

    source: Node
    destination: Node
    source_socket: str = ""
    destination_socket: str = ""


@dataclass(frozen=True)
class NodeSockets:
    """Socket names a renderer attaches to one node, in first-seen order."""

    inputs: tuple[str, ...] = ()
    outputs: tuple[str, ...] = ()


@dataclass
class QuestGraphBuilder:
    """Extracts a forest and its connections from a quest resource.

    Missing or malformed properties mean "nothing here": they are logged at
    DEBUG level and never raise.

    Attributes:
        entry: Content the discovery starts from (holds the "graph" pointer)
        accessor: Reflection over the resource graph
        connections: Wires collected by ``get_children``; reset by ``populate``
    """

    entry: Any
    accessor: ResourceAccessor
    connections: list[Connection] = field(default_factory=list)

    def make_node(self, content: Any) -> Node:
        return Node.wrap(content, self.accessor)

    def populate(self, graph: Graph) -> None:
        """Insert the hierarchy of every block listed in ``graph.graphBlocks``.

        A listed block that is already in the graph (placed as the child of
        an earlier block, or listed twice) is not walked again, so its wires
        are recorded once.
        """
        self.connections.clear()
        for content in self.discover_roots():
            node = self.make_node(content)
            if node in graph:
                logger.debug("Block %r is already placed; skipping", node)
                continue
            graph.add_node_hierarchy(node)

    def discover_roots(self) -> list[Any]:
        acc = self.accessor
        if self.entry is None:
            return []

        graph_ptr = acc.get_named_property(self.entry, GRAPH_PROPERTY)
        if not acc.is_pointer(graph_ptr):
            logger.debug("Entry %r has no '%s' pointer", self.entry, GRAPH_PROPERTY)
            return []
        graph_content = acc.dereference(graph_ptr)
        if graph_content is None:
            logger.debug("Entry %r has a null '%s' pointer", self.entry, GRAPH_PROPERTY)
            return []

        blocks = acc.get_named_property(graph_content, GRAPH_BLOCKS_PROPERTY)
        if not acc.is_array(blocks):
            logger.debug("%r has no '%s' array", graph_content, GRAPH_BLOCKS_PROPERTY)
            return []

        roots = []
        for item in acc.iterate_array(blocks):
            target = acc.dereference(item) if acc.is_pointer(item) else None
            if target is None:
                logger.debug("Skipping null or non-pointer graph block %r", item)
                continue
            roots.append(target)
        return roots

    def get_children(self, node: Node) -> list[Node]:
        """Destinations wired from ``node``'s sockets, recording each wire."""
        acc = self.accessor
        children: list[Node] = []
        if node.content is None:
            return children

        cached = acc.get_named_property(node.content, CONNECTIONS_PROPERTY)
        if not acc.is_array(cached):
            return children

        for conn in acc.iterate_array(cached):
            if not acc.is_labeled_tuple(conn):
                continue
            socket_id = acc.name_value(acc.get_field(conn, SOCKET_ID_FIELD)) or ""
            blocks = acc.get_field(conn, BLOCKS_FIELD)
            if not acc.is_array(blocks):
                continue
            for block in acc.iterate_array(blocks):
                connection = self._read_block(node, socket_id, block)
                if connection is None:
                    continue
                self.connections.append(connection)
                if connection.destination == node:
                    logger.debug("Socket '%s' on %r is wired to itself", socket_id, node)
                    continue
                children.append(connection.destination)
        return children

    def _read_block(self, source: Node, socket_id: str, block: Any) -> Connection | None:
        acc = self.accessor
        if not acc.is_labeled_tuple(block):
            return None

        destination = None
        destination_socket = ""
        for value in acc.iterate_fields(block):
            if acc.is_pointer(value):
                target = acc.dereference(value)
                destination = None if target is None else self.make_node(target)
            elif acc.is_name(value):
                destination_socket = acc.name_value(value) or ""

        if destination is None:
            logger.debug("Dropping wire from %r socket '%s': null target", source, socket_id)
            return None
        return Connection(source, destination, socket_id, destination_socket)

    def sockets_for(self, node: Node) -> NodeSockets:
        """Input and output socket names of ``node`` across all connections."""
        inputs: dict[str, None] = {}
        outputs: dict[str, None] = {}
        for c in self.connections:
            if c.source == node:
                outputs[c.source_socket] = None
            if c.destination == node:
                inputs[c.destination_socket] = None
        return NodeSockets(inputs=tuple(inputs), outputs=tuple(outputs))

    def connections_of(self, node: Node) -> list[Connection]:
        return [c for c in self.connections if c.source == node or c.destination == node]


def build_graph(entry: Any, accessor: ResourceAccessor) -> tuple[Graph, QuestGraphBuilder]:
    """Create and populate a graph for a quest resource entry."""
    from flowtree.graph.core import Graph

    builder = QuestGraphBuilder(entry, accessor)
    graph = Graph(builder)
    graph.refresh()
    return graph, builder

