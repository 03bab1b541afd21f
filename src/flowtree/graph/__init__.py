"""Graph package - node container and domain graph builders."""

from flowtree.graph.builder import Connection, NodeSockets, QuestGraphBuilder, build_graph
from flowtree.graph.core import Graph, GraphBuilder

__all__ = [
    "Graph",
    "GraphBuilder",
    "Connection",
    "NodeSockets",
    "QuestGraphBuilder",
    "build_graph",
]
