"""Flowtree - tidy-tree layout for resource flow graphs."""

from flowtree.content import InMemoryAccessor, ResourceAccessor, load_resource, parse_resource
from flowtree.exceptions import (
    CircularGraphError,
    FlowtreeError,
    HierarchyError,
    LayoutConfigError,
    ResourceFormatError,
)
from flowtree.graph import Connection, Graph, GraphBuilder, NodeSockets, QuestGraphBuilder, build_graph
from flowtree.layout import Edge, GraphLayout, Layout, LayoutConfig, Point, ReingoldTilford, Vertex
from flowtree.nodes import Node

__all__ = [
    # Graph
    "Node",
    "Graph",
    "GraphBuilder",
    "Connection",
    "NodeSockets",
    "QuestGraphBuilder",
    "build_graph",
    # Layout
    "GraphLayout",
    "ReingoldTilford",
    "Layout",
    "LayoutConfig",
    "Vertex",
    "Edge",
    "Point",
    # Resources
    "ResourceAccessor",
    "InMemoryAccessor",
    "load_resource",
    "parse_resource",
    # Errors
    "FlowtreeError",
    "HierarchyError",
    "CircularGraphError",
    "LayoutConfigError",
    "ResourceFormatError",
]
