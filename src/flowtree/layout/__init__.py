"""Layout package - tidy-tree layout and its vertex/edge output model."""

from flowtree.layout.coordinates import Point
from flowtree.layout.reingold_tilford import GraphLayout, ReingoldTilford
from flowtree.layout.types import Edge, Layout, LayoutConfig, Vertex

__all__ = [
    "GraphLayout",
    "ReingoldTilford",
    "Layout",
    "LayoutConfig",
    "Vertex",
    "Edge",
    "Point",
]
