"""Layout configuration and output model (vertices and edges)."""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from flowtree.exceptions import LayoutConfigError
from flowtree.layout.coordinates import Point

if TYPE_CHECKING:
    from flowtree.nodes import Node


_NUMERIC_FIELDS = (
    "distance_between_nodes",
    "distance_between_trees",
    "wire_length_factor",
    "max_children_threshold",
)


@dataclass(frozen=True)
class LayoutConfig:
    """Spacing knobs for tidy-tree layout.

    Attributes:
        distance_between_nodes: Minimum secondary-axis gap between nodes, and
            the base primary-axis distance between levels
        distance_between_trees: Extra gap between disjoint root subtrees
        wire_length_factor: Level spacing multiplier for heavily fanned-out
            levels; 1.0 spaces all levels evenly
        max_children_threshold: Child count at which the full factor applies
        left_to_right: Roots on the left (True) or on the right (False)
    """

    distance_between_nodes: float = 1.0
    distance_between_trees: float = 3.0
    wire_length_factor: float = 3.0
    max_children_threshold: float = 6.0
    left_to_right: bool = True

    def __post_init__(self) -> None:
        for name in _NUMERIC_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise LayoutConfigError(f"{name} must be a number, got {value!r}")
        if not isinstance(self.left_to_right, bool):
            raise LayoutConfigError(f"left_to_right must be true or false, got {self.left_to_right!r}")

        if self.distance_between_nodes <= 0:
            raise LayoutConfigError(
                f"distance_between_nodes must be positive, got {self.distance_between_nodes}"
            )
        if self.distance_between_trees < 0:
            raise LayoutConfigError(
                f"distance_between_trees cannot be negative, got {self.distance_between_trees}"
            )
        if self.wire_length_factor < 1:
            raise LayoutConfigError(
                f"wire_length_factor must be at least 1.0, got {self.wire_length_factor}"
            )
        if self.max_children_threshold <= 0:
            raise LayoutConfigError(
                f"max_children_threshold must be positive, got {self.max_children_threshold}"
            )


@dataclass(eq=False)
class Vertex:
    """Position of one node for one layout pass."""

    node: Node
    position: Point = field(default_factory=Point)


@dataclass(frozen=True)
class Edge:
    """Child vertex → parent vertex."""

    source: Vertex
    destination: Vertex


@dataclass(frozen=True)
class Layout:
    """Result of one ``calculate_layout`` call.

    Attributes:
        vertices: One vertex per node, in graph insertion order
        edges: One edge per (child, parent) pair
        config: Configuration the layout was computed with
    """

    vertices: tuple[Vertex, ...] = ()
    edges: tuple[Edge, ...] = ()
    config: LayoutConfig = field(default_factory=LayoutConfig)

    def __len__(self) -> int:
        return len(self.vertices)

    @functools.cached_property
    def _vertex_index(self) -> dict[Node, Vertex]:
        return {v.node: v for v in self.vertices}

    def position(self, node: Node) -> Point:
        """Position of ``node``. Raises KeyError if it was not laid out."""
        vertex = self._vertex_index.get(node)
        if vertex is None:
            raise KeyError(f"Node {node.key!r} is not part of this layout")
        return vertex.position

    def positions(self) -> dict[Node, Point]:
        return {v.node: v.position for v in self.vertices}

    def as_records(self) -> list[tuple[Node, float, float]]:
        """(node, x, y) per vertex."""
        return [(v.node, v.position.x, v.position.y) for v in self.vertices]

    def edge_pairs(self) -> list[tuple[Node, Node]]:
        """(child, parent) per edge."""
        return [(e.source.node, e.destination.node) for e in self.edges]

    def scaled(self, sx: float, sy: float) -> list[tuple[Node, float, float]]:
        """Records with positions scaled per axis, e.g. to pixels."""
        records = []
        for v in self.vertices:
            p = v.position.scaled(sx, sy)
            records.append((v.node, p.x, p.y))
        return records
