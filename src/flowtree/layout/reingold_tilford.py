"""Tidy-tree layout for graph forests.

Implementation of the Reingold and Tilford algorithm, "Tidier Drawings of
Trees", IEEE Transactions on Software Engineering Vol SE-7 No.2, March 1981,
customized to support graphs with multiple roots and unattached nodes.

Nodes at the same depth share a primary-axis (x) coordinate. Along the
secondary axis (y), each parent sits at the mean of its children after
sibling subtrees have been pushed apart, and each root subtree is stacked
below the previous one.

All traversals use explicit stacks, so deep trees do not hit the recursion
limit.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import replace
from typing import TYPE_CHECKING

from flowtree.layout.coordinates import Point
from flowtree.layout.types import Edge, Layout, LayoutConfig, Vertex

if TYPE_CHECKING:
    from flowtree.graph.core import Graph
    from flowtree.nodes import Node

logger = logging.getLogger(__name__)

# depth -> (min y, max y)
Boundaries = dict[int, tuple[float, float]]


class GraphLayout(ABC):
    """Interface for a generic graph layout."""

    @property
    @abstractmethod
    def vertices(self) -> list[Vertex]: ...

    @property
    @abstractmethod
    def edges(self) -> list[Edge]: ...

    @property
    @abstractmethod
    def left_to_right(self) -> bool: ...

    @abstractmethod
    def calculate_layout(self, graph: Graph) -> Layout: ...


def _lerp(v0: float, v1: float, t: float) -> float:
    return (1 - t) * v0 + t * v1


def _merge_boundaries(upper: Boundaries, lower: Boundaries) -> Boundaries:
    combined: Boundaries = {}
    for depth in sorted(upper.keys() | lower.keys()):
        if depth not in upper:
            combined[depth] = lower[depth]
        elif depth not in lower:
            combined[depth] = upper[depth]
        else:
            combined[depth] = (
                min(upper[depth][0], lower[depth][0]),
                max(upper[depth][1], lower[depth][1]),
            )
    return combined


class ReingoldTilford(GraphLayout):
    """Tidy-tree layout with overlap avoidance and forest stacking.

    The node → vertex lookup is the only state kept between calls; it is
    rebuilt by every ``calculate_layout``.

    Example:
        >>> from flowtree.graph import Graph
        >>> from flowtree.nodes import Node
        >>> g = Graph()
        >>> root = g.add_node(Node("r", key="r"))
        >>> for key in "abc":
        ...     _ = g.add_child(root, Node(key, key=key))
        >>> layout = ReingoldTilford().calculate_layout(g)
        >>> [p.y for p in layout.positions().values()]
        [1.0, 0.0, 1.0, 2.0]
    """

    def __init__(
        self,
        config: LayoutConfig | None = None,
        *,
        left_to_right: bool | None = None,
    ) -> None:
        config = config or LayoutConfig()
        if left_to_right is not None:
            config = replace(config, left_to_right=left_to_right)
        self.config = config
        self._lookup: dict[Node, Vertex] = {}
        self._children: dict[Node, tuple[Node, ...]] = {}
        self._depths: dict[Node, int] = {}

    @property
    def vertices(self) -> list[Vertex]:
        return list(self._lookup.values())

    @property
    def edges(self) -> list[Edge]:
        """One edge per (child, parent) pair of the last layout pass."""
        edges = []
        for vertex in self._lookup.values():
            for child in self._children.get(vertex.node, ()):
                edges.append(Edge(self._lookup[child], vertex))
        return edges

    @property
    def left_to_right(self) -> bool:
        return self.config.left_to_right

    def vertex_for(self, node: Node) -> Vertex:
        return self._lookup[node]

    # === Main entry point ===

    def calculate_layout(self, graph: Graph) -> Layout:
        """Place every node of ``graph``.

        Returns:
            Layout snapshot; an empty graph gives an empty layout
        """
        self._lookup = {}
        for node in graph:
            if node not in self._lookup:
                self._lookup[node] = Vertex(node)
        self._children = {node: graph.children_of(node) for node in self._lookup}
        self._depths = {}

        if not self._lookup:
            return Layout(config=self.config)

        roots = [node for node in self._lookup if graph.parent_of(node) is None]
        self._depths = self._compute_depths(roots)
        horizontal_positions = self._horizontal_position_for_each_level()

        gap = self.config.distance_between_trees + self.config.distance_between_nodes
        for i, root in enumerate(roots):
            self._layout_subtree(root, horizontal_positions)
            if i > 0:
                _, previous_max = self._compute_range(roots[i - 1])
                self._move_subtree(root, previous_max + gap)

        logger.debug(
            "Laid out %d nodes in %d trees over %d levels",
            len(self._lookup),
            len(roots),
            len(horizontal_positions),
        )
        return Layout(
            vertices=tuple(self._lookup.values()),
            edges=tuple(self.edges),
            config=self.config,
        )

    # === Depths and levels ===

    def _compute_depths(self, roots: Sequence[Node]) -> dict[Node, int]:
        depths: dict[Node, int] = {}
        stack = [(root, 1) for root in roots]
        while stack:
            node, depth = stack.pop()
            depths[node] = depth
            stack.extend((child, depth + 1) for child in self._children[node])
        return depths

    def _horizontal_position_for_each_level(self) -> list[float]:
        """Primary-axis coordinate per level, indexed by depth - 1.

        Levels whose nodes have many children (many wires) are pushed
        further from the previous level; the extra length grows linearly up
        to ``wire_length_factor`` at ``max_children_threshold`` children.
        """
        levels: dict[int, list[Node]] = defaultdict(list)
        for node, depth in self._depths.items():
            levels[depth].append(node)

        cfg = self.config
        max_depth = max(levels)
        positions = [0.0] * max_depth
        for d in range(1, max_depth):
            max_children = max(len(self._children[n]) for n in levels[d + 1])
            heuristic = _lerp(
                1.0,
                cfg.wire_length_factor,
                min(1.0, max_children / cfg.max_children_threshold),
            )
            positions[d] = positions[d - 1] + cfg.distance_between_nodes * heuristic

        return positions if cfg.left_to_right else positions[::-1]

    # === Placement ===

    def _layout_subtree(self, root: Node, horizontal_positions: Sequence[float]) -> None:
        """Post-order placement: children first, then the parent at their mean."""
        stack = [(root, False)]
        while stack:
            node, children_done = stack.pop()
            children = self._children[node]
            if not children_done:
                stack.append((node, True))
                stack.extend((child, False) for child in reversed(children))
                continue

            y = 0.0
            if children:
                self._separate_subtrees(children)
                y = sum(self._lookup[c].position.y for c in children) / len(children)

            x = horizontal_positions[self._depths[node] - 1]
            self._lookup[node].position = Point(x, y)

    def _separate_subtrees(self, subroots: Sequence[Node]) -> None:
        """Push sibling subtrees apart so no level overlaps.

        Each subtree is compared against the merged envelope of all the
        siblings before it, depth by depth, and moved down by the largest
        shortfall below ``distance_between_nodes``.
        """
        if len(subroots) < 2:
            return

        unit = self.config.distance_between_nodes
        upper = self._boundary_positions(subroots[0])
        for lower_root in subroots[1:]:
            lower = self._boundary_positions(lower_root)

            upper_min, lower_min = min(upper), min(lower)
            if upper_min != lower_min:
                logger.warning(
                    "Cannot separate subtrees which do not start at the same root depth "
                    "(%d vs %d below %r); using the overlapping levels",
                    upper_min,
                    lower_min,
                    lower_root,
                )

            shift = 0.0
            for depth in range(max(upper_min, lower_min), min(max(upper), max(lower)) + 1):
                overlap = unit - (lower[depth][0] + shift - upper[depth][1])
                shift += max(overlap, 0.0)

            if shift:
                self._move_subtree(lower_root, shift)
                lower = {d: (lo + shift, hi + shift) for d, (lo, hi) in lower.items()}
            upper = _merge_boundaries(upper, lower)

    def _boundary_positions(self, subtree_root: Node) -> Boundaries:
        """Extreme secondary-axis positions at each depth of a subtree."""
        extremes: Boundaries = {}
        for node in self._subtree_nodes(subtree_root):
            depth = self._depths[node]
            y = self._lookup[node].position.y
            if depth in extremes:
                lo, hi = extremes[depth]
                extremes[depth] = (min(lo, y), max(hi, y))
            else:
                extremes[depth] = (y, y)
        return extremes

    def _compute_range(self, subtree_root: Node) -> tuple[float, float]:
        ys = [self._lookup[n].position.y for n in self._subtree_nodes(subtree_root)]
        return min(ys), max(ys)

    def _subtree_nodes(self, root: Node) -> list[Node]:
        """The subtree root and all its descendants."""
        result = []
        stack = [root]
        while stack:
            node = stack.pop()
            result.append(node)
            stack.extend(reversed(self._children[node]))
        return result

    def _move_subtree(self, subtree_root: Node, dy: float) -> None:
        for node in self._subtree_nodes(subtree_root):
            vertex = self._lookup[node]
            vertex.position = vertex.position.shifted(dy)
