"""2D points for tree layout.

The x axis is the primary (depth) axis and y the secondary axis used to
separate siblings and cousins.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """Immutable 2D point.

    Example:
        >>> Point(1, 2) + Point(3, 4)
        Point(x=4, y=6)
        >>> Point(5, 10).shifted(2.5)
        Point(x=5, y=12.5)
    """

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def shifted(self, dy: float) -> Point:
        """Move along the secondary axis only."""
        return Point(self.x, self.y + dy)

    def scaled(self, sx: float, sy: float) -> Point:
        """Scale each axis independently (e.g. layout units to pixels).

        Example:
            >>> Point(2, 3).scaled(400, 100)
            Point(x=800, y=300)
        """
        return Point(self.x * sx, self.y * sy)
