"""Node wrapper around one unit of external content."""

from __future__ import annotations

from collections.abc import Hashable
from typing import Any


class Node:
    """A wrapped reference to external content.

    Identity is the wrapped content's stable key (e.g. a content checksum):
    two nodes around the same content compare equal and collapse in sets
    and dict keys, whatever their weight or active flag.

    Parent/child bookkeeping lives in the owning ``Graph``, not here.

    Attributes:
        content: The wrapped external content (opaque to flowtree)
        key: Stable, hashable identity of ``content``
        weight: Layout weight, 1.0 by default
        active: Whether the node is flagged active by its producer

    Example:
        >>> a = Node("chunk-a", key=1)
        >>> Node("other wrapper", key=1) == a
        True
        >>> len({a, Node("chunk-a", key=1)})
        1
    """

    __slots__ = ("content", "key", "weight", "active")

    def __init__(
        self,
        content: Any,
        key: Hashable,
        *,
        weight: float = 1.0,
        active: bool = False,
    ) -> None:
        self.content = content
        self.key = key
        self.weight = weight
        self.active = active

    @classmethod
    def wrap(cls, content: Any, accessor: Any, **kwargs: Any) -> Node:
        """Create a node keyed by ``accessor.identity_of(content)``."""
        return cls(content, accessor.identity_of(content), **kwargs)

    @property
    def content_type_name(self) -> str:
        """Type name of the wrapped content ("Null" when there is none)."""
        if self.content is None:
            return "Null"
        type_name = getattr(self.content, "type_name", None)
        if isinstance(type_name, str):
            return type_name
        t = type(self.content)
        return f"{t.__module__}.{t.__qualname__}"

    @property
    def content_type_short_name(self) -> str:
        return self.content_type_name.split(".")[-1]

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Node):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"Node({self.key!r}, {self.content_type_short_name})"
