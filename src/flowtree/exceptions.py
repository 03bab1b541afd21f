"""Exceptions for flowtree graph construction and layout."""

from __future__ import annotations

from typing import Any


class FlowtreeError(Exception):
    """Base class for all flowtree errors."""


class HierarchyError(FlowtreeError):
    """Parent/child insertion would break the tree structure.

    Attributes:
        parent: Key of the node receiving the child
        child: Key of the node being attached
        message: Human-readable error message
    """

    def __init__(
        self,
        parent: Any,
        child: Any,
        message: str | None = None,
    ) -> None:
        self.parent = parent
        self.child = child
        self.message = message or self._default_message()
        super().__init__(self.message)

    def _default_message(self) -> str:
        return (
            f"Cannot attach node {self.child!r} to {self.parent!r}: "
            f"a node has at most one parent"
        )


class CircularGraphError(HierarchyError):
    """A node was attached as its own child or as a child of its descendant.

    Circular graphs are not supported. The container is left unchanged.
    """

    def _default_message(self) -> str:
        if self.parent == self.child:
            return f"Circular graphs not supported: node {self.child!r} lists itself as a child"
        return (
            f"Circular graphs not supported: node {self.child!r} is an ancestor "
            f"of {self.parent!r}"
        )


class LayoutConfigError(FlowtreeError):
    """Raised when layout configuration values are invalid."""


class ResourceFormatError(FlowtreeError):
    """A resource document is structurally malformed.

    Attributes:
        location: Path to the offending value inside the document
        message: Human-readable error message
    """

    def __init__(self, message: str, *, location: str | None = None) -> None:
        self.location = location
        self.message = f"{message} (at {location})" if location else message
        super().__init__(self.message)
