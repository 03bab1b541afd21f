"""Inbound contract for the external resource object graph.

flowtree never reads resource files itself. A graph builder walks the
resource graph through a ``ResourceAccessor``, which answers a handful of
reflection questions about content units (chunks) and their property values.

This module also ships a small in-memory resource model and an accessor for
it. It backs the CLI (resources serialized as JSON) and the test suite.

JSON resource document::

    {
      "entry": "file",
      "chunks": [
        {"id": "file", "type": "CQuestResource",
         "properties": {"graph": {"ptr": "graph"}}},
        {"id": "graph", "type": "CQuestGraph",
         "properties": {"graphBlocks": {"array": [{"ptr": "start"}]}}},
        ...
      ]
    }

Tagged values: ``{"ptr": id | null}``, ``{"array": [...]}``,
``{"vector": {field: value, ...}}`` and ``{"name": "..."}``. Plain JSON
scalars are kept as-is.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Hashable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from flowtree.exceptions import ResourceFormatError

logger = logging.getLogger(__name__)


@runtime_checkable
class ResourceAccessor(Protocol):
    """Reflection over an external resource graph.

    Every query must tolerate values of the wrong kind: ``is_*`` answers
    False and ``get_*`` returns None instead of raising.
    """

    def get_named_property(self, content: Any, name: str) -> Any | None: ...

    def is_array(self, value: Any) -> bool: ...

    def iterate_array(self, value: Any) -> Iterable[Any]: ...

    def is_pointer(self, value: Any) -> bool: ...

    def dereference(self, value: Any) -> Any | None: ...

    def is_labeled_tuple(self, value: Any) -> bool: ...

    def iterate_fields(self, value: Any) -> Iterable[Any]: ...

    def get_field(self, value: Any, name: str) -> Any | None: ...

    def is_name(self, value: Any) -> bool: ...

    def name_value(self, value: Any) -> str | None: ...

    def identity_of(self, content: Any) -> Hashable: ...


# === In-memory resource model ===


@dataclass(eq=False)
class Chunk:
    """One content unit of a resource: identity, type and named properties."""

    key: str
    type_name: str = "CObject"
    properties: dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"Chunk({self.key!r}, {self.type_name!r})"


@dataclass(frozen=True)
class Pointer:
    """Pointer-valued property; ``target`` is None for a null pointer."""

    target: Chunk | None = None


@dataclass(frozen=True)
class Array:
    items: tuple[Any, ...] = ()


@dataclass(frozen=True)
class Name:
    value: str


@dataclass(eq=False)
class LabeledTuple:
    """Composite ("vector") value with ordered, named fields."""

    fields: dict[str, Any] = field(default_factory=dict)


class InMemoryAccessor:
    """``ResourceAccessor`` for the in-memory resource model."""

    def get_named_property(self, content: Any, name: str) -> Any | None:
        if not isinstance(content, Chunk):
            return None
        return content.properties.get(name)

    def is_array(self, value: Any) -> bool:
        return isinstance(value, Array)

    def iterate_array(self, value: Any) -> Iterable[Any]:
        return value.items if isinstance(value, Array) else ()

    def is_pointer(self, value: Any) -> bool:
        return isinstance(value, Pointer)

    def dereference(self, value: Any) -> Any | None:
        return value.target if isinstance(value, Pointer) else None

    def is_labeled_tuple(self, value: Any) -> bool:
        return isinstance(value, LabeledTuple)

    def iterate_fields(self, value: Any) -> Iterable[Any]:
        return tuple(value.fields.values()) if isinstance(value, LabeledTuple) else ()

    def get_field(self, value: Any, name: str) -> Any | None:
        if not isinstance(value, LabeledTuple):
            return None
        return value.fields.get(name)

    def is_name(self, value: Any) -> bool:
        return isinstance(value, Name)

    def name_value(self, value: Any) -> str | None:
        return value.value if isinstance(value, Name) else None

    def identity_of(self, content: Any) -> Hashable:
        return content.key


# === JSON documents ===


@dataclass(frozen=True)
class Resource:
    """A parsed resource document.

    Attributes:
        chunks: All chunks in document order
        entry: Chunk graph discovery starts from (first chunk by default)
    """

    chunks: tuple[Chunk, ...]
    entry: Chunk | None

    def chunk(self, key: str) -> Chunk:
        """Look up a chunk by id. Raises KeyError if absent."""
        for c in self.chunks:
            if c.key == key:
                return c
        raise KeyError(key)


_VALUE_TAGS = ("ptr", "array", "vector", "name")


def parse_resource(data: Any) -> Resource:
    """Build a ``Resource`` from a decoded JSON document.

    Pointers to unknown chunk ids become null pointers; they are
    partially-populated data, not a format error.

    Raises:
        ResourceFormatError: If the document shape or a tagged value is invalid
    """
    if not isinstance(data, dict):
        raise ResourceFormatError("Resource document must be a JSON object")
    raw_chunks = data.get("chunks")
    if not isinstance(raw_chunks, list):
        raise ResourceFormatError("Resource document needs a 'chunks' list")

    # First pass: identities, so pointers can refer forward.
    chunks: dict[str, Chunk] = {}
    for i, raw in enumerate(raw_chunks):
        location = f"chunks[{i}]"
        if not isinstance(raw, dict) or "id" not in raw:
            raise ResourceFormatError("Chunk must be an object with an 'id'", location=location)
        key = str(raw["id"])
        if key in chunks:
            raise ResourceFormatError(f"Duplicate chunk id '{key}'", location=location)
        chunks[key] = Chunk(key=key, type_name=str(raw.get("type", "CObject")))

    for i, raw in enumerate(raw_chunks):
        properties = raw.get("properties", {})
        if not isinstance(properties, dict):
            raise ResourceFormatError("'properties' must be an object", location=f"chunks[{i}]")
        chunk = chunks[str(raw["id"])]
        for name, value in properties.items():
            chunk.properties[name] = _parse_value(value, chunks, f"chunks[{i}].{name}")

    ordered = tuple(chunks.values())
    entry_key = data.get("entry")
    if entry_key is None:
        entry = ordered[0] if ordered else None
    elif str(entry_key) in chunks:
        entry = chunks[str(entry_key)]
    else:
        raise ResourceFormatError(f"Entry chunk '{entry_key}' not found")

    return Resource(chunks=ordered, entry=entry)


def _parse_value(value: Any, chunks: dict[str, Chunk], location: str) -> Any:
    if not isinstance(value, dict):
        return value

    tags = [t for t in _VALUE_TAGS if t in value]
    if len(tags) != 1 or len(value) != 1:
        raise ResourceFormatError(
            f"Tagged value needs exactly one of {', '.join(_VALUE_TAGS)}",
            location=location,
        )

    tag = tags[0]
    payload = value[tag]
    if tag == "ptr":
        if payload is None:
            return Pointer(None)
        target = chunks.get(str(payload))
        if target is None:
            logger.debug("Dangling pointer to '%s' at %s", payload, location)
        return Pointer(target)
    if tag == "array":
        if not isinstance(payload, list):
            raise ResourceFormatError("'array' payload must be a list", location=location)
        return Array(tuple(_parse_value(v, chunks, f"{location}[{i}]") for i, v in enumerate(payload)))
    if tag == "vector":
        if not isinstance(payload, dict):
            raise ResourceFormatError("'vector' payload must be an object", location=location)
        return LabeledTuple({k: _parse_value(v, chunks, f"{location}.{k}") for k, v in payload.items()})
    if not isinstance(payload, str):
        raise ResourceFormatError("'name' payload must be a string", location=location)
    return Name(payload)


def load_resource(path: str | Path) -> Resource:
    """Read and parse a JSON resource document from disk."""
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ResourceFormatError(f"Invalid JSON: {e}") from e
    return parse_resource(data)
