"""Text and JSON rendering for CLI commands.

Every ``--json`` payload is wrapped in an envelope carrying the schema
version, the command name and a UTC timestamp, so scripts can detect format
changes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# Bump when the shape of any command's "data" changes incompatibly
SCHEMA_VERSION = 1

MAX_LINES = 200

EMPTY_CELL = "—"


def json_envelope(command: str, data: Any) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "command": command,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }


def print_json(command: str, data: Any, output: str | None = None) -> None:
    """Emit the envelope for ``command`` on stdout, or save it to ``output``."""
    text = json.dumps(json_envelope(command, data), indent=2, default=str)
    if not output:
        print(text)
        return

    with open(output, "w", encoding="utf-8") as f:
        f.write(text)
    print(f"Wrote {command} output to {output} ({len(text.encode()) / 1024:.1f}KB)")


def format_coordinate(value: float) -> str:
    """Whole layout units print bare ("4"), others with two decimals."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


def format_socket(name: str) -> str:
    return name or EMPTY_CELL


def format_sockets(names: list[str] | tuple[str, ...]) -> str:
    return ", ".join(format_socket(n) for n in names) or EMPTY_CELL


@dataclass
class Table:
    """Column-aligned text table.

    Attributes:
        headers: Column titles
        numeric: Titles of the columns to right-align
        rows: Cell strings, one list per row
    """

    headers: list[str]
    numeric: frozenset[str] = frozenset()
    rows: list[list[str]] = field(default_factory=list)

    def add_row(self, *cells: str) -> None:
        self.rows.append(list(cells))

    def render(self, indent: int = 2) -> list[str]:
        """Lines of the table, header and rule first; nothing if there are no rows."""
        if not self.rows:
            return []

        widths = [len(h) for h in self.headers]
        for row in self.rows:
            for i, cell in enumerate(row[: len(widths)]):
                widths[i] = max(widths[i], len(cell))

        def line(cells: list[str]) -> str:
            return " " * indent + "  ".join(cells)

        lines = [
            line([h.ljust(w) for h, w in zip(self.headers, widths)]),
            line(["─" * w for w in widths]),
        ]
        for row in self.rows:
            lines.append(
                line(
                    [
                        cell.rjust(w) if header in self.numeric else cell.ljust(w)
                        for cell, header, w in zip(row, self.headers, widths)
                    ]
                )
            )
        return lines


def print_lines(lines: list[str], max_lines: int = MAX_LINES) -> None:
    """Print at most ``max_lines`` lines, then a note on how many were cut."""
    for text in lines[:max_lines]:
        print(text)
    hidden = len(lines) - max_lines
    if hidden > 0:
        print(f"\n  # ... {hidden} more lines (use --json for the full output)")
