"""Project-level configuration from pyproject.toml.

Reads the [tool.flowtree] section to provide default layout settings for
the CLI::

    [tool.flowtree.layout]
    distance_between_nodes = 1.0
    distance_between_trees = 3.0
    wire_length_factor = 3.0
    max_children_threshold = 6.0
    left_to_right = true

    [tool.flowtree]
    scale_x = 400
    scale_y = 100
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from flowtree.exceptions import LayoutConfigError
from flowtree.layout.types import LayoutConfig

# Layout units -> pixels, as used by the quest flow editor.
DEFAULT_SCALE_X = 400.0
DEFAULT_SCALE_Y = 100.0

PYPROJECT = "pyproject.toml"


@dataclass(frozen=True)
class FlowtreeConfig:
    """Configuration from [tool.flowtree] in pyproject.toml."""

    layout: dict[str, Any] = field(default_factory=dict)
    scale_x: float = DEFAULT_SCALE_X
    scale_y: float = DEFAULT_SCALE_Y

    def layout_config(self, **overrides: Any) -> LayoutConfig:
        """Build a LayoutConfig from the file values plus non-None overrides.

        Raises:
            LayoutConfigError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(LayoutConfig)}
        unknown = sorted(set(self.layout) - known)
        if unknown:
            raise LayoutConfigError(
                f"Unknown [tool.flowtree.layout] keys: {', '.join(unknown)}"
            )
        values = dict(self.layout)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return LayoutConfig(**values)


def find_pyproject(start: Path | None = None) -> Path | None:
    """Nearest pyproject.toml in ``start`` (default: cwd) or one of its parents."""
    here = (Path.cwd() if start is None else Path(start)).resolve()
    search = [here, *here.parents]
    return next((d / PYPROJECT for d in search if (d / PYPROJECT).is_file()), None)


def load_config(start: Path | None = None) -> FlowtreeConfig:
    """Load [tool.flowtree] from the nearest pyproject.toml.

    Returns default config if no pyproject.toml or no [tool.flowtree] section.
    """
    path = find_pyproject(start)
    if path is None:
        return FlowtreeConfig()

    if sys.version_info >= (3, 11):
        import tomllib
    else:
        try:
            import tomli as tomllib
        except ImportError:
            return FlowtreeConfig()

    with open(path, "rb") as f:
        data = tomllib.load(f)

    section = data.get("tool", {}).get("flowtree", {})
    if not section:
        return FlowtreeConfig()

    return FlowtreeConfig(
        layout=section.get("layout", {}),
        scale_x=float(section.get("scale_x", DEFAULT_SCALE_X)),
        scale_y=float(section.get("scale_y", DEFAULT_SCALE_Y)),
    )
