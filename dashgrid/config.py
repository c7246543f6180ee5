"""Shared grid constants for the layout engine and the service around it.

The grid is a fixed number of columns wide and unbounded downward.  Every
engine operation takes its bounds from a :class:`GridRules` instance; the
module-level :data:`GRID_RULES` singleton is the process-wide default and is
built once at import time.

Changing the rules while layouts exist has undefined effect on those
layouts, so overrides are read from the environment only at startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


@dataclass(frozen=True)
class GridRules:
    """Bounds of the dashboard grid.

    All sizes are in grid cells unless noted otherwise.
    """

    grid_columns: int = 12
    """Fixed grid width.  Every item must satisfy ``x + width <= grid_columns``."""

    max_component_height: int = 8
    """Tallest a single component may be."""

    search_margin_rows: int = 10
    """Extra rows the free-cell search scans below the lowest occupied row."""

    cell_height_px: int = 80
    """Pixel height of one row, used only by the presentation layer."""

    @classmethod
    def from_env(cls) -> GridRules:
        """Build rules from ``DASHGRID_*`` environment overrides."""
        return cls(
            grid_columns=_env_int("DASHGRID_GRID_COLUMNS", cls.grid_columns),
            max_component_height=_env_int(
                "DASHGRID_MAX_COMPONENT_HEIGHT", cls.max_component_height),
        )


# Module-level singleton, importable everywhere.
GRID_RULES = GridRules.from_env()

# Default (width, height) per built-in component type.  The engine never
# interprets the type; these are only used when a caller adds a component
# without giving an explicit size.
DEFAULT_SIZES: dict[str, tuple[int, int]] = {
    "Chart": (6, 2),
    "Grid": (12, 3),
    "KPI": (3, 1),
    "StylizedKPIGraph": (4, 2),
}

ROOT = Path(__file__).resolve().parent.parent
SESSIONS_DIR = Path(
    os.environ.get("DASHGRID_SESSIONS_DIR", ROOT / "outputs" / "sessions")
)
