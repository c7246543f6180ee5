"""Layout validation: re-check a layout against the grid invariants.

This deliberately shares nothing with the operations except the geometry
helpers, so it can be run after every mutation as an independent check.
A violation on a layout the engine produced means an engine defect, not a
user error.
"""

from __future__ import annotations

from dashgrid.config import GRID_RULES, GridRules

from .geometry import overlaps, overlap_area
from .models import (
    GridItem, Violation,
    OVERLAP, OUT_OF_BOUNDS, INVALID_DIMENSIONS,
)


def _describe(item: GridItem) -> str:
    return f"{item.component_id} ({item.x},{item.y} {item.width}×{item.height})"


def validate_layout(
    items: list[GridItem],
    *,
    rules: GridRules = GRID_RULES,
) -> list[Violation]:
    """Validate a layout.  Returns violations (empty = valid)."""
    violations: list[Violation] = []

    # ── No overlaps ──
    for i, a in enumerate(items):
        for b in items[i + 1:]:
            if overlaps(a, b):
                violations.append(Violation(
                    kind=OVERLAP,
                    message=(
                        f"Overlap: {_describe(a)} and {_describe(b)} "
                        f"share {overlap_area(a, b)} cell(s)"
                    ),
                    affected_ids=[a.component_id, b.component_id],
                ))

    for item in items:
        # ── Right edge inside the grid ──
        if item.x + item.width > rules.grid_columns:
            violations.append(Violation(
                kind=OUT_OF_BOUNDS,
                message=(
                    f"Out of bounds: {item.component_id} x:{item.x} + "
                    f"w:{item.width} = {item.x + item.width} > {rules.grid_columns}"
                ),
                affected_ids=[item.component_id],
            ))

        # ── Dimensions ──
        if (item.x < 0 or item.y < 0 or item.width < 1 or item.height < 1
                or item.height > rules.max_component_height):
            violations.append(Violation(
                kind=INVALID_DIMENSIONS,
                message=f"Invalid dimensions: {_describe(item)}",
                affected_ids=[item.component_id],
            ))

    return violations
