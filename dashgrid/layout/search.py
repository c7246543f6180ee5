"""Free-cell search: column-locked downward scan for a legal placement."""

from __future__ import annotations

import logging

from dashgrid.config import GRID_RULES, GridRules

from .geometry import overlaps, max_occupied_row
from .models import GridItem


log = logging.getLogger("dashgrid.layout.search")

_PROBE_ID = ""


def can_fit(
    items: list[GridItem],
    x: int, y: int, w: int, h: int,
    exclude_id: str | None = None,
    *,
    rules: GridRules = GRID_RULES,
) -> bool:
    """True if a ``w``×``h`` rectangle at (x, y) is in bounds and collides
    with nothing except *exclude_id*."""
    if x < 0 or y < 0 or x + w > rules.grid_columns or h > rules.max_component_height:
        return False
    probe = GridItem(_PROBE_ID, "", x, y, w, h)
    return not any(
        i.component_id != exclude_id and overlaps(probe, i)
        for i in items
    )


def find_free_cell(
    items: list[GridItem],
    cx: int, cy: int, w: int, h: int,
    exclude_id: str | None = None,
    *,
    rules: GridRules = GRID_RULES,
) -> tuple[int, int] | None:
    """Find the nearest legal (x, y) for a ``w``×``h`` component.

    The column is never changed: a drop keeps the user's horizontal intent
    and only slides down to the first clear row at or below *cy*.  The scan
    stops ``h + search_margin_rows`` rows below the lowest occupied row.

    Returns
    -------
    tuple[int, int] | None
        ``(cx, y)`` for the first legal row, or None if the scan is
        exhausted.
    """
    if cx < 0 or cx + w > rules.grid_columns or h > rules.max_component_height:
        log.debug("No column fit for %dx%d at x=%d", w, h, cx)
        return None

    limit = max_occupied_row(items) + h + rules.search_margin_rows
    for y in range(cy, limit + 1):
        if can_fit(items, cx, y, w, h, exclude_id, rules=rules):
            return (cx, y)

    log.debug("Free-cell scan exhausted for %dx%d from (%d, %d) to row %d",
              w, h, cx, cy, limit)
    return None
