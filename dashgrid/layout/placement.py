"""Placement operations: add, remove and reposition components.

All three are value-semantic: the input list is never modified.  Add and
reposition return None when no legal placement exists; the caller must then
keep its current layout.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from dashgrid.config import GRID_RULES, GridRules

from .models import GridItem
from .search import find_free_cell


log = logging.getLogger("dashgrid.layout.placement")


def add_component(
    items: list[GridItem],
    new_item: GridItem,
    *,
    rules: GridRules = GRID_RULES,
) -> list[GridItem] | None:
    """Append *new_item* at the first free row in its requested column."""
    pos = find_free_cell(
        items, new_item.x, new_item.y, new_item.width, new_item.height,
        rules=rules,
    )
    if pos is None:
        log.info("Rejected add of %s (%dx%d) at (%d, %d): no free cell",
                 new_item.component_id, new_item.width, new_item.height,
                 new_item.x, new_item.y)
        return None
    x, y = pos
    return [*items, replace(new_item, x=x, y=y)]


def remove_component(items: list[GridItem], component_id: str) -> list[GridItem]:
    """Drop the item with *component_id*.  Nothing else moves."""
    return [i for i in items if i.component_id != component_id]


def reposition_component(
    items: list[GridItem],
    component_id: str,
    new_x: int, new_y: int,
    *,
    rules: GridRules = GRID_RULES,
) -> list[GridItem] | None:
    """Move a component to (new_x, new_y), sliding down if that is taken.

    The move is all-or-nothing.  Returns None if *component_id* is not in
    the layout or no free row exists in the target column.
    """
    comp = next((i for i in items if i.component_id == component_id), None)
    if comp is None:
        log.info("Rejected move of %s: not found", component_id)
        return None

    others = [i for i in items if i.component_id != component_id]
    pos = find_free_cell(
        others, new_x, new_y, comp.width, comp.height, rules=rules,
    )
    if pos is None:
        log.info("Rejected move of %s to (%d, %d): no free cell",
                 component_id, new_x, new_y)
        return None

    x, y = pos
    moved = replace(comp, x=x, y=y)
    return [moved if i.component_id == component_id else i for i in items]
