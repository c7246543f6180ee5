"""Low-level geometry helpers for the layout engine.

Rectangles are half-open: an item covers columns ``[x, x + width)`` and rows
``[y, y + height)``, so items that merely touch along an edge do not overlap.
"""

from __future__ import annotations

from typing import Iterable

from shapely.geometry import Polygon, box as shapely_box

from .models import GridItem


def overlaps(a: GridItem, b: GridItem) -> bool:
    """True if the two rectangles share at least one cell."""
    return (
        a.x < b.x + b.width and b.x < a.x + a.width
        and a.y < b.y + b.height and b.y < a.y + a.height
    )


def vertically_overlaps(a: GridItem, b: GridItem) -> bool:
    """True if the two items share a row band, regardless of columns."""
    return a.y < b.y + b.height and b.y < a.y + a.height


def horizontally_overlaps(a: GridItem, b: GridItem) -> bool:
    """True if the two items share a column band, regardless of rows."""
    return a.x < b.x + b.width and b.x < a.x + a.width


def max_occupied_row(items: Iterable[GridItem]) -> int:
    """Exclusive bottom of the lowest item, 0 for an empty layout."""
    return max((i.y + i.height for i in items), default=0)


def item_box(item: GridItem) -> Polygon:
    """Shapely box covering the item's cells."""
    return shapely_box(item.x, item.y, item.x + item.width, item.y + item.height)


def overlap_area(a: GridItem, b: GridItem) -> int:
    """Number of cells two items share (0 when they only touch)."""
    return int(round(item_box(a).intersection(item_box(b)).area))
