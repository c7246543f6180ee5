"""Resize operations: right edge, left edge and bottom edge.

Each edge has its own push strategy:

  right   rightward fixed-point cascade; rejects if anything leaves the grid
  left    mirror of the right cascade with the right edge held fixed;
          rejects if anything is pushed past column 0
  bottom  recursive downward push, then a top-down settle pass that lowers
          any item the push left overlapping another; never
          rejects because the grid has no vertical limit

Cascades work on an arena of positions keyed by component id, never on list
indices.  Rejected resizes return the input list itself, untouched.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from dashgrid.config import GRID_RULES, GridRules

from .geometry import overlaps, vertically_overlaps
from .models import GridItem


log = logging.getLogger("dashgrid.layout.resize")


# ── Helpers ────────────────────────────────────────────────────────


def _find(items: list[GridItem], component_id: str) -> GridItem | None:
    return next((i for i in items if i.component_id == component_id), None)


def _spans_intersect(a_start: int, a_len: int, b_start: int, b_len: int) -> bool:
    return a_start < b_start + b_len and b_start < a_start + a_len


def _collides(resized: GridItem, others: list[GridItem], rules: GridRules) -> bool:
    """True if *resized* is out of bounds or overlaps any of *others*."""
    if resized.x < 0 or resized.x + resized.width > rules.grid_columns:
        return True
    return any(overlaps(resized, o) for o in others)


def _commit(
    items: list[GridItem],
    resized: GridItem,
    xs: dict[str, int] | None = None,
    ys: dict[str, int] | None = None,
) -> list[GridItem]:
    """Build the new list in input order with the resized item and any
    cascaded positions applied."""
    out: list[GridItem] = []
    for i in items:
        cid = i.component_id
        if cid == resized.component_id:
            out.append(resized)
        elif xs is not None and xs[cid] != i.x:
            out.append(replace(i, x=xs[cid]))
        elif ys is not None and ys[cid] != i.y:
            out.append(replace(i, y=ys[cid]))
        else:
            out.append(i)
    return out


# ── Right edge ─────────────────────────────────────────────────────


def _cascade_right(
    resized: GridItem, others: list[GridItem], rules: GridRules,
) -> dict[str, int] | None:
    """Push overlapping items rightward until nothing overlaps.

    Returns the settled x per id, or None once any right edge passes the
    grid.  Positions only ever increase, so the first escape is final.
    """
    xs = {i.component_id: i.x for i in others}
    changed = True
    while changed:
        changed = False
        for item in sorted(others, key=lambda i: xs[i.component_id]):
            cid = item.component_id
            if (vertically_overlaps(resized, item)
                    and _spans_intersect(resized.x, resized.width, xs[cid], item.width)):
                xs[cid] = max(xs[cid], resized.right)
                changed = True

            right = xs[cid] + item.width
            for other in others:
                oid = other.component_id
                if oid == cid or not vertically_overlaps(item, other):
                    continue
                if _spans_intersect(xs[cid], item.width, xs[oid], other.width):
                    xs[oid] = max(xs[oid], right)
                    changed = True

        if any(xs[i.component_id] + i.width > rules.grid_columns for i in others):
            return None
    return xs


def resize_width(
    items: list[GridItem],
    component_id: str,
    new_width: int,
    *,
    rules: GridRules = GRID_RULES,
) -> list[GridItem]:
    """Drag the right edge: set the width, pushing neighbours rightward.

    The width is clamped to ``[1, grid_columns]``.  If the push would move
    anything (the resized item included) past the right edge of the grid
    the whole resize is dropped and *items* is returned unchanged.
    """
    comp = _find(items, component_id)
    if comp is None:
        return items

    clamped = max(1, min(new_width, rules.grid_columns))
    resized = replace(comp, width=clamped)
    others = [i for i in items if i.component_id != component_id]

    if not _collides(resized, others, rules):
        return _commit(items, resized)

    if resized.right > rules.grid_columns:
        log.info("Rejected width %d for %s: right edge %d past column %d",
                 clamped, component_id, resized.right, rules.grid_columns)
        return items

    xs = _cascade_right(resized, others, rules)
    if xs is None:
        log.info("Rejected width %d for %s: cascade leaves the grid",
                 clamped, component_id)
        return items

    log.debug("Width %d for %s pushed %d item(s) right", clamped, component_id,
              sum(1 for i in others if xs[i.component_id] != i.x))
    return _commit(items, resized, xs=xs)


# ── Left edge ──────────────────────────────────────────────────────


def _cascade_left(
    resized: GridItem, others: list[GridItem],
) -> dict[str, int] | None:
    """Mirror of :func:`_cascade_right`.  Returns None once any x < 0."""
    xs = {i.component_id: i.x for i in others}
    changed = True
    while changed:
        changed = False
        for item in sorted(others, key=lambda i: xs[i.component_id], reverse=True):
            cid = item.component_id
            if (vertically_overlaps(resized, item)
                    and _spans_intersect(resized.x, resized.width, xs[cid], item.width)):
                xs[cid] = min(xs[cid], resized.x - item.width)
                changed = True

            for other in others:
                oid = other.component_id
                if oid == cid or not vertically_overlaps(item, other):
                    continue
                if _spans_intersect(xs[cid], item.width, xs[oid], other.width):
                    xs[oid] = min(xs[oid], xs[cid] - other.width)
                    changed = True

        if any(x < 0 for x in xs.values()):
            return None
    return xs


def resize_left_edge(
    items: list[GridItem],
    component_id: str,
    new_x: int,
    *,
    rules: GridRules = GRID_RULES,
) -> list[GridItem]:
    """Drag the left edge: move x while keeping the right edge fixed.

    *new_x* is clamped to ``[0, x + width - 1]`` so the width stays >= 1.
    Neighbours are pushed leftward; if any would cross column 0 the resize
    is dropped and *items* is returned unchanged.
    """
    comp = _find(items, component_id)
    if comp is None:
        return items

    clamped = max(0, min(new_x, comp.right - 1))
    resized = replace(comp, x=clamped, width=comp.right - clamped)
    others = [i for i in items if i.component_id != component_id]

    if not _collides(resized, others, rules):
        return _commit(items, resized)

    xs = _cascade_left(resized, others)
    if xs is None:
        log.info("Rejected left edge %d for %s: cascade leaves the grid",
                 clamped, component_id)
        return items

    log.debug("Left edge %d for %s pushed %d item(s) left", clamped, component_id,
              sum(1 for i in others if xs[i.component_id] != i.x))
    return _commit(items, resized, xs=xs)


# ── Bottom edge ────────────────────────────────────────────────────


def _push_down(
    col_x: int, col_width: int,
    old_bottom: int, new_bottom: int,
    others: list[GridItem],
    ys: dict[str, int],
    pushed: set[str],
) -> None:
    """Move every item under the pusher's columns below its new bottom.

    Recurses with each moved item as the next pusher, so a wide item
    carries the push into columns the original resize never spanned.
    """
    delta = new_bottom - old_bottom
    for item in sorted(others, key=lambda i: (ys[i.component_id], i.x)):
        cid = item.component_id
        if cid in pushed or not _spans_intersect(col_x, col_width, item.x, item.width):
            continue

        top = ys[cid]
        bottom = top + item.height
        if old_bottom <= top < new_bottom:
            new_top = new_bottom
        elif top >= old_bottom:
            new_top = top + delta
        elif top < new_bottom and bottom > old_bottom:
            new_top = new_bottom
        else:
            continue

        pushed.add(cid)
        ys[cid] = new_top
        _push_down(item.x, item.width, bottom, new_top + item.height,
                   others, ys, pushed)


def _settle(resized: GridItem, others: list[GridItem], ys: dict[str, int]) -> None:
    """Lower any item still overlapping one above it after the push.

    The push moves each id once, so two pushes of different depth can land
    items on the same rows.  Items are visited top-down; each is lowered
    until it clears everything already visited.  Nothing moves up and x
    never changes.
    """
    placed = [resized]
    order = sorted(others, key=lambda i: (ys[i.component_id], i.x))
    for item in order:
        cur = replace(item, y=ys[item.component_id])
        blocker = next((p for p in placed if overlaps(cur, p)), None)
        while blocker is not None:
            cur = replace(cur, y=blocker.bottom)
            blocker = next((p for p in placed if overlaps(cur, p)), None)
        ys[item.component_id] = cur.y
        placed.append(cur)


def resize_height(
    items: list[GridItem],
    component_id: str,
    new_height: int,
    *,
    rules: GridRules = GRID_RULES,
) -> list[GridItem]:
    """Drag the bottom edge: set the height, pushing items below downward.

    The height is clamped to ``[1, max_component_height]``.  Shrinking only
    vacates cells and is applied directly.  This never rejects.
    """
    comp = _find(items, component_id)
    if comp is None:
        return items

    clamped = max(1, min(new_height, rules.max_component_height))
    resized = replace(comp, height=clamped)
    others = [i for i in items if i.component_id != component_id]

    if clamped <= comp.height or not any(overlaps(resized, o) for o in others):
        return _commit(items, resized)

    ys = {i.component_id: i.y for i in others}
    pushed = {component_id}
    _push_down(comp.x, comp.width, comp.bottom, resized.bottom,
               others, ys, pushed)
    _settle(resized, others, ys)

    log.debug("Height %d for %s pushed %d item(s) down", clamped, component_id,
              sum(1 for i in others if ys[i.component_id] != i.y))
    return _commit(items, resized, ys=ys)
