"""Layout serialization: JSON conversion and legacy-format migration.

Interchange shape of one item::

    {"componentId": "chart-a", "componentType": "Chart",
     "x": 0, "y": 0, "width": 6, "height": 2}

The legacy format stored rows of bare ``{componentId, componentType}``
entries with no geometry; :func:`migrate_legacy_rows` converts it once.
"""

from __future__ import annotations

from typing import Any

from dashgrid.config import GRID_RULES, GridRules

from .models import GridItem, Violation, LayoutFormatError


_INT_FIELDS = ("x", "y", "width", "height")


def layout_to_dict(items: list[GridItem]) -> list[dict]:
    """Serialize a layout to a JSON-safe list."""
    return [
        {
            "componentId": i.component_id,
            "componentType": i.component_type,
            "x": i.x,
            "y": i.y,
            "width": i.width,
            "height": i.height,
        }
        for i in items
    ]


def _as_int(value: Any, index: int, key: str) -> int:
    if isinstance(value, bool):
        raise LayoutFormatError(index, f"'{key}' must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise LayoutFormatError(index, f"'{key}' must be an integer, got {value!r}")


def parse_layout(data: list) -> list[GridItem]:
    """Parse a layout.json list back into grid items.

    Raises
    ------
    LayoutFormatError
        If an entry is missing a field, has a non-integer coordinate or
        reuses another entry's ``componentId``.
    """
    if not isinstance(data, list):
        raise LayoutFormatError(-1, "layout must be a list of items")

    items: list[GridItem] = []
    seen: set[str] = set()
    for idx, raw in enumerate(data):
        if not isinstance(raw, dict):
            raise LayoutFormatError(idx, "item must be an object")
        for key in ("componentId", "componentType", *_INT_FIELDS):
            if key not in raw:
                raise LayoutFormatError(idx, f"missing required field '{key}'")
        if not isinstance(raw["componentId"], str) or not raw["componentId"]:
            raise LayoutFormatError(idx, "'componentId' must be a non-empty string")
        if raw["componentId"] in seen:
            raise LayoutFormatError(idx, f"duplicate componentId {raw['componentId']!r}")
        seen.add(raw["componentId"])
        if not isinstance(raw["componentType"], str):
            raise LayoutFormatError(idx, "'componentType' must be a string")

        x, y, width, height = (_as_int(raw[k], idx, k) for k in _INT_FIELDS)
        items.append(GridItem(
            component_id=raw["componentId"],
            component_type=raw["componentType"],
            x=x, y=y, width=width, height=height,
        ))
    return items


def violations_to_dict(violations: list[Violation]) -> list[dict]:
    """Serialize validator findings to a JSON-safe list."""
    return [
        {"kind": v.kind, "message": v.message, "affectedIds": list(v.affected_ids)}
        for v in violations
    ]


# ── Legacy rows ────────────────────────────────────────────────────


def is_legacy_format(data: Any) -> bool:
    """True for the old ``[{"items": [...]}, ...]`` row layout."""
    return (
        isinstance(data, list)
        and len(data) > 0
        and all(isinstance(r, dict) and isinstance(r.get("items"), list) for r in data)
    )


def migrate_legacy_rows(
    rows: list[dict],
    *,
    rules: GridRules = GRID_RULES,
) -> list[GridItem]:
    """Convert legacy rows into grid items.

    Each row's items split the grid width evenly, leftover columns going to
    the leading items.  Row index becomes ``y`` and every item is one row
    tall.  Empty rows produce nothing but still use up their row index.
    """
    result: list[GridItem] = []
    seen: set[str] = set()
    for row_idx, row in enumerate(rows):
        entries = row.get("items", []) if isinstance(row, dict) else None
        if not isinstance(entries, list):
            raise LayoutFormatError(row_idx, "legacy row needs an 'items' list")
        count = len(entries)
        if count == 0:
            continue
        base_width, remainder = divmod(rules.grid_columns, count)
        x = 0
        for i, entry in enumerate(entries):
            if (not isinstance(entry, dict)
                    or "componentId" not in entry or "componentType" not in entry):
                raise LayoutFormatError(
                    i, f"row {row_idx}: legacy item needs componentId and componentType")
            if entry["componentId"] in seen:
                raise LayoutFormatError(
                    i, f"row {row_idx}: duplicate componentId {entry['componentId']!r}")
            seen.add(entry["componentId"])
            w = base_width + (1 if i < remainder else 0)
            result.append(GridItem(
                component_id=entry["componentId"],
                component_type=entry["componentType"],
                x=x, y=row_idx, width=w, height=1,
            ))
            x += w
    return result
