"""Layout dataclasses: grid items and validator findings."""

from __future__ import annotations

from dataclasses import dataclass, field


# ── Items ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class GridItem:
    """A placed rectangular component, in grid-cell units.

    Items are immutable values.  Operations produce moved or resized copies
    via :func:`dataclasses.replace`; the list passed in is never touched.
    """

    component_id: str
    component_type: str
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        """Exclusive right edge (``x + width``)."""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """Exclusive bottom edge (``y + height``)."""
        return self.y + self.height


# ── Validator output ───────────────────────────────────────────────

OVERLAP = "overlap"
OUT_OF_BOUNDS = "out_of_bounds"
INVALID_DIMENSIONS = "invalid_dimensions"

VIOLATION_KINDS = (OVERLAP, OUT_OF_BOUNDS, INVALID_DIMENSIONS)


@dataclass
class Violation:
    """One broken layout invariant."""

    kind: str                   # one of VIOLATION_KINDS
    message: str
    affected_ids: list[str] = field(default_factory=list)


class LayoutFormatError(ValueError):
    """Raised when interchange data cannot be turned into grid items."""

    def __init__(self, index: int, reason: str) -> None:
        self.index = index
        self.reason = reason
        super().__init__(f"Item {index}: {reason}")
