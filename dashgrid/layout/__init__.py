"""Layout engine: positions dashboard components on a fixed-width grid.

Submodules:
  models        Item and violation dataclasses.
  geometry      Half-open rectangle overlap predicates.
  search        Column-locked free-cell search.
  placement     add / remove / reposition.
  resize        Right, left and bottom edge resizes with cascading pushes.
  validation    Independent invariant checker.
  serialization JSON conversion and legacy-row migration.
"""

from .models import GridItem, Violation, LayoutFormatError
from .geometry import overlaps, vertically_overlaps, horizontally_overlaps, max_occupied_row
from .search import find_free_cell
from .placement import add_component, remove_component, reposition_component
from .resize import resize_width, resize_left_edge, resize_height
from .validation import validate_layout
from .serialization import (
    layout_to_dict, parse_layout, violations_to_dict,
    is_legacy_format, migrate_legacy_rows,
)

__all__ = [
    # Models
    "GridItem", "Violation", "LayoutFormatError",
    # Geometry
    "overlaps", "vertically_overlaps", "horizontally_overlaps", "max_occupied_row",
    # Operations
    "find_free_cell",
    "add_component", "remove_component", "reposition_component",
    "resize_width", "resize_left_edge", "resize_height",
    # Validation
    "validate_layout",
    # Serialization
    "layout_to_dict", "parse_layout", "violations_to_dict",
    "is_legacy_format", "migrate_legacy_rows",
]
