"""Column-count helpers for the year grid."""

from __future__ import annotations


def derive_columns(
    *,
    viewport_width: float,
    cell_unit: int,
    min_cols: int,
    padding: float,
) -> tuple[int, float]:
    """Derive (cols, cell_size) for a viewport.

    Policy:
    - usable width is the viewport minus padding on both sides
    - nominal column count is usable // cell_unit
    - odd counts drop by one so 2x2 blocks sit symmetric to the edges
    - never fewer than min_cols

    cell_size is the real rendered width of one grid unit; it differs from
    cell_unit whenever the division is not exact or min_cols kicked in.
    """

    if viewport_width <= 0:
        raise ValueError("viewport_width must be > 0")
    if cell_unit <= 0:
        raise ValueError("cell_unit must be > 0")
    if min_cols <= 0:
        raise ValueError("min_cols must be > 0")
    if padding < 0:
        raise ValueError("padding must be >= 0")

    usable = viewport_width - padding * 2
    if usable <= 0:
        raise ValueError("viewport too narrow for given padding")

    cols = int(usable // cell_unit)
    if cols % 2 != 0:
        cols -= 1
    cols = max(min_cols, cols)
    return cols, usable / cols
