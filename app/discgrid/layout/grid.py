"""Year grid layout (skyline packing) helpers.

This module is intentionally UI-framework agnostic.

Goal: given albums already grouped by year and a known viewport width,
compute absolute positions for year markers and album tiles so a renderer
can place them without measuring anything.

Every item is a square block on a grid of ``cols`` columns. A per-column
height map tracks the next free row; each item goes to the span whose
highest column is lowest (leftmost on ties). Each year starts on a fresh
row below everything placed so far. Some albums are preceded by an
invisible 1x1 spacer chosen from a hash of the album id, which breaks up
the grid without making the layout depend on a random seed.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from app.discgrid.layout.columns import derive_columns
from app.discgrid.utils.hashing import should_insert_spacer

UNKNOWN_YEAR = "Unknown"


@dataclass(frozen=True)
class GridConfig:
    """Tunings for one layout pass.

    cell_unit: nominal size of a 1x1 grid unit before scaling.
    block_size: footprint (in grid units) of year markers and albums.
    bottom_margin: flat pixels added below the tallest column.
    """

    cell_unit: int = 100
    min_cols: int = 6
    spacer_rate: float = 0.15
    padding: float = 24
    min_viewport_width: float = 200
    block_size: int = 2
    bottom_margin: float = 100

    def __post_init__(self) -> None:
        if self.cell_unit <= 0:
            raise ValueError("cell_unit must be > 0")
        if self.min_cols <= 0:
            raise ValueError("min_cols must be > 0")
        if self.padding < 0:
            raise ValueError("padding must be >= 0")
        if self.block_size <= 0:
            raise ValueError("block_size must be > 0")


DEFAULT_GRID_CONFIG = GridConfig()


@dataclass
class YearGroup:
    year: Union[int, str]
    albums: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class YearCell:
    x: float
    y: float
    w: float
    h: float
    year: Union[int, str, None]
    count: int
    kind: str = field(default="year", init=False)

    def to_dict(self) -> dict:
        return {
            "type": self.kind,
            "x": self.x,
            "y": self.y,
            "w": self.w,
            "h": self.h,
            "year": self.year,
            "count": self.count,
        }


@dataclass(frozen=True)
class AlbumCell:
    x: float
    y: float
    w: float
    h: float
    album: Any
    kind: str = field(default="album", init=False)

    def to_dict(self) -> dict:
        return {
            "type": self.kind,
            "x": self.x,
            "y": self.y,
            "w": self.w,
            "h": self.h,
            "album": self.album,
        }


Cell = Union[YearCell, AlbumCell]


@dataclass(frozen=True)
class GridLayout:
    cells: List[Cell]
    total_height: float
    cell_size: float = 0
    cols: int = 0

    def to_dict(self) -> dict:
        return {
            "cells": [c.to_dict() for c in self.cells],
            "totalHeight": self.total_height,
            "cellSize": self.cell_size,
        }


def _empty_layout() -> GridLayout:
    return GridLayout(cells=[], total_height=0)


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def album_id(album: Any) -> str:
    """Stable id used for hashing; missing ids collapse to ""."""
    value = _field(album, "id")
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def find_placement(height_map: Sequence[int], item_w: int) -> Tuple[int, int]:
    """Return (col, row) for an item spanning item_w columns.

    The row is the highest height-map value under the span. The lowest
    such row wins; scanning left to right, only a strictly lower row
    replaces the current best, so ties go to the leftmost column.
    """

    best_col = 0
    best_row: Optional[int] = None
    for c in range(len(height_map) - item_w + 1):
        row = max(height_map[c:c + item_w])
        if best_row is None or row < best_row:
            best_row = row
            best_col = c
    return best_col, (best_row if best_row is not None else 0)


def mark_placement(height_map: List[int], col: int, row: int, w: int, h: int) -> None:
    for i in range(w):
        height_map[col + i] = row + h


def _usable(viewport_width: Any, config: GridConfig) -> bool:
    if not viewport_width or isinstance(viewport_width, bool):
        return False
    if not isinstance(viewport_width, (int, float)) or not math.isfinite(viewport_width):
        return False
    if viewport_width < config.min_viewport_width:
        return False
    return viewport_width - config.padding * 2 > 0


def compute_grid_layout(
    year_groups: Optional[Iterable[Any]],
    viewport_width: Optional[float],
    *,
    config: GridConfig = DEFAULT_GRID_CONFIG,
) -> GridLayout:
    """Lay out year markers and album tiles for one viewport width.

    year_groups are consumed in the given order; each is a YearGroup or a
    mapping with "year" and "albums". Albums are passed through untouched
    into their AlbumCell; only their "id" is read.

    Returns an empty layout (no cells, zero height) when the width is
    missing or below config.min_viewport_width, or when there are no
    groups. Otherwise never raises; invalid tunings are rejected earlier,
    when the GridConfig is built.
    """

    groups = list(year_groups) if year_groups else []
    if not groups or not _usable(viewport_width, config):
        return _empty_layout()

    cols, cell_size = derive_columns(
        viewport_width=viewport_width,
        cell_unit=config.cell_unit,
        min_cols=config.min_cols,
        padding=config.padding,
    )
    block = config.block_size
    if cols < block:
        return _empty_layout()

    # Local to this call; never shared.
    height_map = [0] * cols
    cells: List[Cell] = []
    side = cell_size * block

    for index, group in enumerate(groups):
        albums = list(_field(group, "albums") or [])

        # Every year after the first starts one empty row below the tallest column.
        if index > 0:
            level = max(height_map) + 1
            height_map[:] = [level] * cols

        col, row = find_placement(height_map, block)
        mark_placement(height_map, col, row, block, block)
        cells.append(
            YearCell(
                x=config.padding + col * cell_size,
                y=row * cell_size,
                w=side,
                h=side,
                year=_field(group, "year"),
                count=len(albums),
            )
        )

        for album in albums:
            if should_insert_spacer(album_id(album), config.spacer_rate):
                s_col, s_row = find_placement(height_map, 1)
                mark_placement(height_map, s_col, s_row, 1, 1)

            col, row = find_placement(height_map, block)
            mark_placement(height_map, col, row, block, block)
            cells.append(
                AlbumCell(
                    x=config.padding + col * cell_size,
                    y=row * cell_size,
                    w=side,
                    h=side,
                    album=album,
                )
            )

    total = max(height_map) * cell_size + config.bottom_margin
    return GridLayout(cells=cells, total_height=total, cell_size=cell_size, cols=cols)
