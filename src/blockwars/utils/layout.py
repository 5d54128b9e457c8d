"""Pixel math for laying items out on a regular grid."""
from __future__ import annotations

from dataclasses import dataclass

from blockwars.constants import (
    LAYOUT_CELL_HEIGHT,
    LAYOUT_CELL_WIDTH,
    LAYOUT_COLS,
    LAYOUT_GAP_X,
    LAYOUT_GAP_Y,
)


@dataclass(slots=True)
class LayoutOptions:
    cols: int = LAYOUT_COLS
    cell_w: float = LAYOUT_CELL_WIDTH
    cell_h: float = LAYOUT_CELL_HEIGHT
    gap_x: float = LAYOUT_GAP_X
    gap_y: float = LAYOUT_GAP_Y
    origin_x: float = 0
    origin_y: float = 0

    def resolved(self) -> "LayoutOptions":
        # Zero or missing values fall back to the defaults, including the gaps.
        return LayoutOptions(
            cols=self.cols or LAYOUT_COLS,
            cell_w=self.cell_w or LAYOUT_CELL_WIDTH,
            cell_h=self.cell_h or LAYOUT_CELL_HEIGHT,
            gap_x=self.gap_x or LAYOUT_GAP_X,
            gap_y=self.gap_y or LAYOUT_GAP_Y,
            origin_x=self.origin_x or 0,
            origin_y=self.origin_y or 0,
        )


@dataclass(slots=True, frozen=True)
class GridPosition:
    x: float
    y: float
    row: int
    col: int


def cell_position(row: int, col: int, options: LayoutOptions | None = None) -> GridPosition:
    opts = (options or LayoutOptions()).resolved()
    x = opts.origin_x + col * (opts.cell_w + opts.gap_x)
    y = opts.origin_y + row * (opts.cell_h + opts.gap_y)
    return GridPosition(x=x, y=y, row=row, col=col)


def grid_pos(index: int, options: LayoutOptions | None = None) -> GridPosition:
    """Return the position of the ``index``-th item laid out row by row."""
    opts = (options or LayoutOptions()).resolved()
    row, col = divmod(index, opts.cols)
    return cell_position(row, col, opts)
