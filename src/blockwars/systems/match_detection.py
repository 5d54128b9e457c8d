"""Run detection over the block matrix.

Runs are three or more contiguous cells of the same truthy color in one row or
column. Hero-exempt cells and empty slots break runs.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from blockwars.components.block import BlockState
from blockwars.components.cell import CellWrapper
from blockwars.constants import MIN_RUN_LENGTH
from blockwars.grid import GridLike
from blockwars.systems.idle_tracking import hero_cell_fulfills_idle

Position = Tuple[int, int]


@dataclass(slots=True)
class MatchReport:
    matches: List[str] = field(default_factory=list)
    positions: List[Position] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.positions)


def _wrapper(grid: GridLike, row: int, col: int) -> Optional[CellWrapper]:
    matrix = grid.block_matrix or []
    if row >= len(matrix) or not matrix[row] or col >= len(matrix[row]):
        return None
    return matrix[row][col]


def _effective_color(grid: GridLike, row: int, col: int, wrapper: Optional[CellWrapper]) -> Optional[str]:
    entry = wrapper.entry if wrapper is not None else None
    if entry is None:
        return None
    if hero_cell_fulfills_idle(grid, row, col, entry):
        return None
    return entry.block_color or None


def _sweep(grid: GridLike, cells: List[Position], matched: Dict[int, Tuple[Position, CellWrapper]]) -> None:
    """Register every wrapper of each qualifying run along one line of cells."""
    run_color: Optional[str] = None
    run: List[Tuple[Position, CellWrapper]] = []
    # One extra step past the end flushes the final run.
    for pos in cells + [None]:
        if pos is None:
            wrapper, color = None, None
        else:
            wrapper = _wrapper(grid, *pos)
            color = _effective_color(grid, pos[0], pos[1], wrapper)
        if color and color == run_color:
            run.append((pos, wrapper))
            continue
        if run_color and len(run) >= MIN_RUN_LENGTH:
            for run_pos, run_wrapper in run:
                matched.setdefault(id(run_wrapper), (run_pos, run_wrapper))
        run_color = color
        run = [(pos, wrapper)] if color else []


def mark_matched_blocks(grid: GridLike) -> MatchReport:
    """Flag every block in a horizontal or vertical run as ``matched``.

    Blocks that were ``matched`` but no longer belong to a run go back to
    ``idle``. A block in both a row run and a column run is counted once.
    """
    grid.ensure_matrix()
    rows, cols = grid.grid_rows, grid.grid_cols
    # Keyed by wrapper identity; dicts keep registration order.
    matched: Dict[int, Tuple[Position, CellWrapper]] = {}

    for row in range(rows):
        _sweep(grid, [(row, col) for col in range(cols)], matched)
    for col in range(cols):
        _sweep(grid, [(row, col) for row in range(rows)], matched)

    for row in range(rows):
        for col in range(cols):
            wrapper = _wrapper(grid, row, col)
            if wrapper is None or wrapper.entry is None:
                continue
            entry = wrapper.entry
            if id(wrapper) in matched:
                entry.transition(BlockState.MATCHED)
            elif grid.normalize_state_name(entry.block_state) == BlockState.MATCHED.value:
                entry.transition(BlockState.IDLE)

    report = MatchReport()
    for pos, wrapper in matched.values():
        report.positions.append(pos)
        if wrapper.entry is not None and wrapper.entry.item_name:
            report.matches.append(wrapper.entry.item_name)
    return report


def has_matched_blocks(grid: GridLike) -> bool:
    grid.ensure_matrix()
    for row in range(grid.grid_rows):
        for col in range(grid.grid_cols):
            entry = grid.get_block_entry_at(row, col)
            if entry is None:
                continue
            if grid.normalize_state_name(entry.block_state) == BlockState.MATCHED.value:
                return True
    return False
