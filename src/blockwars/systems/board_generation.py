"""Match-free starting boards.

Generation is two steps: fill the matrix cell by cell with colors that do not
complete a run against their neighbours, then scrub whatever runs the
unconstrained fallback let through. A cell with no safe color first tries to
free one by recoloring its left or upper neighbour. The scrub is bounded by a
fixed number of passes, so a two-color palette can still, rarely, leave runs
behind.
"""
from __future__ import annotations

import logging
import random
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from blockwars.config import resolve_palette
from blockwars.constants import MIN_RUN_LENGTH, REROLL_PASSES
from blockwars.grid import GridLike

logger = logging.getLogger(__name__)

Position = Tuple[int, int]
ColorMatrix = List[List[Optional[str]]]


def _resolve_rng(grid: GridLike, rng: Optional[random.Random]) -> random.Random:
    if rng is not None:
        return rng
    candidate = getattr(getattr(grid, "world", None), "random", None)
    if isinstance(candidate, random.Random):
        return candidate
    return random.Random()


def _color_at(matrix: ColorMatrix, row: int, col: int) -> Optional[str]:
    if row < 0 or col < 0 or row >= len(matrix) or col >= len(matrix[row]):
        return None
    return matrix[row][col]


def creates_local_run(matrix: ColorMatrix, row: int, col: int, color: str) -> bool:
    """Would placing ``color`` at (row, col) complete a run with its neighbours?

    Checks the two cells before, the two cells after, and the straddling pair,
    both horizontally and vertically.
    """
    def same(r: int, c: int) -> bool:
        return _color_at(matrix, r, c) == color

    if same(row, col - 1) and same(row, col - 2):
        return True
    if same(row, col + 1) and same(row, col + 2):
        return True
    if same(row, col - 1) and same(row, col + 1):
        return True
    if same(row - 1, col) and same(row - 2, col):
        return True
    if same(row + 1, col) and same(row + 2, col):
        return True
    return same(row - 1, col) and same(row + 1, col)


def _pick_safe(
    matrix: ColorMatrix,
    row: int,
    col: int,
    palette: Sequence[str],
    rng: random.Random,
    exclude: Optional[str] = None,
) -> Optional[str]:
    pool = [color for color in palette if color != exclude]
    rng.shuffle(pool)
    for candidate in pool:
        if not creates_local_run(matrix, row, col, candidate):
            return candidate
    return None


def select_alternate_color(
    matrix: ColorMatrix,
    row: int,
    col: int,
    palette: Sequence[str],
    rng: random.Random,
    *,
    exclude: Optional[str] = None,
) -> str:
    """Pick a color for the cell that does not complete a run.

    Candidates are drawn from the shuffled palette without replacement, minus
    ``exclude``. When every candidate would complete a run the pick is made
    without the constraint.
    """
    choice = _pick_safe(matrix, row, col, palette, rng, exclude)
    if choice is not None:
        return choice
    pool = [color for color in palette if color != exclude]
    fallback = rng.choice(pool or list(palette))
    logger.debug("No safe color for cell %s, falling back to %s", (row, col), fallback)
    return fallback


def _free_cell_by_neighbour(
    matrix: ColorMatrix,
    row: int,
    col: int,
    palette: Sequence[str],
    rng: random.Random,
) -> bool:
    """Recolor the left or upper neighbour so (row, col) gets a safe color.

    Only safe recolors are made. True once some palette color fits the cell.
    """
    for n_row, n_col in ((row, col - 1), (row - 1, col)):
        current = _color_at(matrix, n_row, n_col)
        if current is None:
            continue
        replacement = _pick_safe(matrix, n_row, n_col, palette, rng, current)
        if replacement is None:
            continue
        matrix[n_row][n_col] = replacement
        if any(not creates_local_run(matrix, row, col, color) for color in palette):
            return True
    return False


def build_match_safe_matrix(
    rows: int,
    cols: int,
    palette: Sequence[str],
    rng: random.Random,
    hero_cells: Iterable[Position] = (),
) -> ColorMatrix:
    blocked: Set[Position] = set(hero_cells)
    matrix: ColorMatrix = [[None] * cols for _ in range(rows)]
    for row in range(rows):
        for col in range(cols):
            if (row, col) in blocked:
                continue
            color = _pick_safe(matrix, row, col, palette, rng)
            if color is None and _free_cell_by_neighbour(matrix, row, col, palette, rng):
                color = _pick_safe(matrix, row, col, palette, rng)
            if color is None:
                color = select_alternate_color(matrix, row, col, palette, rng)
            matrix[row][col] = color
    return matrix


def _find_runs(line: Sequence[Optional[str]]) -> List[Tuple[int, int]]:
    """Half-open (start, end) index ranges of runs along one line."""
    runs: List[Tuple[int, int]] = []
    start = 0
    for idx in range(1, len(line) + 1):
        if idx < len(line) and line[idx] is not None and line[idx] == line[start]:
            continue
        if line[start] is not None and idx - start >= MIN_RUN_LENGTH:
            runs.append((start, idx))
        start = idx
    return runs


def _reroll_cell(matrix: ColorMatrix, row: int, col: int, palette: Sequence[str], rng: random.Random) -> bool:
    current = matrix[row][col]
    replacement = select_alternate_color(matrix, row, col, palette, rng, exclude=current)
    if replacement == current:
        return False
    matrix[row][col] = replacement
    return True


def _break_run(matrix: ColorMatrix, cells: List[Position], palette: Sequence[str], rng: random.Random) -> bool:
    """Recolor one cell of the run with a safe color.

    Cells whose recolor leaves no run on either side go first, offsets 2, 5, ...
    ahead of the rest. Only when no cell has a safe alternate is the offset-2
    cell flipped unconstrained.
    """
    step = MIN_RUN_LENGTH
    length = len(cells)

    def priority(idx: int) -> Tuple[bool, bool, int]:
        splits = idx < step and length - idx - 1 < step
        return (not splits, idx % step != step - 1, idx)

    for idx in sorted(range(length), key=priority):
        row, col = cells[idx]
        replacement = _pick_safe(matrix, row, col, palette, rng, matrix[row][col])
        if replacement is not None:
            matrix[row][col] = replacement
            return True
    row, col = cells[step - 1]
    return _reroll_cell(matrix, row, col, palette, rng)


def reroll_row_matches(matrix: ColorMatrix, palette: Sequence[str], rng: random.Random) -> bool:
    """Break each horizontal run with one recolor; True if anything changed."""
    changed = False
    for row, line in enumerate(matrix):
        for start, end in _find_runs(line):
            cells = [(row, col) for col in range(start, end)]
            changed = _break_run(matrix, cells, palette, rng) or changed
    return changed


def reroll_column_matches(matrix: ColorMatrix, palette: Sequence[str], rng: random.Random) -> bool:
    changed = False
    cols = max((len(line) for line in matrix), default=0)
    for col in range(cols):
        column = [_color_at(matrix, row, col) for row in range(len(matrix))]
        for start, end in _find_runs(column):
            cells = [(row, col) for row in range(start, end)]
            changed = _break_run(matrix, cells, palette, rng) or changed
    return changed


def scrub_matrix_matches(
    matrix: ColorMatrix,
    palette: Sequence[str],
    rng: random.Random,
    passes: int = REROLL_PASSES,
) -> int:
    """Reroll leftover runs until a pass changes nothing; returns the passes used."""
    for done in range(1, passes + 1):
        rows_changed = reroll_row_matches(matrix, palette, rng)
        cols_changed = reroll_column_matches(matrix, palette, rng)
        if not (rows_changed or cols_changed):
            return done
    return passes


def matrix_has_matches(matrix: Sequence[Sequence[Optional[str]]]) -> bool:
    for line in matrix:
        if _find_runs(line):
            return True
    cols = max((len(line) for line in matrix), default=0)
    for col in range(cols):
        column = [line[col] if col < len(line) else None for line in matrix]
        if _find_runs(column):
            return True
    return False


def generate_match_free_matrix(
    grid: GridLike,
    palette: Optional[Iterable[str]] = None,
    *,
    rng: Optional[random.Random] = None,
    passes: int = REROLL_PASSES,
) -> ColorMatrix:
    """Build a fresh color matrix for the grid's dimensions without touching the grid.

    Hero-occupied cells come back as ``None``.
    """
    grid.ensure_matrix()
    rows, cols = grid.grid_rows, grid.grid_cols
    colors = resolve_palette(palette)
    rng = _resolve_rng(grid, rng)
    hero_cells = [
        (row, col)
        for row in range(rows)
        for col in range(cols)
        if grid.is_hero_occupied_cell(row, col)
    ]
    matrix = build_match_safe_matrix(rows, cols, colors, rng, hero_cells)
    scrub_matrix_matches(matrix, colors, rng, passes)
    return matrix
