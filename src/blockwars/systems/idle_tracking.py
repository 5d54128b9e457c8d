"""Board-settledness predicates and the post-swap cascade end trigger.

Every predicate materializes the matrix first and walks every cell. An empty
wrapper and a missing wrapper are both "missing" here; the predicates differ
only in how they treat that case.
"""
from __future__ import annotations

import logging
from typing import Optional

from blockwars.components.block import BlockEntry, BlockState
from blockwars.grid import GridLike

logger = logging.getLogger(__name__)

ACTIVE_STATES = frozenset({BlockState.LAUNCH.value, BlockState.MATCH.value, BlockState.EXPLODE.value})


def hero_cell_fulfills_idle(grid: GridLike, row: int, col: int, entry: Optional[BlockEntry]) -> bool:
    """True when a hero occupies the cell or the entry is bound to one."""
    if grid.is_hero_occupied_cell(row, col):
        return True
    return entry is not None and entry.is_hero_bound()


def all_entries_idle_allow_missing(grid: GridLike) -> bool:
    grid.ensure_matrix()
    for row in range(grid.grid_rows):
        for col in range(grid.grid_cols):
            entry = grid.get_block_entry_at(row, col)
            if entry is None:
                continue
            if grid.normalize_state_name(entry.block_state) != BlockState.IDLE.value:
                if hero_cell_fulfills_idle(grid, row, col, entry):
                    continue
                return False
    return True


def all_entries_idle_no_missing(grid: GridLike) -> bool:
    grid.ensure_matrix()
    for row in range(grid.grid_rows):
        for col in range(grid.grid_cols):
            entry = grid.get_block_entry_at(row, col)
            if entry is None:
                if hero_cell_fulfills_idle(grid, row, col, entry):
                    continue
                return False
            if grid.normalize_state_name(entry.block_state) != BlockState.IDLE.value:
                if hero_cell_fulfills_idle(grid, row, col, entry):
                    continue
                return False
    return True


def all_entries_idle_destroyed_or_missing(grid: GridLike) -> bool:
    grid.ensure_matrix()
    settled = (BlockState.IDLE.value, BlockState.DESTROYED.value)
    for row in range(grid.grid_rows):
        for col in range(grid.grid_cols):
            entry = grid.get_block_entry_at(row, col)
            if entry is None:
                continue
            if grid.normalize_state_name(entry.block_state) not in settled:
                if hero_cell_fulfills_idle(grid, row, col, entry):
                    continue
                return False
    return True


def has_missing_or_destroyed_blocks(grid: GridLike) -> bool:
    grid.ensure_matrix()
    for row in range(grid.grid_rows):
        for col in range(grid.grid_cols):
            entry = grid.get_block_entry_at(row, col)
            if entry is None:
                return True
            if grid.normalize_state_name(entry.block_state) == BlockState.DESTROYED.value:
                return True
    return False


def has_active_non_idle_blocks(grid: GridLike) -> bool:
    """True if any entry is launching, matching or exploding."""
    grid.ensure_matrix()
    for row in range(grid.grid_rows):
        for col in range(grid.grid_cols):
            entry = grid.get_block_entry_at(row, col)
            if entry is None:
                continue
            if grid.normalize_state_name(entry.block_state) in ACTIVE_STATES:
                return True
    return False


def handle_post_swap_cascade_resolution(grid: GridLike) -> bool:
    """End a post-swap cascade once the board is full and quiet.

    Fires at most once per cascade: it clears ``post_swap_cascading`` and asks
    the grid for the ``idle`` board state, returning True. Any other call
    returns False without side effects.
    """
    if not grid.post_swap_cascading:
        return False
    if has_missing_or_destroyed_blocks(grid):
        return False
    if has_active_non_idle_blocks(grid):
        return False
    grid.post_swap_cascading = False
    grid.request_state("idle")
    logger.debug("Post-swap cascade resolved")
    return True
