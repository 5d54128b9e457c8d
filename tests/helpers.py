from __future__ import annotations

import random
from typing import List, Optional, Sequence

from blockwars.components.block import BlockEntry
from blockwars.config import GridConfig
from blockwars.events.bus import EventBus
from blockwars.grid import BattleGrid, create_battle_grid


def build_grid(
    colors: Sequence[Sequence[Optional[str]]],
    *,
    event_bus: EventBus | None = None,
    health: float = 5,
    seed: int = 0,
) -> BattleGrid:
    """Grid whose cell (r, c) holds a block named ``block_r_c`` of the given color.

    ``None`` leaves the slot without a wrapper.
    """
    rows = len(colors)
    cols = max(len(line) for line in colors)
    grid = create_battle_grid(event_bus, GridConfig(rows=rows, cols=cols), rng=random.Random(seed))
    for r, line in enumerate(colors):
        for c, color in enumerate(line):
            if color is None:
                continue
            grid.place_block(r, c, BlockEntry(
                block_color=color,
                item_name=f"block_{r}_{c}",
                health=health,
                state_listener=grid.state_listener(),
            ))
    return grid


def states_of(grid: BattleGrid) -> List[List[Optional[str]]]:
    states: List[List[Optional[str]]] = []
    for r in range(grid.grid_rows):
        row: List[Optional[str]] = []
        for c in range(grid.grid_cols):
            entry = grid.get_block_entry_at(r, c)
            row.append(grid.normalize_state_name(entry.block_state) if entry is not None else None)
        states.append(row)
    return states
