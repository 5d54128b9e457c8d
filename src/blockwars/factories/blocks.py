from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from blockwars.components.block import BlockEntry, BlockState, HeroLink
from blockwars.components.drop_phase import DropTracker
from blockwars.grid import BattleGrid
from blockwars.systems.color_pool import ColorPool
from blockwars.utils.identifiers import IdGenerator

DEFAULT_DROP_DURATION = 0.2


def create_block(
    grid: BattleGrid,
    row: int,
    col: int,
    *,
    id_generator: IdGenerator,
    color: str = "red",
    name_prefix: str = "block",
    health: Optional[float] = None,
    hero_link: Optional[HeroLink] = None,
    serializer: Optional[Callable[[BlockEntry], Dict[str, Any]]] = None,
    spawn_from_above: bool = False,
    drop_duration: float = DEFAULT_DROP_DURATION,
) -> BlockEntry:
    """Create a named block entry and place it on the grid.

    Blocks spawned from above start ``animating`` and carry a ``DropTracker``
    until the drop system settles them.
    """
    entry = BlockEntry(
        block_color=color or "red",
        item_name=id_generator(f"{name_prefix}_core"),
        health=grid.config.block_health if health is None else health,
        hero_link=hero_link,
        serializer=serializer,
        state_listener=grid.state_listener(),
    )
    if spawn_from_above:
        entry.block_state = BlockState.ANIMATING
    wrapper = grid.place_block(row, col, entry)
    if spawn_from_above:
        grid.world.add_component(wrapper.entity, DropTracker(duration=max(drop_duration, 0.0)))
    return entry


def settle_block(entry: BlockEntry) -> bool:
    """Return an animating block to idle; other states are left alone."""
    if BattleGrid.normalize_state_name(entry.block_state) != BlockState.ANIMATING.value:
        return False
    entry.transition(BlockState.IDLE)
    return True


def fill_missing_cells(
    grid: BattleGrid,
    pool: ColorPool,
    *,
    id_generator: IdGenerator,
    spawn_from_above: bool = False,
) -> List[BlockEntry]:
    """Refill every empty, hero-free slot, drawing colors from one pool queue per column."""
    created: List[BlockEntry] = []
    grid.ensure_matrix()
    for row in range(grid.grid_rows):
        for col in range(grid.grid_cols):
            if grid.get_block_entry_at(row, col) is not None:
                continue
            if grid.is_hero_occupied_cell(row, col):
                continue
            created.append(create_block(
                grid,
                row,
                col,
                id_generator=id_generator,
                color=pool.next_color(queue=col),
                spawn_from_above=spawn_from_above,
            ))
    return created
