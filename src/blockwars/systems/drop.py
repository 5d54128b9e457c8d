from typing import List

from blockwars.components.block import BlockEntry
from blockwars.components.drop_phase import DropPhase, DropTracker
from blockwars.events.bus import EventBus, EVENT_BLOCKS_MUTATED, EVENT_TICK
from blockwars.factories.blocks import settle_block
from blockwars.grid import BattleGrid


def advance_drops(grid: BattleGrid, dt: float) -> List[str]:
    """Step every in-flight drop by ``dt`` and settle the ones that landed."""
    world = grid.world
    landed: List[str] = []
    for ent, tracker in list(world.get_component(DropTracker)):
        if tracker.advance(dt) is not DropPhase.SETTLED:
            continue
        entry = world.component_for_entity(ent, BlockEntry)
        settle_block(entry)
        world.remove_component(ent, DropTracker)
        landed.append(entry.item_name)
    return landed


class DropSystem:
    def __init__(self, grid: BattleGrid, event_bus: EventBus):
        self.grid = grid
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get("dt", 0.0)
        landed = advance_drops(self.grid, dt)
        if landed:
            self.event_bus.emit(EVENT_BLOCKS_MUTATED, reason="drop_settled", items=landed)
