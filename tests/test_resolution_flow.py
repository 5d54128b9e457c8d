import random

from blockwars.components.block import BlockState
from blockwars.components.board import BoardState
from blockwars.components.drop_phase import DropPhase, DropTracker
from blockwars.config import GridConfig
from blockwars.events.bus import (EventBus, EVENT_TILE_SWAP_FINALIZE, EVENT_BLOCKS_MUTATED, EVENT_MATCH_FOUND,
                                  EVENT_CASCADE_COMPLETE, EVENT_BOARD_RESHUFFLE_REQUEST, EVENT_BOARD_GENERATED,
                                  EVENT_TICK)
from blockwars.factories.blocks import create_block, fill_missing_cells, settle_block
from blockwars.grid import create_battle_grid
from blockwars.systems.board_generation import matrix_has_matches
from blockwars.systems.color_pool import ColorPool
from blockwars.systems.drop import DropSystem
from blockwars.systems.resolution import BoardResolutionSystem
from blockwars.utils.identifiers import SequenceIdGenerator
from tests.helpers import build_grid


def test_swap_then_clear_then_refill_ends_cascade():
    bus = EventBus()
    grid = build_grid([["red", "red", "blue", "red"]], event_bus=bus)
    BoardResolutionSystem(grid, bus)
    found = []; complete = []
    bus.subscribe(EVENT_MATCH_FOUND, lambda s, **k: found.append(k))
    bus.subscribe(EVENT_CASCADE_COMPLETE, lambda s, **k: complete.append(k))

    assert grid.swap_blocks((0, 2), (0, 3))
    bus.emit(EVENT_TILE_SWAP_FINALIZE, src=(0, 2), dst=(0, 3))
    assert len(found) == 1
    assert sorted(found[0]['names']) == ["block_0_0", "block_0_1", "block_0_3"]
    assert found[0]['size'] == 3
    assert grid.post_swap_cascading
    assert grid.board_state is BoardState.CASCADING

    # Gameplay removes the matched blocks; the board has holes, so the cascade stays open.
    for row, col in found[0]['positions']:
        grid.clear_cell(row, col)
    bus.emit(EVENT_BLOCKS_MUTATED, reason="cleared")
    assert complete == []
    assert grid.post_swap_cascading

    ids = SequenceIdGenerator(clock=lambda: 2.0)
    for col, color in enumerate(["green", "yellow", "green"]):
        create_block(grid, 0, col, id_generator=ids, color=color)
    bus.emit(EVENT_BLOCKS_MUTATED, reason="refill")
    assert complete == [{'reason': 'refill'}]
    assert not grid.post_swap_cascading
    assert grid.board_state is BoardState.IDLE

    bus.emit(EVENT_BLOCKS_MUTATED, reason="refill")
    assert len(complete) == 1
    assert len(found) == 1


def test_mutation_without_cascade_only_marks():
    bus = EventBus()
    grid = build_grid([["blue", "blue", "blue"]], event_bus=bus)
    BoardResolutionSystem(grid, bus)
    complete = []
    bus.subscribe(EVENT_CASCADE_COMPLETE, lambda s, **k: complete.append(k))
    bus.emit(EVENT_BLOCKS_MUTATED, reason="explosion")
    assert grid.get_block_entry_at(0, 1).block_state is BlockState.MATCHED
    assert complete == []


def test_swap_event_without_positions_is_ignored():
    bus = EventBus()
    grid = build_grid([["red", "blue"]], event_bus=bus)
    BoardResolutionSystem(grid, bus)
    bus.emit(EVENT_TILE_SWAP_FINALIZE, src=None, dst=(0, 1))
    assert not grid.post_swap_cascading


def test_reshuffle_request_fills_board_without_runs():
    bus = EventBus()
    grid = create_battle_grid(bus, GridConfig(rows=6, cols=6), rng=random.Random(11))
    grid.occupy_hero(2, 3)
    BoardResolutionSystem(grid, bus, id_generator=SequenceIdGenerator(clock=lambda: 3.0))
    generated = []
    bus.subscribe(EVENT_BOARD_GENERATED, lambda s, **k: generated.append(k))
    bus.emit(EVENT_BOARD_RESHUFFLE_REQUEST, palette=["red", "green", "blue"], reason="level_start")
    assert len(generated) == 1 and generated[0]['reason'] == "level_start"
    colors = grid.color_matrix()
    assert colors == generated[0]['matrix']
    assert not matrix_has_matches(colors)
    assert colors[2][3] is None
    names = [entry.item_name for _, _, entry in grid.blocks()]
    assert len(names) == 35 and len(set(names)) == 35
    assert grid.board_state is BoardState.IDLE


def test_reshuffle_keeps_existing_entries():
    bus = EventBus()
    grid = build_grid([["red", "red", "red"], ["blue", "blue", "blue"], ["green", "green", "green"]], event_bus=bus)
    system = BoardResolutionSystem(grid, bus, rng=random.Random(4))
    matrix = system.reshuffle()
    assert not matrix_has_matches(matrix)
    assert grid.get_block_entry_at(1, 1).item_name == "block_1_1"
    assert grid.color_matrix() == matrix


def test_drop_system_settles_spawned_blocks():
    bus = EventBus()
    grid = create_battle_grid(bus, GridConfig(rows=2, cols=2))
    DropSystem(grid, bus)
    mutated = []
    bus.subscribe(EVENT_BLOCKS_MUTATED, lambda s, **k: mutated.append(k))
    entry = create_block(grid, 0, 1, id_generator=SequenceIdGenerator(), color="blue",
                         spawn_from_above=True, drop_duration=0.25)
    assert entry.block_state is BlockState.ANIMATING
    tracker = grid.world.component_for_entity(grid.wrapper_at(0, 1).entity, DropTracker)
    assert tracker.phase is DropPhase.SPAWNING

    bus.emit(EVENT_TICK, dt=0.15)
    assert tracker.phase is DropPhase.DROPPING
    assert entry.block_state is BlockState.ANIMATING
    assert mutated == []

    bus.emit(EVENT_TICK, dt=0.15)
    assert entry.block_state is BlockState.IDLE
    assert mutated == [{'reason': 'drop_settled', 'items': [entry.item_name]}]
    assert not grid.world.has_component(grid.wrapper_at(0, 1).entity, DropTracker)


def test_fill_missing_cells_draws_one_queue_per_column():
    grid = build_grid([["red", None, None], [None, "blue", None]])
    grid.occupy_hero(1, 0)
    created = fill_missing_cells(grid, ColorPool([0, 1, 2, 3]), id_generator=SequenceIdGenerator())
    assert len(created) == 3
    assert grid.color_matrix() == [["red", "red", "red"], [None, "blue", "blue"]]
    assert all(entry.block_state is BlockState.IDLE for entry in created)
    assert not settle_block(created[0])
