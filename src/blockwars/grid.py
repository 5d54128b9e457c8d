"""In-memory grid state store backed by an esper World.

Block entries and hero occupants are esper entities; the matrix of
``CellWrapper`` objects records which entry sits in which slot and gives the
resolution engine stable wrapper identity within a pass.
"""
from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Any, Callable, Iterator, List, Optional, Protocol, Sequence, Set, Tuple

from esper import World

from blockwars.components.block import BlockEntry, BlockState
from blockwars.components.board import Board, BoardState, GridStatus
from blockwars.components.cell import CellSlot, CellWrapper, classify_cell
from blockwars.components.hero_occupant import HeroOccupant
from blockwars.config import GridConfig
from blockwars.constants import GRID_COLS, GRID_ROWS
from blockwars.events.bus import EventBus, EVENT_BLOCK_STATE_CHANGED, EVENT_BOARD_STATE_CHANGED
from blockwars.utils.identifiers import IdGenerator
from blockwars.utils.layout import GridPosition, LayoutOptions, cell_position

logger = logging.getLogger(__name__)

Position = Tuple[int, int]
Matrix = List[List[Optional[CellWrapper]]]


class GridLike(Protocol):
    """What the resolution engine needs from a grid."""
    grid_rows: int
    grid_cols: int
    block_matrix: Matrix
    post_swap_cascading: bool

    def ensure_matrix(self) -> None: ...

    def get_block_entry_at(self, row: int, col: int) -> Optional[BlockEntry]: ...

    def is_hero_occupied_cell(self, row: int, col: int) -> bool: ...

    def normalize_state_name(self, state) -> str: ...

    def request_state(self, name: str) -> None: ...


class BattleGrid:
    def __init__(
        self,
        world: World,
        event_bus: EventBus | None = None,
        rows: int = GRID_ROWS,
        cols: int = GRID_COLS,
        *,
        layout: LayoutOptions | None = None,
        config: GridConfig | None = None,
    ):
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {rows}x{cols}")
        self.world = world
        self.event_bus = event_bus
        self.grid_entity = world.create_entity(Board(rows=rows, cols=cols), GridStatus())
        self.config = config or GridConfig(rows=rows, cols=cols)
        self.layout = layout or LayoutOptions(cols=cols)
        self.block_matrix: Matrix = []
        self.ensure_matrix()

    # -- dimensions and status -------------------------------------------------

    @property
    def board(self) -> Board:
        return self.world.component_for_entity(self.grid_entity, Board)

    @property
    def status(self) -> GridStatus:
        return self.world.component_for_entity(self.grid_entity, GridStatus)

    @property
    def grid_rows(self) -> int:
        return self.board.rows

    @property
    def grid_cols(self) -> int:
        return self.board.cols

    @property
    def post_swap_cascading(self) -> bool:
        return self.status.post_swap_cascading

    @post_swap_cascading.setter
    def post_swap_cascading(self, value: bool) -> None:
        self.status.post_swap_cascading = bool(value)

    @property
    def board_state(self) -> BoardState:
        return self.status.board_state

    def ensure_matrix(self) -> None:
        """Pad or trim ``block_matrix`` to exactly ``grid_rows`` x ``grid_cols``.

        Existing wrappers keep their slots.
        """
        rows, cols = self.grid_rows, self.grid_cols
        del self.block_matrix[rows:]
        for matrix_row in self.block_matrix:
            del matrix_row[cols:]
            matrix_row.extend([None] * (cols - len(matrix_row)))
        while len(self.block_matrix) < rows:
            self.block_matrix.append([None] * cols)

    def resize(self, rows: int, cols: int) -> None:
        """Change the board dimensions, dropping entries that fall outside."""
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {rows}x{cols}")
        for row, col, _ in list(self.blocks()):
            if row >= rows or col >= cols:
                self.clear_cell(row, col, drop_wrapper=True)
        for ent, occupant in list(self.world.get_component(HeroOccupant)):
            if occupant.row >= rows or occupant.col >= cols:
                self.world.delete_entity(ent, immediate=True)
        board = self.board
        board.rows, board.cols = rows, cols
        self.config.rows, self.config.cols = rows, cols
        self.layout.cols = cols
        self.ensure_matrix()

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.grid_rows and 0 <= col < self.grid_cols

    def _check_bounds(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise IndexError(f"Cell {(row, col)} outside {self.grid_rows}x{self.grid_cols} grid")

    # -- reads -------------------------------------------------------------------

    def wrapper_at(self, row: int, col: int) -> Optional[CellWrapper]:
        if not self.in_bounds(row, col):
            return None
        return self.block_matrix[row][col]

    def cell_slot(self, row: int, col: int) -> CellSlot:
        return classify_cell(self.wrapper_at(row, col))

    def get_block_entry_at(self, row: int, col: int) -> Optional[BlockEntry]:
        """Entry at the slot, or ``None`` for both an empty wrapper and no wrapper."""
        wrapper = self.wrapper_at(row, col)
        if wrapper is None:
            return None
        return wrapper.entry

    def blocks(self) -> Iterator[Tuple[int, int, BlockEntry]]:
        """Yield ``(row, col, entry)`` for every occupied slot, row-major."""
        self.ensure_matrix()
        for row, matrix_row in enumerate(self.block_matrix):
            for col, wrapper in enumerate(matrix_row):
                if wrapper is not None and wrapper.entry is not None:
                    yield row, col, wrapper.entry

    def find_block(self, item_name: str) -> Optional[Position]:
        for row, col, entry in self.blocks():
            if entry.item_name == item_name:
                return row, col
        return None

    def color_matrix(self) -> List[List[Optional[str]]]:
        self.ensure_matrix()
        return [
            [
                wrapper.entry.block_color if wrapper is not None and wrapper.entry is not None else None
                for wrapper in matrix_row
            ]
            for matrix_row in self.block_matrix
        ]

    # -- mutations ---------------------------------------------------------------

    def place_block(self, row: int, col: int, entry: BlockEntry) -> CellWrapper:
        """Put ``entry`` into the slot, replacing any entry already there."""
        self._check_bounds(row, col)
        self.ensure_matrix()
        wrapper = self.block_matrix[row][col]
        if wrapper is None:
            wrapper = CellWrapper()
            self.block_matrix[row][col] = wrapper
        elif wrapper.entity is not None:
            self.world.delete_entity(wrapper.entity, immediate=True)
        wrapper.entity = self.world.create_entity(entry)
        wrapper.entry = entry
        entry.row, entry.column = row, col
        return wrapper

    def clear_cell(self, row: int, col: int, *, drop_wrapper: bool = False) -> Optional[BlockEntry]:
        """Remove the entry at the slot and return it.

        The wrapper stays in place (empty) unless ``drop_wrapper`` is set.
        """
        self._check_bounds(row, col)
        wrapper = self.block_matrix[row][col]
        if wrapper is None:
            return None
        entry = wrapper.entry
        if wrapper.entity is not None:
            self.world.delete_entity(wrapper.entity, immediate=True)
        wrapper.entry = None
        wrapper.entity = None
        if drop_wrapper:
            self.block_matrix[row][col] = None
        return entry

    def swap_blocks(self, a: Position, b: Position) -> bool:
        """Exchange the entries of two slots; both must hold an entry."""
        self._check_bounds(*a)
        self._check_bounds(*b)
        wrapper_a = self.block_matrix[a[0]][a[1]]
        wrapper_b = self.block_matrix[b[0]][b[1]]
        if wrapper_a is None or wrapper_b is None or wrapper_a.entry is None or wrapper_b.entry is None:
            return False
        wrapper_a.entry, wrapper_b.entry = wrapper_b.entry, wrapper_a.entry
        wrapper_a.entity, wrapper_b.entity = wrapper_b.entity, wrapper_a.entity
        wrapper_a.entry.row, wrapper_a.entry.column = a
        wrapper_b.entry.row, wrapper_b.entry.column = b
        return True

    def apply_color_matrix(
        self,
        matrix: Sequence[Sequence[Optional[str]]],
        id_generator: IdGenerator,
        *,
        health: Optional[float] = None,
        name_prefix: str = "block",
    ) -> List[BlockEntry]:
        """Write a generated color matrix into the store.

        Existing entries are recolored and reset to idle; empty slots get new
        entries named by ``id_generator``; ``None`` cells are cleared. Returns
        the newly created entries.
        """
        self.ensure_matrix()
        if len(matrix) != self.grid_rows or any(len(r) != self.grid_cols for r in matrix):
            raise ValueError(
                f"Color matrix shape does not match {self.grid_rows}x{self.grid_cols} grid"
            )
        created: List[BlockEntry] = []
        for row in range(self.grid_rows):
            for col in range(self.grid_cols):
                color = matrix[row][col]
                if color is None:
                    if self.get_block_entry_at(row, col) is not None:
                        self.clear_cell(row, col)
                    continue
                entry = self.get_block_entry_at(row, col)
                if entry is not None:
                    entry.block_color = color
                    entry.row, entry.column = row, col
                    entry.transition(BlockState.IDLE)
                    continue
                entry = BlockEntry(
                    block_color=color,
                    item_name=id_generator(f"{name_prefix}_core"),
                    health=self.config.block_health if health is None else health,
                    state_listener=self.state_listener(),
                )
                self.place_block(row, col, entry)
                created.append(entry)
        logger.debug("Applied color matrix: %d new entries", len(created))
        return created

    # -- heroes ------------------------------------------------------------------

    def occupy_hero(self, row: int, col: int, hero_key: Optional[str] = None) -> int:
        self._check_bounds(row, col)
        return self.world.create_entity(HeroOccupant(row=row, col=col, hero_key=hero_key))

    def release_hero(self, row: int, col: int) -> bool:
        for ent, occupant in list(self.world.get_component(HeroOccupant)):
            if occupant.row == row and occupant.col == col:
                self.world.delete_entity(ent, immediate=True)
                return True
        return False

    def is_hero_occupied_cell(self, row: int, col: int) -> bool:
        for _, occupant in self.world.get_component(HeroOccupant):
            if occupant.row == row and occupant.col == col:
                return True
        return False

    def hero_cells(self) -> Set[Position]:
        return {(occupant.row, occupant.col) for _, occupant in self.world.get_component(HeroOccupant)}

    # -- state names ---------------------------------------------------------------

    @staticmethod
    def normalize_state_name(state) -> str:
        if state is None:
            return ""
        if isinstance(state, Enum):
            state = state.value
        return str(state).strip().lower()

    def request_state(self, name) -> None:
        """Move the board to a new overall state and announce it on the bus."""
        try:
            new_state = BoardState(self.normalize_state_name(name))
        except ValueError:
            raise ValueError(f"Unknown board state {name!r}") from None
        status = self.status
        previous = status.board_state
        status.board_state = new_state
        if self.event_bus is not None:
            self.event_bus.emit(EVENT_BOARD_STATE_CHANGED, previous=previous.value, state=new_state.value)

    def state_listener(self) -> Optional[Callable[[BlockEntry, Any, Any], None]]:
        """Listener relaying entry state changes onto the bus; None without a bus."""
        if self.event_bus is None:
            return None
        bus = self.event_bus

        def relay(entry: BlockEntry, previous, state) -> None:
            bus.emit(
                EVENT_BLOCK_STATE_CHANGED,
                item_name=entry.item_name,
                previous=self.normalize_state_name(previous),
                state=self.normalize_state_name(state),
            )
        return relay

    # -- layout ------------------------------------------------------------------

    def cell_position(self, row: int, col: int) -> GridPosition:
        return cell_position(row, col, self.layout)


def create_battle_grid(
    event_bus: EventBus | None = None,
    config: GridConfig | None = None,
    *,
    rng: random.Random | None = None,
    world: World | None = None,
) -> BattleGrid:
    config = config or GridConfig()
    world = world or World()
    if not isinstance(getattr(world, "random", None), random.Random):
        setattr(world, "random", rng or random.Random())
    elif rng is not None:
        setattr(world, "random", rng)
    return BattleGrid(world, event_bus, config.rows, config.cols, layout=config.layout, config=config)
