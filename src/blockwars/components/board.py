from dataclasses import dataclass
from enum import Enum


class BoardState(Enum):
    """Overall board phase requested through ``BattleGrid.request_state``."""
    IDLE = "idle"
    SWAPPING = "swapping"
    CASCADING = "cascading"
    RESHUFFLING = "reshuffling"


@dataclass(slots=True)
class Board:
    rows: int
    cols: int


@dataclass(slots=True)
class GridStatus:
    """Board-wide flags shared between gameplay code and the engine."""
    post_swap_cascading: bool = False
    board_state: BoardState = BoardState.IDLE
