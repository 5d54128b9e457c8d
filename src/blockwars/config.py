from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from blockwars.constants import DEFAULT_BLOCK_HEALTH, DEFAULT_PALETTE, GRID_COLS, GRID_ROWS, REROLL_PASSES
from blockwars.utils.layout import LayoutOptions


def resolve_palette(palette: Optional[Iterable[str]]) -> List[str]:
    """Unique, non-empty colors in order; the default palette if none remain."""
    colors = [color for color in dict.fromkeys(palette or ()) if color]
    return colors or list(DEFAULT_PALETTE)


@dataclass(slots=True)
class GridConfig:
    """Tunables for one battle grid. Defaults come from ``blockwars.constants``."""
    rows: int = GRID_ROWS
    cols: int = GRID_COLS
    palette: Tuple[str, ...] = DEFAULT_PALETTE
    reroll_passes: int = REROLL_PASSES
    block_health: float = DEFAULT_BLOCK_HEALTH
    layout: LayoutOptions = field(default_factory=LayoutOptions)

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {self.rows}x{self.cols}")
        self.palette = tuple(resolve_palette(self.palette))
