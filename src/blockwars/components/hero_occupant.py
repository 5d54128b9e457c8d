from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class HeroOccupant:
    """Marks a cell held by a hero; the cell never takes part in color matching."""
    row: int
    col: int
    hero_key: Optional[str] = None
