"""Block entries held by the battle grid."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional


class BlockState(Enum):
    """Lifecycle states of a block entry.

    Only ``MATCHED`` (and its reset back to ``IDLE``) is written by the
    resolution engine; gameplay code owns every other transition.
    """
    IDLE = "idle"
    ANIMATING = "animating"
    LAUNCH = "launch"
    MATCH = "match"
    MATCHED = "matched"
    EXPLODE = "explode"
    DESTROYED = "destroyed"


@dataclass(slots=True)
class HeroLink:
    """Binding between a block and a hero occupying its cell."""
    powerup_hero_linked: bool = False
    hero_linked: bool = False
    hero_binding_key: Optional[str] = None
    powerup_hero_uuid: Optional[str] = None

    def is_bound(self) -> bool:
        return bool(
            self.powerup_hero_linked
            or self.hero_linked
            or self.hero_binding_key
            or self.powerup_hero_uuid
        )


@dataclass(slots=True)
class BlockEntry:
    """A colored block sitting in one grid cell.

    ``row``/``column`` are the block's own idea of its position and may lag the
    matrix slot that holds it. Optional capabilities are fixed at construction:

    - ``serializer`` replaces the default persistence record.
    - ``hero_link`` exempts the block from idle and color checks when bound.
    - ``state_listener`` is called as ``listener(entry, previous, new)`` on
      every ``transition``.
    """
    block_color: Optional[str]
    item_name: str = ""
    block_state: BlockState | str = BlockState.IDLE
    row: int = 0
    column: int = 0
    health: float = 0
    hero_link: Optional[HeroLink] = None
    serializer: Optional[Callable[["BlockEntry"], Dict[str, Any]]] = None
    state_listener: Optional[Callable[["BlockEntry", Any, Any], None]] = None

    def is_hero_bound(self) -> bool:
        return self.hero_link is not None and self.hero_link.is_bound()

    def transition(self, state: BlockState | str) -> None:
        previous = self.block_state
        self.block_state = state
        if self.state_listener is not None and previous != state:
            self.state_listener(self, previous, state)
