from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from blockwars.components.block import BlockEntry


@dataclass(eq=False, slots=True)
class CellWrapper:
    """Matrix slot holder for a block entry.

    Compared by identity: two wrappers holding equal entries are still
    distinct cells. ``entry`` may be ``None`` while the wrapper stays in place.
    """
    entry: Optional[BlockEntry] = None
    entity: Optional[int] = None


class CellSlot(Enum):
    OCCUPIED = auto()
    EMPTY_WRAPPER = auto()
    NO_WRAPPER = auto()


def classify_cell(wrapper: Optional[CellWrapper]) -> CellSlot:
    if wrapper is None:
        return CellSlot.NO_WRAPPER
    if wrapper.entry is None:
        return CellSlot.EMPTY_WRAPPER
    return CellSlot.OCCUPIED
