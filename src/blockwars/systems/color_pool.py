"""Replayable color sequence for refills.

The pool holds a fixed list of color indices and hands them out through any
number of independent queues. Each queue keeps its own cursor and wraps back
to the start at the end of the sequence, so two players (or two columns) fed
from the same pool see the same colors in the same order.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

POOL_COLORS = ("red", "blue", "yellow", "green")
UNKNOWN_COLOR = "black"


class ColorPool:
    def __init__(self, numbers: Iterable[int] = ()):
        self.numbers: List[int] = [n for n in numbers if 0 <= n < len(POOL_COLORS)]
        self.queue_indexes: Dict[int, int] = {}

    @classmethod
    def from_text(cls, text: str) -> "ColorPool":
        """One index per digit character; digits outside the palette and other characters are skipped."""
        return cls(int(ch) for ch in text if ch.isdigit())

    @classmethod
    def from_file(cls, path: str | Path) -> "ColorPool":
        pool = cls.from_text(Path(path).read_text(encoding="utf-8"))
        logger.debug("Loaded %d pool colors from %s", len(pool.numbers), path)
        return pool

    def __len__(self) -> int:
        return len(self.numbers)

    def random_number(self, current_index: Optional[int] = None, queue: int = 0) -> int:
        """Advance ``queue`` and return the index it lands on.

        With ``current_index`` the queue is first repositioned there. The cursor
        wraps to 0 past the end; an empty pool always yields 0.
        """
        if current_index is not None:
            self.queue_indexes[queue] = current_index
        position = self.queue_indexes.get(queue, -1) + 1
        if position >= len(self.numbers) or position < 0:
            position = 0
        self.queue_indexes[queue] = position
        if not self.numbers:
            return 0
        return self.numbers[position]

    def next_color(self, current_index: Optional[int] = None, queue: int = 0) -> str:
        number = self.random_number(current_index, queue)
        if 0 <= number < len(POOL_COLORS):
            return POOL_COLORS[number]
        return UNKNOWN_COLOR

    def reset(self, queue: Optional[int] = None) -> None:
        if queue is None:
            self.queue_indexes.clear()
        else:
            self.queue_indexes.pop(queue, None)
