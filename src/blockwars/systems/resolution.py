"""Runs the resolution engine in response to gameplay events."""
from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from blockwars.events.bus import (EventBus, EVENT_TILE_SWAP_FINALIZE, EVENT_BLOCKS_MUTATED,
                                  EVENT_MATCH_FOUND, EVENT_CASCADE_COMPLETE,
                                  EVENT_BOARD_RESHUFFLE_REQUEST, EVENT_BOARD_GENERATED)
from blockwars.grid import BattleGrid
from blockwars.systems.board_generation import ColorMatrix, generate_match_free_matrix
from blockwars.systems.idle_tracking import handle_post_swap_cascade_resolution
from blockwars.systems.match_detection import MatchReport, mark_matched_blocks
from blockwars.utils.identifiers import IdGenerator, SequenceIdGenerator

logger = logging.getLogger(__name__)


class BoardResolutionSystem:
    def __init__(
        self,
        grid: BattleGrid,
        event_bus: EventBus,
        *,
        id_generator: IdGenerator | None = None,
        rng: random.Random | None = None,
    ):
        self.grid = grid
        self.event_bus = event_bus
        self.id_generator = id_generator or SequenceIdGenerator()
        self.rng = rng
        self.event_bus.subscribe(EVENT_TILE_SWAP_FINALIZE, self.on_swap_finalize)
        self.event_bus.subscribe(EVENT_BLOCKS_MUTATED, self.on_blocks_mutated)
        self.event_bus.subscribe(EVENT_BOARD_RESHUFFLE_REQUEST, self.on_reshuffle_request)

    def on_swap_finalize(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        # The swap opens a cascade; it stays open until the board settles with no runs.
        self.grid.post_swap_cascading = True
        self.grid.request_state("cascading")
        self.resolve(reason="swap")

    def on_blocks_mutated(self, sender, **kwargs):
        self.resolve(reason=kwargs.get("reason", "blocks_mutated"))

    def on_reshuffle_request(self, sender, **kwargs):
        self.reshuffle(kwargs.get("palette"), reason=kwargs.get("reason", "reshuffle"))

    def resolve(self, reason: str) -> MatchReport:
        """Mark runs; if there are none, try to close the running cascade."""
        report = mark_matched_blocks(self.grid)
        if report:
            self.event_bus.emit(
                EVENT_MATCH_FOUND,
                names=list(report.matches),
                positions=list(report.positions),
                size=len(report.positions),
                reason=reason,
            )
            return report
        if handle_post_swap_cascade_resolution(self.grid):
            self.event_bus.emit(EVENT_CASCADE_COMPLETE, reason=reason)
        return report

    def reshuffle(self, palette: Optional[Sequence[str]] = None, *, reason: str = "reshuffle") -> ColorMatrix:
        """Replace the board's colors with a freshly generated match-free layout."""
        config = self.grid.config
        self.grid.request_state("reshuffling")
        matrix = generate_match_free_matrix(
            self.grid,
            palette or config.palette,
            rng=self.rng,
            passes=config.reroll_passes,
        )
        created = self.grid.apply_color_matrix(matrix, self.id_generator)
        logger.debug("Reshuffled board (%s): %d new blocks", reason, len(created))
        self.grid.request_state("idle")
        self.event_bus.emit(EVENT_BOARD_GENERATED, matrix=[list(row) for row in matrix], reason=reason)
        return matrix
