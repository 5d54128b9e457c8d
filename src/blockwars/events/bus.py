from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # weak=False keeps bound methods of systems that nobody else references alive.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float


# ============================================================================
# BOARD MUTATION
# ============================================================================
EVENT_TILE_SWAP_FINALIZE = "tile_swap_finalize"    # payload: src=(r,c), dst=(r,c)
EVENT_BLOCKS_MUTATED = "blocks_mutated"            # payload: reason=str, items=list[str]|None
EVENT_BLOCK_STATE_CHANGED = "block_state_changed"  # payload: item_name=str, previous=str, state=str


# ============================================================================
# RESOLUTION
# ============================================================================
EVENT_MATCH_FOUND = "match_found"                  # payload: names=list[str], positions=[(r,c),...], size=int
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: reason=str
EVENT_BOARD_STATE_CHANGED = "board_state_changed"  # payload: previous=str, state=str


# ============================================================================
# BOARD GENERATION
# ============================================================================
EVENT_BOARD_RESHUFFLE_REQUEST = "board_reshuffle_request"  # payload: palette=Sequence[str]|None, reason=str
EVENT_BOARD_GENERATED = "board_generated"                  # payload: matrix=list[list[str|None]], reason=str
