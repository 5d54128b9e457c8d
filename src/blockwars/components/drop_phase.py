from dataclasses import dataclass
from enum import Enum, auto


class DropPhase(Enum):
    SPAWNING = auto()
    DROPPING = auto()
    SETTLED = auto()


@dataclass(slots=True)
class DropTracker:
    """Drop-in progress for a block spawned above its target cell.

    Advanced by an external clock through ``advance(dt)``; once ``elapsed``
    reaches ``duration`` the drop is settled.
    """
    duration: float
    phase: DropPhase = DropPhase.SPAWNING
    elapsed: float = 0.0

    def advance(self, dt: float) -> DropPhase:
        if self.phase is DropPhase.SETTLED:
            return self.phase
        if self.phase is DropPhase.SPAWNING:
            self.phase = DropPhase.DROPPING
        self.elapsed += dt
        if self.elapsed >= self.duration:
            self.phase = DropPhase.SETTLED
        return self.phase

