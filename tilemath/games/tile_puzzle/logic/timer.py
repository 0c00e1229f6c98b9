# tilemath/games/tile_puzzle/logic/timer.py
from __future__ import annotations

import enum
from dataclasses import dataclass, replace

ROUND_TIME_LIMIT = 60  # seconds per round


class TimerPhase(enum.Enum):
    INACTIVE = "inactive"
    RUNNING = "running"
    EXPIRED = "expired"


@dataclass(frozen=True)
class RoundTimer:
    """Countdown for one round. Every transition returns a new timer."""

    phase: TimerPhase = TimerPhase.INACTIVE
    remaining: int = ROUND_TIME_LIMIT

    @property
    def running(self) -> bool:
        return self.phase is TimerPhase.RUNNING and self.remaining > 0

    @property
    def expired(self) -> bool:
        return self.phase is TimerPhase.EXPIRED

    @classmethod
    def started(cls, seconds: int = ROUND_TIME_LIMIT) -> RoundTimer:
        return cls(phase=TimerPhase.RUNNING, remaining=int(seconds))

    def tick(self) -> RoundTimer:
        if self.phase is not TimerPhase.RUNNING:
            return self
        left = max(0, self.remaining - 1)
        if left == 0:
            return RoundTimer(phase=TimerPhase.EXPIRED, remaining=0)
        return replace(self, remaining=left)

    def stop(self) -> RoundTimer:
        # remaining is kept so the read model still shows the time left at the stop
        if self.phase is not TimerPhase.RUNNING:
            return self
        return replace(self, phase=TimerPhase.INACTIVE)
