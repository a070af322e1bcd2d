from __future__ import annotations

from dataclasses import dataclass

from .models import SpawnerState


@dataclass(slots=True)
class WaveSpawner:
    """Countdown of pending spawn events for the current wave.

    The spawner owns no clock. Whoever drives it calls :meth:`fire` once per
    real-time interval (``interval_s``), independently of the frame tick.
    """

    interval_s: float = 0.6
    state: SpawnerState = SpawnerState.IDLE
    wave: int = 0
    remaining: int = 0
    fired: int = 0

    @property
    def spawning(self) -> bool:
        return self.state is SpawnerState.SPAWNING

    def arm(self, wave: int, count: int) -> bool:
        if self.spawning:
            return False
        self.wave = wave
        self.remaining = max(0, count)
        self.fired = 0
        self.state = SpawnerState.SPAWNING if self.remaining > 0 else SpawnerState.IDLE
        return True

    def fire(self) -> bool:
        """Consume one pending spawn; False when nothing is scheduled."""
        if not self.spawning:
            return False
        self.remaining -= 1
        self.fired += 1
        if self.remaining <= 0:
            self.remaining = 0
            self.state = SpawnerState.IDLE
        return True

    def cancel(self) -> int:
        dropped = self.remaining
        self.remaining = 0
        self.state = SpawnerState.IDLE
        return dropped
