from __future__ import annotations

import heapq
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Tuple, Union

from .models import EventType

if TYPE_CHECKING:
    from .simulation import Simulation

EPS = 1e-9


def clamp_dt(dt: float, max_dt: float) -> float:
    """Bound a frame delta; negative or non-finite deltas become 0."""
    try:
        value = float(dt)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value <= 0.0:
        return 0.0
    return min(value, max_dt)


@dataclass(slots=True)
class WaveReport:
    wave: int
    spawned: int
    killed: int
    leaked: int
    cash: int
    lives: int
    duration_s: float
    game_over: bool
    timed_out: bool


class HeadlessDriver:
    """Deterministic host for a :class:`Simulation` without a real clock.

    Frame ticks advance a virtual clock by a fixed delta. The spawn timer is
    a separate schedule on the same clock: the k-th firing of a wave is due
    at ``start + k * interval`` and every due firing runs before the frame
    tick that reaches it, like a timer callback and a frame callback sharing
    one event loop.
    """

    def __init__(self, simulation: "Simulation"):
        self.simulation = simulation
        self.now = 0.0
        # (due, serial, generation, k)
        self._timers: List[Tuple[float, int, int, int]] = []
        self._serial = 0
        self._generation = 0
        self._wave_origin = 0.0

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    def _cancel_timers(self) -> None:
        self._timers.clear()
        self._generation += 1

    def _schedule_spawn(self, k: int) -> None:
        due = self._wave_origin + self.simulation.spawn_interval_s * k
        heapq.heappush(self._timers, (due, self._serial, self._generation, k))
        self._serial += 1

    def start_wave(self) -> bool:
        started = self.simulation.start_wave()
        if started and self.simulation.spawning:
            self._wave_origin = self.now
            self._schedule_spawn(1)
        return started

    def select_map(self, map_key: Union[int, str]) -> None:
        self.simulation.catalog.get(map_key)
        self._cancel_timers()
        self.simulation.select_map(map_key)

    def reset(self) -> None:
        self._cancel_timers()
        self.simulation.reset()
        self.now = 0.0

    def _fire_due_timers(self) -> None:
        while self._timers and self._timers[0][0] <= self.now + EPS:
            _, _, generation, k = heapq.heappop(self._timers)
            if generation != self._generation:
                continue
            self.simulation.spawn_tick()
            if self.simulation.spawning:
                self._schedule_spawn(k + 1)

    def step(self, frame_dt: float) -> None:
        self.now += frame_dt
        self._fire_due_timers()
        self.simulation.tick(frame_dt)

    def advance(self, seconds: float, frame_dt: float = 1.0 / 60.0) -> None:
        frames = max(0, int(round(seconds / frame_dt)))
        for _ in range(frames):
            if self.simulation.game_over:
                break
            self.step(frame_dt)

    def run_wave(self, frame_dt: float = 1.0 / 60.0, max_seconds: float = 300.0) -> WaveReport:
        """Start the next wave and run until it is resolved.

        Resolved means the spawner is idle and no enemies remain, or the game
        is over, or ``max_seconds`` elapsed.
        """
        sim = self.simulation
        sim.drain_events()
        started_at = self.now
        self.start_wave()

        timed_out = False
        while (sim.spawning or sim.state.enemies) and not sim.game_over:
            if self.now - started_at >= max_seconds:
                timed_out = True
                break
            self.step(frame_dt)

        events = sim.drain_events()
        return WaveReport(
            wave=sim.wave,
            spawned=sum(1 for event in events if event.type is EventType.ENEMY_SPAWNED),
            killed=sum(1 for event in events if event.type is EventType.ENEMY_KILLED),
            leaked=sum(1 for event in events if event.type is EventType.ENEMY_LEAKED),
            cash=sim.cash,
            lives=sim.lives,
            duration_s=self.now - started_at,
            game_over=sim.game_over,
            timed_out=timed_out,
        )
