"""
Asyncio host for a live simulation.
Runs the frame tick and the wave spawn timer as two tasks on one event loop.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional, Union

from .clock import clamp_dt
from .models import PlacementResult
from .simulation import Simulation

logger = logging.getLogger(__name__)


class SimulationRunner:
    """
    Drives a Simulation in real time.

    The frame task measures wall-clock delta between frames and calls
    ``tick``. Each wave gets its own spawn task that sleeps the spawn interval
    between ``spawn_tick`` calls. Every method here must be called from the
    loop thread; that is what keeps the simulation single-writer.
    """

    def __init__(self, simulation: Simulation, frame_interval_s: float = 1.0 / 60.0) -> None:
        self.simulation = simulation
        self._frame_interval_s = max(0.001, frame_interval_s)
        self._frame_task: Optional[asyncio.Task] = None
        self._spawn_task: Optional[asyncio.Task] = None
        self._is_running = False
        self._frames = 0

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def frames(self) -> int:
        return self._frames

    @property
    def spawn_pending(self) -> bool:
        return self._spawn_task is not None and not self._spawn_task.done()

    async def start(self) -> None:
        """Start the frame loop."""
        if self._frame_task is not None:
            return
        self._is_running = True
        self._frame_task = asyncio.create_task(self._frame_loop())
        logger.info(f"Simulation runner started (frame: {self._frame_interval_s * 1000:.1f}ms)")

    async def stop(self) -> None:
        """Stop the frame loop and drop any pending spawns."""
        self._is_running = False
        await self._cancel_spawns()
        if self._frame_task is None:
            return
        self._frame_task.cancel()
        try:
            await self._frame_task
        except asyncio.CancelledError:
            pass
        self._frame_task = None
        logger.info("Simulation runner stopped")

    async def _frame_loop(self) -> None:
        # No try/except here - simulation errors should surface, not be hidden.
        last = time.perf_counter()
        while self._is_running:
            await asyncio.sleep(self._frame_interval_s)
            now = time.perf_counter()
            self.simulation.tick(clamp_dt(now - last, self.simulation.config.max_dt))
            last = now
            self._frames += 1

    async def _spawn_loop(self) -> None:
        interval = self.simulation.spawn_interval_s
        while self.simulation.spawning:
            await asyncio.sleep(interval)
            self.simulation.spawn_tick()

    async def _cancel_spawns(self) -> None:
        task = self._spawn_task
        self._spawn_task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    # ------------------------------------------------------------------
    # Input events
    # ------------------------------------------------------------------
    def start_wave(self) -> bool:
        started = self.simulation.start_wave()
        if started and self.simulation.spawning:
            self._spawn_task = asyncio.get_running_loop().create_task(self._spawn_loop())
        return started

    def place_tower(self, x: float, y: float) -> PlacementResult:
        return self.simulation.place_tower(x, y)

    def step(self, dt: float) -> None:
        self.simulation.tick(clamp_dt(dt, self.simulation.config.max_dt))

    async def select_map(self, map_key: Union[int, str]) -> None:
        self.simulation.catalog.get(map_key)
        await self._cancel_spawns()
        self.simulation.select_map(map_key)

    async def reset(self) -> None:
        await self._cancel_spawns()
        self.simulation.reset()
