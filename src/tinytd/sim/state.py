from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional

from .entities import Enemy, Projectile, Tower
from .models import EventType, GameConfig, MapDefinition, RejectReason, SimEvent
from .path import Path
from .spawner import WaveSpawner

EVENT_LOG_LIMIT = 1000


@dataclass(slots=True)
class SimulationState:
    """Every piece of mutable game state, owned by one simulation.

    ``enemies`` is keyed by uid in spawn order; projectiles refer to their
    target through that key only.
    """

    config: GameConfig
    map_definition: MapDefinition
    path: Path
    cash: int
    lives: int
    wave: int = 0
    enemies: Dict[int, Enemy] = field(default_factory=dict)
    towers: List[Tower] = field(default_factory=list)
    projectiles: List[Projectile] = field(default_factory=list)
    spawner: WaveSpawner = field(default_factory=WaveSpawner)
    game_over: bool = False
    last_rejection: Optional[RejectReason] = None
    elapsed_s: float = 0.0
    next_uid: int = 1
    emitted: int = 0
    events: Deque[SimEvent] = field(default_factory=lambda: deque(maxlen=EVENT_LOG_LIMIT))

    def allocate_uid(self) -> int:
        uid = self.next_uid
        self.next_uid += 1
        return uid

    def emit(self, event_type: EventType, **data: Any) -> SimEvent:
        event = SimEvent(type=event_type, at_s=self.elapsed_s, wave=self.wave, data=data)
        self.events.append(event)
        self.emitted += 1
        return event

    def clear_entities(self) -> None:
        self.enemies.clear()
        self.towers.clear()
        self.projectiles.clear()
