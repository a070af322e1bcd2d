from __future__ import annotations

import logging
from typing import Optional

from .entities import Tower
from .geometry import Point, distance
from .models import EventType, PlacementResult, RejectReason
from .state import SimulationState

logger = logging.getLogger(__name__)


def overlaps_existing_tower(state: SimulationState, point: Point) -> bool:
    separation = state.config.tower.min_separation
    return any(distance(tower.position, point) < separation for tower in state.towers)


def can_place(state: SimulationState, point: Point) -> bool:
    """Read-only placement check shared by cursor feedback and the real commit."""
    return (
        state.cash >= state.config.economy.tower_cost
        and not state.path.corridor_contains(point)
        and not overlaps_existing_tower(state, point)
    )


def rejection_reason(state: SimulationState, point: Point) -> Optional[RejectReason]:
    """Why ``point`` is not placeable, in a fixed priority order; None if it is."""
    if state.path.corridor_contains(point):
        return RejectReason.ON_PATH
    if overlaps_existing_tower(state, point):
        return RejectReason.OVERLAPS_TOWER
    if state.cash < state.config.economy.tower_cost:
        return RejectReason.INSUFFICIENT_FUNDS
    return None


def place_tower(state: SimulationState, point: Point) -> PlacementResult:
    point = Point(float(point[0]), float(point[1]))

    if state.game_over:
        reason: Optional[RejectReason] = RejectReason.GAME_OVER
    elif can_place(state, point):
        reason = None
    else:
        reason = rejection_reason(state, point)

    if reason is not None:
        state.last_rejection = reason
        state.emit(EventType.PLACEMENT_REJECTED, x=point.x, y=point.y, reason=reason.value)
        logger.debug("Placement at (%.1f, %.1f) rejected: %s", point.x, point.y, reason.value)
        return PlacementResult(accepted=False, reason=reason)

    rules = state.config.tower
    tower = Tower(
        uid=state.allocate_uid(),
        position=point,
        range=rules.range,
        fire_rate=rules.fire_rate,
        damage=rules.damage,
    )
    state.cash -= state.config.economy.tower_cost
    state.towers.append(tower)
    state.last_rejection = None
    state.emit(EventType.TOWER_PLACED, tower_uid=tower.uid, x=point.x, y=point.y)
    logger.debug("Tower %d placed at (%.1f, %.1f), cash left %d", tower.uid, point.x, point.y, state.cash)
    return PlacementResult(accepted=True, tower_uid=tower.uid)
