from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
import json
import logging
import math
import os
import time
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from .config import ConfigError, default_config, load_config
from .sim import GameConfig, MapNotFoundError, Simulation, SimulationRunner

logger = logging.getLogger(__name__)


def _resolve_config() -> GameConfig:
    config_path = os.environ.get("TINYTD_CONFIG", "").strip()
    if not config_path:
        return default_config()
    try:
        return load_config(config_path)
    except ConfigError:
        logger.exception("Unable to load TINYTD_CONFIG=%s", config_path)
        raise


def _autorun_enabled() -> bool:
    return os.environ.get("TINYTD_AUTORUN", "1").strip().lower() not in {"0", "false", "no", "off"}


def _frame_interval_s() -> float:
    raw = os.environ.get("TINYTD_FRAME_MS", "16").strip()
    try:
        return max(1.0, float(raw)) / 1000.0
    except ValueError:
        return 0.016


simulation = Simulation(_resolve_config())
runner = SimulationRunner(simulation, frame_interval_s=_frame_interval_s())


@asynccontextmanager
async def lifespan(app: FastAPI):
    if _autorun_enabled():
        await runner.start()
    else:
        logger.info("Autorun disabled; advance the simulation with POST /api/v1/tick")
    yield
    await runner.stop()


app = FastAPI(
    title="tinytd Simulation API",
    description="Input events and render snapshots for the tower-defense simulation.",
    version="1.0.0",
    lifespan=lifespan,
)


class PlaceTowerRequest(BaseModel):
    x: float = Field(..., allow_inf_nan=False, description="Pixel x coordinate.")
    y: float = Field(..., allow_inf_nan=False, description="Pixel y coordinate.")


class SelectMapRequest(BaseModel):
    index: Optional[int] = Field(default=None, ge=0)
    map_id: str = ""


class TickRequest(BaseModel):
    dt: float = Field(..., ge=0.0, allow_inf_nan=False, description="Frame delta in seconds; clamped to max_dt.")


def _format_sse_event(event: str, data: Dict[str, Any]) -> str:
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=True, separators=(',', ':'))}\n\n"


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/api/v1/state")
async def get_state():
    return simulation.snapshot().to_dict()


@app.get("/api/v1/maps")
async def list_maps():
    return {
        "active_map_id": simulation.state.map_definition.id,
        "arena": {"width": simulation.config.arena.width, "height": simulation.config.arena.height},
        "maps": simulation.catalog.describe(),
    }


@app.post("/api/v1/maps/select")
async def select_map(payload: SelectMapRequest):
    if payload.index is None and not payload.map_id.strip():
        raise HTTPException(status_code=400, detail="Provide 'index' or 'map_id'.")
    key = payload.index if payload.index is not None else payload.map_id.strip()
    try:
        await runner.select_map(key)
    except MapNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return simulation.snapshot().to_dict()


@app.get("/api/v1/placement/check")
async def placement_check(
    x: float = Query(..., allow_inf_nan=False),
    y: float = Query(..., allow_inf_nan=False),
):
    if not (math.isfinite(x) and math.isfinite(y)):
        raise HTTPException(status_code=422, detail="Coordinates must be finite numbers.")
    reason = simulation.placement_verdict(x, y)
    return {
        "x": x,
        "y": y,
        "allowed": reason is None,
        "reason": reason.value if reason is not None else None,
    }


@app.post("/api/v1/towers")
async def place_tower(payload: PlaceTowerRequest):
    result = runner.place_tower(payload.x, payload.y)
    response = result.to_dict()
    response["cash"] = simulation.cash
    return response


@app.post("/api/v1/waves/start")
async def start_wave():
    started = runner.start_wave()
    return {
        "started": started,
        "wave": simulation.wave,
        "spawning": simulation.spawning,
        "spawn_remaining": simulation.state.spawner.remaining,
    }


@app.post("/api/v1/tick")
async def tick(payload: TickRequest):
    runner.step(payload.dt)
    return simulation.snapshot().to_dict()


@app.post("/api/v1/reset")
async def reset():
    await runner.reset()
    return simulation.snapshot().to_dict()


@app.get("/api/v1/events")
async def events(limit: int = 1, heartbeat_ms: int = 1000):
    max_events = max(1, min(int(limit), 1000))
    delay_s = max(0.05, min(float(heartbeat_ms) / 1000.0, 60.0))

    async def _event_stream():
        sent = 0
        while sent < max_events:
            drained: List[Dict[str, Any]] = [event.to_dict() for event in simulation.drain_events()]
            for item in drained:
                yield _format_sse_event("simulation", item)
            yield _format_sse_event("state", simulation.snapshot().to_dict())
            sent += 1
            if sent < max_events:
                yield _format_sse_event("heartbeat", {"timestamp": time.time(), "sequence": sent})
                await asyncio.sleep(delay_s)

    return StreamingResponse(
        _event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
