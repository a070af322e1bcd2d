from __future__ import annotations

from collections import Counter
from dataclasses import asdict
from typing import Any, Dict, List, Sequence

from .sim.clock import WaveReport
from .sim.models import PlacementResult, SimulationSnapshot


def summarize_placements(results: Sequence[PlacementResult]) -> str:
    if not results:
        return "none"
    placed = sum(1 for result in results if result.accepted)
    reasons = Counter(result.reason.value for result in results if result.reason is not None)
    parts = [f"placed x{placed}"]
    parts.extend(f"{reason} x{count}" for reason, count in reasons.items())
    return ", ".join(parts)


def format_wave_table(reports: Sequence[WaveReport]) -> str:
    if not reports:
        return "No waves were run."

    header = f"{'Wave':<6}{'Spawned':<10}{'Killed':<9}{'Leaked':<9}{'Cash':<8}{'Lives':<7}Time"
    lines: List[str] = [header, "-" * len(header)]
    for report in reports:
        flag = ""
        if report.game_over:
            flag = "  GAME OVER"
        elif report.timed_out:
            flag = "  (time limit)"
        lines.append(
            f"{report.wave:<6}{report.spawned:<10}{report.killed:<9}{report.leaked:<9}"
            f"{report.cash:<8}{report.lives:<7}{report.duration_s:.1f}s{flag}"
        )
    return "\n".join(lines)


def format_snapshot(snapshot: SimulationSnapshot) -> str:
    lines = [
        f"Map: {snapshot.map_id}  Wave: {snapshot.wave}  Cash: {snapshot.cash}  Lives: {snapshot.lives}",
        f"Enemies: {len(snapshot.enemies)}  Towers: {len(snapshot.towers)}  Projectiles: {len(snapshot.projectiles)}",
    ]
    if snapshot.game_over:
        lines.append("GAME OVER")
    return "\n".join(lines)


def reports_to_dict(reports: Sequence[WaveReport], snapshot: SimulationSnapshot) -> Dict[str, Any]:
    return {
        "map_id": snapshot.map_id,
        "waves": [asdict(report) for report in reports],
        "final": {
            "cash": snapshot.cash,
            "lives": snapshot.lives,
            "wave": snapshot.wave,
            "towers": len(snapshot.towers),
            "game_over": snapshot.game_over,
        },
    }
