"""Simulation driver."""

from __future__ import annotations

from dataclasses import astuple, fields
from pathlib import Path
from typing import Dict, List, Optional
import csv

from . import config
from .logger import log
from .renderer import render_ascii, render_ppm
from .world import StepStats, World


def _write_csv(stats: List[StepStats], csv_path: str) -> None:
    path = Path(csv_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow([f.name for f in fields(StepStats)])
        writer.writerows(astuple(row) for row in stats)


def _summarize(stats: List[StepStats]) -> Dict[str, float]:
    if not stats:
        return {
            "steps": 0,
            "final_citizens": 0,
            "peak_citizens": 0,
            "deaths_starvation": 0,
            "deaths_boredom": 0,
            "organism_deaths": 0,
            "houses": 0,
            "houses_complete": 0,
            "avg_energy": 0.0,
            "avg_fullness": 0.0,
            "avg_boredom": 0.0,
        }
    last = stats[-1]
    return {
        "steps": len(stats),
        "final_citizens": last.citizens_alive,
        "peak_citizens": max(s.citizens_alive for s in stats),
        "deaths_starvation": sum(s.deaths_starvation for s in stats),
        "deaths_boredom": sum(s.deaths_boredom for s in stats),
        "organism_deaths": sum(s.organism_deaths for s in stats),
        "houses": last.houses,
        "houses_complete": last.houses_complete,
        "avg_energy": sum(s.avg_energy for s in stats) / len(stats),
        "avg_fullness": sum(s.avg_fullness for s in stats) / len(stats),
        "avg_boredom": sum(s.avg_boredom for s in stats) / len(stats),
    }


def _print_summary(summary: Dict[str, float]) -> None:
    print("summary:")
    print(
        f"  steps={int(summary['steps'])} final_citizens={int(summary['final_citizens'])} "
        f"peak_citizens={int(summary['peak_citizens'])}"
    )
    print(
        f"  starved={int(summary['deaths_starvation'])} bored={int(summary['deaths_boredom'])} "
        f"organism_deaths={int(summary['organism_deaths'])}"
    )
    print(f"  houses={int(summary['houses'])} complete={int(summary['houses_complete'])}")
    print(
        f"  avg_energy={summary['avg_energy']:.2f} avg_fullness={summary['avg_fullness']:.2f} "
        f"avg_boredom={summary['avg_boredom']:.2f}"
    )


def _frame_path(render_path: str, tick: int) -> Path:
    """``render_path`` is a ``{tick}`` pattern, a single .ppm file or a frame directory."""
    if "{tick}" in render_path:
        return Path(render_path.format(tick=tick))
    path = Path(render_path)
    if path.suffix.lower() == ".ppm":
        return path
    return path / f"tick_{tick:06d}.ppm"


def run_simulation(
    steps: int,
    citizens: int = config.INITIAL_CITIZENS,
    organisms: int = config.INITIAL_ORGANISMS,
    seed: Optional[int] = None,
    ocean_threshold: float = config.OCEAN_THRESHOLD,
    cell_size: float = config.CELL_SIZE,
    log_every: int = config.LOG_EVERY,
    csv_path: Optional[str] = None,
    summary: bool = True,
    render_every: int = 0,
    render_path: Optional[str] = None,
    render_ascii_enabled: bool = False,
    render_scale: int = 4,
) -> List[StepStats]:
    world = World.create(
        seed=seed,
        cell_size=cell_size,
        ocean_threshold=ocean_threshold,
        citizens=citizens,
        organisms=organisms,
    )

    stats: List[StepStats] = []
    for _ in range(steps):
        step_stats = world.step()
        stats.append(step_stats)
        if log_every and step_stats.tick % log_every == 0:
            log.info(
                "tick=%d alive=%d organisms=%d starv=%d bored=%d houses=%d/%d "
                "avgE=%.2f avgF=%.2f avgB=%.2f",
                step_stats.tick,
                step_stats.citizens_alive,
                step_stats.organisms_alive,
                step_stats.deaths_starvation,
                step_stats.deaths_boredom,
                step_stats.houses_complete,
                step_stats.houses,
                step_stats.avg_energy,
                step_stats.avg_fullness,
                step_stats.avg_boredom,
            )
        if render_every and step_stats.tick % render_every == 0:
            if render_ascii_enabled:
                print(render_ascii(world))
            if render_path:
                frame = _frame_path(render_path, step_stats.tick)
                frame.parent.mkdir(parents=True, exist_ok=True)
                render_ppm(world, str(frame), scale=render_scale)
    if csv_path:
        _write_csv(stats, csv_path)
        log.info("Wrote %d rows to %s", len(stats), csv_path)
    if summary:
        _print_summary(_summarize(stats))
    return stats
