"""CLI entry point."""

from __future__ import annotations

import argparse

from . import config
from .logger import setup_logging
from .simulation import run_simulation


def main() -> None:
    parser = argparse.ArgumentParser(description="Village simulation")
    parser.add_argument("--steps", type=int, default=5000)
    parser.add_argument("--citizens", type=int, default=config.INITIAL_CITIZENS)
    parser.add_argument("--organisms", type=int, default=config.INITIAL_ORGANISMS)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--ocean-threshold", type=float, default=config.OCEAN_THRESHOLD)
    parser.add_argument("--cell-size", type=float, default=config.CELL_SIZE)
    parser.add_argument("--log-every", type=int, default=config.LOG_EVERY)
    parser.add_argument("--log-level", type=str, default="INFO", help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--log-file", type=str, default=None, help="Also write the log to this file")
    parser.add_argument("--csv", type=str, default=None, help="Write per-step stats to CSV")
    parser.add_argument("--no-summary", action="store_true", help="Disable summary output")
    parser.add_argument("--render-every", type=int, default=0, help="Render every N steps")
    parser.add_argument("--render-path", type=str, default=None, help="PPM frame directory, single .ppm file, or pattern with {tick}")
    parser.add_argument("--render-ascii", action="store_true", help="Print ASCII map at render steps")
    parser.add_argument("--render-scale", type=int, default=4, help="PPM scale factor")
    args = parser.parse_args()

    setup_logging(args.log_level, args.log_file)
    run_simulation(
        steps=args.steps,
        citizens=args.citizens,
        organisms=args.organisms,
        seed=args.seed,
        ocean_threshold=args.ocean_threshold,
        cell_size=args.cell_size,
        log_every=args.log_every,
        csv_path=args.csv,
        summary=not args.no_summary,
        render_every=args.render_every,
        render_path=args.render_path,
        render_ascii_enabled=args.render_ascii,
        render_scale=args.render_scale,
    )


if __name__ == "__main__":
    main()
