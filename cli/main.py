"""CLI entry point for trapped-water solves."""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
import logging
from pathlib import Path
import platform
import shutil
import sys
import tempfile

import numpy as np
import structlog
from rainwater.config import DEFAULT_RANDOM_MAX_HEIGHT, SWEEP_MODES, RetentionConfig, SolverConfig
from rainwater.derive import depth_preview_u8, height_preview_u16, level_surface, wet_mask_u8
from rainwater.flood import flood_volume
from rainwater.grid import GridShapeError, validate_heights
from rainwater.io import (
    move_tree_contents,
    read_height_grid,
    resolve_output_dir,
    safe_clean_output_dir,
    write_grid_npy,
    write_json,
    write_png_u16,
    write_png_u8,
)
from rainwater.metrics import retention_metrics
from rainwater.rng import RngStream, random_heights
from rainwater.solver import SolverError, relax


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Trapped rain water volume on an integer height grid")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", help="Height grid file (.npy, .json, .csv or .txt)")
    source.add_argument("--random", metavar="HxW", help="Solve a random grid of the given size (e.g. 12x20)")
    parser.add_argument("--seed", type=int, default=0, help="Seed for --random terrain")
    parser.add_argument(
        "--max-height",
        type=int,
        default=DEFAULT_RANDOM_MAX_HEIGHT,
        help="Highest cell for --random terrain",
    )
    parser.add_argument("--mode", choices=SWEEP_MODES, default=SWEEP_MODES[0], help="Relaxation sweep order")
    parser.add_argument("--max-sweeps", type=int, default=None, help="Fail if no fixed point after this many sweeps")
    parser.add_argument("--check", action="store_true", help="Cross-check the volume with a priority flood")
    parser.add_argument("--out", default=None, help="Output root directory for artifacts")
    parser.add_argument("--overwrite", action="store_true", help="Overwrite files in existing output directory")
    parser.add_argument(
        "--json",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Write metadata JSON files",
    )
    parser.add_argument("--verbose", action="store_true", help="Log sweep progress")
    return parser


def configure_logging(verbose: bool) -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if verbose else logging.INFO),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        solver_config = SolverConfig(
            mode=args.mode,
            max_sweeps=args.max_sweeps,
            log_every_sweeps=1 if args.verbose else 0,
        )
    except ValueError as exc:
        parser.error(str(exc))
    config = RetentionConfig(solver=solver_config, cross_check=args.check)

    if args.random is not None:
        shape = _parse_shape(parser, args.random)
        rows = random_heights(shape[0], shape[1], RngStream(args.seed), max_height=args.max_height)
        run_name = f"random-{args.seed}"
    else:
        try:
            rows = read_height_grid(args.input)
        except (OSError, ValueError) as exc:
            parser.error(str(exc))
        run_name = Path(args.input).stem

    try:
        height = validate_heights(rows)
    except GridShapeError as exc:
        parser.error(str(exc))

    if height is None:
        print("Grid has no interior cells; retained volume 0")
        return 0

    result = relax(height, config=config.solver)
    metrics = retention_metrics(height, result.water)

    if config.cross_check:
        expected = flood_volume(height)
        if expected != result.total_volume:
            raise SolverError(
                f"Relaxation volume {result.total_volume} disagrees with priority flood volume {expected}"
            )

    rows_n, cols_n = height.shape
    print(f"Retained volume: {result.total_volume}")
    print(
        "Relaxation: "
        f"mode={result.mode}, bound={result.bound}, sweeps={result.sweeps}, "
        f"decrements={result.decrements}, time={result.seconds:.3f}s ({rows_n}x{cols_n})"
    )
    print(
        "Ponds: "
        f"count={metrics.pond_count}, wet cells={metrics.wet_cells}/{metrics.interior_cells}, "
        f"largest={metrics.largest_pond_volume}, max depth={metrics.max_depth}"
    )
    if config.cross_check:
        print("Priority flood check: ok")

    if args.out is None:
        return 0

    out_dir = resolve_output_dir(args.out, run_name, rows_n, cols_n, overwrite=args.overwrite)
    stage_dir = Path(tempfile.mkdtemp(prefix=".staging-", dir=str(out_dir.parent)))
    try:
        write_grid_npy(stage_dir / "height.npy", height)
        write_grid_npy(stage_dir / "water.npy", result.water)
        write_grid_npy(stage_dir / "level.npy", level_surface(height, result.water))
        write_png_u16(
            stage_dir / "height_16.png",
            height_preview_u16(height, robust_percentiles=config.render.height_percentiles),
        )
        write_png_u8(
            stage_dir / "depth.png",
            depth_preview_u8(result.water, robust_percentiles=config.render.depth_percentiles),
        )
        write_png_u8(stage_dir / "wet_mask.png", wet_mask_u8(result.water))
        if args.json:
            deterministic_meta = {
                "run_name": run_name,
                "rows": rows_n,
                "cols": cols_n,
                "config": config.to_dict(),
                "solver": {
                    "total_volume": result.total_volume,
                    "bound": result.bound,
                    "sweeps": result.sweeps,
                    "decrements": result.decrements,
                    "mode": result.mode,
                },
                "metrics": {
                    "wet_cells": metrics.wet_cells,
                    "interior_cells": metrics.interior_cells,
                    "pond_count": metrics.pond_count,
                    "largest_pond_volume": metrics.largest_pond_volume,
                    "max_depth": metrics.max_depth,
                    "mean_depth_wet": metrics.mean_depth_wet,
                },
            }
            if args.random is not None:
                deterministic_meta["seed"] = args.seed
                deterministic_meta["max_height"] = args.max_height
            meta = {
                **deterministic_meta,
                "generated_at_utc": datetime.now(timezone.utc).isoformat(),
                "solve_seconds": result.seconds,
                "python_version": platform.python_version(),
                "numpy_version": np.__version__,
            }
            write_json(stage_dir / "deterministic_meta.json", deterministic_meta)
            write_json(stage_dir / "meta.json", meta)

        safe_clean_output_dir(out_dir, out_root=Path(args.out))
        move_tree_contents(stage_dir, out_dir)
    finally:
        shutil.rmtree(stage_dir, ignore_errors=True)

    file_count = sum(1 for child in out_dir.iterdir() if child.is_file())
    print(f"Output files: {file_count} in {out_dir}")
    return 0


def _parse_shape(parser: argparse.ArgumentParser, text: str) -> tuple[int, int]:
    parts = text.lower().split("x")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        parser.error(f"--random expects HxW (e.g. 12x20); got {text!r}")
    return int(parts[0]), int(parts[1])


if __name__ == "__main__":
    raise SystemExit(main())
