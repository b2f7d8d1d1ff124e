"""Trapped-water volume by iterative constraint relaxation.

The grid is first flooded to the highest cell anywhere on it. Interior cells
whose water level (height + water) sits above a neighbour's level are then
drained one unit at a time until a full sweep changes nothing. Draining only
ever removes water the constraints forbid, so the fixed point is the largest
feasible water field and its sum is the retained volume.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import time

import numpy as np
import structlog

from rainwater.config import BOUND_POLICY, DEFAULT_SWEEP_MODE, SolverConfig
from rainwater.constraints import ConstraintSet, build_constraints
from rainwater.grid import validate_heights


logger = structlog.get_logger()

HeightRows = Sequence[Sequence[int]] | np.ndarray


class SolverError(RuntimeError):
    """Raised when a solve cannot produce a trustworthy result."""


class SolverResourceError(MemoryError):
    """Raised when the water or constraint buffers cannot be allocated."""


@dataclass(frozen=True)
class RelaxationResult:
    water: np.ndarray
    total_volume: int
    sweeps: int
    decrements: int
    bound: int
    mode: str
    seconds: float


def solve(height_rows: HeightRows, *, config: SolverConfig | None = None) -> int:
    """Return the total water volume retained by `height_rows`."""

    height = validate_heights(height_rows)
    if height is None:
        return 0
    return relax(height, config=config).total_volume


def solve_detailed(height_rows: HeightRows, *, config: SolverConfig | None = None) -> RelaxationResult:
    """Like `solve`, but return the water field and sweep statistics.

    Grids without an interior yield an all-dry field shaped by the row count
    and the length of the first row.
    """

    height = validate_heights(height_rows)
    if height is None:
        cfg = config or SolverConfig()
        return RelaxationResult(
            water=np.zeros(_trivial_shape(height_rows), dtype=np.int64),
            total_volume=0,
            sweeps=0,
            decrements=0,
            bound=0,
            mode=cfg.mode,
            seconds=0.0,
        )
    return relax(height, config=config)


def relax(height: np.ndarray, *, config: SolverConfig | None = None) -> RelaxationResult:
    """Drain a flooded copy of validated `height` down to its fixed point."""

    cfg = config or SolverConfig()
    start = time.perf_counter()

    bound = global_bound(height)
    try:
        constraints = build_constraints(height)
        water = initial_water(height, bound)
    except MemoryError as exc:
        raise SolverResourceError(
            f"Cannot allocate relaxation buffers for a {height.shape[0]}x{height.shape[1]} grid"
        ) from exc
    initial_total = int(water.sum())

    sweeps = 0
    changed = constraints.size > 0
    while changed:
        if cfg.max_sweeps is not None and sweeps >= cfg.max_sweeps:
            raise SolverError(f"No fixed point after {cfg.max_sweeps} sweeps")
        water, changed = drain_sweep(water, constraints, mode=cfg.mode)
        sweeps += 1
        if cfg.log_every_sweeps and sweeps % cfg.log_every_sweeps == 0:
            logger.debug("sweep", sweep=sweeps, volume=int(water.sum()))

    total = int(water.sum())
    seconds = time.perf_counter() - start
    logger.debug(
        "relaxation_complete",
        shape=list(height.shape),
        mode=cfg.mode,
        bound=bound,
        sweeps=sweeps,
        volume=total,
        seconds=round(seconds, 6),
    )
    return RelaxationResult(
        water=water,
        total_volume=total,
        sweeps=sweeps,
        decrements=initial_total - total,
        bound=bound,
        mode=cfg.mode,
        seconds=seconds,
    )


def global_bound(height: np.ndarray) -> int:
    """Upper bound on any final water level."""

    if BOUND_POLICY != "global_max":
        raise ValueError(f"Unsupported bound policy: {BOUND_POLICY}")
    if height.size == 0:
        return 0
    return int(np.max(height))


def initial_water(height: np.ndarray, bound: int) -> np.ndarray:
    """Flood every interior cell up to `bound`; border cells stay dry."""

    water = np.zeros(height.shape, dtype=np.int64)
    interior = height[1:-1, 1:-1]
    if interior.size == 0:
        return water
    if int(np.max(interior)) > bound:
        raise ValueError(f"bound {bound} is below the highest interior cell")
    water[1:-1, 1:-1] = bound - interior
    return water


def drain_sweep(
    water: np.ndarray,
    constraints: ConstraintSet,
    *,
    mode: str = DEFAULT_SWEEP_MODE,
) -> tuple[np.ndarray, bool]:
    """Run one sweep and return `(next_water, changed)`.

    Each wet cell breaking a constraint loses one unit per sweep. The input
    field is never modified.
    """

    if water.shape != constraints.shape:
        raise ValueError(f"water shape {water.shape} does not match constraints {constraints.shape}")
    if mode == "gauss_seidel":
        return _gauss_seidel_sweep(water, constraints)
    if mode == "jacobi":
        return _jacobi_sweep(water, constraints)
    raise ValueError(f"Unknown sweep mode: {mode}")


def _gauss_seidel_sweep(water: np.ndarray, constraints: ConstraintSet) -> tuple[np.ndarray, bool]:
    # Row-major, against the in-progress field. First violation wins; the
    # cell's other constraints wait for the next sweep.
    flat = water.ravel().tolist()
    changed = False
    for cell, nbs, lhs in constraints.rows:
        depth = flat[cell]
        if depth <= 0:
            continue
        for nb, bound in zip(nbs, lhs):
            if bound > flat[nb] - depth:
                flat[cell] = depth - 1
                changed = True
                break
    if not changed:
        return water.copy(), False
    return np.asarray(flat, dtype=np.int64).reshape(water.shape), True


def _jacobi_sweep(water: np.ndarray, constraints: ConstraintSet) -> tuple[np.ndarray, bool]:
    violated = constraints.violated(water)
    out = water.copy()
    if not np.any(violated):
        return out, False
    out.ravel()[constraints.cells[violated]] -= 1
    return out, True


def _trivial_shape(height_rows: HeightRows) -> tuple[int, int]:
    if isinstance(height_rows, np.ndarray):
        if height_rows.ndim == 2:
            return height_rows.shape
        return (0, 0)
    if len(height_rows) == 0:
        return (0, 0)
    return (len(height_rows), len(height_rows[0]))
