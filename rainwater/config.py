"""Configuration models for trapped-water solves."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


SWEEP_MODES = ("gauss_seidel", "jacobi")
DEFAULT_SWEEP_MODE = "gauss_seidel"
# Initial water level is the highest cell anywhere on the grid.
BOUND_POLICY = "global_max"
DEFAULT_RANDOM_MAX_HEIGHT = 9


@dataclass(frozen=True)
class SolverConfig:
    """Controls the relaxation sweeps."""

    mode: str = DEFAULT_SWEEP_MODE
    max_sweeps: int | None = None
    log_every_sweeps: int = 0

    def __post_init__(self) -> None:
        if self.mode not in SWEEP_MODES:
            raise ValueError(f"mode must be one of {', '.join(SWEEP_MODES)}; got {self.mode!r}")
        if self.max_sweeps is not None and self.max_sweeps < 1:
            raise ValueError("max_sweeps must be positive")
        if self.log_every_sweeps < 0:
            raise ValueError("log_every_sweeps must be non-negative")


@dataclass(frozen=True)
class RenderConfig:
    """Preview raster configuration."""

    depth_percentiles: tuple[float, float] = (0.0, 100.0)
    height_percentiles: tuple[float, float] = (0.0, 100.0)


@dataclass(frozen=True)
class RetentionConfig:
    """Primary run configuration."""

    solver: SolverConfig = field(default_factory=SolverConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    cross_check: bool = False

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["bound_policy"] = BOUND_POLICY
        return out
