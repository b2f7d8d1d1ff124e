"""Trapped rain water volume on integer height grids."""

from .config import RetentionConfig, SolverConfig
from .grid import GridShapeError, validate_heights
from .solver import (
    RelaxationResult,
    SolverError,
    SolverResourceError,
    relax,
    solve,
    solve_detailed,
)

__all__ = [
    "GridShapeError",
    "RelaxationResult",
    "RetentionConfig",
    "SolverConfig",
    "SolverError",
    "SolverResourceError",
    "relax",
    "solve",
    "solve_detailed",
    "validate_heights",
]
