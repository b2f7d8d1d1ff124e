"""Retention summaries for solved water fields."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy import ndimage


_FOUR_CONNECTED = np.array(
    [
        [0, 1, 0],
        [1, 1, 1],
        [0, 1, 0],
    ],
    dtype=bool,
)


@dataclass(frozen=True)
class RetentionMetrics:
    """Volume and pond statistics for one water field."""

    total_volume: int
    wet_cells: int
    interior_cells: int
    pond_count: int
    largest_pond_volume: int
    max_depth: int
    mean_depth_wet: float


def retention_metrics(height: np.ndarray, water: np.ndarray) -> RetentionMetrics:
    """Compute pond statistics; ponds are 4-connected groups of wet cells."""

    if height.shape != water.shape:
        raise ValueError("height and water must share a shape")
    if water.ndim != 2:
        raise ValueError("water must be 2D")
    if np.any(water < 0):
        raise ValueError("water has negative values")

    h, w = water.shape
    interior = max(h - 2, 0) * max(w - 2, 0)
    wet = water > 0
    wet_cells = int(wet.sum())
    if wet_cells == 0:
        return RetentionMetrics(0, 0, interior, 0, 0, 0, 0.0)

    labels, pond_count = ndimage.label(wet, structure=_FOUR_CONNECTED)
    pond_volumes = np.bincount(labels.ravel(), weights=water.ravel().astype(np.float64))[1:]
    total = int(water.sum())
    return RetentionMetrics(
        total_volume=total,
        wet_cells=wet_cells,
        interior_cells=interior,
        pond_count=int(pond_count),
        largest_pond_volume=int(round(float(np.max(pond_volumes)))),
        max_depth=int(np.max(water)),
        mean_depth_wet=float(total / wet_cells),
    )
