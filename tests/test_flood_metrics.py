from __future__ import annotations

import numpy as np
import pytest

from rainwater.flood import flood_levels, flood_volume
from rainwater.metrics import retention_metrics
from rainwater.solver import solve_detailed


BOWL = np.array(
    [
        [1, 4, 3, 1, 3, 2],
        [3, 2, 1, 3, 2, 4],
        [2, 3, 3, 2, 3, 1],
    ],
    dtype=np.int64,
)


def test_flood_levels_fill_to_spill_point() -> None:
    levels = flood_levels(BOWL)

    assert levels[1].tolist() == [3, 3, 3, 3, 3, 4]
    assert np.array_equal(levels[0], BOWL[0])
    assert flood_volume(BOWL) == 4


def test_flood_small_grid_is_identity() -> None:
    height = np.array([[1, 0], [0, 1]], dtype=np.int64)
    assert np.array_equal(flood_levels(height), height)
    assert flood_volume(height) == 0


def test_retention_metrics_bowl() -> None:
    result = solve_detailed(BOWL)
    m = retention_metrics(BOWL, result.water)

    assert m.total_volume == 4
    assert m.wet_cells == 3
    assert m.interior_cells == 4
    assert m.pond_count == 2
    assert m.largest_pond_volume == 3
    assert m.max_depth == 2
    assert m.mean_depth_wet == pytest.approx(4.0 / 3.0)


def test_retention_metrics_single_pond() -> None:
    height = np.full((5, 5), 3, dtype=np.int64)
    height[1:-1, 1:-1] = 2
    height[2, 2] = 1
    m = retention_metrics(height, solve_detailed(height).water)

    assert m.total_volume == 10
    assert m.pond_count == 1
    assert m.largest_pond_volume == 10
    assert m.wet_cells == 9
    assert m.max_depth == 2


def test_retention_metrics_dry_and_invalid() -> None:
    height = np.zeros((4, 4), dtype=np.int64)
    m = retention_metrics(height, np.zeros_like(height))

    assert m.total_volume == 0
    assert m.pond_count == 0
    assert m.interior_cells == 4

    with pytest.raises(ValueError):
        retention_metrics(height, np.zeros((3, 4), dtype=np.int64))
    with pytest.raises(ValueError):
        retention_metrics(height, np.full((4, 4), -1, dtype=np.int64))
