"""Orthogonal neighbour lookup on rectangular grids."""

from __future__ import annotations

import numpy as np


# North, south, east, west. Constraint columns follow this order.
DIRECTIONS_4 = [
    (-1, 0),
    (1, 0),
    (0, 1),
    (0, -1),
]


def neighbor(cell: tuple[int, int], direction: int) -> tuple[int, int]:
    """Return the coordinate one step from `cell` along `DIRECTIONS_4[direction]`."""

    dy, dx = DIRECTIONS_4[direction]
    return cell[0] + dy, cell[1] + dx


def is_interior(cell: tuple[int, int], shape: tuple[int, int]) -> bool:
    y, x = cell
    h, w = shape
    return 0 < y < h - 1 and 0 < x < w - 1


def interior_flat_indices(shape: tuple[int, int]) -> np.ndarray:
    """Row-major flat indices of all non-border cells."""

    h, w = shape
    if h < 3 or w < 3:
        return np.zeros(0, dtype=np.intp)
    grid = np.arange(h * w, dtype=np.intp).reshape((h, w))
    return grid[1:-1, 1:-1].ravel().copy()


def neighbor_flat_indices(shape: tuple[int, int]) -> np.ndarray:
    """Flat neighbour indices of every interior cell, one column per direction."""

    h, w = shape
    cells = interior_flat_indices(shape)
    out = np.empty((cells.size, len(DIRECTIONS_4)), dtype=np.intp)
    ys = cells // w
    xs = cells - ys * w
    for d, (dy, dx) in enumerate(DIRECTIONS_4):
        ny = ys + dy
        nx = xs + dx
        if np.any((ny < 0) | (ny >= h) | (nx < 0) | (nx >= w)):
            raise ValueError(f"Direction {d} leaves the {h}x{w} grid from an interior cell")
        out[:, d] = ny * w + nx
    return out
