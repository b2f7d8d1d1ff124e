"""Priority-flood water levels, used to cross-check relaxation results."""

from __future__ import annotations

import heapq

import numpy as np

from rainwater.adjacency import DIRECTIONS_4
from rainwater.grid import has_interior


def flood_levels(height: np.ndarray) -> np.ndarray:
    """Return the settled water surface (height + water) of every cell.

    Border cells seed a min-heap at their own height. Each cell reached from
    the heap is raised to the level it was reached at, so a pit fills to its
    lowest spill point.
    """

    if height.ndim != 2:
        raise ValueError("height must be 2D")

    h, w = height.shape
    level = height.astype(np.int64, copy=True)
    if not has_interior(height.shape):
        return level

    visited = np.zeros((h, w), dtype=bool)
    heap: list[tuple[int, int]] = []
    edge = np.zeros((h, w), dtype=bool)
    edge[0, :] = True
    edge[-1, :] = True
    edge[:, 0] = True
    edge[:, -1] = True
    for idx in np.flatnonzero(edge.ravel()):
        i = int(idx)
        visited.ravel()[i] = True
        heapq.heappush(heap, (int(level.ravel()[i]), i))

    while heap:
        cur, flat = heapq.heappop(heap)
        y = flat // w
        x = flat - y * w
        for dy, dx in DIRECTIONS_4:
            ny = y + dy
            nx = x + dx
            if ny < 0 or ny >= h or nx < 0 or nx >= w:
                continue
            if visited[ny, nx]:
                continue
            visited[ny, nx] = True
            next_level = max(int(level[ny, nx]), cur)
            level[ny, nx] = next_level
            heapq.heappush(heap, (next_level, int(ny * w + nx)))
    return level


def flood_water(height: np.ndarray) -> np.ndarray:
    return flood_levels(height) - height.astype(np.int64)


def flood_volume(height: np.ndarray) -> int:
    return int(flood_water(height).sum())
