"""Non-overflow constraints between interior cells and their neighbours."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

import numpy as np

from rainwater.adjacency import interior_flat_indices, neighbor_flat_indices


@dataclass(frozen=True)
class ConstraintSet:
    """Per interior cell, four inequalities `lhs <= W[neighbor] - W[cell]`.

    `lhs[c, d]` is `H[cells[c]] - H[neighbors[c, d]]`. Derived once from the
    height grid; all arrays are read-only.
    """

    shape: tuple[int, int]
    cells: np.ndarray
    neighbors: np.ndarray
    lhs: np.ndarray

    @property
    def size(self) -> int:
        return int(self.cells.size)

    @cached_property
    def rows(self) -> list[tuple[int, tuple[int, ...], tuple[int, ...]]]:
        """(cell, neighbours, lhs) as plain ints for scalar sweeps."""

        return [
            (cell, tuple(nbs), tuple(lhs))
            for cell, nbs, lhs in zip(self.cells.tolist(), self.neighbors.tolist(), self.lhs.tolist())
        ]

    def slack(self, water: np.ndarray) -> np.ndarray:
        """Return `W[neighbor] - W[cell] - lhs`; negative entries are violations."""

        flat = water.ravel()
        return flat[self.neighbors] - flat[self.cells][:, None] - self.lhs

    def violated(self, water: np.ndarray) -> np.ndarray:
        """Mask over `cells` of wet cells breaking at least one constraint."""

        flat = water.ravel()
        wet = flat[self.cells] > 0
        return wet & np.any(self.slack(water) < 0, axis=1)

    def satisfied(self, water: np.ndarray) -> bool:
        return not bool(np.any(self.violated(water)))


def build_constraints(height: np.ndarray) -> ConstraintSet:
    if height.ndim != 2:
        raise ValueError("height must be 2D")

    shape = (int(height.shape[0]), int(height.shape[1]))
    cells = interior_flat_indices(shape)
    neighbors = neighbor_flat_indices(shape)
    flat = height.ravel().astype(np.int64, copy=False)
    lhs = flat[cells][:, None] - flat[neighbors]

    for arr in (cells, neighbors, lhs):
        arr.flags.writeable = False
    return ConstraintSet(shape=shape, cells=cells, neighbors=neighbors, lhs=lhs)
