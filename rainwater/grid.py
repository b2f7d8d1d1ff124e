"""Height grid validation."""

from __future__ import annotations

from collections.abc import Sequence
from numbers import Integral

import numpy as np


class GridShapeError(ValueError):
    """Raised when a height grid violates a structural invariant."""


def check_dimensions(row_count: int, column_counts: Sequence[int]) -> bool:
    """Return True when the grid has interior cells, False when it is trivially dry.

    Negative dimensions and ragged rows raise `GridShapeError`. Raggedness is
    only checked once both dimensions are large enough to hold an interior.
    """

    if row_count < 0:
        raise GridShapeError(f"Row count must be non-negative; got {row_count}.")
    for i, count in enumerate(column_counts):
        if count < 0:
            raise GridShapeError(f"Column count of row {i} must be non-negative; got {count}.")
    if len(column_counts) != row_count:
        raise GridShapeError(
            f"Expected {row_count} column counts; got {len(column_counts)}."
        )

    if row_count < 2:
        return False
    if column_counts[0] < 2:
        return False

    expected = column_counts[0]
    for i in range(1, row_count):
        if column_counts[i] != expected:
            raise GridShapeError(
                f"Grid is ragged: row {i} has {column_counts[i]} columns, row 0 has {expected}."
            )
    return True


def validate_heights(rows: Sequence[Sequence[int]] | np.ndarray) -> np.ndarray | None:
    """Validate `rows` and return a read-only int64 height array.

    Returns None when the grid has fewer than 2 rows or columns.
    """

    if isinstance(rows, np.ndarray):
        return _validate_array(rows)

    if isinstance(rows, (str, bytes)) or not isinstance(rows, Sequence):
        raise GridShapeError("Height grid must be a sequence of rows.")

    column_counts: list[int] = []
    for i, row in enumerate(rows):
        if isinstance(row, (str, bytes)) or not isinstance(row, (Sequence, np.ndarray)):
            raise GridShapeError(f"Row {i} is not a sequence of heights.")
        column_counts.append(len(row))

    if not check_dimensions(len(rows), column_counts):
        return None

    height = np.empty((len(rows), column_counts[0]), dtype=np.int64)
    for i, row in enumerate(rows):
        for j, value in enumerate(row):
            height[i, j] = _as_height(value, i, j)
    height.flags.writeable = False
    return height


def has_interior(shape: tuple[int, ...]) -> bool:
    return len(shape) == 2 and shape[0] >= 3 and shape[1] >= 3


def _validate_array(arr: np.ndarray) -> np.ndarray | None:
    if arr.ndim != 2:
        raise GridShapeError(f"Height grid must be 2D; got {arr.ndim}D array.")
    rows, cols = arr.shape
    if not check_dimensions(rows, [cols] * rows):
        return None

    if arr.dtype == np.bool_ or not (
        np.issubdtype(arr.dtype, np.integer) or np.issubdtype(arr.dtype, np.floating)
    ):
        raise GridShapeError(f"Heights must be integers; got dtype {arr.dtype}.")
    if np.issubdtype(arr.dtype, np.floating):
        if not np.all(np.isfinite(arr)) or not np.all(arr == np.round(arr)):
            raise GridShapeError("Heights must be integers; got fractional or non-finite values.")

    height = arr.astype(np.int64, copy=True)
    height.flags.writeable = False
    return height


def _as_height(value: object, i: int, j: int) -> int:
    if isinstance(value, (bool, np.bool_)):
        raise GridShapeError(f"Height at ({i}, {j}) must be an integer; got bool.")
    if isinstance(value, Integral):
        return int(value)
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return int(value)
    raise GridShapeError(f"Height at ({i}, {j}) must be an integer; got {value!r}.")
