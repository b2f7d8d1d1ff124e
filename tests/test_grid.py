from __future__ import annotations

import numpy as np
import pytest

from rainwater.grid import GridShapeError, check_dimensions, has_interior, validate_heights


def test_check_dimensions_rejects_negative_counts() -> None:
    with pytest.raises(GridShapeError):
        check_dimensions(-1, [])
    with pytest.raises(GridShapeError):
        check_dimensions(3, [3, -1, 3])


def test_check_dimensions_short_circuits_small_grids() -> None:
    assert check_dimensions(0, []) is False
    assert check_dimensions(1, [7]) is False
    assert check_dimensions(4, [1, 1, 1, 1]) is False
    # Too few columns in the first row wins over raggedness.
    assert check_dimensions(3, [1, 4, 4]) is False


def test_check_dimensions_rejects_ragged_rows() -> None:
    with pytest.raises(GridShapeError) as exc:
        check_dimensions(3, [3, 3, 4])

    assert "ragged" in str(exc.value)
    assert check_dimensions(3, [3, 3, 3]) is True


def test_validate_heights_returns_readonly_copy() -> None:
    rows = [[1, 2, 3], [4, 5, 6], [7, 8, 9]]
    height = validate_heights(rows)

    assert height is not None
    assert height.dtype == np.int64
    assert height.shape == (3, 3)
    assert not height.flags.writeable
    assert rows == [[1, 2, 3], [4, 5, 6], [7, 8, 9]]


def test_validate_heights_trivial_grids() -> None:
    assert validate_heights([]) is None
    assert validate_heights([[1, 2, 3]]) is None
    assert validate_heights([[1], [2], [3]]) is None
    assert validate_heights(np.zeros((1, 5), dtype=np.int32)) is None
    assert validate_heights([[1, 2], [3, 4]]) is not None


def test_validate_heights_rejects_ragged_rows() -> None:
    with pytest.raises(GridShapeError):
        validate_heights([[1, 2, 3], [4, 5], [6, 7, 8]])


def test_validate_heights_rejects_non_integer_values() -> None:
    with pytest.raises(GridShapeError):
        validate_heights([[1, 2], [3, 4.5]])
    with pytest.raises(GridShapeError):
        validate_heights([[1, True], [3, 4]])
    with pytest.raises(GridShapeError):
        validate_heights([[1, "2"], [3, 4]])
    with pytest.raises(GridShapeError):
        validate_heights(np.array([[0.5, 1.0], [1.0, 2.0]]))
    with pytest.raises(GridShapeError):
        validate_heights(np.ones((3, 3), dtype=bool))


def test_validate_heights_accepts_integral_floats_and_arrays() -> None:
    height = validate_heights([[1.0, 2.0], [3.0, 4.0]])
    assert height is not None
    assert height.tolist() == [[1, 2], [3, 4]]

    arr = np.arange(12, dtype=np.int16).reshape((3, 4))
    height = validate_heights(arr)
    assert height is not None
    assert height.dtype == np.int64
    assert np.array_equal(height, arr)


def test_validate_heights_rejects_wrong_structure() -> None:
    with pytest.raises(GridShapeError):
        validate_heights(np.zeros((3, 3, 3)))
    with pytest.raises(GridShapeError):
        validate_heights("123")
    with pytest.raises(GridShapeError):
        validate_heights([[1, 2], 3])


def test_has_interior() -> None:
    assert not has_interior((2, 10))
    assert not has_interior((10, 2))
    assert has_interior((3, 3))
