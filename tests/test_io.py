from __future__ import annotations

import json

from PIL import Image
import numpy as np
import pytest

from rainwater.derive import depth_preview_u8, height_preview_u16, level_surface, wet_mask_u8
from rainwater.io import read_height_grid, resolve_output_dir, write_png_u16, write_png_u8


def test_read_csv_and_txt_keep_ragged_rows(tmp_path) -> None:
    csv_path = tmp_path / "grid.csv"
    csv_path.write_text("1,2,3\n\n4,5\n# comment\n6, 7, 8\n", encoding="utf-8")
    txt_path = tmp_path / "grid.txt"
    txt_path.write_text("1 2 3\n4 5 6\n", encoding="utf-8")

    assert read_height_grid(csv_path) == [[1, 2, 3], [4, 5], [6, 7, 8]]
    assert read_height_grid(txt_path) == [[1, 2, 3], [4, 5, 6]]


def test_read_json_and_npy(tmp_path) -> None:
    json_path = tmp_path / "grid.json"
    json_path.write_text(json.dumps({"heights": [[1, 2], [3, 4]]}), encoding="utf-8")
    npy_path = tmp_path / "grid.npy"
    np.save(npy_path, np.arange(6, dtype=np.int64).reshape((2, 3)))

    assert read_height_grid(json_path) == [[1, 2], [3, 4]]
    assert read_height_grid(npy_path).tolist() == [[0, 1, 2], [3, 4, 5]]


def test_read_rejects_bad_files(tmp_path) -> None:
    bad_cell = tmp_path / "bad.csv"
    bad_cell.write_text("1,2\n3,x\n", encoding="utf-8")
    unknown = tmp_path / "grid.xml"
    unknown.write_text("<grid/>", encoding="utf-8")
    scalar = tmp_path / "scalar.json"
    scalar.write_text("3", encoding="utf-8")

    for path in (bad_cell, unknown, scalar):
        with pytest.raises(ValueError):
            read_height_grid(path)


def test_resolve_output_dir_refuses_non_empty_without_overwrite(tmp_path) -> None:
    target = resolve_output_dir(tmp_path, "bowl", 3, 6, overwrite=False)
    (target / "stale.txt").write_text("x", encoding="utf-8")

    with pytest.raises(FileExistsError):
        resolve_output_dir(tmp_path, "bowl", 3, 6, overwrite=False)
    assert resolve_output_dir(tmp_path, "bowl", 3, 6, overwrite=True) == target


def test_previews(tmp_path) -> None:
    height = np.array([[3, 3, 3], [3, 1, 3], [3, 3, 3]], dtype=np.int64)
    water = np.zeros_like(height)
    water[1, 1] = 2

    assert level_surface(height, water).tolist() == [[3, 3, 3]] * 3
    assert wet_mask_u8(water)[1, 1] == 255
    assert int(wet_mask_u8(water).sum()) == 255
    depth = depth_preview_u8(water)
    assert depth[1, 1] == 255
    assert depth[0, 0] == 0
    assert not np.any(depth_preview_u8(np.zeros_like(water)))

    preview = height_preview_u16(height)
    assert preview[1, 1] == 0
    assert preview[0, 0] == 65535

    write_png_u16(tmp_path / "height_16.png", preview)
    write_png_u8(tmp_path / "depth.png", depth)
    with Image.open(tmp_path / "height_16.png") as image:
        assert image.mode in {"I", "I;16"}
        assert image.size == (3, 3)
    with Image.open(tmp_path / "depth.png") as image:
        assert image.mode == "L"
