"""Height grid loading and solve artifact serialization."""

from __future__ import annotations

import json
from pathlib import Path
import re
import shutil
from typing import Any

import numpy as np
from PIL import Image


_CELL_SPLIT_RE = re.compile(r"[,\s]+")


def read_height_grid(path: str | Path):
    """Load heights from .npy, .json or .csv/.txt.

    Text formats come back as lists of rows without padding so that ragged
    input reaches validation unchanged.
    """

    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".npy":
        return np.load(path, allow_pickle=False)
    if suffix == ".json":
        payload = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(payload, dict):
            payload = payload.get("heights")
        if not isinstance(payload, list):
            raise ValueError(f"{path}: expected a list of rows or an object with 'heights'")
        return payload
    if suffix in (".csv", ".txt"):
        rows: list[list[int]] = []
        for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
            text = line.strip()
            if not text or text.startswith("#"):
                continue
            try:
                rows.append([int(tok) for tok in _CELL_SPLIT_RE.split(text) if tok])
            except ValueError as exc:
                raise ValueError(f"{path}:{lineno}: {exc}") from exc
        return rows
    raise ValueError(f"Unsupported height grid format: {path.suffix or '<none>'}")


def resolve_output_dir(
    out_root: str | Path,
    run_name: str,
    rows: int,
    cols: int,
    *,
    overwrite: bool,
) -> Path:
    """Create and return the output directory for one solve."""

    target = Path(out_root) / run_name / f"{rows}x{cols}"
    if target.exists() and any(target.iterdir()) and not overwrite:
        raise FileExistsError(
            f"Output directory already exists and is not empty: {target}. Use --overwrite to replace files."
        )
    target.mkdir(parents=True, exist_ok=True)
    return target


def safe_clean_output_dir(target: Path, *, out_root: Path) -> None:
    """Delete all children of target directory, refusing paths outside out_root."""

    out_root_r = out_root.resolve()
    target_r = target.resolve()
    target_r.relative_to(out_root_r)

    if not target_r.exists():
        target_r.mkdir(parents=True, exist_ok=True)
        return

    for child in target_r.iterdir():
        if child.is_symlink() or child.is_file():
            child.unlink()
        elif child.is_dir():
            shutil.rmtree(child)


def move_tree_contents(src_dir: Path, dst_dir: Path) -> None:
    """Move all files from src_dir into dst_dir."""

    for child in src_dir.iterdir():
        shutil.move(str(child), str(dst_dir / child.name))


def write_grid_npy(path: str | Path, grid: np.ndarray) -> None:
    np.save(Path(path), grid.astype(np.int64), allow_pickle=False)


def write_png_u16(path: str | Path, raster_u16: np.ndarray) -> None:
    image = Image.fromarray(raster_u16.astype(np.uint16))
    image.save(Path(path))


def write_png_u8(path: str | Path, raster_u8: np.ndarray) -> None:
    image = Image.fromarray(raster_u8.astype(np.uint8))
    image.save(Path(path))


def write_json(path: str | Path, payload: dict[str, Any]) -> None:
    text = json.dumps(payload, indent=2, sort_keys=True)
    Path(path).write_text(text + "\n", encoding="utf-8")
