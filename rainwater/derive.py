"""Derived raster products from solved water fields."""

from __future__ import annotations

import numpy as np


def level_surface(height: np.ndarray, water: np.ndarray) -> np.ndarray:
    """Water surface elevation (height + water)."""

    if height.shape != water.shape:
        raise ValueError("height and water must share a shape")
    return height.astype(np.int64) + water.astype(np.int64)


def height_preview_u16(height: np.ndarray, *, robust_percentiles: tuple[float, float] = (0.0, 100.0)) -> np.ndarray:
    """Map integer heights to 16-bit preview grayscale."""

    if height.size == 0:
        return np.zeros(height.shape, dtype=np.uint16)
    values = height.astype(np.float64)
    lo, hi = np.percentile(values, robust_percentiles)
    scale = max(hi - lo, 1e-6)
    norm = np.clip((values - lo) / scale, 0.0, 1.0)
    return np.round(norm * 65535.0).astype(np.uint16)


def depth_preview_u8(water: np.ndarray, *, robust_percentiles: tuple[float, float] = (0.0, 100.0)) -> np.ndarray:
    """Map water depth to 8-bit grayscale; dry cells stay black."""

    out = np.zeros(water.shape, dtype=np.uint8)
    wet = water > 0
    if not np.any(wet):
        return out
    _, hi = np.percentile(water[wet].astype(np.float64), robust_percentiles)
    scale = max(float(hi), 1e-6)
    norm = np.clip(water.astype(np.float64) / scale, 0.0, 1.0)
    out = np.round(norm * 255.0).astype(np.uint8)
    out[~wet] = 0
    return out


def wet_mask_u8(water: np.ndarray) -> np.ndarray:
    """Encode wet cells to an 8-bit mask image."""

    return np.where(water > 0, 255, 0).astype(np.uint8)
