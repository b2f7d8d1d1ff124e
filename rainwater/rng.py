"""Deterministic RNG streams for reproducible test terrain."""

from __future__ import annotations

from dataclasses import dataclass
import hashlib

import numpy as np


def _normalize_seed(seed: int) -> int:
    return int(seed) & ((1 << 64) - 1)


def derive_seed(parent_seed: int, key: str, *, namespace: str = "rainwater-v1") -> int:
    """Derive a deterministic child seed from a parent seed and label."""

    payload = f"{namespace}:{_normalize_seed(parent_seed)}:{key}".encode("utf-8")
    digest = hashlib.blake2b(payload, digest_size=8, person=b"rwfork01").digest()
    return int.from_bytes(digest, byteorder="big", signed=False)


@dataclass(frozen=True)
class RngStream:
    """Immutable RNG stream that can be forked by label."""

    seed: int
    namespace: str = "rainwater-v1"

    def fork(self, key: str) -> "RngStream":
        if not key:
            raise ValueError("fork key must be non-empty")
        return RngStream(derive_seed(self.seed, key, namespace=self.namespace), self.namespace)

    def generator(self) -> np.random.Generator:
        return np.random.Generator(np.random.PCG64(np.uint64(_normalize_seed(self.seed))))


def random_heights(height: int, width: int, rng: RngStream, *, max_height: int) -> np.ndarray:
    """Uniform integer terrain in [0, max_height]."""

    if height < 0 or width < 0:
        raise ValueError("grid dimensions must be non-negative")
    if max_height < 0:
        raise ValueError("max_height must be non-negative")
    gen = rng.fork(f"heights:{height}x{width}").generator()
    return gen.integers(0, max_height + 1, size=(height, width), dtype=np.int64)
