"""
Hash-based deterministic random stream keyed by (seed, cell id, tag).

Unlike a sequential PRNG, every draw is addressed: the value for a given
cell and tag never depends on how many other draws were made before it.
This keeps generation reproducible when cells are produced out of order,
in chunks, or on several workers.

The construction is splitmix64 indexed by cell id: a 64-bit key is taken
from SHA-256 of the seed and tag, the cell id advances it by the golden
gamma, and the splitmix64 finalizer mixes the result.
"""

import hashlib
from typing import Dict

import numpy as np

from .constants import DEFAULT_SEED

_MASK_64 = 0xFFFFFFFFFFFFFFFF
_GOLDEN_GAMMA = 0x9E3779B97F4A7C15
_MIX_A = 0xBF58476D1CE4E5B9
_MIX_B = 0x94D049BB133111EB
_TO_UNIT = 1.0 / (1 << 53)


def normalize_seed(seed) -> str:
    """Map any seed input to the string actually hashed."""
    if seed is None:
        return DEFAULT_SEED
    seed = str(seed)
    return seed if seed else DEFAULT_SEED


def _uint64(n: int) -> int:
    """Convert to unsigned 64-bit integer."""
    return n & _MASK_64


def _mix64(z: int) -> int:
    """splitmix64 finalizer."""
    z = _uint64((z ^ (z >> 30)) * _MIX_A)
    z = _uint64((z ^ (z >> 27)) * _MIX_B)
    return z ^ (z >> 31)


def _uint64_array(values) -> np.ndarray:
    """Convert ids to uint64, wrapping negative and oversized ints like _uint64."""
    if isinstance(values, np.ndarray) and values.dtype.kind in "iu":
        return np.atleast_1d(values).astype(np.uint64)
    if np.isscalar(values):
        values = [values]
    return np.fromiter((_uint64(int(v)) for v in values), dtype=np.uint64)


def _stream_key(seed: str, tag: str) -> int:
    payload = f"{seed}\x1f{tag}".encode("utf-8")
    return int.from_bytes(hashlib.sha256(payload).digest()[:8], "little")


class SeedStream:
    """
    Deterministic draws in [0, 1) for one seed.

    Instances are immutable apart from a per-tag key cache, so a single
    stream can be shared between threads.
    """

    def __init__(self, seed: str):
        self.seed = normalize_seed(seed)
        self._keys: Dict[str, int] = {}

    def _key(self, tag: str) -> int:
        key = self._keys.get(tag)
        if key is None:
            key = _stream_key(self.seed, tag)
            self._keys[tag] = key
        return key

    def draw(self, cell_id: int, tag: str) -> float:
        """Draw the value for a single cell."""
        z = _uint64(self._key(tag) + _uint64(int(cell_id)) * _GOLDEN_GAMMA)
        return (_mix64(z) >> 11) * _TO_UNIT

    def draw_array(self, cell_ids, tag: str) -> np.ndarray:
        """
        Vectorized draw for many cells.

        Bit-identical to calling draw() for each id; uint64 array arithmetic
        wraps modulo 2**64 exactly like the masked integer version.
        """
        ids = _uint64_array(cell_ids)
        z = np.uint64(self._key(tag)) + ids * np.uint64(_GOLDEN_GAMMA)
        z = (z ^ (z >> np.uint64(30))) * np.uint64(_MIX_A)
        z = (z ^ (z >> np.uint64(27))) * np.uint64(_MIX_B)
        z = z ^ (z >> np.uint64(31))
        return (z >> np.uint64(11)).astype(np.float64) * _TO_UNIT


def draw(seed: str, cell_id: int, tag: str) -> float:
    """Draw a reproducible value in [0, 1) for (seed, cell_id, tag)."""
    return SeedStream(seed).draw(cell_id, tag)
