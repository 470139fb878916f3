# seeding.py
"""
Deterministic scalar hash used as the only source of "randomness".

A frame may be rendered in isolation by any worker, so nothing in the
engine uses a stateful RNG. Every per-particle constant is instead derived
from a seed through the fractional part of a scaled sine:

    hash(seed) = frac(sin(seed * 127.1 + 311.7) * 43758.5453)

The operation order (multiply, add, sin, multiply, subtract floor) is part
of the contract. It is not a statistically rigorous PRNG, only a visually
uniform one.
"""
import math
import numpy as np
from numba import jit

from constants import (
    HASH_SCALE, HASH_OFFSET, HASH_AMPLITUDE, EASING_HASH_SCALE, EASING_HASH_OFFSET,
)
from utils import config_error

# --- Data Contracts ---
#
# seeded_hash(seed: float) -> float:
#   - Inputs: a finite real seed.
#   - Outputs: a float in [0, 1).
#   - Invariants: Pure. Identical inputs give identical outputs.
#
# easing_hash(seed: float) -> float:
#   - Same contract, with the character-timing constants.
#
# hash_array(seeds: np.ndarray) -> np.ndarray:
#   - Inputs: float64 array of finite seeds, any shape.
#   - Outputs: float64 array of the same shape with values in [0, 1).


def _frac_sin(seed: float, scale: float, offset: float) -> float:
    if not math.isfinite(seed):
        raise config_error(f"Hash seed must be finite, got {seed!r}.")
    x = math.sin(seed * scale + offset) * HASH_AMPLITUDE
    value = x - math.floor(x)
    # x - floor(x) can round up to 1.0 for x just below an integer.
    return value if value < 1.0 else 0.0


def seeded_hash(seed: float) -> float:
    """Maps a finite seed to a pseudo-random value in [0, 1)."""
    return _frac_sin(seed, HASH_SCALE, HASH_OFFSET)


def easing_hash(seed: float) -> float:
    """
    The character-timing hash, frac(sin(seed * 12.9898 + 78.233) * 43758.5453).

    Same shape as seeded_hash but with the constants the character
    animations were authored against; blink schedules depend on them.
    """
    return _frac_sin(seed, EASING_HASH_SCALE, EASING_HASH_OFFSET)


@jit(nopython=True)
def _hash_array_numba(seeds, out):
    """Numba-jitted kernel for the vectorized hash over a flat array."""
    for i in range(seeds.shape[0]):
        x = np.sin(seeds[i] * HASH_SCALE + HASH_OFFSET) * HASH_AMPLITUDE
        value = x - np.floor(x)
        if value >= 1.0:
            value = 0.0
        out[i] = value


def hash_array(seeds) -> np.ndarray:
    """Vectorized seeded_hash; seeds must be finite."""
    flat = np.ascontiguousarray(seeds, dtype=np.float64).ravel()
    if not np.all(np.isfinite(flat)):
        raise config_error("Hash seeds must all be finite.")
    out = np.empty_like(flat)
    _hash_array_numba(flat, out)
    return out.reshape(np.shape(seeds))
