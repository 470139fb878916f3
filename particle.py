# particle.py
"""
Builds the static, per-particle constants of a particle set.

This module defines the ParticleSet class, which stores every particle's
base position, size, speed, opacity and phase offset in read-only NumPy
arrays. A set is built once when a scene is initialized and is then shared,
unmodified, by every frame evaluation.
"""
import logging
import numpy as np
from collections.abc import Mapping, Sequence
from typing import NamedTuple, Tuple

from constants import (
    ATTRIBUTE_MULTIPLIERS, TWO_PI,
    DEFAULT_SIZE_RANGE, DEFAULT_SPEED_RANGE, DEFAULT_OPACITY_RANGE,
)
from seeding import hash_array
from utils import config_error, require_count, require_finite

# --- Data Contracts ---
#
# make_particles(count, seed, bounds, ranges=ParticleRanges()) -> ParticleSet:
#   - Inputs:
#     - count: non-negative int, number of particles.
#     - seed: finite float, the set's seed.
#     - bounds: Bounds (x1, y1, x2, y2) with x2 > x1 and y2 > y1.
#     - ranges: ParticleRanges with ordered (min, max) pairs.
#   - Outputs: A ParticleSet.
#   - Side Effects: None beyond logging.
#   - Invariants:
#     - Attribute a of particle i is derived from hash(seed + i * k_a), with a
#       distinct k_a per attribute (see constants.ATTRIBUTE_MULTIPLIERS).
#     - All arrays are float64, shape (count,), and not writeable.


class Bounds(NamedTuple):
    """Axis-aligned rectangle; x2 > x1 and y2 > y1 once validated."""
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @classmethod
    def coerce(cls, value) -> "Bounds":
        """Accepts a Bounds or any (x1, y1, x2, y2) sequence."""
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or len(value) != 4:
            raise config_error(f"bounds must be four numbers (x1, y1, x2, y2), got {value!r}.")
        return cls(*value).validate()

    def validate(self) -> "Bounds":
        for name, value in zip(self._fields, self):
            require_finite(f"bounds.{name}", value)
        if self.x2 <= self.x1 or self.y2 <= self.y1:
            raise config_error(
                f"Degenerate bounds {tuple(self)}: need x2 > x1 and y2 > y1."
            )
        return self


class ParticleRanges(NamedTuple):
    """(min, max) ranges the hashed attributes are mapped onto."""
    size: Tuple[float, float] = DEFAULT_SIZE_RANGE
    speed: Tuple[float, float] = DEFAULT_SPEED_RANGE
    opacity: Tuple[float, float] = DEFAULT_OPACITY_RANGE

    @classmethod
    def coerce(cls, value) -> "ParticleRanges":
        """
        Accepts a ParticleRanges, a (size, speed, opacity) sequence, or a
        mapping of some of those names to (min, max) pairs; missing names
        keep their defaults.
        """
        if isinstance(value, Mapping):
            unknown = set(value) - set(cls._fields)
            if unknown:
                raise config_error(f"Unknown particle ranges: {sorted(map(str, unknown))}.")
            return cls(**value).validate()
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or len(value) > len(cls._fields):
            raise config_error(
                f"ranges must be a mapping of {list(cls._fields)} to (min, max) pairs, got {value!r}."
            )
        return cls(*value).validate()

    def validate(self) -> "ParticleRanges":
        for name, pair in zip(self._fields, self):
            if isinstance(pair, (str, bytes)) or not isinstance(pair, Sequence) or len(pair) != 2:
                raise config_error(f"{name} range must be a (min, max) pair, got {pair!r}.")
            low, high = pair
            require_finite(f"{name} range min", low)
            require_finite(f"{name} range max", high)
            if high < low:
                raise config_error(f"{name} range is reversed: {pair!r}.")
        if self.size[0] <= 0:
            raise config_error(f"size range must be strictly positive, got {self.size!r}.")
        if self.speed[0] < 0:
            raise config_error(f"speed range must not be negative, got {self.speed!r}.")
        if self.opacity[0] < 0 or self.opacity[1] > 1:
            raise config_error(f"opacity range must lie within [0, 1], got {self.opacity!r}.")
        return self


def _frozen(values: np.ndarray) -> np.ndarray:
    values.flags.writeable = False
    return values


class ParticleSet:
    """
    Immutable per-particle constants for one set of particles.
    """
    __slots__ = ("count", "seed", "bounds", "x", "y", "size", "speed", "opacity", "phase")

    def __init__(self, seed: float, bounds: Bounds, x, y, size, speed, opacity, phase):
        object.__setattr__(self, "count", len(x))
        object.__setattr__(self, "seed", seed)
        object.__setattr__(self, "bounds", bounds)
        for name, values in (("x", x), ("y", y), ("size", size), ("speed", speed),
                             ("opacity", opacity), ("phase", phase)):
            object.__setattr__(self, name, _frozen(np.asarray(values, dtype=np.float64)))

    def __setattr__(self, name, value):
        raise AttributeError("ParticleSet is immutable.")

    def __len__(self) -> int:
        return self.count

    def __reduce__(self):
        # Rebuild through __init__ so the copy in a worker process is frozen too.
        return (ParticleSet, (self.seed, self.bounds, self.x.copy(), self.y.copy(),
                              self.size.copy(), self.speed.copy(),
                              self.opacity.copy(), self.phase.copy()))

    def __repr__(self) -> str:
        return f"ParticleSet(count={self.count}, seed={self.seed}, bounds={tuple(self.bounds)})"


def make_particles(count: int, seed: float, bounds, ranges: ParticleRanges = ParticleRanges()) -> ParticleSet:
    """
    Builds the static parameters of `count` particles inside `bounds`.

    Args:
        count (int): Number of particles; zero yields an empty set.
        seed (float): Seed of the whole set.
        bounds (Bounds): Spawn rectangle; also the wrap region for drifting kinds.
        ranges (ParticleRanges): Size, speed and opacity ranges.

    Returns:
        ParticleSet: The read-only particle constants.
    """
    count = require_count("particle count", count)
    require_finite("particle seed", seed)
    bounds = Bounds.coerce(bounds)
    ranges = ParticleRanges.coerce(ranges)

    index = np.arange(count, dtype=np.float64)

    def attribute(name: str) -> np.ndarray:
        return hash_array(seed + index * ATTRIBUTE_MULTIPLIERS[name])

    def spread(name: str, low: float, high: float) -> np.ndarray:
        return low + attribute(name) * (high - low)

    particles = ParticleSet(
        seed=seed,
        bounds=bounds,
        x=spread("x", bounds.x1, bounds.x2),
        y=spread("y", bounds.y1, bounds.y2),
        size=spread("size", *ranges.size),
        speed=spread("speed", *ranges.speed),
        opacity=spread("opacity", *ranges.opacity),
        phase=attribute("phase") * TWO_PI,
    )

    logging.info(f"ParticleSet initialized with {count} particles (seed {seed}).")
    logging.debug(f"Particle bounds: {tuple(bounds)}, ranges: {tuple(ranges)}")
    return particles
