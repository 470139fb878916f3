# lifecycle.py
"""
Lifecycle and phase math shared by every motion kind.

"What does frame N mean for this particle's cycle" has a single
implementation here. The phase of a particle is

    raw   = frame * speed + phase_offset
    cycle = floor(raw / lifetime)
    phase = (raw - cycle * lifetime) / lifetime      in [0, 1)

frame * speed is reduced modulo the lifetime before the offset is added, so
that frames far into a long render keep full precision and frame f and
frame f + lifetime (at speed 1) land on the exact same phase.
"""
import math
import numpy as np
from typing import NamedTuple

from constants import TWO_PI
from utils import require_positive

# --- Data Contracts ---
#
# phase_of(frame, speed, phase_offset, lifetime) -> Phase:
#   - Inputs: frame >= 0, finite speed and offset, lifetime > 0.
#   - Outputs: Phase(phase in [0, 1), cycle_index int).
#   - Invariants: Pure; no state carried between frames.
#
# phase_array(frame, speeds, phase_offsets, lifetime) -> (phases, cycles):
#   - Same math, element-wise over NumPy arrays.


class Phase(NamedTuple):
    phase: float
    cycle_index: int


def _below_one(phase: float) -> float:
    # Rounding in (r / lifetime) can produce exactly 1.0.
    return phase if phase < 1.0 else math.nextafter(1.0, 0.0)


def phase_of(frame: float, speed: float, phase_offset: float, lifetime: float) -> Phase:
    """Normalized cycle position and cycle index for one particle."""
    require_positive("lifetime", lifetime)
    travelled = frame * speed
    remainder = math.fmod(travelled, lifetime)
    base_cycles = (travelled - remainder) / lifetime
    raw = remainder + phase_offset
    extra_cycles = math.floor(raw / lifetime)
    phase = (raw - extra_cycles * lifetime) / lifetime
    return Phase(_below_one(phase), int(round(base_cycles)) + extra_cycles)


def phase_array(frame: float, speeds, phase_offsets, lifetime: float):
    """
    Vectorized phase_of.

    Returns:
        tuple: (phases, cycle_indices) as float64 and int64 arrays.
    """
    require_positive("lifetime", lifetime)
    travelled = frame * np.asarray(speeds, dtype=np.float64)
    remainder = np.fmod(travelled, lifetime)
    base_cycles = np.rint((travelled - remainder) / lifetime)
    raw = remainder + np.asarray(phase_offsets, dtype=np.float64)
    extra_cycles = np.floor(raw / lifetime)
    phases = (raw - extra_cycles * lifetime) / lifetime
    phases = np.minimum(phases, np.nextafter(1.0, 0.0))
    return phases, (base_cycles + extra_cycles).astype(np.int64)


def angle(frame: float, frequency) -> np.ndarray:
    """frame * frequency reduced modulo 2*pi, element-wise."""
    return np.fmod(frame * np.asarray(frequency, dtype=np.float64), TWO_PI)


def wave(frame: float, frequency, phase=0.0):
    """sin(frame * frequency + phase) with the frame term reduced modulo 2*pi."""
    return np.sin(angle(frame, frequency) + phase)


def wrap(values, low: float, high: float):
    """Wraps values into [low, high)."""
    span = high - low
    wrapped = np.mod(np.asarray(values, dtype=np.float64) - low, span) + low
    # np.mod of a tiny negative value returns span itself.
    return np.where(wrapped >= high, low, wrapped)
