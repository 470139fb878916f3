# gait.py
"""
Gait cycle evaluator for articulated figures.

A figure's limbs swing as

    angle_k = amplitude_k * sin(frame * stride_frequency + seed + offset_k)

with opposing limbs half a cycle (pi) apart. A slower idle term (breathing,
body sway) is added on top at its own frequency, so a standing figure whose
gait amplitudes are all zero still moves.

The evaluator has no notion of "walking" or "idle": the caller picks the
parameters for a given frame range and the pose is recomputed from scratch
on every call.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Tuple

from constants import (
    GAIT_PRESETS, GAIT_LIMB_NAMES,
    IDLE_BREATH_FREQUENCY, IDLE_BREATH_AMPLITUDE,
    IDLE_SWAY_FREQUENCY, IDLE_SWAY_AMPLITUDE,
)
from utils import config_error, require_finite, require_positive, require_non_negative

# --- Data Contracts ---
#
# evaluate_gait(frame, params: GaitParams, limbs: LimbSet, idle: IdleTerm) -> GaitPose:
#   - Inputs: frame >= 0; params and limbs with the same number of limbs.
#   - Outputs: GaitPose(limb_angles: tuple of degrees, body_bob, body_lean).
#   - Invariants: Pure. For two limbs with offsets 0 and pi and no idle
#     limb term, the two angles never share a sign.


def _reduced(frame: float, frequency: float) -> float:
    return math.fmod(frame * frequency, 2.0 * math.pi)


@dataclass(frozen=True)
class GaitParams:
    """One figure's motion signature."""
    seed: float
    stride_frequency: float
    limb_phase_offsets: Tuple[float, ...]

    def __post_init__(self):
        require_finite("gait seed", self.seed)
        require_positive("gait stride_frequency", self.stride_frequency)
        offsets = tuple(self.limb_phase_offsets)
        for offset in offsets:
            require_finite("gait limb phase offset", offset)
        object.__setattr__(self, "limb_phase_offsets", offsets)


@dataclass(frozen=True)
class LimbSet:
    """Names and swing amplitudes (degrees) of a figure's limbs."""
    names: Tuple[str, ...]
    amplitudes: Tuple[float, ...]
    idle_amplitudes: Tuple[float, ...] = ()
    bob: float = 0.0
    lean: float = 0.0

    def __post_init__(self):
        names = tuple(self.names)
        amplitudes = tuple(self.amplitudes)
        idle_amplitudes = tuple(self.idle_amplitudes) or (0.0,) * len(amplitudes)
        if len(names) != len(amplitudes) or len(idle_amplitudes) != len(amplitudes):
            raise config_error(
                f"Limb set mismatch: {len(names)} names, {len(amplitudes)} amplitudes, "
                f"{len(idle_amplitudes)} idle amplitudes."
            )
        for amplitude in amplitudes + idle_amplitudes:
            require_non_negative("limb amplitude", amplitude)
        require_non_negative("body bob", self.bob)
        require_non_negative("body lean", self.lean)
        object.__setattr__(self, "names", names)
        object.__setattr__(self, "amplitudes", amplitudes)
        object.__setattr__(self, "idle_amplitudes", idle_amplitudes)


@dataclass(frozen=True)
class IdleTerm:
    """Slow breathing (bob) and sway (lean, idle limbs) superimposed on any gait."""
    breath_amplitude: float = IDLE_BREATH_AMPLITUDE
    breath_frequency: float = IDLE_BREATH_FREQUENCY
    sway_amplitude: float = IDLE_SWAY_AMPLITUDE
    sway_frequency: float = IDLE_SWAY_FREQUENCY

    def __post_init__(self):
        require_non_negative("idle breath_amplitude", self.breath_amplitude)
        require_positive("idle breath_frequency", self.breath_frequency)
        require_non_negative("idle sway_amplitude", self.sway_amplitude)
        require_positive("idle sway_frequency", self.sway_frequency)


@dataclass(frozen=True)
class GaitPose:
    limb_angles: Tuple[float, ...]
    body_bob: float
    body_lean: float
    limb_names: Tuple[str, ...] = field(default=(), compare=False)

    def angle_of(self, name: str) -> float:
        return self.limb_angles[self.limb_names.index(name)]


def evaluate_gait(frame: int, params: GaitParams, limbs: LimbSet, idle: IdleTerm = IdleTerm()) -> GaitPose:
    """
    Computes one figure's pose at `frame`.

    Args:
        frame (int): Frame index.
        params (GaitParams): Seed, stride frequency and per-limb phase offsets.
        limbs (LimbSet): Limb names and amplitudes; must match the offsets.
        idle (IdleTerm): Breathing and sway superimposed on the gait.

    Returns:
        GaitPose: Limb angles in degrees, vertical bob and lean.
    """
    if len(params.limb_phase_offsets) != len(limbs.amplitudes):
        raise config_error(
            f"Gait has {len(params.limb_phase_offsets)} phase offsets "
            f"but {len(limbs.amplitudes)} limbs."
        )
    stride = _reduced(frame, params.stride_frequency) + params.seed
    idle_sway = math.sin(_reduced(frame, idle.sway_frequency) + params.seed)
    breath = math.sin(_reduced(frame, idle.breath_frequency) + params.seed)

    limb_angles = tuple(
        amplitude * math.sin(stride + offset) + idle_amplitude * idle_sway
        for amplitude, idle_amplitude, offset in zip(
            limbs.amplitudes, limbs.idle_amplitudes, params.limb_phase_offsets
        )
    )
    body_bob = limbs.bob * abs(math.sin(stride)) + idle.breath_amplitude * breath
    body_lean = limbs.lean * math.sin(stride) + idle.sway_amplitude * idle_sway
    return GaitPose(limb_angles, body_bob, body_lean, limbs.names)


def gait_from_preset(preset: str, seed: float, speed: float = 1.0):
    """
    Builds (GaitParams, LimbSet) for one of the named presets.

    `speed` scales the stride frequency, as a figure's walk speed multiplier
    does in the scenes.
    """
    if preset not in GAIT_PRESETS:
        raise config_error(f"Unknown gait preset {preset!r}. Known presets: {sorted(GAIT_PRESETS)}.")
    require_positive("gait speed", speed)
    preset_values = GAIT_PRESETS[preset]
    params = GaitParams(
        seed=seed,
        stride_frequency=preset_values["stride_frequency"] * speed,
        limb_phase_offsets=preset_values["limb_phase_offsets"],
    )
    limbs = LimbSet(
        names=GAIT_LIMB_NAMES,
        amplitudes=preset_values["limb_amplitudes"],
        bob=preset_values["bob"],
        lean=preset_values["lean"],
    )
    logging.debug(f"Gait preset '{preset}' built for seed {seed} at speed {speed}.")
    return params, limbs
