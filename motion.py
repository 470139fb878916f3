# motion.py
"""
Motion evaluators: one pure function per particle kind.

Every evaluator has the shape

    evaluate_<kind>(frame, particles, constants) -> ParticleStates

and computes the visual state of the whole set for that frame from nothing
but the frame index, the read-only ParticleSet and the kind's constants.
Nothing is cached or accumulated between calls, so frames can be requested
in any order and by any number of workers.

Frequencies are radians per frame. Angles in the output are degrees.
"""
import logging
import numpy as np
from dataclasses import dataclass
from typing import Tuple

from lifecycle import phase_array, angle, wave, wrap
from constants import TWO_PI
from particle import ParticleSet
from utils import (
    config_error, require_finite, require_positive,
    require_non_negative, require_unit_interval,
)

# --- Data Contracts ---
#
# ParticleStates:
#   - x, y, scale, opacity, angle: float64 arrays of shape (N,).
#   - Invariants: 0 <= opacity <= the set's max base opacity, scale > 0.
#
# evaluate_<kind>(frame: int, particles: ParticleSet, constants) -> ParticleStates:
#   - Inputs: frame >= 0, a ParticleSet, the kind's validated constants.
#   - Outputs: ParticleStates of length particles.count.
#   - Side Effects: None. The ParticleSet is never written.


@dataclass(frozen=True, eq=False)
class ParticleStates:
    x: np.ndarray
    y: np.ndarray
    scale: np.ndarray
    opacity: np.ndarray
    angle: np.ndarray

    @property
    def count(self) -> int:
        return len(self.x)

    @classmethod
    def empty(cls) -> "ParticleStates":
        nothing = np.empty(0, dtype=np.float64)
        return cls(nothing, nothing, nothing, nothing, nothing)


def _zeros_like(particles: ParticleSet) -> np.ndarray:
    return np.zeros(particles.count, dtype=np.float64)


def _frequency_tuple(name: str, values) -> Tuple[float, ...]:
    values = tuple(values)
    for value in values:
        require_positive(name, value)
    return values


# ---------------------------------------------------------------------------
# Twinkle (stars)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TwinkleConstants:
    frequency: float = 0.3
    secondary_ratio: float = 2.3
    primary_weight: float = 0.7
    secondary_weight: float = 0.3
    floor: float = 0.3

    def __post_init__(self):
        require_positive("twinkle frequency", self.frequency)
        require_positive("twinkle secondary_ratio", self.secondary_ratio)
        require_non_negative("twinkle primary_weight", self.primary_weight)
        require_non_negative("twinkle secondary_weight", self.secondary_weight)
        if self.primary_weight + self.secondary_weight <= 0:
            raise config_error("twinkle weights must not both be zero.")
        require_unit_interval("twinkle floor", self.floor)
        if self.floor <= 0:
            raise config_error("twinkle floor must be above zero so stars never vanish.")


def evaluate_twinkle(frame: int, particles: ParticleSet, constants: TwinkleConstants) -> ParticleStates:
    """Star brightness from two superimposed sines; periodic by construction."""
    if particles.count == 0:
        return ParticleStates.empty()
    c = constants
    primary = np.sin(angle(frame, c.frequency * particles.speed) + particles.phase)
    secondary = np.sin(
        angle(frame, c.frequency * c.secondary_ratio * particles.speed) + particles.phase * 1.7
    )
    total = np.abs(c.primary_weight * primary + c.secondary_weight * secondary)
    level = np.clip(total / (c.primary_weight + c.secondary_weight), 0.0, 1.0)
    twinkle = c.floor + (1.0 - c.floor) * level
    return ParticleStates(
        x=particles.x.copy(),
        y=particles.y.copy(),
        scale=particles.size * twinkle,
        opacity=particles.opacity * twinkle,
        angle=_zeros_like(particles),
    )


# ---------------------------------------------------------------------------
# Rising, expanding puff (smoke, incense, spray)
# ---------------------------------------------------------------------------

FADE_LINEAR = "linear"
FADE_QUADRATIC = "quadratic"


@dataclass(frozen=True)
class PuffConstants:
    lifetime: float = 110.0
    rise: float = 180.0
    growth: float = 1.5
    sway: float = 10.0
    sway_frequency: float = 0.06
    fade: str = FADE_QUADRATIC
    fade_in: float = 0.0
    visible_fraction: float = 1.0

    def __post_init__(self):
        require_positive("puff lifetime", self.lifetime)
        require_finite("puff rise", self.rise)
        require_non_negative("puff growth", self.growth)
        require_non_negative("puff sway", self.sway)
        require_positive("puff sway_frequency", self.sway_frequency)
        if self.fade not in (FADE_LINEAR, FADE_QUADRATIC):
            raise config_error(f"puff fade must be 'linear' or 'quadratic', got {self.fade!r}.")
        require_unit_interval("puff visible_fraction", self.visible_fraction)
        if self.visible_fraction <= 0:
            raise config_error("puff visible_fraction must be above zero.")
        require_unit_interval("puff fade_in", self.fade_in)
        if self.fade_in >= 1:
            raise config_error("puff fade_in must be below 1.")


def puff_envelope(phases: np.ndarray, constants: PuffConstants) -> np.ndarray:
    """
    Opacity multiplier over a puff's life, 0 at both ends of the visible part.

    The visible part of the life is [0, visible_fraction); within it the puff
    fades in over the first `fade_in` share and then fades out, linearly or
    quadratically, reaching 0 exactly where the phase wraps.
    """
    life = phases / constants.visible_fraction
    visible = life < 1.0
    life = np.minimum(life, 1.0)
    if constants.fade_in > 0:
        fade_in = np.clip(life / constants.fade_in, 0.0, 1.0)
        remaining = np.clip((life - constants.fade_in) / (1.0 - constants.fade_in), 0.0, 1.0)
    else:
        fade_in = np.ones_like(life)
        remaining = life
    fade_out = 1.0 - remaining
    if constants.fade == FADE_QUADRATIC:
        fade_out = fade_out * fade_out
    return np.where(visible, fade_in * fade_out, 0.0)


def evaluate_puff(frame: int, particles: ParticleSet, constants: PuffConstants) -> ParticleStates:
    """Puff rises, grows and fades; opacity is ~0 when the phase wraps."""
    if particles.count == 0:
        return ParticleStates.empty()
    c = constants
    # Spread the per-particle phase (radians) over the lifetime.
    offsets = particles.phase / TWO_PI * c.lifetime
    phases, _ = phase_array(frame, particles.speed, offsets, c.lifetime)
    return ParticleStates(
        x=particles.x + c.sway * wave(frame, c.sway_frequency, particles.phase),
        y=particles.y - phases * c.rise,
        scale=particles.size * (1.0 + phases * c.growth),
        opacity=particles.opacity * puff_envelope(phases, c),
        angle=_zeros_like(particles),
    )


# ---------------------------------------------------------------------------
# Drifting mote (dust, embers)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MoteConstants:
    frequencies: Tuple[float, ...] = (0.02,)
    amplitudes: Tuple[float, ...] = (25.0,)
    frequency_y: float = 0.014
    amplitude_y: float = 15.0
    rise: float = 0.15
    drift_x: float = 0.0
    opacity_level: float = 0.6
    opacity_depth: float = 0.4
    opacity_frequency: float = 0.12

    def __post_init__(self):
        object.__setattr__(self, "frequencies", _frequency_tuple("mote frequency", self.frequencies))
        object.__setattr__(self, "amplitudes", tuple(self.amplitudes))
        if not 1 <= len(self.frequencies) <= 2:
            raise config_error("mote needs one or two horizontal frequency terms.")
        if len(self.amplitudes) != len(self.frequencies):
            raise config_error("mote amplitudes and frequencies must have the same length.")
        for amplitude in self.amplitudes:
            require_non_negative("mote amplitude", amplitude)
        require_positive("mote frequency_y", self.frequency_y)
        require_non_negative("mote amplitude_y", self.amplitude_y)
        require_finite("mote rise", self.rise)
        require_finite("mote drift_x", self.drift_x)
        require_unit_interval("mote opacity_level", self.opacity_level)
        require_unit_interval("mote opacity_depth", self.opacity_depth)
        require_positive("mote opacity_frequency", self.opacity_frequency)


def evaluate_mote(frame: int, particles: ParticleSet, constants: MoteConstants) -> ParticleStates:
    """Organic wander from one or two sines plus a wrapped one-way drift."""
    if particles.count == 0:
        return ParticleStates.empty()
    c = constants
    bounds = particles.bounds
    x = particles.x.copy()
    for frequency, amplitude in zip(c.frequencies, c.amplitudes):
        x += amplitude * np.sin(angle(frame, frequency * particles.speed) + particles.phase)
    y = particles.y + c.amplitude_y * np.cos(angle(frame, c.frequency_y * particles.speed) + particles.phase)

    if c.drift_x:
        drift = np.fmod(frame * c.drift_x * particles.speed, bounds.width)
        x = wrap(x + drift, bounds.x1, bounds.x2)
    if c.rise:
        rise = np.fmod(frame * c.rise * particles.speed, bounds.height)
        y = wrap(y - rise, bounds.y1, bounds.y2)

    level = c.opacity_level + c.opacity_depth * np.sin(
        angle(frame, c.opacity_frequency * particles.speed) + particles.phase
    )
    return ParticleStates(
        x=x,
        y=y,
        scale=particles.size.copy(),
        opacity=particles.opacity * np.clip(level, 0.0, 1.0),
        angle=_zeros_like(particles),
    )


# ---------------------------------------------------------------------------
# Drifting fog bank
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FogConstants:
    drift: float = 0.3
    amplitude: float = 8.0
    frequency: float = 0.063
    opacity_scale: float = 0.4
    pulse_frequency: float = 0.094

    def __post_init__(self):
        require_finite("fog drift", self.drift)
        require_non_negative("fog amplitude", self.amplitude)
        require_positive("fog frequency", self.frequency)
        require_unit_interval("fog opacity_scale", self.opacity_scale)
        require_positive("fog pulse_frequency", self.pulse_frequency)


def evaluate_fog(frame: int, particles: ParticleSet, constants: FogConstants) -> ParticleStates:
    """Low mist sliding sideways; x wraps inside the set's bounds."""
    if particles.count == 0:
        return ParticleStates.empty()
    c = constants
    bounds = particles.bounds
    drift = np.fmod(frame * c.drift * particles.speed, bounds.width)
    pulse = 0.5 + 0.5 * wave(frame, c.pulse_frequency, particles.phase)
    return ParticleStates(
        x=wrap(particles.x + drift, bounds.x1, bounds.x2),
        y=particles.y + c.amplitude * wave(frame, c.frequency, particles.phase),
        scale=particles.size.copy(),
        opacity=particles.opacity * c.opacity_scale * pulse,
        angle=_zeros_like(particles),
    )


# ---------------------------------------------------------------------------
# Rippling wave line
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RippleConstants:
    amplitude_x: float = 8.0
    frequency: float = 0.025
    amplitude_y: float = 2.0
    frequency_y: float = 0.038
    stretch: float = 0.05

    def __post_init__(self):
        require_non_negative("ripple amplitude_x", self.amplitude_x)
        require_positive("ripple frequency", self.frequency)
        require_non_negative("ripple amplitude_y", self.amplitude_y)
        require_positive("ripple frequency_y", self.frequency_y)
        require_unit_interval("ripple stretch", self.stretch)
        if self.stretch >= 1:
            raise config_error("ripple stretch must be below 1 to keep scale positive.")


def evaluate_ripple(frame: int, particles: ParticleSet, constants: RippleConstants) -> ParticleStates:
    if particles.count == 0:
        return ParticleStates.empty()
    c = constants
    sway = wave(frame, c.frequency, particles.phase)
    return ParticleStates(
        x=particles.x + c.amplitude_x * sway,
        y=particles.y + c.amplitude_y * wave(frame, c.frequency_y, particles.phase),
        scale=particles.size * (1.0 + c.stretch * sway),
        opacity=particles.opacity.copy(),
        angle=_zeros_like(particles),
    )


# ---------------------------------------------------------------------------
# Swimmers and gliders (fish, birds)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SwimConstants:
    swim_speed: float = 1.0
    direction: int = 1
    bob: float = 10.0
    bob_frequency: float = 0.025
    sway: float = 30.0
    sway_frequency: float = 0.1

    def __post_init__(self):
        require_non_negative("swim swim_speed", self.swim_speed)
        if self.direction not in (1, -1):
            raise config_error(f"swim direction must be 1 or -1, got {self.direction!r}.")
        require_non_negative("swim bob", self.bob)
        require_positive("swim bob_frequency", self.bob_frequency)
        require_non_negative("swim sway", self.sway)
        require_positive("swim sway_frequency", self.sway_frequency)


def evaluate_swim(frame: int, particles: ParticleSet, constants: SwimConstants) -> ParticleStates:
    """
    Crosses the bounds and re-enters on the other side.

    Bob and tail beat (or wing flap) use the kind's fixed amplitude and
    frequency; each instance only differs in phase, so a school does not
    move in lockstep.
    """
    if particles.count == 0:
        return ParticleStates.empty()
    c = constants
    bounds = particles.bounds
    travel = np.fmod(frame * c.swim_speed * particles.speed, bounds.width)
    return ParticleStates(
        x=wrap(particles.x + c.direction * travel, bounds.x1, bounds.x2),
        y=particles.y + c.bob * wave(frame, c.bob_frequency, particles.phase),
        scale=particles.size.copy(),
        opacity=particles.opacity.copy(),
        angle=c.sway * wave(frame, c.sway_frequency, particles.phase),
    )


# ---------------------------------------------------------------------------
# Sway (trees, banners, reeds)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SwayConstants:
    amplitude: float = 3.0
    frequency: float = 0.021
    secondary_amplitude: float = 1.5
    secondary_frequency: float = 0.033

    def __post_init__(self):
        require_non_negative("sway amplitude", self.amplitude)
        require_positive("sway frequency", self.frequency)
        require_non_negative("sway secondary_amplitude", self.secondary_amplitude)
        require_positive("sway secondary_frequency", self.secondary_frequency)


def evaluate_sway(frame: int, particles: ParticleSet, constants: SwayConstants) -> ParticleStates:
    if particles.count == 0:
        return ParticleStates.empty()
    c = constants
    sway = (c.amplitude * wave(frame, c.frequency, particles.phase)
            + c.secondary_amplitude * wave(frame, c.secondary_frequency, particles.phase))
    return ParticleStates(
        x=particles.x.copy(),
        y=particles.y.copy(),
        scale=particles.size.copy(),
        opacity=particles.opacity.copy(),
        angle=sway,
    )


# ---------------------------------------------------------------------------
# Flash (lightning)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FlashConstants:
    interval: float = 90.0
    duration: float = 8.0
    bolts: int = 3
    phase_offset: float = 0.0
    spread: float = 0.0

    def __post_init__(self):
        require_positive("flash interval", self.interval)
        require_positive("flash duration", self.duration)
        if self.duration > self.interval:
            raise config_error("flash duration must not exceed its interval.")
        if isinstance(self.bolts, bool) or not isinstance(self.bolts, int) or self.bolts < 1:
            raise config_error(f"flash bolts must be a positive integer, got {self.bolts!r}.")
        require_finite("flash phase_offset", self.phase_offset)
        require_unit_interval("flash spread", self.spread)


def evaluate_flash(frame: int, particles: ParticleSet, constants: FlashConstants) -> ParticleStates:
    """
    A flash once per interval, brightest on its first frame and gone after
    `duration` frames. Each cycle strikes the next of `bolts` positions,
    spaced evenly across the bounds, so consecutive flashes land elsewhere.

    `spread` desynchronises the particles of one set (0 flashes them all
    together).
    """
    if particles.count == 0:
        return ParticleStates.empty()
    c = constants
    bounds = particles.bounds
    offsets = c.phase_offset + c.spread * particles.phase / TWO_PI * c.interval
    phases, cycles = phase_array(frame, np.ones(particles.count), offsets, c.interval)
    position = phases * c.interval
    intensity = np.where(position < c.duration, 1.0 - position / c.duration, 0.0)
    bolt = np.mod(cycles, c.bolts)
    return ParticleStates(
        x=wrap(particles.x + bolt * (bounds.width / c.bolts), bounds.x1, bounds.x2),
        y=particles.y.copy(),
        scale=particles.size.copy(),
        opacity=particles.opacity * intensity,
        angle=_zeros_like(particles),
    )


# ---------------------------------------------------------------------------
# Flicker (lamp glow, lit windows)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FlickerConstants:
    level: float = 0.85
    frequencies: Tuple[float, ...] = (0.03 * TWO_PI / 30, 0.07 * TWO_PI / 30, 0.13 * TWO_PI / 30)
    depths: Tuple[float, ...] = (0.06, 0.04, 0.03)
    phases: Tuple[float, ...] = (0.0, 1.3, 2.7)
    pulse_depth: float = 0.125
    pulse_frequency: float = 0.025 * TWO_PI / 30
    pulse_phase: float = 0.5

    def __post_init__(self):
        object.__setattr__(self, "frequencies", _frequency_tuple("flicker frequency", self.frequencies))
        object.__setattr__(self, "depths", tuple(self.depths))
        object.__setattr__(self, "phases", tuple(self.phases))
        if not 1 <= len(self.frequencies) <= 3:
            raise config_error("flicker needs one to three frequency terms.")
        if not len(self.frequencies) == len(self.depths) == len(self.phases):
            raise config_error("flicker frequencies, depths and phases must have the same length.")
        for depth in self.depths:
            require_non_negative("flicker depth", depth)
        for phase in self.phases:
            require_finite("flicker phase", phase)
        require_unit_interval("flicker level", self.level)
        require_unit_interval("flicker pulse_depth", self.pulse_depth)
        if self.pulse_depth >= 1:
            raise config_error("flicker pulse_depth must be below 1 to keep scale positive.")
        require_positive("flicker pulse_frequency", self.pulse_frequency)
        require_finite("flicker pulse_phase", self.pulse_phase)


def evaluate_flicker(frame: int, particles: ParticleSet, constants: FlickerConstants) -> ParticleStates:
    """Steady light with a few small sines on its brightness and a breathing radius."""
    if particles.count == 0:
        return ParticleStates.empty()
    c = constants
    level = np.full(particles.count, c.level)
    for frequency, depth, phase in zip(c.frequencies, c.depths, c.phases):
        level += depth * wave(frame, frequency, particles.phase + phase)
    pulse = wave(frame, c.pulse_frequency, particles.phase + c.pulse_phase)
    return ParticleStates(
        x=particles.x.copy(),
        y=particles.y.copy(),
        scale=particles.size * (1.0 + c.pulse_depth * pulse),
        opacity=particles.opacity * np.clip(level, 0.0, 1.0),
        angle=_zeros_like(particles),
    )


# Kind name -> (evaluator, constants class).
EVALUATORS = {
    "twinkle": (evaluate_twinkle, TwinkleConstants),
    "puff": (evaluate_puff, PuffConstants),
    "mote": (evaluate_mote, MoteConstants),
    "fog": (evaluate_fog, FogConstants),
    "ripple": (evaluate_ripple, RippleConstants),
    "swim": (evaluate_swim, SwimConstants),
    "sway": (evaluate_sway, SwayConstants),
    "flash": (evaluate_flash, FlashConstants),
    "flicker": (evaluate_flicker, FlickerConstants),
}


def make_constants(kind: str, values=None):
    """Builds and validates the constants of a kind from a config mapping."""
    if not isinstance(kind, str) or kind not in EVALUATORS:
        raise config_error(f"Unknown particle kind {kind!r}. Known kinds: {sorted(EVALUATORS)}.")
    _, constants_class = EVALUATORS[kind]
    try:
        constants = constants_class(**(values or {}))
    except TypeError as e:
        raise config_error(f"Invalid constants for kind {kind!r}: {e}") from e
    logging.debug(f"Constants for kind '{kind}': {constants}")
    return constants


def evaluate(kind: str, frame: int, particles: ParticleSet, constants) -> ParticleStates:
    """Dispatches to the evaluator registered for `kind`."""
    evaluator, _ = EVALUATORS[kind]
    return evaluator(frame, particles, constants)
