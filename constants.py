# constants.py
"""
Application-level constants.

These values are static and do not change between renders. They are the
fixed arithmetic of the motion engine (hash constants, attribute
multipliers) plus the defaults shared by every scene and the preview
window settings. Scene-specific numbers live in the configuration file.
"""
import math

# --- Deterministic Hash ---
# hash(seed) = frac(sin(seed * HASH_SCALE + HASH_OFFSET) * HASH_AMPLITUDE)
# The exact constants and operation order are part of the contract: a port
# that changes them will place every particle somewhere else.
HASH_SCALE = 127.1
HASH_OFFSET = 311.7
HASH_AMPLITUDE = 43758.5453

# Per-attribute multipliers for hash(seed + index * k). Distinct values
# keep the attributes of one particle decorrelated.
ATTRIBUTE_MULTIPLIERS = {
    "x": 1.1,
    "y": 2.3,
    "size": 3.7,
    "speed": 4.1,
    "opacity": 5.9,
    "phase": 6.3,
}

# Character timing (blinks) uses its own hash with different constants:
# easing_hash(seed) = frac(sin(seed * EASING_HASH_SCALE + EASING_HASH_OFFSET) * HASH_AMPLITUDE)
EASING_HASH_SCALE = 12.9898
EASING_HASH_OFFSET = 78.233

TWO_PI = 2.0 * math.pi

# Default attribute ranges for the particle factory (min, max).
DEFAULT_SIZE_RANGE = (1.5, 5.5)
DEFAULT_SPEED_RANGE = (0.2, 1.0)
DEFAULT_OPACITY_RANGE = (0.15, 0.6)

# --- Rendering host ---
FPS = 30
CANVAS_WIDTH = 1536
CANVAS_HEIGHT = 1024

# --- Gait presets ---
# Stride frequencies are radians per frame. Limb order is
# (left leg, right leg, left arm, right arm); arms swing against their leg.
GAIT_LIMB_NAMES = ("left_leg", "right_leg", "left_arm", "right_arm")
GAIT_PRESETS = {
    "walk": {
        "stride_frequency": 0.08,
        "limb_amplitudes": (25.0, 25.0, 20.0, 20.0),
        "limb_phase_offsets": (0.0, math.pi, math.pi, 0.0),
        "bob": 2.0,
        "lean": 2.0,
    },
    "fight": {
        "stride_frequency": 0.25 * TWO_PI / FPS,
        "limb_amplitudes": (6.0, 6.0, 20.0, 15.0),
        "limb_phase_offsets": (0.0, math.pi, 0.0, 1.5),
        "bob": 1.0,
        "lean": 4.0,
    },
    "drum": {
        "stride_frequency": 0.2 * TWO_PI / FPS,
        "limb_amplitudes": (0.0, 0.0, 15.0, 15.0),
        "limb_phase_offsets": (0.0, math.pi, 0.0, math.pi),
        "bob": 0.5,
        "lean": 1.0,
    },
    "idle": {
        "stride_frequency": 0.08,
        "limb_amplitudes": (0.0, 0.0, 0.0, 0.0),
        "limb_phase_offsets": (0.0, math.pi, math.pi, 0.0),
        "bob": 0.0,
        "lean": 0.0,
    },
}

# Breathing (~0.5 Hz, 1.5px) and body sway (~0.15 Hz) for standing figures.
IDLE_BREATH_FREQUENCY = 0.5 * TWO_PI / FPS
IDLE_BREATH_AMPLITUDE = 1.5
IDLE_SWAY_FREQUENCY = 0.15 * TWO_PI / FPS
IDLE_SWAY_AMPLITUDE = 0.8

# --- Expressions ---
BLINK_WINDOW_SECONDS = 2
BLINK_THRESHOLD = 0.35
BLINK_DURATION_FRAMES = 5

# Named arm gestures and their nominal lengths in frames.
GESTURE_DURATIONS = {
    "wave": 45,
    "point": 30,
    "shrug": 40,
    "explain": 60,
    "cheers": 35,
}
DEFAULT_GESTURE_DURATION = 30
GESTURE_ENTRY_FRAMES = 8

# --- Visualization settings ---
# Set to True to run in borderless fullscreen mode.
FULLSCREEN = False
BACKGROUND_COLOR = (18, 14, 28)  # Night blue
FIGURE_COLOR = (230, 220, 200)
FIGURE_LIMB_LENGTH = 28

# Preview colors per particle kind.
KIND_COLORS = {
    "twinkle": (255, 253, 232),
    "puff": (160, 150, 140),
    "mote": (255, 208, 128),
    "fog": (184, 168, 200),
    "ripple": (120, 170, 210),
    "swim": (48, 30, 57),
    "sway": (25, 125, 8),
    "flash": (235, 240, 255),
    "flicker": (255, 213, 128),
}
