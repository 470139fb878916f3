# expression.py
"""
Frame-driven facial and arm helpers for dialogue characters.

Like the gait evaluator these are pure functions of the frame: a character
"decides" to blink or to open its mouth through a seed hash, so any frame
renders the same face no matter which worker draws it. Gestures are the
exception that needs one extra number, the frame the gesture started on,
which the scene stores with the figure.
"""
import math
from typing import NamedTuple

from constants import (
    FPS, BLINK_WINDOW_SECONDS, BLINK_THRESHOLD, BLINK_DURATION_FRAMES, TWO_PI,
    GESTURE_DURATIONS, GESTURE_ENTRY_FRAMES, DEFAULT_GESTURE_DURATION,
)
from seeding import easing_hash
from utils import config_error, require_positive

MOUTH_CLOSED = 0
MOUTH_SLIGHT = 1
MOUTH_ROUND = 2
MOUTH_WIDE = 3


class GestureState(NamedTuple):
    """Arm rotations in degrees, added on top of the gait and talking motion."""
    left_arm: float = 0.0
    left_forearm: float = 0.0
    right_arm: float = 0.0
    right_forearm: float = 0.0


IDLE_GESTURE = GestureState()


def _rhythm(frame: int, hertz: float, phase: float, fps: int) -> float:
    # hertz over a fps-frame second
    return math.sin(math.fmod(frame / fps * hertz, 1.0) * TWO_PI + phase)


def cubic_ease_out(t: float) -> float:
    t = min(max(t, 0.0), 1.0)
    return 1.0 - (1.0 - t) ** 3


def cubic_ease_in_out(t: float) -> float:
    t = min(max(t, 0.0), 1.0)
    if t < 0.5:
        return 4.0 * t * t * t
    return 1.0 - (-2.0 * t + 2.0) ** 3 / 2.0


def blink_openness(frame: int, seed: float = 0.0, fps: int = FPS) -> float:
    """
    Eyelid openness in [0, 1]; 1 is fully open.

    Time is cut into two-second windows. A window holds one blink when its
    hash clears BLINK_THRESHOLD, starting at a hashed offset inside the
    window. The blink closes over two frames, holds nearly shut for one and
    reopens over two.
    """
    require_positive("fps", fps)
    window_size = fps * BLINK_WINDOW_SECONDS
    window = frame // window_size
    if easing_hash(window * 7 + seed) <= BLINK_THRESHOLD:
        return 1.0
    offset = math.floor(easing_hash(window * 13 + seed) * (window_size - 10))
    in_blink = frame - (window * window_size + offset)
    if in_blink < 0 or in_blink > BLINK_DURATION_FRAMES:
        return 1.0
    if in_blink <= 2:
        return 1.0 - in_blink / 2
    if in_blink == 3:
        return 0.05
    return (in_blink - 3) / 2


def mouth_shape(frame: int, talking: bool, fps: int = FPS) -> int:
    """Mouth shape 0-3 from syllable, word and sentence rhythms."""
    if not talking:
        return MOUTH_CLOSED
    syllable = _rhythm(frame, 4.5, 0.0, fps)
    word = _rhythm(frame, 2.2, 0.7, fps)
    sentence = _rhythm(frame, 0.8, 1.3, fps)

    if sentence < -0.6:
        return MOUTH_CLOSED
    combined = syllable * 0.6 + word * 0.4
    if combined > 0.5:
        return MOUTH_WIDE
    if combined > 0.0:
        return MOUTH_ROUND
    if combined > -0.4:
        return MOUTH_SLIGHT
    return MOUTH_CLOSED


def talking_bounce(frame: int, talking: bool, fps: int = FPS) -> float:
    """Upward body bounce (<= 0) in time with the syllables."""
    if not talking:
        return 0.0
    return -abs(_rhythm(frame, 3.5, 0.0, fps)) * 1.2


def talking_gesture(frame: int, talking: bool, fps: int = FPS) -> float:
    """Free-hand rotation (degrees, within +/-12) while talking."""
    if not talking:
        return 0.0
    return _rhythm(frame, 1.2, 0.5, fps) * 12.0


def gesture_duration(gesture: str) -> int:
    """Nominal length of a gesture in frames, for scheduling."""
    return GESTURE_DURATIONS.get(gesture, DEFAULT_GESTURE_DURATION)


def gesture_state(gesture: str, frame: int, gesture_frame: int, fps: int = FPS) -> GestureState:
    """
    Arm rotations for a named gesture.

    Args:
        gesture (str): One of GESTURE_DURATIONS' keys, or "idle".
        frame (int): Absolute frame; drives the looping parts (waving).
        gesture_frame (int): Frames since the gesture started; drives the
            eased entry. Negative means the gesture has not started yet.

    Returns:
        GestureState: Rotations in degrees.
    """
    if gesture != "idle" and gesture not in GESTURE_DURATIONS:
        raise config_error(f"Unknown gesture {gesture!r}. Known gestures: {sorted(GESTURE_DURATIONS)}.")
    if gesture == "idle" or gesture_frame < 0:
        return IDLE_GESTURE
    entry = cubic_ease_out(gesture_frame / GESTURE_ENTRY_FRAMES)

    if gesture == "wave":
        swing = _rhythm(frame, 3.0, 0.0, fps) * 20.0
        return GestureState(left_arm=(-45.0 + swing) * entry, left_forearm=-40.0 * entry)
    if gesture == "point":
        return GestureState(left_arm=-55.0 * entry, left_forearm=-70.0 * entry)
    if gesture == "shrug":
        hold = cubic_ease_in_out(gesture_frame / 12)
        return GestureState(-30.0 * hold, -50.0 * hold, 30.0 * hold, 50.0 * hold)
    if gesture == "explain":
        circle_x = _rhythm(frame, 1.5, 0.0, fps) * 15.0
        circle_y = _rhythm(frame, 1.5, 1.57, fps) * 8.0
        return GestureState(left_arm=(-35.0 + circle_x) * entry,
                            left_forearm=(-45.0 + circle_y) * entry)
    # cheers
    raise_ = cubic_ease_out(gesture_frame / 15)
    return GestureState(right_arm=-15.0 * raise_, right_forearm=-20.0 * raise_)
