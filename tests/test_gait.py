"""Tests for the gait cycle evaluator and the expression helpers."""

import math
import os
import sys

import pytest

# Add the project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from gait import GaitParams, IdleTerm, LimbSet, evaluate_gait, gait_from_preset
from expression import (
    IDLE_GESTURE, blink_openness, gesture_duration, gesture_state,
    mouth_shape, talking_bounce, talking_gesture,
)
from utils import ConfigurationError

LEGS = LimbSet(names=("left_leg", "right_leg"), amplitudes=(25.0, 25.0), bob=2.0, lean=2.0)


class TestEvaluateGait:
    """Tests for evaluate_gait."""

    def test_legs_alternate(self):
        """Opposite phase offsets keep the two legs on opposite sides."""
        params = GaitParams(seed=0.4, stride_frequency=0.08, limb_phase_offsets=(0.0, math.pi))
        for frame in range(0, 2000):
            left, right = evaluate_gait(frame, params, LEGS).limb_angles
            assert left * right <= 1e-12

    def test_limb_formula(self):
        params = GaitParams(seed=1.0, stride_frequency=0.1, limb_phase_offsets=(0.0, math.pi))
        pose = evaluate_gait(12, params, LEGS, IdleTerm(breath_amplitude=0.0, sway_amplitude=0.0))
        assert pose.limb_angles[0] == pytest.approx(25.0 * math.sin(12 * 0.1 + 1.0))
        assert pose.body_bob == pytest.approx(2.0 * abs(math.sin(12 * 0.1 + 1.0)))
        assert pose.body_lean == pytest.approx(2.0 * math.sin(12 * 0.1 + 1.0))

    def test_deterministic(self):
        params, limbs = gait_from_preset("walk", seed=2.5)
        for frame in (0, 17, 999, 10 ** 9):
            assert evaluate_gait(frame, params, limbs) == evaluate_gait(frame, params, limbs)

    def test_idle_persists_without_gait(self):
        """A standing figure keeps breathing and swaying."""
        params, limbs = gait_from_preset("idle", seed=0.0)
        poses = [evaluate_gait(frame, params, limbs) for frame in range(0, 120, 5)]
        assert all(angle == 0.0 for pose in poses for angle in pose.limb_angles)
        assert len({round(pose.body_bob, 9) for pose in poses}) > 1
        assert len({round(pose.body_lean, 9) for pose in poses}) > 1

    def test_idle_limb_term(self):
        limbs = LimbSet(names=("arm",), amplitudes=(0.0,), idle_amplitudes=(4.0,))
        params = GaitParams(seed=0.0, stride_frequency=0.1, limb_phase_offsets=(0.0,))
        idle = IdleTerm(sway_frequency=0.05)
        pose = evaluate_gait(10, params, limbs, idle)
        assert pose.limb_angles[0] == pytest.approx(4.0 * math.sin(0.5))

    def test_named_lookup(self):
        params, limbs = gait_from_preset("walk", seed=0.0)
        pose = evaluate_gait(20, params, limbs)
        assert pose.angle_of("left_leg") == pose.limb_angles[0]
        assert pose.angle_of("right_arm") == pose.limb_angles[3]

    def test_presets_arms_oppose_legs(self):
        params, limbs = gait_from_preset("walk", seed=0.0)
        idle = IdleTerm(breath_amplitude=0.0, sway_amplitude=0.0)
        for frame in range(0, 200, 3):
            left_leg, _, left_arm, _ = evaluate_gait(frame, params, limbs, idle).limb_angles
            assert left_leg * left_arm <= 1e-12

    def test_speed_scales_stride(self):
        slow, _ = gait_from_preset("walk", seed=0.0, speed=1.0)
        fast, _ = gait_from_preset("walk", seed=0.0, speed=2.0)
        assert fast.stride_frequency == pytest.approx(2 * slow.stride_frequency)


class TestGaitValidation:
    """Gait configuration errors surface at construction."""

    @pytest.mark.parametrize("frequency", [0.0, -0.1, math.inf])
    def test_bad_stride_frequency(self, frequency):
        with pytest.raises(ConfigurationError):
            GaitParams(seed=0.0, stride_frequency=frequency, limb_phase_offsets=(0.0,))

    def test_limb_count_mismatch(self):
        params = GaitParams(seed=0.0, stride_frequency=0.1, limb_phase_offsets=(0.0, math.pi, 0.0))
        with pytest.raises(ConfigurationError):
            evaluate_gait(0, params, LEGS)

    def test_limb_set_mismatch(self):
        with pytest.raises(ConfigurationError):
            LimbSet(names=("a", "b"), amplitudes=(1.0,))

    def test_negative_amplitude(self):
        with pytest.raises(ConfigurationError):
            LimbSet(names=("a",), amplitudes=(-1.0,))

    def test_unknown_preset(self):
        with pytest.raises(ConfigurationError):
            gait_from_preset("moonwalk", seed=0.0)

    def test_bad_idle_frequency(self):
        with pytest.raises(ConfigurationError):
            IdleTerm(breath_frequency=0.0)


class TestExpressions:
    """Tests for the blink and mouth helpers."""

    def test_blink_values(self):
        for frame in range(0, 3000):
            assert 0.0 <= blink_openness(frame) <= 1.0

    def test_blink_happens(self):
        closed = [f for f in range(0, 3000) if blink_openness(f) < 0.1]
        assert closed

    def test_blink_is_short(self):
        """A blink never keeps the eye shut for more than two frames in a row."""
        run = 0
        for frame in range(0, 3000):
            run = run + 1 if blink_openness(frame) < 0.5 else 0
            assert run <= 3

    def test_blink_seed_changes_timing(self):
        a = [blink_openness(f, seed=0.0) for f in range(600)]
        b = [blink_openness(f, seed=5.5) for f in range(600)]
        assert a != b

    def test_mouth_closed_when_silent(self):
        assert all(mouth_shape(f, talking=False) == 0 for f in range(100))

    def test_mouth_shapes_vary(self):
        shapes = {mouth_shape(f, talking=True) for f in range(300)}
        assert shapes == {0, 1, 2, 3}

    def test_talking_bounce(self):
        assert talking_bounce(10, talking=False) == 0.0
        assert all(-1.2 <= talking_bounce(f, talking=True) <= 0.0 for f in range(200))

    def test_talking_gesture(self):
        assert talking_gesture(10, talking=False) == 0.0
        values = [talking_gesture(f, talking=True) for f in range(200)]
        assert all(-12.0 <= v <= 12.0 for v in values)
        assert max(values) > 10.0


def reference_blink(frame):
    """Blink curve written out with the character-timing hash inline."""
    def frac_sin(seed):
        x = math.sin(seed * 12.9898 + 78.233) * 43758.5453
        return x - math.floor(x)

    window = frame // 60
    if frac_sin(window * 7) <= 0.35:
        return 1.0
    start = window * 60 + math.floor(frac_sin(window * 13) * 50)
    step = frame - start
    if step < 0 or step > 5:
        return 1.0
    if step <= 2:
        return 1.0 - step / 2
    if step == 3:
        return 0.05
    return (step - 3) / 2


class TestBlinkSchedule:
    """The blink schedule is fixed by the character-timing hash."""

    def test_matches_reference_curve(self):
        for frame in range(0, 1800):
            assert blink_openness(frame) == reference_blink(frame)

    def test_closed_frames_in_first_twenty_seconds(self):
        closed = [f for f in range(600) if blink_openness(f) < 0.1]
        assert closed == [82, 83, 160, 161, 195, 196, 259, 260, 411, 412, 435, 436, 543, 544]


class TestGestures:
    """Tests for named arm gestures."""

    def test_idle_and_not_started(self):
        assert gesture_state("idle", 100, 50) == IDLE_GESTURE
        assert gesture_state("wave", 100, -1) == IDLE_GESTURE

    def test_point_eases_in(self):
        start = gesture_state("point", 0, 0)
        assert start.left_arm == 0.0
        mid = gesture_state("point", 4, 4)
        full = gesture_state("point", 8, 8)
        assert -55.0 < mid.left_arm < 0.0
        assert full.left_arm == pytest.approx(-55.0)
        assert full.left_forearm == pytest.approx(-70.0)
        assert gesture_state("point", 200, 200) == full

    def test_wave_keeps_moving(self):
        arms = {round(gesture_state("wave", f, 30).left_arm, 6) for f in range(30, 60)}
        assert len(arms) >= 3
        assert max(arms) - min(arms) > 30.0
        assert all(-65.0 - 1e-9 <= a <= -25.0 + 1e-9 for a in arms)

    def test_shrug_is_symmetric(self):
        state = gesture_state("shrug", 20, 20)
        assert state.left_arm == pytest.approx(-state.right_arm)
        assert state.left_forearm == pytest.approx(-state.right_forearm)
        assert state.right_arm == pytest.approx(30.0)

    def test_cheers_raises_right_arm(self):
        state = gesture_state("cheers", 15, 15)
        assert state.left_arm == 0.0
        assert state.right_arm == pytest.approx(-15.0)
        assert state.right_forearm == pytest.approx(-20.0)

    def test_explain_circles(self):
        states = [gesture_state("explain", f, 40) for f in range(0, 20)]
        assert len({round(s.left_forearm, 6) for s in states}) > 5

    def test_durations(self):
        assert gesture_duration("explain") == 60
        assert gesture_duration("idle") == 30

    def test_unknown_gesture(self):
        with pytest.raises(ConfigurationError):
            gesture_state("moonwalk", 0, 0)
