"""Tests for gesture classification from raw landmarks."""

import numpy as np
import pytest

from handart.gestures import (
    RULES,
    FingerStates,
    Gesture,
    InvalidPoseError,
    classify,
    validate_pose,
)


def make_pose(thumb=False, index=False, middle=False, ring=False, pinky=False):
    """Raw image-space landmarks with the chosen fingers extended.

    Proximal joints sit at y=0.6; extended tips are above them (y=0.4),
    curled tips below (y=0.7). The thumb is judged sideways: its tip is to
    the right of its joint when extended.
    """
    lm = np.zeros((21, 3), dtype=np.float32)
    lm[:, :2] = 0.5
    lm[0] = [0.5, 0.9, 0.0]  # wrist

    lm[3] = [0.25, 0.75, 0.0]
    lm[4] = [0.30 if thumb else 0.20, 0.75, 0.0]

    for (pip, tip, x, up) in [
        (6, 8, 0.45, index),
        (10, 12, 0.50, middle),
        (14, 16, 0.55, ring),
        (18, 20, 0.60, pinky),
    ]:
        lm[pip] = [x, 0.6, 0.0]
        lm[tip] = [x, 0.4 if up else 0.7, 0.0]
    return lm


def make_pinch(**fingers):
    lm = make_pose(**fingers)
    lm[4, :2] = lm[8, :2] + np.array([0.02, 0.03], dtype=np.float32)
    return lm


class TestFingerStates:
    def test_all_extended(self):
        f = FingerStates.from_landmarks(make_pose(True, True, True, True, True))
        assert (f.thumb, f.index, f.middle, f.ring, f.pinky) == (True,) * 5
        assert f.up_count == 5

    def test_all_curled(self):
        f = FingerStates.from_landmarks(make_pose())
        assert f.up_count == 0

    def test_pinch_distance_is_2d(self):
        lm = make_pose(index=True)
        lm[4] = [0.45, 0.4, 0.9]  # same x/y as index tip, far in z
        f = FingerStates.from_landmarks(lm)
        assert f.pinch_distance == pytest.approx(0.0, abs=1e-6)


class TestClassify:
    def test_open_hand(self):
        assert classify(make_pose(True, True, True, True, True)) == Gesture.OPEN

    def test_four_fingers_is_open(self):
        assert classify(make_pose(False, True, True, True, True)) == Gesture.OPEN

    def test_peace(self):
        assert classify(make_pose(index=True, middle=True)) == Gesture.PEACE

    def test_peace_with_thumb(self):
        assert classify(make_pose(thumb=True, index=True, middle=True)) == Gesture.PEACE

    def test_point(self):
        assert classify(make_pose(index=True)) == Gesture.POINT

    def test_point_with_thumb_out(self):
        assert classify(make_pose(thumb=True, index=True)) == Gesture.POINT

    def test_fist(self):
        assert classify(make_pose()) == Gesture.FIST

    def test_thumb_only_is_fist(self):
        assert classify(make_pose(thumb=True)) == Gesture.FIST

    def test_other(self):
        # Middle and ring up: no specific rule, but two fingers up
        assert classify(make_pose(middle=True, ring=True)) == Gesture.OTHER

    def test_pinch(self):
        assert classify(make_pinch(index=True)) == Gesture.PINCH

    @pytest.mark.parametrize("fingers", [
        dict(thumb=True, index=True, middle=True, ring=True, pinky=True),
        dict(index=True, middle=True),
        dict(),
    ])
    def test_pinch_precedence(self, fingers):
        assert classify(make_pinch(**fingers)) == Gesture.PINCH

    def test_pinch_threshold_is_strict(self):
        lm = make_pose(index=True)
        lm[4, :2] = lm[8, :2] + np.array([0.09, 0.0], dtype=np.float32)
        assert classify(lm) != Gesture.PINCH

    def test_pure_function(self):
        lm = make_pose(index=True)
        before = lm.copy()
        assert classify(lm) == classify(lm)
        np.testing.assert_array_equal(lm, before)

    def test_accepts_nested_lists(self):
        assert classify(make_pose(index=True).tolist()) == Gesture.POINT


class TestRuleTable:
    def test_rule_order(self):
        assert [r.gesture for r in RULES] == [
            Gesture.PINCH, Gesture.OPEN, Gesture.PEACE, Gesture.POINT, Gesture.FIST,
        ]

    def test_custom_table(self):
        rules = (RULES[-1],)  # fist only
        assert classify(make_pose(index=True), rules=rules) == Gesture.FIST
        assert classify(make_pose(index=True, middle=True), rules=rules) == Gesture.OTHER


class TestMalformedPoses:
    def test_too_few_landmarks(self):
        with pytest.raises(InvalidPoseError):
            classify(np.zeros((20, 3), dtype=np.float32))

    def test_wrong_rank(self):
        with pytest.raises(InvalidPoseError):
            validate_pose(np.zeros(63, dtype=np.float32))

    def test_invalid_pose_is_value_error(self):
        with pytest.raises(ValueError):
            validate_pose([])

    def test_nan_landmarks_classify(self):
        lm = np.full((21, 3), np.nan, dtype=np.float32)
        # Every comparison with NaN is false: no fingers up, no pinch
        assert classify(lm) == Gesture.FIST

    def test_inf_landmarks_do_not_raise(self):
        lm = np.full((21, 3), np.inf, dtype=np.float32)
        assert isinstance(classify(lm), Gesture)
