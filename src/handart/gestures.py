"""Gesture classification from raw hand landmarks.

Each finger is judged "up" or "down" from a single landmark comparison,
then an ordered rule table picks the first matching gesture. The table is
evaluated top to bottom because the rules overlap: a pinch wins over
everything, and a mostly-open hand wins over the two- and one-finger shapes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable

import numpy as np


class Gesture(Enum):
    """Discrete hand shapes recognized by the classifier."""
    PINCH = "pinch"
    OPEN = "open"
    PEACE = "peace"
    POINT = "point"
    FIST = "fist"
    OTHER = "other"


class InvalidPoseError(ValueError):
    """Raised when a hand pose does not carry 21 landmarks."""


# MediaPipe hand landmark indices
WRIST = 0
THUMB_IP, THUMB_TIP = 3, 4
INDEX_PIP, INDEX_TIP = 6, 8
MIDDLE_PIP, MIDDLE_TIP = 10, 12
RING_PIP, RING_TIP = 14, 16
PINKY_PIP, PINKY_TIP = 18, 20

NUM_LANDMARKS = 21

PINCH_THRESHOLD = 0.08


@dataclass(frozen=True)
class FingerStates:
    """Which fingers are extended in a single pose."""
    thumb: bool
    index: bool
    middle: bool
    ring: bool
    pinky: bool
    pinch_distance: float

    @property
    def up_count(self) -> int:
        return sum((self.thumb, self.index, self.middle, self.ring, self.pinky))

    @classmethod
    def from_landmarks(cls, landmarks: np.ndarray) -> FingerStates:
        lm = landmarks
        # Thumb moves sideways relative to the hand, the others vertically
        # (smaller y is higher in the image).
        return cls(
            thumb=bool(lm[THUMB_TIP][0] > lm[THUMB_IP][0]),
            index=bool(lm[INDEX_TIP][1] < lm[INDEX_PIP][1]),
            middle=bool(lm[MIDDLE_TIP][1] < lm[MIDDLE_PIP][1]),
            ring=bool(lm[RING_TIP][1] < lm[RING_PIP][1]),
            pinky=bool(lm[PINKY_TIP][1] < lm[PINKY_PIP][1]),
            pinch_distance=math.hypot(
                float(lm[THUMB_TIP][0] - lm[INDEX_TIP][0]),
                float(lm[THUMB_TIP][1] - lm[INDEX_TIP][1]),
            ),
        )


@dataclass(frozen=True)
class GestureRule:
    """One row of the classification table."""
    gesture: Gesture
    predicate: Callable[[FingerStates], bool]
    description: str = ""

    def matches(self, fingers: FingerStates) -> bool:
        return self.predicate(fingers)


RULES: tuple[GestureRule, ...] = (
    GestureRule(
        Gesture.PINCH,
        lambda f: f.pinch_distance < PINCH_THRESHOLD,
        "thumb and index tips touching",
    ),
    GestureRule(
        Gesture.OPEN,
        lambda f: f.up_count >= 4,
        "four or more fingers up",
    ),
    GestureRule(
        Gesture.PEACE,
        lambda f: f.index and f.middle and not f.ring and not f.pinky,
        "index and middle only",
    ),
    GestureRule(
        Gesture.POINT,
        lambda f: f.index and not f.middle and not f.ring and not f.pinky,
        "index only",
    ),
    GestureRule(
        Gesture.FIST,
        lambda f: f.up_count <= 1,
        "at most one finger up",
    ),
)


def validate_pose(landmarks) -> np.ndarray:
    """Coerce a pose to a float array and check it has 21 landmarks.

    Raises:
        InvalidPoseError: if the pose cannot hold 21 (x, y) landmarks.
    """
    try:
        arr = np.asarray(landmarks, dtype=np.float32)
    except (TypeError, ValueError) as e:
        raise InvalidPoseError(f"pose is not numeric: {e}") from e

    if arr.ndim != 2 or arr.shape[0] < NUM_LANDMARKS or arr.shape[1] < 2:
        raise InvalidPoseError(
            f"expected ({NUM_LANDMARKS}, 3) landmarks, got shape {arr.shape}"
        )
    return arr


def classify(landmarks, rules: tuple[GestureRule, ...] = RULES) -> Gesture:
    """Classify a hand pose, first matching rule wins.

    Args:
        landmarks: Raw detector landmarks, shape (21, 3), normalized to [0, 1].
        rules: Ordered rule table.

    Returns:
        The matching Gesture, or Gesture.OTHER when no rule applies.
    """
    fingers = FingerStates.from_landmarks(validate_pose(landmarks))
    for rule in rules:
        if rule.matches(fingers):
            return rule.gesture
    return Gesture.OTHER
