"""Gesture-gated stroke construction.

While the hand holds a POINT gesture the fingertip positions are collected
into the current path and the newest few points are stroked with midpoint
quadratic interpolation. Any other gesture ends the stroke.

Usage:
    builder = StrokeBuilder()
    # In frame loop:
    update = builder.feed(point, gesture, color="#f15c5c", width=5)
    surface.apply_all(update.commands)
    if update.ended:
        history.commit(surface.snapshot())
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

from handart.canvas import DrawCommand, stroke_path
from handart.gestures import Gesture

logger = logging.getLogger("handart.stroke")

Point = tuple[float, float]


class StrokeState(Enum):
    IDLE = "idle"
    DRAWING = "drawing"


@dataclass
class StrokeUpdate:
    """Result of feeding one frame to the stroke builder."""
    commands: list[DrawCommand] = field(default_factory=list)
    started: bool = False
    ended: bool = False
    appended: bool = False


class StrokeBuilder:
    """Turns a stream of (point, gesture) pairs into stroke segments.

    Args:
        min_distance: Movement in pixels a point must exceed (from the last
            accepted point) before it is added. Suppresses jitter strokes.
        max_points: Path length that triggers trimming.
        keep_points: Number of most recent points kept after a trim.
        tail: Number of trailing points redrawn each time a point is added.
        draw_gesture: Gesture that keeps the pen down.
    """

    def __init__(
        self,
        min_distance: float = 2.0,
        max_points: int = 100,
        keep_points: int = 50,
        tail: int = 3,
        draw_gesture: Gesture = Gesture.POINT,
    ):
        if keep_points > max_points:
            raise ValueError("keep_points must not exceed max_points")
        self.min_distance = min_distance
        self.max_points = max_points
        self.keep_points = keep_points
        self.tail = tail
        self.draw_gesture = draw_gesture

        self._state = StrokeState.IDLE
        self._path: list[Point] = []
        self._last_point: Point | None = None

    def feed(
        self,
        point: Point,
        gesture: Gesture,
        color: str = "#000000",
        width: float = 5.0,
    ) -> StrokeUpdate:
        """Advance the state machine by one frame."""
        update = StrokeUpdate()

        if gesture != self.draw_gesture:
            if self._state == StrokeState.DRAWING:
                logger.debug("Stroke ended after %d points", len(self._path))
                self._reset()
                update.ended = True
            return update

        x, y = float(point[0]), float(point[1])

        if self._state == StrokeState.IDLE:
            self._state = StrokeState.DRAWING
            self._path = [(x, y)]
            self._last_point = (x, y)
            update.started = True
            logger.debug("Stroke started at (%.1f, %.1f)", x, y)
            return update

        lx, ly = self._last_point
        if math.hypot(x - lx, y - ly) <= self.min_distance:
            return update

        self._path.append((x, y))
        cmd = stroke_path(self._path, color, width, tail=self.tail)
        if cmd is not None:
            update.commands.append(cmd)
        self._last_point = (x, y)
        update.appended = True

        if len(self._path) > self.max_points:
            self._path = self._path[-self.keep_points:]

        return update

    def cancel(self):
        """Drop the stroke in progress without reporting an end."""
        self._reset()

    def _reset(self):
        self._state = StrokeState.IDLE
        self._path = []
        self._last_point = None

    @property
    def state(self) -> StrokeState:
        return self._state

    @property
    def is_drawing(self) -> bool:
        return self._state == StrokeState.DRAWING

    @property
    def path(self) -> list[Point]:
        return list(self._path)
