"""Fingertip jitter reduction."""

from __future__ import annotations

from collections import deque


Point = tuple[float, float]


class CoordinateSmoother:
    """Weighted moving average over the last few raw fingertip positions.

    The oldest retained sample has weight 1, the next weight 2, and so on,
    so the newest sample always pulls hardest. There is no outlier
    rejection; call ``reset()`` whenever tracking is lost so the first
    point after reacquisition is not dragged toward stale positions.
    """

    def __init__(self, window: int = 5):
        if window < 1:
            raise ValueError(f"window must be >= 1, got {window}")
        self.window = window
        self._history: deque[Point] = deque(maxlen=window)

    def smooth(self, point: Point) -> Point:
        self._history.append((float(point[0]), float(point[1])))

        total_weight = 0
        avg_x = 0.0
        avg_y = 0.0
        for weight, (x, y) in enumerate(self._history, start=1):
            avg_x += x * weight
            avg_y += y * weight
            total_weight += weight

        return avg_x / total_weight, avg_y / total_weight

    def reset(self):
        self._history.clear()

    @property
    def history(self) -> list[Point]:
        return list(self._history)

    def __len__(self) -> int:
        return len(self._history)
