"""Transient overlay for the preview window.

Nothing here touches the persisted drawing surface: the skeleton, cursor
ring, camera preview and status bar are drawn onto a copy each frame.
"""

from __future__ import annotations

import math
from typing import Optional

import cv2
import numpy as np

from handart.controller import FrameStatus
from handart.surface import parse_color

# MediaPipe hand topology
HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (5, 9), (9, 10), (10, 11), (11, 12),
    (9, 13), (13, 14), (14, 15), (15, 16),
    (13, 17), (0, 17), (17, 18), (18, 19), (19, 20),
]

SKELETON_COLOR = (0, 255, 0)   # BGR green
JOINT_COLOR = (0, 0, 255)      # BGR red
CURSOR_RADIUS = 10

# Keeps wild landmark coordinates inside OpenCV's int range
_PIXEL_LIMIT = 1 << 15


def draw_hand(frame: np.ndarray, landmarks: np.ndarray) -> np.ndarray:
    """Draw a mirrored hand skeleton onto ``frame`` in place.

    Landmarks with non-finite coordinates are skipped along with every
    connection that touches them.
    """
    h, w = frame.shape[:2]
    pts: list[Optional[tuple[int, int]]] = []
    for lm in landmarks:
        x, y = float(lm[0]), float(lm[1])
        if not (math.isfinite(x) and math.isfinite(y)):
            pts.append(None)
            continue
        px = min(max((1.0 - x) * w, -_PIXEL_LIMIT), _PIXEL_LIMIT)
        py = min(max(y * h, -_PIXEL_LIMIT), _PIXEL_LIMIT)
        pts.append((int(round(px)), int(round(py))))

    for a, b in HAND_CONNECTIONS:
        if a < len(pts) and b < len(pts) and pts[a] and pts[b]:
            cv2.line(frame, pts[a], pts[b], SKELETON_COLOR, 2, cv2.LINE_AA)
    for p in pts:
        if p is not None:
            cv2.circle(frame, p, 3, JOINT_COLOR, -1, cv2.LINE_AA)
    return frame


def draw_cursor(frame: np.ndarray, point: tuple[float, float], color: str) -> np.ndarray:
    x, y = float(point[0]), float(point[1])
    if not (math.isfinite(x) and math.isfinite(y)):
        return frame
    center = (
        int(round(min(max(x, -_PIXEL_LIMIT), _PIXEL_LIMIT))),
        int(round(min(max(y, -_PIXEL_LIMIT), _PIXEL_LIMIT))),
    )
    cv2.circle(frame, center, CURSOR_RADIUS, parse_color(color), 3, cv2.LINE_AA)
    return frame


def draw_status(frame: np.ndarray, status: FrameStatus) -> np.ndarray:
    text = (
        f"camera: {status.camera} | hand: {status.hand} | "
        f"gesture: {status.gesture} | mode: {status.mode}"
    )
    cv2.rectangle(frame, (0, 0), (frame.shape[1], 32), (40, 40, 40), -1)
    cv2.putText(
        frame, text, (10, 22),
        cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 1, cv2.LINE_AA,
    )
    return frame


def draw_preview(frame: np.ndarray, preview_rgb: np.ndarray, margin: int = 10) -> np.ndarray:
    """Inset the camera preview in the bottom-right corner."""
    ph, pw = preview_rgb.shape[:2]
    h, w = frame.shape[:2]
    if ph + margin > h or pw + margin > w:
        return frame
    y0, x0 = h - ph - margin, w - pw - margin
    frame[y0:y0 + ph, x0:x0 + pw] = cv2.cvtColor(preview_rgb, cv2.COLOR_RGB2BGR)
    return frame


def compose(
    surface_image: np.ndarray,
    status: FrameStatus,
    landmarks: Optional[np.ndarray] = None,
    cursor: Optional[tuple[float, float]] = None,
    brush_color: str = "#000000",
    preview_rgb: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Build the frame shown on screen from the ink and transient layers."""
    frame = surface_image.copy()
    if landmarks is not None:
        draw_hand(frame, landmarks)
    if cursor is not None:
        draw_cursor(frame, cursor, brush_color)
    if preview_rgb is not None:
        draw_preview(frame, preview_rgb)
    draw_status(frame, status)
    return frame
