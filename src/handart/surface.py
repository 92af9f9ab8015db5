"""Raster drawing surface backed by a numpy image and OpenCV primitives.

The surface holds the persisted ink as an (H, W, 3) uint8 BGR array. It
knows how to apply DrawCommand objects, take and restore snapshots, resize
without losing ink, and encode itself to PNG.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Iterable

import cv2
import numpy as np

from handart.canvas import DrawCommand

logger = logging.getLogger("handart.surface")

WHITE = "#ffffff"

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")

# Fixed-point bits for sub-pixel cv2 drawing
_SHIFT = 4
_SCALE = 1 << _SHIFT

# Pixel coordinates are clipped to this range before fixed-point conversion
_COORD_LIMIT = float(1 << 15)

# Line samples per quadratic curve segment
_CURVE_STEPS = 8


def parse_color(color: str) -> tuple[int, int, int]:
    """Convert '#RRGGBB' to an OpenCV BGR tuple."""
    match = _HEX_COLOR.match(color.strip())
    if not match:
        raise ValueError(f"Invalid colour {color!r}, expected #RRGGBB")
    value = match.group(1)
    r, g, b = int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
    return b, g, r


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def _quad_points(p0, ctrl, p1, steps: int = _CURVE_STEPS) -> list[tuple[float, float]]:
    """Sample a quadratic Bezier curve, excluding its start point."""
    pts = []
    for i in range(1, steps + 1):
        t = i / steps
        u = 1.0 - t
        x = u * u * p0[0] + 2 * u * t * ctrl[0] + t * t * p1[0]
        y = u * u * p0[1] + 2 * u * t * ctrl[1] + t * t * p1[1]
        pts.append((x, y))
    return pts


class DrawingSurface:
    """Persisted ink layer.

    Only the controller owns a surface; the stroke builder and particle
    field describe their output as DrawCommand lists applied here.
    """

    def __init__(self, width: int = 1280, height: int = 720, background: str = WHITE):
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")
        self.background = background
        self.global_alpha = 1.0
        self._image = np.empty((height, width, 3), dtype=np.uint8)
        self.fill(background)

    @property
    def width(self) -> int:
        return self._image.shape[1]

    @property
    def height(self) -> int:
        return self._image.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def image(self) -> np.ndarray:
        """The live raster. Mutating it mutates the surface."""
        return self._image

    # --- primitives ---

    def fill(self, color: str = WHITE):
        self._image[:] = parse_color(color)

    def fade(self, color: str = WHITE, alpha: float = 0.05):
        """Composite a translucent colour rectangle over the whole surface."""
        alpha = min(1.0, max(0.0, alpha))
        if alpha == 0.0:
            return
        overlay = np.empty_like(self._image)
        overlay[:] = parse_color(color)
        self._image[:] = cv2.addWeighted(overlay, alpha, self._image, 1.0 - alpha, 0.0)

    def stroke_path(self, segments: Iterable[tuple], color: str, width: float):
        """Stroke a move/line/quad segment list with round caps and joins."""
        polylines: list[list[tuple[float, float]]] = []
        current: list[tuple[float, float]] = []
        pen: tuple[float, float] | None = None

        for seg in segments:
            op = seg[0]
            coords = [float(v) for v in seg[1:]]
            if not _finite(*coords):
                logger.debug("Skipping non-finite path segment %s", seg)
                continue

            if op == "move":
                if len(current) > 1:
                    polylines.append(current)
                pen = (coords[0], coords[1])
                current = [pen]
            elif op == "line":
                target = (coords[0], coords[1])
                if pen is None:
                    current = [target]
                else:
                    current.append(target)
                pen = target
            elif op == "quad":
                ctrl = (coords[0], coords[1])
                target = (coords[2], coords[3])
                if pen is None:
                    current = [target]
                else:
                    current.extend(_quad_points(pen, ctrl, target))
                pen = target
            else:
                raise ValueError(f"Unknown path segment {op!r}")

        if len(current) > 1:
            polylines.append(current)

        if not polylines:
            return

        thickness = max(1, int(round(width)))
        bgr = parse_color(color)
        pts = []
        for line in polylines:
            arr = np.array(line, dtype=np.float64)
            arr = arr[np.isfinite(arr).all(axis=1)]
            if len(arr) < 2:
                continue
            arr = np.clip(arr, -_COORD_LIMIT, _COORD_LIMIT)
            pts.append(np.round(arr * _SCALE).astype(np.int32))
        if not pts:
            return

        if self.global_alpha >= 1.0:
            cv2.polylines(self._image, pts, False, bgr, thickness, cv2.LINE_AA, _SHIFT)
        elif self.global_alpha > 0.0:
            layer = self._image.copy()
            cv2.polylines(layer, pts, False, bgr, thickness, cv2.LINE_AA, _SHIFT)
            self._image[:] = cv2.addWeighted(layer, self.global_alpha, self._image, 1.0 - self.global_alpha, 0.0)

    def fill_circle(self, x: float, y: float, radius: float, color: str):
        """Draw a filled disc using the current global alpha."""
        if not _finite(x, y, radius) or radius <= 0:
            logger.debug("Skipping invalid disc at (%s, %s) r=%s", x, y, radius)
            return
        if self.global_alpha <= 0.0:
            return

        x = min(max(x, -_COORD_LIMIT), _COORD_LIMIT)
        y = min(max(y, -_COORD_LIMIT), _COORD_LIMIT)
        radius = min(radius, _COORD_LIMIT)
        center = (int(round(x * _SCALE)), int(round(y * _SCALE)))
        r = max(1, int(round(radius * _SCALE)))
        bgr = parse_color(color)

        if self.global_alpha >= 1.0:
            cv2.circle(self._image, center, r, bgr, -1, cv2.LINE_AA, _SHIFT)
            return

        # Blend only the disc's bounding box
        pad = int(math.ceil(radius)) + 2
        x0, y0 = max(0, int(x) - pad), max(0, int(y) - pad)
        x1, y1 = min(self.width, int(x) + pad + 1), min(self.height, int(y) + pad + 1)
        if x0 >= x1 or y0 >= y1:
            return

        roi = self._image[y0:y1, x0:x1]
        layer = roi.copy()
        local_center = (center[0] - x0 * _SCALE, center[1] - y0 * _SCALE)
        cv2.circle(layer, local_center, r, bgr, -1, cv2.LINE_AA, _SHIFT)
        roi[:] = cv2.addWeighted(layer, self.global_alpha, roi, 1.0 - self.global_alpha, 0.0)

    def apply(self, command: DrawCommand):
        """Apply a single draw command."""
        if command.type == "path":
            self.stroke_path(command.segments, command.color, command.width)
        elif command.type == "disc":
            self.global_alpha = min(1.0, max(0.0, command.alpha))
            self.fill_circle(command.x, command.y, command.radius, command.color)
        elif command.type == "alpha":
            self.global_alpha = min(1.0, max(0.0, command.alpha))
        elif command.type == "fill":
            self.fill(command.color)
        elif command.type == "fade":
            self.fade(command.color, command.alpha)
        else:
            raise ValueError(f"Unknown draw command type {command.type!r}")

    def apply_all(self, commands: Iterable[DrawCommand]):
        for command in commands:
            self.apply(command)

    # --- state ---

    def snapshot(self) -> np.ndarray:
        """Full copy of the current raster."""
        return self._image.copy()

    def paste(self, image: np.ndarray):
        """Draw an image at the top-left corner at its own size, cropping overflow."""
        h = min(self.height, image.shape[0])
        w = min(self.width, image.shape[1])
        self._image[:h, :w] = image[:h, :w]

    def restore(self, snapshot: np.ndarray):
        """Replace the visible ink with a snapshot."""
        self.fill(self.background)
        self.paste(snapshot)

    def resize(self, width: int, height: int) -> bool:
        """Resize the surface, keeping existing ink at its previous size.

        Returns False when the size is unchanged (nothing happens).
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")
        if (width, height) == self.size:
            return False

        captured = self.snapshot()
        self._image = np.empty((height, width, 3), dtype=np.uint8)
        self.fill(self.background)
        self.paste(captured)
        return True

    def encode_png(self) -> bytes:
        ok, buf = cv2.imencode(".png", self._image)
        if not ok:
            raise RuntimeError("PNG encoding failed")
        return buf.tobytes()
