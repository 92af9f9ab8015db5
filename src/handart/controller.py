"""Per-frame orchestration of the gesture-to-ink pipeline.

The controller receives the detector's hand list once per video frame and
drives smoothing, classification, and either the stroke builder (DRAW
mode) or the particle field (PARTICLE mode). It owns the drawing surface
and the undo history, and reports a small status record for the UI.

Usage:
    controller = InteractionController(AppConfig())
    # Detector callback:
    controller.on_results(hands)
    # Display refresh (particle fade):
    controller.animation_tick()
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from handart.animation import AnimationLoop
from handart.canvas import DrawCommand
from handart.config import AppConfig
from handart.gestures import INDEX_TIP, Gesture, InvalidPoseError, classify, validate_pose
from handart.history import DrawingHistory
from handart.particles import ParticleField
from handart.smoothing import CoordinateSmoother
from handart.stroke import StrokeBuilder
from handart.surface import DrawingSurface, parse_color

logger = logging.getLogger("handart.controller")


class Mode(Enum):
    DRAW = "draw"
    PARTICLE = "particle"


@dataclass
class Brush:
    color: str = "#F15C5C"
    size: float = 5.0


@dataclass
class Session:
    """Mutable interaction state shared across frames."""
    mode: Mode = Mode.DRAW
    brush: Brush = field(default_factory=Brush)
    hand_detected: bool = False
    gesture: Optional[Gesture] = None
    cursor: Optional[tuple[float, float]] = None
    camera_status: str = "starting"
    blur_enabled: bool = True


@dataclass
class FrameStatus:
    """What the UI shows in its status bar."""
    camera: str
    hand: str
    gesture: str
    mode: str
    drawing: bool
    particles: int
    history: int
    can_undo: bool
    can_redo: bool


class InteractionController:
    """Owns the session, the surface and every pipeline component."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or AppConfig()
        cfg = self.config

        self.session = Session(
            brush=Brush(color=cfg.brush.color, size=cfg.brush.size),
            blur_enabled=cfg.detector.blur,
        )
        self.surface = DrawingSurface(
            cfg.canvas.width, cfg.canvas.height, background=cfg.canvas.background,
        )
        self.smoother = CoordinateSmoother(window=cfg.smoothing.window)
        self.stroke = StrokeBuilder(
            min_distance=cfg.stroke.min_distance,
            max_points=cfg.stroke.max_points,
            keep_points=cfg.stroke.keep_points,
            tail=cfg.stroke.tail,
        )
        pc = cfg.particles
        if rng is None and pc.seed is not None:
            rng = np.random.default_rng(pc.seed)
        self.particles = ParticleField(
            batch_size=pc.batch_size,
            max_speed=pc.max_speed,
            min_size=pc.min_size,
            max_size=pc.max_size,
            gravity=pc.gravity,
            decay=pc.decay,
            min_life=pc.min_life,
            rng=rng,
        )
        self.history = DrawingHistory(capacity=cfg.history.capacity)
        self.animation = AnimationLoop(self._fade, interval=1.0 / max(1, pc.fps))

        # Initial blank canvas is the first undo target
        self.history.commit(self.surface.snapshot())

    # --- detector callback ---

    def on_results(self, hands: list) -> list[DrawCommand]:
        """Process one detector frame. Only the first hand drives ink.

        Returns the draw commands applied to the surface this frame.
        """
        pose = None
        if hands:
            try:
                pose = validate_pose(hands[0])
            except InvalidPoseError as e:
                logger.debug("Ignoring malformed hand: %s", e)
            else:
                tip = pose[INDEX_TIP]
                if not (math.isfinite(float(tip[0])) and math.isfinite(float(tip[1]))):
                    logger.debug("Ignoring hand with non-finite fingertip")
                    pose = None

        if pose is None:
            self._tracking_lost()
            return []

        self.session.hand_detected = True

        tip = pose[INDEX_TIP]
        point = self.to_surface_point(float(tip[0]), float(tip[1]))
        if self.session.mode == Mode.DRAW:
            point = self.smoother.smooth(point)

        gesture = classify(pose)
        self.session.gesture = gesture
        self.session.cursor = point

        if self.session.mode == Mode.DRAW:
            commands = self._handle_draw(point, gesture)
        else:
            commands = self._handle_particles(point, gesture)
        return commands

    def to_surface_point(self, x: float, y: float) -> tuple[float, float]:
        """Mirror a normalized landmark horizontally and scale it to pixels."""
        return (1.0 - x) * self.surface.width, y * self.surface.height

    def _tracking_lost(self):
        if self.session.hand_detected:
            logger.debug("Hand lost")
        self.session.hand_detected = False
        self.session.gesture = None
        self.session.cursor = None
        self.smoother.reset()
        self.stroke.cancel()

    def _handle_draw(self, point: tuple[float, float], gesture: Gesture) -> list[DrawCommand]:
        brush = self.session.brush
        update = self.stroke.feed(point, gesture, color=brush.color, width=brush.size)

        if update.started:
            self.smoother.reset()
        self.surface.apply_all(update.commands)
        if update.ended:
            self.smoother.reset()
            self.history.commit(self.surface.snapshot())
        return update.commands

    def _handle_particles(self, point: tuple[float, float], gesture: Gesture) -> list[DrawCommand]:
        commands = self.particles.advance(point, gesture, self.session.brush.color)
        self.surface.apply_all(commands)
        return commands

    # --- animation ---

    def _fade(self):
        self.surface.apply(DrawCommand(
            type="fade",
            color=self.config.canvas.background,
            alpha=self.config.particles.fade_alpha,
        ))

    def animation_tick(self) -> bool:
        """One display refresh. Fades the surface while in PARTICLE mode."""
        return self.animation.tick()

    # --- user actions ---

    def set_mode(self, mode: Mode | str):
        mode = Mode(mode)
        self.animation.stop()
        self.stroke.cancel()
        self.smoother.reset()

        if mode != self.session.mode:
            logger.info("Mode: %s -> %s", self.session.mode.value, mode.value)
        self.session.mode = mode

        if mode == Mode.PARTICLE:
            self.animation.start()

    def set_brush_color(self, color: str):
        parse_color(color)
        self.session.brush.color = color

    def set_brush_size(self, size: float):
        lo, hi = self.config.brush.min_size, self.config.brush.max_size
        if not math.isfinite(size) or not lo <= size <= hi:
            raise ValueError(f"Brush size must be in [{lo}, {hi}], got {size}")
        self.session.brush.size = float(size)

    def toggle_blur(self) -> bool:
        self.session.blur_enabled = not self.session.blur_enabled
        return self.session.blur_enabled

    def undo(self) -> bool:
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self.surface.restore(snapshot)
        logger.info("Undo (step %d/%d)", self.history.cursor, len(self.history) - 1)
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self.surface.restore(snapshot)
        logger.info("Redo (step %d/%d)", self.history.cursor, len(self.history) - 1)
        return True

    def clear(self):
        """Wipe the canvas and particles. The wipe itself is undoable."""
        self.surface.apply(DrawCommand(type="fill", color=self.config.canvas.background))
        self.particles.clear()
        self.history.commit(self.surface.snapshot())
        logger.info("Canvas cleared")

    def resize(self, width: int, height: int) -> bool:
        """Resize the surface, keeping existing ink, then checkpoint it."""
        old = self.surface.size
        if not self.surface.resize(width, height):
            return False
        self.history.commit(self.surface.snapshot())
        logger.info("Resized canvas %dx%d -> %dx%d", old[0], old[1], width, height)
        return True

    def save_png(self) -> bytes:
        data = self.surface.encode_png()
        logger.info("Encoded %dx%d PNG (%d bytes)", self.surface.width, self.surface.height, len(data))
        return data

    # --- status ---

    def set_camera_status(self, status: str):
        self.session.camera_status = status

    @property
    def mode(self) -> Mode:
        return self.session.mode

    @property
    def status(self) -> FrameStatus:
        s = self.session
        return FrameStatus(
            camera=s.camera_status,
            hand="detected" if s.hand_detected else "not detected",
            gesture=s.gesture.value if s.gesture else "none",
            mode=s.mode.value,
            drawing=self.stroke.is_drawing,
            particles=len(self.particles),
            history=len(self.history),
            can_undo=self.history.can_undo,
            can_redo=self.history.can_redo,
        )
