"""Decaying particle effects.

Every qualifying frame sprays a small batch of particles from the
fingertip. Particles fall under constant gravity, shrink and fade as their
life runs out, and are dropped once it is nearly gone.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from handart.canvas import DrawCommand
from handart.gestures import Gesture

MIN_RADIUS = 0.1
RADIUS_EPSILON = 1e-6


@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    size: float
    color: str
    life: float = 1.0

    def step(self, gravity: float, decay: float):
        self.x += self.vx
        self.y += self.vy
        self.vy += gravity
        self.life -= decay

    def render_params(self) -> tuple[float, float]:
        """Return (radius, alpha) for drawing, always finite and visible-safe."""
        return particle_radius(self.size, self.life), particle_alpha(self.life)


def particle_radius(size: float, life: float) -> float:
    normalized_life = max(0.0, life)
    radius = size * normalized_life
    if not math.isfinite(radius) or radius < RADIUS_EPSILON:
        return MIN_RADIUS
    return max(MIN_RADIUS, abs(radius))


def particle_alpha(life: float) -> float:
    if not math.isfinite(life):
        return 0.0
    return max(0.0, min(1.0, max(0.0, life)))


class ParticleField:
    """Bounded collection of particles advanced once per frame.

    Args:
        batch_size: Particles spawned per emitting frame.
        max_speed: Initial velocity components are uniform in [-max_speed, max_speed].
        min_size: Smallest initial particle size.
        max_size: Largest initial particle size.
        gravity: Added to vy every step.
        decay: Subtracted from life every step.
        min_life: Particles at or below this life are removed.
        emit_gestures: Gestures that spawn particles.
        rng: Random source, seedable for reproducible runs.
    """

    def __init__(
        self,
        batch_size: int = 5,
        max_speed: float = 5.0,
        min_size: float = 5.0,
        max_size: float = 25.0,
        gravity: float = 0.5,
        decay: float = 0.02,
        min_life: float = 0.01,
        emit_gestures: frozenset[Gesture] = frozenset({Gesture.POINT}),
        rng: Optional[np.random.Generator] = None,
    ):
        self.batch_size = batch_size
        self.max_speed = max_speed
        self.min_size = min_size
        self.max_size = max_size
        self.gravity = gravity
        self.decay = decay
        self.min_life = min_life
        self.emit_gestures = frozenset(emit_gestures)
        self._rng = rng or np.random.default_rng()
        self._particles: list[Particle] = []

    def emit(self, x: float, y: float, color: str):
        for _ in range(self.batch_size):
            vx, vy = self._rng.uniform(-self.max_speed, self.max_speed, size=2)
            self._particles.append(Particle(
                x=float(x),
                y=float(y),
                vx=float(vx),
                vy=float(vy),
                size=float(self._rng.uniform(self.min_size, self.max_size)),
                color=color,
                life=1.0,
            ))

    def advance(
        self,
        emit_point: Optional[tuple[float, float]],
        gesture: Optional[Gesture],
        color: str,
    ) -> list[DrawCommand]:
        """Spawn (if the gesture qualifies), step and render all particles.

        Returns the disc commands for this tick, followed by a command that
        restores the surface's global alpha to fully opaque.
        """
        if emit_point is not None and gesture in self.emit_gestures:
            self.emit(emit_point[0], emit_point[1], color)

        self._particles = [p for p in self._particles if p.life > self.min_life]

        commands: list[DrawCommand] = []
        for p in self._particles:
            p.step(self.gravity, self.decay)
            radius, alpha = p.render_params()
            commands.append(DrawCommand(
                type="disc", x=p.x, y=p.y, radius=radius, color=p.color, alpha=alpha,
            ))

        commands.append(DrawCommand(type="alpha", alpha=1.0))
        return commands

    def clear(self):
        self._particles = []

    @property
    def particles(self) -> list[Particle]:
        return list(self._particles)

    def __len__(self) -> int:
        return len(self._particles)
