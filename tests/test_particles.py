"""Tests for the particle field."""

import math

import numpy as np
import pytest

from handart.gestures import Gesture
from handart.particles import (
    MIN_RADIUS,
    Particle,
    ParticleField,
    particle_alpha,
    particle_radius,
)


def make_field(**kwargs):
    return ParticleField(rng=np.random.default_rng(42), **kwargs)


def discs(commands):
    return [c for c in commands if c.type == "disc"]


class TestRenderParams:
    def test_zero_life(self):
        p = Particle(x=0, y=0, vx=0, vy=0, size=10, color="#ffffff", life=0.0)
        radius, alpha = p.render_params()
        assert alpha == 0.0
        assert radius == MIN_RADIUS

    def test_negative_life_clamped(self):
        assert particle_alpha(-0.5) == 0.0
        assert particle_radius(10, -0.5) == MIN_RADIUS

    def test_full_life(self):
        assert particle_radius(12, 1.0) == pytest.approx(12.0)
        assert particle_alpha(1.0) == 1.0

    def test_alpha_clamped_above_one(self):
        assert particle_alpha(1.5) == 1.0

    def test_non_finite_radius(self):
        assert particle_radius(float("nan"), 0.5) == MIN_RADIUS
        assert particle_radius(float("inf"), 0.5) == MIN_RADIUS
        assert particle_alpha(float("nan")) == 0.0

    def test_tiny_radius_gets_minimum(self):
        assert particle_radius(5, 1e-9) == MIN_RADIUS
        assert particle_radius(1, 0.05) == pytest.approx(MIN_RADIUS)

    def test_radius_never_zero(self):
        for life in np.linspace(-1, 1, 41):
            r = particle_radius(10, float(life))
            assert math.isfinite(r) and r >= MIN_RADIUS


class TestParticleField:
    def test_point_emits_batch(self):
        field = make_field()
        cmds = field.advance((100, 100), Gesture.POINT, "#ff0000")
        assert len(field) == 5
        assert len(discs(cmds)) == 5
        assert all(c.color == "#ff0000" for c in discs(cmds))

    def test_non_emitting_gesture(self):
        field = make_field()
        cmds = field.advance((100, 100), Gesture.OPEN, "#ff0000")
        assert len(field) == 0
        assert discs(cmds) == []

    def test_emit_gestures_configurable(self):
        field = make_field(emit_gestures=frozenset({Gesture.POINT, Gesture.OPEN}))
        field.advance((0, 0), Gesture.OPEN, "#000000")
        assert len(field) == 5

    def test_no_emit_point(self):
        field = make_field()
        field.advance(None, Gesture.POINT, "#000000")
        assert len(field) == 0

    def test_initial_ranges(self):
        field = make_field()
        for _ in range(20):
            field.emit(0, 0, "#000000")
        for p in field.particles:
            assert -5 <= p.vx <= 5
            assert -5 <= p.vy <= 5
            assert 5 <= p.size <= 25
            assert p.life == 1.0

    def test_physics_step(self):
        field = make_field()
        field.emit(50, 50, "#000000")
        before = [(p.x, p.y, p.vx, p.vy, p.life) for p in field.particles]
        field.advance(None, None, "#000000")
        for (x, y, vx, vy, life), p in zip(before, field.particles):
            assert p.x == pytest.approx(x + vx)
            assert p.y == pytest.approx(y + vy)
            assert p.vy == pytest.approx(vy + 0.5)
            assert p.life == pytest.approx(life - 0.02)

    def test_alpha_restored_after_batch(self):
        field = make_field()
        cmds = field.advance((0, 0), Gesture.POINT, "#000000")
        assert cmds[-1].type == "alpha"
        assert cmds[-1].alpha == 1.0

    def test_empty_tick_still_restores_alpha(self):
        cmds = make_field().advance(None, None, "#000000")
        assert [c.type for c in cmds] == ["alpha"]

    def test_dead_particles_removed(self):
        field = make_field()
        field.advance((0, 0), Gesture.POINT, "#000000")
        ticks = 0
        while len(field) and ticks < 100:
            cmds = field.advance(None, None, "#000000")
            ticks += 1
        assert len(field) == 0
        assert discs(cmds) == []
        # 1.0 decays by 0.02 per tick: about 50 ticks of life
        assert 45 <= ticks <= 55

    def test_particle_below_min_life_absent_next_tick(self):
        field = make_field()
        field._particles = [Particle(x=0, y=0, vx=0, vy=0, size=10, color="#000000", life=0.025)]
        cmds = field.advance(None, None, "#000000")
        assert len(discs(cmds)) == 1           # life 0.025 -> 0.005, still rendered
        cmds = field.advance(None, None, "#000000")
        assert discs(cmds) == []               # dropped before the next tick

    def test_batches_accumulate(self):
        field = make_field()
        for _ in range(3):
            field.advance((0, 0), Gesture.POINT, "#000000")
        assert len(field) == 15

    def test_clear(self):
        field = make_field()
        field.advance((0, 0), Gesture.POINT, "#000000")
        field.clear()
        assert len(field) == 0

    def test_seeded_rng_reproducible(self):
        a = ParticleField(rng=np.random.default_rng(7))
        b = ParticleField(rng=np.random.default_rng(7))
        ca = a.advance((10, 10), Gesture.POINT, "#000000")
        cb = b.advance((10, 10), Gesture.POINT, "#000000")
        assert [c.to_dict() for c in ca] == [c.to_dict() for c in cb]
