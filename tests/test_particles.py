"""Destruction bursts: per-style counts, placement and per-frame decay."""

import numpy as np
import pytest

from ring_escape.core import PARTICLE_STYLES, ParticleStyle, spawn_particles, update_particles
from ring_escape.core.particles import PARTICLE_DECAY
from ring_escape.core.state import IdAllocator

CENTER = (400.0, 300.0)
RING_COLOR = (200, 100, 50)


class TestCounts:

    @pytest.mark.parametrize("style, radius, expected", [
        (ParticleStyle.STANDARD, 100.0, 100),
        (ParticleStyle.STANDARD, 20.0, 50),
        (ParticleStyle.STANDARD, 500.0, 150),
        (ParticleStyle.SPARKLE, 100.0, 120),
        (ParticleStyle.SPARKLE, 500.0, 180),
        (ParticleStyle.EXPLOSION, 100.0, 150),
        (ParticleStyle.EXPLOSION, 500.0, 200),
        (ParticleStyle.MINIMAL, 100.0, 30),
        (ParticleStyle.CONFETTI, 100.0, 180),
        (ParticleStyle.CONFETTI, 500.0, 270),
    ])
    def test_count_for(self, style, radius, expected):
        assert PARTICLE_STYLES[style].count_for(radius) == expected

    def test_every_style_has_a_preset(self):
        assert set(PARTICLE_STYLES) == set(ParticleStyle)


class TestSpawn:

    @pytest.mark.parametrize("style", list(ParticleStyle))
    def test_particles_start_on_the_ring(self, style, rng):
        ids = IdAllocator(7)
        burst = spawn_particles(CENTER, 100.0, RING_COLOR, style, rng, ids)
        preset = PARTICLE_STYLES[style]

        assert len(burst) == preset.count_for(100.0)
        assert [p.id for p in burst] == list(range(7, 7 + len(burst)))
        for p in burst:
            assert np.hypot(p.pos[0] - CENTER[0], p.pos[1] - CENTER[1]) == pytest.approx(100.0)
            assert p.lifetime == p.max_lifetime
            assert preset.lifetime_range[0] <= p.lifetime <= sum(preset.lifetime_range)
            assert p.radius == p.initial_radius > 0
            assert p.alpha == 1.0
            assert all(0 <= c <= 255 for c in p.color)

    def test_minimal_uses_the_ring_color(self, rng):
        burst = spawn_particles(CENTER, 100.0, RING_COLOR, ParticleStyle.MINIMAL, rng, IdAllocator(0))
        assert {p.color for p in burst} == {RING_COLOR}

    def test_standard_speed_range(self, rng):
        burst = spawn_particles(CENTER, 100.0, RING_COLOR, ParticleStyle.STANDARD, rng, IdAllocator(0))
        speeds = [np.hypot(*p.vel) for p in burst]
        assert min(speeds) >= 0.5
        assert max(speeds) <= 2.5

    def test_style_accepts_plain_string(self, rng):
        burst = spawn_particles(CENTER, 100.0, RING_COLOR, "confetti", rng, IdAllocator(0))
        assert len(burst) == 180


class TestUpdate:

    def test_age_fade_and_shrink(self, rng):
        burst = spawn_particles(CENTER, 100.0, RING_COLOR, ParticleStyle.STANDARD, rng, IdAllocator(0))
        updated = update_particles(burst, 1.0, rng)
        assert len(updated) == len(burst)
        for before, after in zip(burst, updated):
            assert after.id == before.id
            assert after.lifetime == pytest.approx(before.lifetime - PARTICLE_DECAY)
            assert after.pos == pytest.approx((before.pos[0] + before.vel[0], before.pos[1] + before.vel[1]))
            assert 0.0 < after.alpha < 1.0
            assert before.initial_radius * 0.5 <= after.radius < before.initial_radius

    def test_expired_particles_are_dropped(self, rng):
        burst = spawn_particles(CENTER, 100.0, RING_COLOR, ParticleStyle.MINIMAL, rng, IdAllocator(0))
        particles = burst
        # minimal lifetimes are at most 80, 0.8 is lost per frame
        for _ in range(101):
            particles = update_particles(particles, 1.0, rng)
        assert particles == ()

    def test_empty(self, rng):
        assert update_particles((), 1.0, rng) == ()
