import math

import matplotlib
matplotlib.use("Agg")

import pytest

from ring_escape.core import SimConfig, SimulationState, create_ball, create_ring
from ring_escape.utils.random import make_rng


# ── Helpers ──────────────────────────────────────────────

def polar(center, dist, angle):
    """Point at `dist` from `center` along screen angle `angle` (y down)."""
    return (center[0] + dist * math.cos(angle), center[1] + dist * math.sin(angle))


def radial_ball(config, dist, angle, speed, ball_id=0, radius=None):
    """Ball on the ray at `angle`, moving along it (outward for speed > 0)."""
    radius = config.base_ball_radius if radius is None else radius
    return create_ball(
        ball_id,
        polar(config.center, dist, angle),
        (speed * math.cos(angle), speed * math.sin(angle)),
        radius,
    )


def static_rings(radii, rotation=0.0, first_id=100):
    return tuple(
        create_ring(first_id + i, index=i, radius=r, rotation=rotation, rotation_speed=0.0)
        for i, r in enumerate(radii)
    )


def make_state(balls, rings=(), next_id=1000):
    return SimulationState(balls=tuple(balls), rings=tuple(rings), next_id=next_id)


@pytest.fixture
def still_config():
    """No gravity, no drag, no spin: straight-line motion for exact checks."""
    return SimConfig(gravity=0.0, air_resistance=1.0, rotation_speed=0.0, wall_angle_jitter=0.0)


@pytest.fixture
def rng():
    return make_rng(1234)
