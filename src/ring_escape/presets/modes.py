from __future__ import annotations

import logging
import math
from typing import Any, Mapping

import numpy as np

from ring_escape.core import SimConfig, SimulationState, World, create_ball, create_ring
from ring_escape.core.state import IdAllocator
from ring_escape.utils.plotting import random_pastel
from ring_escape.utils.random import make_rng

logger = logging.getLogger(__name__)

DEFAULT_MODE = "collapsing_rotating_circles"

# Each game is the default engine plus a handful of overrides.
MODE_PRESETS: dict[str, dict[str, Any]] = {
    # concentric rotating rings that shrink as they are destroyed
    "collapsing_rotating_circles": {
        "max_velocity": 8.0,
    },
    # open rings (the gate covers everything) that pack inward after each escape
    "collapsing_circles": {
        "ring_count": 10,
        "circle_gap": 30.0,
        "base_ball_radius": 10.0,
        "ball_speed": 3.0,
        "gravity": 0.0,
        "air_resistance": 1.0,
        "bounciness": 1.0,
        "min_velocity": 0.0,
        "gate_width_degrees": 359.0,
        "rotation_speed": 0.0,
        "shrink_factor": 0.0,
        "min_circle_gap": 20.0,
        "min_circle_radius": 40.0,
    },
    # a single rotating ring; every escape releases more balls
    "rotating_circle": {
        "ring_count": 1,
        "circle_gap": 230.0,
        "base_ball_radius": 10.0,
        "gate_width_degrees": 45.0,
        "gravity": 0.0,
        "air_resistance": 1.0,
        "bounciness": 1.0,
        "shrink_on_destroy": False,
        "balls_on_destroy": 2,
        "max_ball_count": 20,
    },
    # a closed ring; the ball grows on every bounce until it fills the ring
    "growing_ball": {
        "ring_count": 1,
        "circle_gap": 225.0,
        "gate_width_degrees": 0.0,
        "rotation_speed": 0.0,
        "gravity": 0.8,
        "gravity_scaling": 1.1,
        "air_resistance": 0.999 * 0.998,
        "bounciness": 0.85,
        "ball_speed": 7.0,
        "energy_floor_ratio": 0.85,
        "ring_safety_margin": 3.0,
        "ring_immunity": 6.0,
        "growth_rate": 0.7,
        "growth_game_over": True,
        "shrink_on_destroy": False,
    },
    # walls only
    "bouncing_ball": {
        "rings_enabled": False,
        "ring_count": 0,
        "gravity": 0.8,
        "gravity_scaling": 1.1,
        "bounciness": 0.85,
        "wall_friction": 0.98,
        "wall_angle_jitter": 0.05,
        "ball_count": 3,
        "ball_speed": 7.0,
    },
}


def config_for_mode(mode: str, overrides: Mapping[str, Any] | None = None) -> SimConfig:
    if mode not in MODE_PRESETS:
        raise ValueError(f"Unknown mode '{mode}'. Available: {sorted(MODE_PRESETS)}")
    merged = dict(MODE_PRESETS[mode])
    merged.update(overrides or {})
    return SimConfig.from_dict(merged)


def make_initial_state(config: SimConfig, rng: np.random.Generator) -> SimulationState:
    """
    Starting layout: balls at the arena center, rings i = 0..n-1 with radius
    (i + 1) * circle_gap + base_ball_radius. A progressive offset of p percent
    turns ring i by p% of a full turn per index and spins it p% faster per index.
    """
    ids = IdAllocator(0)
    cx, cy = config.center

    balls = []
    for _ in range(config.ball_count):
        if config.rings_enabled:
            vel = ((rng.random() - 0.5) * config.ball_speed, 0.0)
        else:
            angle = rng.random() * 2 * math.pi
            vel = (math.cos(angle) * config.ball_speed, math.sin(angle) * config.ball_speed)
        balls.append(
            create_ball(ids.new_id(), (cx, cy), vel, config.base_ball_radius, elasticity=config.ball_elasticity)
        )

    rings = []
    if config.rings_enabled:
        pct = config.progressive_rotation_offset_pct / 100
        for i in range(config.ring_count):
            rings.append(
                create_ring(
                    ids.new_id(),
                    index=i,
                    radius=(i + 1) * config.circle_gap + config.base_ball_radius,
                    rotation=pct * 2 * math.pi * i,
                    rotation_speed=config.rotation_speed * (1 + pct * i),
                    color=random_pastel(rng),
                )
            )

    return SimulationState(balls=tuple(balls), rings=tuple(rings), next_id=ids.next_id)


def make_world(config: SimConfig, seed: int | None = None) -> World:
    rng = make_rng(seed)
    state = make_initial_state(config, rng)
    logger.info(
        "World ready: %dx%d arena, %d balls, %d rings (seed %s)",
        int(config.width), int(config.height), len(state.balls), len(state.rings), seed,
    )
    return World(config=config, state=state, rng=rng)
