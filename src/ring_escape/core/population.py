# src/ring_escape/core/population.py

from __future__ import annotations
from dataclasses import replace
from typing import List, Sequence, TYPE_CHECKING

import numpy as np

from .shapes import Ball, Ring, Vec2, create_ball
from .events import BallGrewEvent, BallSpawnedEvent

if TYPE_CHECKING:
    from .config import SimConfig
    from .state import IdAllocator

# spawned balls appear at this fraction of the destroyed ring's radius
SPAWN_RADIUS_FRACTION = 0.8
SPAWN_SPEED_RANGE = (1.0, 3.0)   # (low, span)
GROWTH_TOLERANCE = 1e-9


def growth_cap(config: SimConfig, field_radius: float) -> float:
    return config.max_radius_ratio * field_radius


def grow_ball(ball: Ball, config: SimConfig, field_radius: float, t: float) -> tuple[Ball, BallGrewEvent | None]:
    if config.growth_rate <= 0.0:
        return ball, None
    new_radius = min(ball.radius + config.growth_rate, growth_cap(config, field_radius))
    if new_radius <= ball.radius:
        return ball, None
    grown = replace(ball, radius=new_radius, growing=True)
    return grown, BallGrewEvent(t=t, ball_id=ball.id, new_radius=new_radius)


def spawn_balls_on_destroy(
    center: Vec2,
    ring_radius: float,
    n_live: int,
    config: SimConfig,
    rng: np.random.Generator,
    ids: IdAllocator,
    t: float,
) -> tuple[List[Ball], List[BallSpawnedEvent]]:
    """New balls on the destroyed ring, flying outward; never more than max_ball_count alive."""
    n = min(config.balls_on_destroy, max(0, config.max_ball_count - n_live))
    balls: List[Ball] = []
    events: List[BallSpawnedEvent] = []
    for _ in range(n):
        angle = rng.random() * 2 * np.pi
        direction = np.array([np.cos(angle), np.sin(angle)])
        pos = np.asarray(center, dtype=float) + direction * ring_radius * SPAWN_RADIUS_FRACTION
        speed = SPAWN_SPEED_RANGE[0] + rng.random() * SPAWN_SPEED_RANGE[1]
        ball = create_ball(
            ids.new_id(),
            pos=pos,
            vel=direction * speed,
            radius=config.base_ball_radius,
            elasticity=config.ball_elasticity,
        )
        balls.append(ball)
        events.append(BallSpawnedEvent(t=t, ball=ball))
    return balls, events


def game_over_reason(balls: Sequence[Ball], rings: Sequence[Ring], config: SimConfig, field_radius: float) -> str | None:
    """Why the game has ended, or None while it is still on."""
    if config.rings_enabled and rings and all(r.destroyed for r in rings):
        return "all_rings_destroyed"
    if config.growth_game_over:
        cap = growth_cap(config, field_radius)
        if any(b.radius >= cap - GROWTH_TOLERANCE for b in balls):
            return "ball_too_large"
    return None
