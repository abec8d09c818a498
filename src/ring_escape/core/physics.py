# src/ring_escape/core/physics.py

from __future__ import annotations
from dataclasses import replace
from typing import TYPE_CHECKING

import numpy as np

from .shapes import Ball, as_vec, to_pair
from ring_escape.utils.random import random_unit_vector

if TYPE_CHECKING:
    from .config import SimConfig

# boost applied when a ball falls under its energy floor
ENERGY_BOOST_CAP = 1.1
ENERGY_BOOST_GAIN = 0.9


def limit_speed(vel: np.ndarray, max_speed: float) -> np.ndarray:
    speed = float(np.linalg.norm(vel))
    if speed > max_speed:
        return vel / speed * max_speed
    return vel


def enforce_speed_bounds(
    vel: np.ndarray,
    min_speed: float,
    max_speed: float,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """
    Clamp |vel| into [min_speed, max_speed].

    A zero vector is left alone unless `rng` is given, in which case it gets a
    random direction at `min_speed` (the direction of zero is undefined).
    """
    speed = float(np.linalg.norm(vel))
    if speed > max_speed:
        return vel / speed * max_speed
    if speed < min_speed:
        if speed > 0.0:
            return vel / speed * min_speed
        if rng is not None and min_speed > 0.0:
            return random_unit_vector(rng) * min_speed
    return vel


def integrate_ball(ball: Ball, config: SimConfig, dt: float) -> Ball:
    """
    Advance one ball by dt frames: drag, gravity, energy floor, speed bounds,
    then explicit Euler on position. Pure; no randomness.
    """
    vel = as_vec(ball.vel) * config.air_resistance
    vel[1] += config.gravity * config.gravity_scaling * dt

    if config.energy_floor_ratio > 0.0 and ball.initial_speed > 0.0:
        speed = float(np.linalg.norm(vel))
        if 0.0 < speed < ball.initial_speed * config.energy_floor_ratio:
            vel = vel * min(ENERGY_BOOST_CAP, ball.initial_speed / speed * ENERGY_BOOST_GAIN)

    vel = enforce_speed_bounds(vel, config.min_velocity, config.max_velocity)
    pos = as_vec(ball.pos) + vel * dt
    return replace(ball, pos=to_pair(pos), vel=to_pair(vel))


def reflect(vel: np.ndarray, normal: np.ndarray) -> np.ndarray:
    """Mirror `vel` about the plane with unit `normal`."""
    return vel - 2.0 * float(np.dot(vel, normal)) * normal
