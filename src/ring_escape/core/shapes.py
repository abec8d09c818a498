# src/ring_escape/core/shapes.py

from __future__ import annotations
from dataclasses import dataclass
import math

import numpy as np

Vec2 = tuple[float, float]
Color = tuple[int, int, int]


def as_vec(v) -> np.ndarray:
    return np.asarray(v, dtype=float)


def to_pair(v) -> Vec2:
    return (float(v[0]), float(v[1]))


# --------- Balls (physics state) ---------

@dataclass(frozen=True)
class Ball:
    """
    A circular projectile.

    - pos / vel: world-space position & velocity in pixels and pixels/frame
    - initial_speed: speed at spawn, reference for the optional energy floor
    - last_ring_hit / last_wall_hit: simulation time of the last collision
      response of each kind, so the two immunity windows run independently
    """
    id: int
    pos: Vec2
    vel: Vec2
    radius: float
    initial_speed: float = 0.0
    elasticity: float = 1.0
    last_ring_hit: float = -math.inf
    last_wall_hit: float = -math.inf
    growing: bool = False

    @property
    def speed(self) -> float:
        return math.hypot(self.vel[0], self.vel[1])


def create_ball(
    ball_id: int,
    pos,
    vel,
    radius: float,
    elasticity: float = 1.0,
    growing: bool = False,
) -> Ball:
    """Helper to create a Ball that remembers its spawn speed."""
    vel = to_pair(vel)
    return Ball(
        id=ball_id,
        pos=to_pair(pos),
        vel=vel,
        radius=float(radius),
        initial_speed=math.hypot(*vel),
        elasticity=float(elasticity),
        growing=growing,
    )


# --------- Rings ---------

@dataclass(frozen=True)
class Ring:
    """
    One concentric boundary with an exit gate.

    The gate spans [rotation, rotation + gate width) measured from the +x
    axis in screen coordinates (y down). `destroyed` only ever goes from
    False to True.
    """
    id: int
    index: int
    radius: float
    target_radius: float
    original_radius: float
    rotation: float
    rotation_speed: float
    original_rotation_speed: float
    color: Color = (255, 255, 255)
    destroyed: bool = False
    flashing: bool = False

    @property
    def is_active(self) -> bool:
        return not self.destroyed

    @property
    def is_animating(self) -> bool:
        return self.radius != self.target_radius


def create_ring(
    ring_id: int,
    index: int,
    radius: float,
    rotation: float,
    rotation_speed: float,
    color: Color = (255, 255, 255),
) -> Ring:
    return Ring(
        id=ring_id,
        index=index,
        radius=float(radius),
        target_radius=float(radius),
        original_radius=float(radius),
        rotation=float(rotation) % (2 * math.pi),
        rotation_speed=float(rotation_speed),
        original_rotation_speed=float(rotation_speed),
        color=color,
    )
