# src/ring_escape/core/rings.py

"""
Rotating gated rings: contact classification, bounce response and the
radius/rotation animation that follows a destruction.

Angles are measured with atan2 in screen coordinates and wrapped to
[0, 2π). A ring's gate covers [rotation, rotation + gate_width), widened on
both sides by `gate_margin_ratio * gate_width`.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Sequence, TYPE_CHECKING
import math

import numpy as np

from .shapes import Ball, Ring, Vec2, as_vec, to_pair
from .events import BaseEvent, RingBounceEvent, RingDestroyedEvent
from .physics import limit_speed, reflect

if TYPE_CHECKING:
    from .config import SimConfig

TWO_PI = 2 * math.pi

# rotation speed follows (radius / original_radius) ** this while a ring resizes
ROTATION_RADIUS_EXPONENT = 0.5
# rings keep flashing until they are this close to their target radius
FLASH_SETTLE_DISTANCE = 1.0

DEFAULT_NORMAL = np.array([1.0, 0.0])


class ContactKind(str, Enum):
    NONE = "none"                  # not touching the ring
    GATE = "gate"                  # touching, but inside the gate: no response
    PASS_THROUGH = "pass_through"  # leaving through the gate: ring is destroyed
    BOUNCE = "bounce"              # touching the solid arc


def normalize_angle(angle: float) -> float:
    wrapped = angle % TWO_PI
    # float modulo can round up to exactly 2π for tiny negative inputs
    return 0.0 if wrapped >= TWO_PI else wrapped


def angle_in_gate(angle: float, rotation: float, gate_width: float, margin_ratio: float = 0.0) -> bool:
    if gate_width <= 0.0:
        return False
    margin = gate_width * margin_ratio
    offset = normalize_angle(angle - (rotation - margin))
    return offset <= gate_width + 2 * margin


def radial_frame(pos: Vec2, center: Vec2) -> tuple[np.ndarray, float, np.ndarray]:
    """(offset from center, distance, outward unit normal); the normal falls back to +x at the center."""
    offset = as_vec(pos) - as_vec(center)
    dist = float(np.linalg.norm(offset))
    normal = offset / dist if dist > 0.0 else DEFAULT_NORMAL.copy()
    return offset, dist, normal


def crossed_ring(prev_pos: Vec2 | None, dist: float, ring: Ring, center: Vec2) -> bool:
    """True when the ball center went from one side of the ring to the other during the frame."""
    if prev_pos is None:
        return False
    _, prev_dist, _ = radial_frame(prev_pos, center)
    return (prev_dist - ring.radius) * (dist - ring.radius) < 0.0


def approached_from_inside(prev_pos: Vec2 | None, dist: float, ring: Ring, center: Vec2) -> bool:
    """Side of the ring the ball started the frame on; the current position when that is unknown."""
    if prev_pos is not None:
        _, prev_dist, _ = radial_frame(prev_pos, center)
        if prev_dist != ring.radius:
            return prev_dist < ring.radius
    return dist < ring.radius


def classify_ring_contact(
    ball: Ball,
    ring: Ring,
    config: SimConfig,
    center: Vec2,
    prev_pos: Vec2 | None = None,
) -> ContactKind:
    """
    `prev_pos` is where the ball was at the start of the frame. With it, a
    ball fast enough to jump over the whole contact band still counts as
    touching the ring.
    """
    if ring.destroyed:
        return ContactKind.NONE
    offset, dist, _ = radial_frame(ball.pos, center)
    if abs(dist - ring.radius) >= ball.radius and not crossed_ring(prev_pos, dist, ring, center):
        return ContactKind.NONE

    angle = normalize_angle(math.atan2(offset[1], offset[0]))
    if not angle_in_gate(angle, ring.rotation, config.gate_width_radians, config.gate_margin_ratio):
        return ContactKind.BOUNCE

    moving_out = float(np.dot(offset, as_vec(ball.vel))) > 0.0
    if moving_out and dist > ring.radius - ball.radius * config.pass_through_ratio:
        return ContactKind.PASS_THROUGH
    return ContactKind.GATE


def bounce_off_ring(
    ball: Ball,
    ring: Ring,
    config: SimConfig,
    center: Vec2,
    t: float,
    prev_pos: Vec2 | None = None,
) -> tuple[Ball, float | None]:
    """
    Push the ball back to the side of the ring it came from (judged from
    `prev_pos`, so a ball that crossed the arc in one frame is sent back) and,
    when it is heading into the arc, reflect it about the radial normal.

    Returns the new ball and the impact speed (None when only the position
    was corrected).
    """
    _, dist, normal = radial_frame(ball.pos, center)
    inside = approached_from_inside(prev_pos, dist, ring, center)
    if inside:
        new_dist = max(0.0, ring.radius - ball.radius - config.ring_safety_margin)
    else:
        new_dist = ring.radius + ball.radius + config.ring_safety_margin
    pos = as_vec(center) + normal * new_dist

    vel = as_vec(ball.vel)
    v_n = float(np.dot(vel, normal))
    heading_into_arc = v_n > 0.0 if inside else v_n < 0.0
    immune = t - ball.last_ring_hit < config.ring_immunity
    if not heading_into_arc or immune:
        return replace(ball, pos=to_pair(pos)), None

    impact_speed = float(np.linalg.norm(vel))
    vel = reflect(vel, normal) * (config.bounciness * ball.elasticity)
    vel = limit_speed(vel, config.max_velocity)
    return replace(ball, pos=to_pair(pos), vel=to_pair(vel), last_ring_hit=t), impact_speed


@dataclass
class RingPassResult:
    ball: Ball
    rings: tuple[Ring, ...]
    events: List[BaseEvent] = field(default_factory=list)
    destroyed: List[Ring] = field(default_factory=list)
    bounced: Ring | None = None


def resolve_ring_collisions(
    ball: Ball,
    rings: Sequence[Ring],
    config: SimConfig,
    center: Vec2,
    t: float,
    prev_pos: Vec2 | None = None,
) -> RingPassResult:
    """
    Run one ball against every active ring in index order.

    Escaping through a gate destroys that ring and the pass continues with
    the next one. The first bounce ends the pass; later rings see the new
    trajectory on the next frame.
    """
    result = RingPassResult(ball=ball, rings=tuple(rings))
    updated = list(result.rings)
    for i, ring in enumerate(updated):
        kind = classify_ring_contact(result.ball, ring, config, center, prev_pos)
        if kind is ContactKind.PASS_THROUGH:
            dead = replace(ring, destroyed=True)
            updated[i] = dead
            result.destroyed.append(dead)
            result.events.append(
                RingDestroyedEvent(
                    t=t,
                    ring_id=ring.id,
                    ball_id=ball.id,
                    center=center,
                    radius=ring.radius,
                    color=ring.color,
                )
            )
        elif kind is ContactKind.BOUNCE:
            new_ball, impact_speed = bounce_off_ring(result.ball, ring, config, center, t, prev_pos)
            result.ball = new_ball
            if impact_speed is not None:
                result.bounced = ring
                result.events.append(
                    RingBounceEvent(t=t, ball_id=ball.id, ring_id=ring.id, impact_speed=impact_speed)
                )
                break
    result.rings = tuple(updated)
    return result


# --------- Animation ---------

def rotation_speed_for(ring: Ring, radius: float) -> float:
    if ring.original_radius <= 0.0:
        return ring.original_rotation_speed
    return ring.original_rotation_speed * (radius / ring.original_radius) ** ROTATION_RADIUS_EXPONENT


def animate_ring(ring: Ring, config: SimConfig, dt: float) -> Ring:
    """Ease the radius toward its target, rescale the spin and advance the gate."""
    if ring.destroyed:
        return ring

    delta = ring.target_radius - ring.radius
    if abs(delta) > config.radius_epsilon:
        radius = ring.radius + delta * min(1.0, config.radius_ease * dt)
        flashing = ring.flashing and abs(radius - ring.target_radius) > FLASH_SETTLE_DISTANCE
    else:
        radius = ring.target_radius
        flashing = ring.flashing and abs(delta) > FLASH_SETTLE_DISTANCE

    speed = rotation_speed_for(ring, radius)
    return replace(
        ring,
        radius=radius,
        rotation_speed=speed,
        rotation=normalize_angle(ring.rotation + speed * dt),
        flashing=flashing,
    )


def retarget_rings(
    rings: Sequence[Ring],
    total_shrink_factor: float,
    config: SimConfig,
) -> tuple[tuple[Ring, ...], float]:
    """
    Apply one more shrink step to every active ring.

    target = max(original * cumulative shrink,
                 previous target + min gap + base ball radius  (min gap > 0 only),
                 min circle radius)
    so the active rings never overlap or change order.
    """
    total = total_shrink_factor * config.shrink_factor
    previous = 0.0
    retargeted: dict[int, Ring] = {}
    for ring in sorted((r for r in rings if not r.destroyed), key=lambda r: r.index):
        candidates = [ring.original_radius * total, config.min_circle_radius]
        if config.min_circle_gap > 0:
            candidates.append(previous + config.min_circle_gap + config.base_ball_radius)
        target = max(candidates)
        retargeted[ring.id] = replace(ring, target_radius=target, flashing=True)
        previous = target
    return tuple(retargeted.get(r.id, r) for r in rings), total


def clear_flashing(rings: Sequence[Ring]) -> tuple[Ring, ...]:
    return tuple(replace(r, flashing=False) if r.flashing else r for r in rings)
