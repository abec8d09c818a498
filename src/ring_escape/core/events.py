# src/ring_escape/core/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import TYPE_CHECKING
from abc import ABC

if TYPE_CHECKING:
    from .shapes import Ball, Color, Vec2
    from .particles import Particle


class Wall(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


@dataclass(kw_only=True)
class BaseEvent(ABC):
    """Marker base class so you can type on 'list[BaseEvent]'."""
    t: float  # simulation time (frames) when this event occurred
    a_id: int | None = None
    b_id: int | None = None

    def to_payload_dict(self) -> dict:
        """Convert event-specific data to a serializable dict."""
        return {}


@dataclass(kw_only=True)
class WallCollisionEvent(BaseEvent):
    ball_id: int
    wall: Wall
    impact_speed: float     # speed into the wall before the bounce

    def __post_init__(self):
        self.a_id = self.ball_id

    def to_payload_dict(self) -> dict:
        return {
            "wall": self.wall.value,
            "impact_speed": self.impact_speed,
        }


@dataclass(kw_only=True)
class RingBounceEvent(BaseEvent):
    ball_id: int
    ring_id: int
    impact_speed: float

    def __post_init__(self):
        self.a_id = self.ball_id
        self.b_id = self.ring_id

    def to_payload_dict(self) -> dict:
        return {
            "impact_speed": self.impact_speed,
        }


@dataclass(kw_only=True)
class RingDestroyedEvent(BaseEvent):
    ring_id: int
    ball_id: int | None
    center: Vec2
    radius: float
    color: Color

    def __post_init__(self):
        self.a_id = self.ball_id
        self.b_id = self.ring_id

    def to_payload_dict(self) -> dict:
        return {
            "center": list(self.center),
            "radius": self.radius,
            "color": list(self.color),
        }


@dataclass(kw_only=True)
class ParticlesSpawnedEvent(BaseEvent):
    ring_id: int
    particles: tuple[Particle, ...]

    def __post_init__(self):
        self.b_id = self.ring_id

    def to_payload_dict(self) -> dict:
        return {
            "count": len(self.particles),
            "particle_ids": [p.id for p in self.particles],
        }


@dataclass(kw_only=True)
class BallGrewEvent(BaseEvent):
    ball_id: int
    new_radius: float

    def __post_init__(self):
        self.a_id = self.ball_id

    def to_payload_dict(self) -> dict:
        return {
            "new_radius": self.new_radius,
        }


@dataclass(kw_only=True)
class BallSpawnedEvent(BaseEvent):
    ball: Ball
    reason: str = "ring_destroyed"

    def __post_init__(self):
        self.a_id = self.ball.id

    def to_payload_dict(self) -> dict:
        payload = asdict(self.ball)
        payload["pos"] = list(self.ball.pos)
        payload["vel"] = list(self.ball.vel)
        payload["reason"] = self.reason
        return payload


@dataclass(kw_only=True)
class GameOverEvent(BaseEvent):
    score: int
    reason: str = "all_rings_destroyed"

    def to_payload_dict(self) -> dict:
        return {
            "score": self.score,
            "reason": self.reason,
        }
