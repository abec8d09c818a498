# src/ring_escape/core/config.py

from __future__ import annotations
from dataclasses import dataclass, fields, replace, asdict
from enum import Enum
from typing import Any, Mapping
import math


class ParticleStyle(str, Enum):
    STANDARD = "standard"
    SPARKLE = "sparkle"
    EXPLOSION = "explosion"
    MINIMAL = "minimal"
    CONFETTI = "confetti"


@dataclass(frozen=True)
class SimConfig:
    """
    Every tunable of the engine. One instance describes one game mode: the
    presets in `ring_escape.presets.modes` are just different overrides of
    these defaults. Units: pixels, and frames of a 60 Hz clock for time
    (so dt = 1.0 is one frame).
    """
    # arena
    width: float = 800.0
    height: float = 600.0
    walls_enabled: bool = True
    rings_enabled: bool = True

    # kinematics
    gravity: float = 0.2
    gravity_scaling: float = 1.0
    air_resistance: float = 0.999
    min_velocity: float = 2.0
    max_velocity: float = 15.0
    energy_floor_ratio: float = 0.0   # 0 disables the initial-speed boost
    max_dt: float = 3.0

    # walls
    bounciness: float = 0.9
    wall_margin: float = 0.0
    wall_safety_ratio: float = 0.02
    min_rebound_velocity: float = 1.0
    wall_friction: float = 1.0
    wall_angle_jitter: float = 0.02   # radians
    wall_immunity: float = 6.0        # frames

    # rings
    ring_count: int = 5
    circle_gap: float = 40.0
    gate_width_radians: float = math.radians(30.0)
    gate_margin_ratio: float = 0.1
    pass_through_ratio: float = 0.5
    rotation_speed: float = 0.01      # radians per frame
    progressive_rotation_offset_pct: float = 0.0
    ring_safety_margin: float = 2.0
    ring_immunity: float = 0.0
    score_per_ring: int = 10

    # ring animation
    shrink_on_destroy: bool = True
    shrink_factor: float = 0.8
    min_circle_gap: float = 15.0
    min_circle_radius: float = 20.0
    radius_ease: float = 0.05
    radius_epsilon: float = 0.1

    # population
    ball_count: int = 1
    ball_speed: float = 5.0
    base_ball_radius: float = 15.0
    ball_elasticity: float = 1.0
    balls_on_destroy: int = 0
    max_ball_count: int = 5
    growth_rate: float = 0.0
    max_radius_ratio: float = 0.9
    growth_game_over: bool = False

    # effects
    effects_enabled: bool = True
    particle_style: ParticleStyle = ParticleStyle.STANDARD

    def __post_init__(self):
        if not isinstance(self.particle_style, ParticleStyle):
            object.__setattr__(self, "particle_style", ParticleStyle(self.particle_style))
        self.validate()

    @property
    def center(self) -> tuple[float, float]:
        return (self.width / 2, self.height / 2)

    @property
    def gate_width_degrees(self) -> float:
        return math.degrees(self.gate_width_radians)

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Arena must have positive size, got {self.width}x{self.height}")
        if self.min_velocity < 0 or self.max_velocity <= 0:
            raise ValueError("Velocity bounds must be non-negative and max_velocity > 0")
        if self.min_velocity > self.max_velocity:
            raise ValueError(
                f"min_velocity {self.min_velocity} exceeds max_velocity {self.max_velocity}"
            )
        if not 0.0 <= self.gate_width_radians < 2 * math.pi:
            raise ValueError(f"gate_width_radians must be in [0, 2π), got {self.gate_width_radians}")
        if self.ring_count < 0 or self.ball_count < 0 or self.max_ball_count < 0:
            raise ValueError("Entity counts must be non-negative")
        if self.base_ball_radius <= 0:
            raise ValueError("base_ball_radius must be positive")
        if self.max_dt <= 0:
            raise ValueError("max_dt must be positive")

    def with_overrides(self, **overrides) -> "SimConfig":
        return replace(self, **_normalize(overrides))

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["particle_style"] = self.particle_style.value
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "SimConfig":
        kwargs = _normalize(dict(data or {}))
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ValueError(f"Unknown SimConfig keys: {unknown}")
        return cls(**kwargs)

    @classmethod
    def from_args(cls, args, base: "SimConfig | None" = None) -> "SimConfig":
        """Override `base` (or the defaults) with every matching, non-None argparse attribute."""
        base = base if base is not None else cls()
        kwargs = {}
        for f in fields(cls):
            value = getattr(args, f.name, None)
            if value is not None:
                kwargs[f.name] = value
        gate_deg = getattr(args, "gate_width_degrees", None)
        if gate_deg is not None:
            kwargs["gate_width_degrees"] = gate_deg
        return base.with_overrides(**kwargs)


def _normalize(kwargs: dict[str, Any]) -> dict[str, Any]:
    # gate width may be given in degrees
    if "gate_width_degrees" in kwargs:
        kwargs = dict(kwargs)
        kwargs["gate_width_radians"] = math.radians(float(kwargs.pop("gate_width_degrees")))
    return kwargs
