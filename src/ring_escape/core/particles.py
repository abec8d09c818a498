# src/ring_escape/core/particles.py

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Callable, TYPE_CHECKING

import numpy as np

from .config import ParticleStyle
from .shapes import Color, Vec2
from ring_escape.utils.plotting import hsl_to_uint8, scale_brightness

if TYPE_CHECKING:
    from .state import IdAllocator

# per-frame update constants
PARTICLE_DECAY = 0.8         # lifetime lost per frame
PARTICLE_FRICTION = 0.98
PARTICLE_GRAVITY = 0.1
PARTICLE_JITTER = 0.1        # half-width of the random velocity kick
PARTICLE_MIN_SIZE_RATIO = 0.5
PARTICLE_FADE_EXPONENT = 1.5

BASE_COUNT_MIN = 50
BASE_COUNT_MAX = 150


@dataclass(frozen=True)
class Particle:
    id: int
    pos: Vec2
    vel: Vec2
    radius: float
    initial_radius: float
    color: Color
    lifetime: float
    max_lifetime: float
    alpha: float = 1.0


Palette = Callable[[np.random.Generator, int, Color], list[Color]]


def _palette_ring_shades(rng: np.random.Generator, n: int, ring_color: Color) -> list[Color]:
    brightness = 0.8 + rng.random(n) * 0.4
    return [scale_brightness(ring_color, float(b)) for b in brightness]


def _palette_sparks(rng: np.random.Generator, n: int, ring_color: Color) -> list[Color]:
    hue = rng.random(n) * 60 + 30
    sat = 80 + rng.random(n) * 20
    light = 60 + rng.random(n) * 30
    return [hsl_to_uint8(h, s, l) for h, s, l in zip(hue, sat, light)]


def _palette_fire(rng: np.random.Generator, n: int, ring_color: Color) -> list[Color]:
    hue = rng.random(n) * 30
    light = 50 + rng.random(n) * 30
    return [hsl_to_uint8(h, 100.0, l) for h, l in zip(hue, light)]


def _palette_ring_color(rng: np.random.Generator, n: int, ring_color: Color) -> list[Color]:
    return [ring_color] * n


def _palette_rainbow(rng: np.random.Generator, n: int, ring_color: Color) -> list[Color]:
    hue = rng.random(n) * 360
    return [hsl_to_uint8(h, 100.0, 70.0) for h in hue]


@dataclass(frozen=True)
class ParticleStylePreset:
    """
    How a destruction burst looks. Ranges are (low, span): value = low + u * span.
    With `big_fraction` > 0 that share of particles draws its size from
    `big_size_range` instead.
    """
    count_multiplier: float
    count_cap: int | None
    speed_range: tuple[float, float]
    size_range: tuple[float, float]
    lifetime_range: tuple[float, float]
    palette: Palette
    vy_offset: float = 0.0
    big_fraction: float = 0.0
    big_size_range: tuple[float, float] = (0.0, 0.0)

    def count_for(self, ring_radius: float) -> int:
        base = min(BASE_COUNT_MAX, max(BASE_COUNT_MIN, int(np.floor(ring_radius))))
        if self.count_multiplier == 1.0:
            return base
        count = int(np.floor(base * self.count_multiplier))
        if self.count_cap is not None:
            count = min(self.count_cap, count)
        return count


PARTICLE_STYLES: dict[ParticleStyle, ParticleStylePreset] = {
    ParticleStyle.STANDARD: ParticleStylePreset(
        count_multiplier=1.0, count_cap=None,
        speed_range=(0.5, 2.0), size_range=(1.0, 6.0), lifetime_range=(60.0, 120.0),
        palette=_palette_ring_shades,
    ),
    ParticleStyle.SPARKLE: ParticleStylePreset(
        count_multiplier=1.2, count_cap=180,
        speed_range=(1.0, 3.0), size_range=(0.5, 3.0), lifetime_range=(30.0, 70.0),
        palette=_palette_sparks,
    ),
    ParticleStyle.EXPLOSION: ParticleStylePreset(
        count_multiplier=1.5, count_cap=200,
        speed_range=(2.0, 4.0), size_range=(1.0, 4.0), lifetime_range=(40.0, 100.0),
        palette=_palette_fire,
        big_fraction=0.3, big_size_range=(3.0, 7.0),
    ),
    ParticleStyle.MINIMAL: ParticleStylePreset(
        count_multiplier=0.3, count_cap=None,
        speed_range=(0.5, 2.0), size_range=(0.5, 2.0), lifetime_range=(30.0, 50.0),
        palette=_palette_ring_color,
    ),
    ParticleStyle.CONFETTI: ParticleStylePreset(
        count_multiplier=1.8, count_cap=300,
        speed_range=(0.3, 1.5), size_range=(2.0, 4.0), lifetime_range=(80.0, 160.0),
        palette=_palette_rainbow,
        vy_offset=-0.5,
    ),
}


def spawn_particles(
    center: Vec2,
    ring_radius: float,
    ring_color: Color,
    style: ParticleStyle,
    rng: np.random.Generator,
    ids: IdAllocator,
) -> tuple[Particle, ...]:
    """Burst of particles on the circumference of a destroyed ring."""
    preset = PARTICLE_STYLES[ParticleStyle(style)]
    n = preset.count_for(ring_radius)
    if n <= 0:
        return ()

    angles = rng.random(n) * 2 * np.pi
    speeds = preset.speed_range[0] + rng.random(n) * preset.speed_range[1]
    sizes = preset.size_range[0] + rng.random(n) * preset.size_range[1]
    if preset.big_fraction > 0.0:
        big = rng.random(n) < preset.big_fraction
        big_sizes = preset.big_size_range[0] + rng.random(n) * preset.big_size_range[1]
        sizes = np.where(big, big_sizes, sizes)
    lifetimes = preset.lifetime_range[0] + rng.random(n) * preset.lifetime_range[1]
    colors = preset.palette(rng, n, ring_color)

    cos, sin = np.cos(angles), np.sin(angles)
    xs = center[0] + cos * ring_radius
    ys = center[1] + sin * ring_radius
    vxs = cos * speeds
    vys = sin * speeds + preset.vy_offset

    return tuple(
        Particle(
            id=ids.new_id(),
            pos=(float(xs[i]), float(ys[i])),
            vel=(float(vxs[i]), float(vys[i])),
            radius=float(sizes[i]),
            initial_radius=float(sizes[i]),
            color=colors[i],
            lifetime=float(lifetimes[i]),
            max_lifetime=float(lifetimes[i]),
        )
        for i in range(n)
    )


def update_particles(
    particles: tuple[Particle, ...],
    dt: float,
    rng: np.random.Generator,
) -> tuple[Particle, ...]:
    """Age, move, shrink and fade every particle; drop the expired ones."""
    if not particles:
        return ()
    jitter = rng.uniform(-PARTICLE_JITTER, PARTICLE_JITTER, size=(len(particles), 2))
    friction = PARTICLE_FRICTION ** dt

    out = []
    for p, kick in zip(particles, jitter):
        lifetime = p.lifetime - PARTICLE_DECAY * dt
        if lifetime <= 0:
            continue
        ratio = lifetime / p.max_lifetime
        pos = (p.pos[0] + p.vel[0] * dt, p.pos[1] + p.vel[1] * dt)
        vel = (
            p.vel[0] * friction + float(kick[0]),
            p.vel[1] * friction + PARTICLE_GRAVITY * dt + float(kick[1]),
        )
        size_ratio = PARTICLE_MIN_SIZE_RATIO + ratio * (1 - PARTICLE_MIN_SIZE_RATIO)
        out.append(
            replace(
                p,
                pos=pos,
                vel=vel,
                lifetime=lifetime,
                radius=p.initial_radius * size_ratio,
                alpha=ratio ** PARTICLE_FADE_EXPONENT,
            )
        )
    return tuple(out)
