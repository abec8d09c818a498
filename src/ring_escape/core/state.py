# src/ring_escape/core/state.py

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .shapes import Ball, Ring
from .particles import Particle

if TYPE_CHECKING:
    from .config import SimConfig


@dataclass(frozen=True)
class SimulationState:
    """
    Immutable snapshot of one game.

    Rings are stored in index order (ascending radius). `step` builds a new
    instance every frame, so two states can be compared or diffed freely.
    """
    balls: tuple[Ball, ...] = ()
    rings: tuple[Ring, ...] = ()
    particles: tuple[Particle, ...] = ()
    score: int = 0
    game_over: bool = False
    total_shrink_factor: float = 1.0
    time: float = 0.0
    next_id: int = 0

    @property
    def n_balls(self) -> int:
        return len(self.balls)

    @property
    def active_rings(self) -> tuple[Ring, ...]:
        return tuple(r for r in self.rings if not r.destroyed)

    def ball_by_id(self, ball_id: int) -> Ball:
        for b in self.balls:
            if b.id == ball_id:
                return b
        raise KeyError(f"No ball with id {ball_id}")

    def ring_by_id(self, ring_id: int) -> Ring:
        for r in self.rings:
            if r.id == ring_id:
                return r
        raise KeyError(f"No ring with id {ring_id}")


class IdAllocator:
    """Hands out entity ids during one step; the final value goes back into the state."""

    def __init__(self, start: int):
        self._next_id = start

    @property
    def next_id(self) -> int:
        return self._next_id

    def new_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid


def play_field_radius(rings, config: SimConfig) -> float:
    """Outermost ring's original radius, or half the short arena side without rings."""
    if rings:
        return max(r.original_radius for r in rings)
    return min(config.width, config.height) / 2
