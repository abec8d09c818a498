# src/ring_escape/core/boundary.py
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import List, TYPE_CHECKING

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle

from .shapes import Ball, as_vec, to_pair
from .events import BaseEvent, Wall, WallCollisionEvent
from .physics import enforce_speed_bounds

if TYPE_CHECKING:
    from .config import SimConfig


class Boundary(ABC):
    @abstractmethod
    def resolve_collision(
        self,
        ball: Ball,
        config: SimConfig,
        t: float,
        rng: np.random.Generator,
    ) -> tuple[Ball, List[BaseEvent]]:
        """
        Return the ball after contact with the boundary has been resolved,
        plus any events describing what happened.
        """
        ...

    @abstractmethod
    def contains(self, pos, radius: float = 0.0) -> bool:
        """
        Return True if a (possibly extended) point is fully inside the domain.

        `radius` lets you check "does this circle of radius r fit inside?".
        """
        ...

    def bounds(self) -> tuple[float, float, float, float]:
        """
        Optionally provide (xmin, xmax, ymin, ymax) for camera setup / plotting.
        Default raises if not meaningful.
        """
        raise NotImplementedError


# (wall, axis, side) where side is the direction pointing back into the arena
_WALLS = (
    (Wall.LEFT, 0, 1.0),
    (Wall.RIGHT, 0, -1.0),
    (Wall.TOP, 1, 1.0),
    (Wall.BOTTOM, 1, -1.0),
)


@dataclass(frozen=True)
class BoxBoundary(Boundary):
    width: float
    height: float
    margin: float = 0.0

    def _limit(self, axis: int, side: float) -> float:
        if side > 0:
            return self.margin
        extent = self.width if axis == 0 else self.height
        return extent - self.margin

    def resolve_collision(
        self,
        ball: Ball,
        config: SimConfig,
        t: float,
        rng: np.random.Generator,
    ) -> tuple[Ball, List[BaseEvent]]:
        events: List[BaseEvent] = []
        r = ball.radius
        pos = as_vec(ball.pos)
        vel = as_vec(ball.vel)
        safety = config.wall_safety_ratio * r
        restitution = config.bounciness * ball.elasticity
        immune = t - ball.last_wall_hit < config.wall_immunity
        bounced: list[tuple[int, float]] = []
        touched = False

        for wall, axis, side in _WALLS:
            limit = self._limit(axis, side)
            # leading edge past the (margin-adjusted) wall?
            if side * (pos[axis] - limit) >= r:
                continue

            touched = True
            # Position is corrected even inside the immunity window
            pos[axis] = limit + side * (r + safety)

            v_perp = float(vel[axis])
            approaching = v_perp * side < 0.0
            if immune or not approaching:
                # position only; velocity is left as it is
                continue

            impact_speed = abs(v_perp)
            rebound = max(impact_speed * restitution, config.min_rebound_velocity)
            vel[axis] = side * rebound
            vel[1 - axis] *= config.wall_friction
            bounced.append((axis, side))
            events.append(WallCollisionEvent(t=t, ball_id=ball.id, wall=wall, impact_speed=impact_speed))

        if not touched:
            return ball, events
        if not bounced:
            return replace(ball, pos=to_pair(pos), vel=to_pair(vel)), events

        if config.wall_angle_jitter > 0.0:
            vel = _rotate(vel, rng.uniform(-config.wall_angle_jitter, config.wall_angle_jitter))
            # jitter must never turn the ball back into a wall it just left
            for axis, side in bounced:
                vel[axis] = side * max(abs(vel[axis]), config.min_rebound_velocity)

        vel = enforce_speed_bounds(vel, config.min_velocity, config.max_velocity, rng)
        return replace(ball, pos=to_pair(pos), vel=to_pair(vel), last_wall_hit=t), events

    def contains(self, pos, radius: float = 0.0) -> bool:
        x, y = float(pos[0]), float(pos[1])
        return (
            x - radius >= 0.0
            and x + radius <= self.width
            and y - radius >= 0.0
            and y + radius <= self.height
        )

    def bounds(self) -> tuple[float, float, float, float]:
        return 0.0, self.width, 0.0, self.height

    def plot(self, ax=None, delta=0, **kwargs):
        """
        Plot the box boundary using matplotlib.

        Parameters
        ----------
        ax : matplotlib.axes.Axes, optional
            Axes to draw on. If None, a new figure and axes are created.
        **kwargs :
            Extra keyword arguments passed to Rectangle, e.g.
            edgecolor, linewidth, linestyle.

        Returns
        -------
        (fig, ax)
        """
        if ax is None:
            fig, ax = plt.subplots()
        else:
            fig = ax.figure

        kwargs.setdefault("fill", False)
        rect = Rectangle(
            (0.0, 0.0),
            self.width,
            self.height,
            **kwargs,
        )
        ax.add_patch(rect)

        ax.set_xlim(-delta, self.width + delta)
        ax.set_ylim(-delta, self.height + delta)
        ax.set_aspect("equal", adjustable="box")
        return fig, ax


def _rotate(vec: np.ndarray, angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([c * vec[0] - s * vec[1], s * vec[0] + c * vec[1]])
