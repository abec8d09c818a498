# src/ring_escape/core/world.py

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import List
import logging

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.patches import Arc, Circle

from .config import SimConfig
from .shapes import Ball, create_ball
from .state import IdAllocator, SimulationState, play_field_radius
from .boundary import BoxBoundary
from .physics import integrate_ball
from .rings import animate_ring, clear_flashing, resolve_ring_collisions, retarget_rings
from .particles import spawn_particles, update_particles
from .population import game_over_reason, grow_ball, spawn_balls_on_destroy
from .events import BaseEvent, GameOverEvent, ParticlesSpawnedEvent
from .recording import SimulationRecording, snapshot_state
from .sim_decisions import SimAction, SimStopPolicy
from ring_escape.utils.plotting import get_color, uint8_to_float
from ring_escape.utils.random import make_rng

logger = logging.getLogger(__name__)


def step(
    state: SimulationState,
    dt: float,
    config: SimConfig,
    rng: np.random.Generator,
) -> tuple[SimulationState, List[BaseEvent]]:
    """
    Advance the game by dt frames (1.0 = one 60 Hz frame) and return the new
    state plus everything that happened, in order.

    Per frame:
    - rings rotate and ease toward their target radius
    - particles age and drift
    - each ball: integrate, walls, rings (destruction may retarget the rings,
      spawn particles and spawn balls)
    - flash bookkeeping and the terminal check

    `state` is never modified; all randomness comes from `rng`.
    """
    dt = min(max(float(dt), 0.0), config.max_dt)
    t = state.time + dt
    ids = IdAllocator(state.next_id)
    events: List[BaseEvent] = []
    center = config.center

    rings = state.rings
    if config.rings_enabled:
        rings = tuple(animate_ring(r, config, dt) for r in rings)
    particles = update_particles(state.particles, dt, rng)
    boundary = BoxBoundary(config.width, config.height, margin=config.wall_margin) if config.walls_enabled else None
    field_radius = play_field_radius(state.rings, config)

    score = state.score
    total_shrink = state.total_shrink_factor
    destroyed_any = False
    balls: List[Ball] = []
    spawned: List[Ball] = []

    for ball in state.balls:
        prev_pos = ball.pos
        ball = integrate_ball(ball, config, dt)

        if boundary is not None:
            ball, wall_events = boundary.resolve_collision(ball, config, t, rng)
            events.extend(wall_events)

        if config.rings_enabled and rings:
            result = resolve_ring_collisions(ball, rings, config, center, t, prev_pos)
            ball, rings = result.ball, result.rings
            events.extend(result.events)

            for ring in result.destroyed:
                destroyed_any = True
                score += config.score_per_ring
                logger.debug("Ring %d destroyed by ball %d at t=%.2f (score %d)", ring.id, ball.id, t, score)

                if config.effects_enabled:
                    burst = spawn_particles(center, ring.radius, ring.color, config.particle_style, rng, ids)
                    particles = particles + burst
                    events.append(ParticlesSpawnedEvent(t=t, ring_id=ring.id, particles=burst))

                if config.balls_on_destroy > 0:
                    n_live = len(state.balls) + len(spawned)
                    new_balls, spawn_events = spawn_balls_on_destroy(
                        center, ring.radius, n_live, config, rng, ids, t
                    )
                    spawned.extend(new_balls)
                    events.extend(spawn_events)

                if config.shrink_on_destroy:
                    rings, total_shrink = retarget_rings(rings, total_shrink, config)

            if result.bounced is not None:
                ball, grew = grow_ball(ball, config, field_radius, t)
                if grew is not None:
                    events.append(grew)

        balls.append(ball)

    balls.extend(spawned)
    if not destroyed_any:
        rings = clear_flashing(rings)

    game_over = state.game_over
    if not game_over:
        reason = game_over_reason(balls, rings, config, field_radius)
        if reason is not None:
            game_over = True
            events.append(GameOverEvent(t=t, score=score, reason=reason))
            logger.info("Game over at t=%.2f: %s (score %d)", t, reason, score)

    new_state = replace(
        state,
        balls=tuple(balls),
        rings=rings,
        particles=particles,
        score=score,
        game_over=game_over,
        total_shrink_factor=total_shrink,
        time=t,
        next_id=ids.next_id,
    )
    return new_state, events


@dataclass
class World:
    """
    Mutable host around the pure `step`: owns the current state, the config
    and the RNG stream, the way a game loop would.
    """
    config: SimConfig
    state: SimulationState = field(default_factory=SimulationState)
    rng: np.random.Generator = field(default_factory=make_rng)

    @property
    def boundary(self) -> BoxBoundary:
        return BoxBoundary(self.config.width, self.config.height, margin=self.config.wall_margin)

    def add_ball(self, pos, vel, radius: float | None = None) -> Ball:
        radius = self.config.base_ball_radius if radius is None else radius
        if self.config.walls_enabled and not self.boundary.contains(pos, radius=radius):
            raise ValueError("Ball placed outside boundary")
        ids = IdAllocator(self.state.next_id)
        ball = create_ball(ids.new_id(), pos, vel, radius, elasticity=self.config.ball_elasticity)
        self.state = replace(self.state, balls=self.state.balls + (ball,), next_id=ids.next_id)
        return ball

    def step(self, dt: float) -> List[BaseEvent]:
        self.state, events = step(self.state, dt, self.config, self.rng)
        return events

    def plot(self, ax=None, delta=10, include_boundary=True, gamma=0):
        """
        Plot the world: boundary in gray, rings with their gates open, balls
        and particles in their colors.
        Coordinate system: x-right, y-down.
        """
        if include_boundary:
            fig, ax = self.boundary.plot(ax=ax, delta=delta, edgecolor="gray", linewidth=2, linestyle="--")
        else:
            if ax is None:
                fig, ax = plt.subplots()
            else:
                fig = ax.figure
            ax.set_xlim(-delta, self.config.width + delta)
            ax.set_ylim(-delta, self.config.height + delta)
            ax.set_aspect("equal", adjustable="box")

        cx, cy = self.config.center
        gate_deg = self.config.gate_width_degrees
        for ring in self.state.active_rings:
            # the drawn arc runs from the end of the gate all the way round
            start = np.degrees(ring.rotation) + gate_deg
            ax.add_patch(Arc(
                (cx, cy), 2 * ring.radius, 2 * ring.radius,
                theta1=start, theta2=start + 360.0 - gate_deg,
                edgecolor="white" if ring.flashing else uint8_to_float(ring.color),
                linewidth=2,
            ))

        for p in self.state.particles:
            ax.add_patch(Circle(p.pos, p.radius, facecolor=uint8_to_float(p.color, p.alpha), linewidth=0))

        for ball in self.state.balls:
            ax.add_patch(Circle(
                ball.pos, ball.radius,
                edgecolor="black",
                facecolor=get_color((0.2, 0.4, 0.9), gamma),
                linewidth=.35,
            ))

        # y increases downward
        ax.invert_yaxis()

        return fig, ax


def run_simulation(
    world: World,
    n_steps: int,
    dt: float = 1.0,
    log_interval: int = 600,
    *,
    policy: SimStopPolicy | None = None,
    record_events: bool = True,
    record_particles: bool = False,
) -> SimulationRecording:
    """
    Step the world forward up to n_steps (or until the policy says stop) and
    record snapshots for rendering/audio hosts.
    """
    recording = SimulationRecording()
    if policy is not None:
        policy.reset()
    for i in range(n_steps):
        events = world.step(dt)
        frame_events = events if record_events else []
        recording.add_frame(snapshot_state(world.state, frame_events, record_particles=record_particles))

        if (i + 1) % log_interval == 0:
            logger.info(
                "Simulated %d/%d frames: %d balls, %d rings left, score %d",
                i + 1, n_steps, world.state.n_balls, len(world.state.active_rings), world.state.score,
            )

        if policy is not None:
            decision = policy.decide(step=i + 1, state=world.state)
            if decision.action == SimAction.STOP:
                logger.info("Stopping after %d frames (%s)", i + 1, decision.reason)
                if policy.game_over_step is not None:
                    logger.info("Lingered %d frames after game over", i + 1 - policy.game_over_step)
                break

    return recording
