"""
Whole-game behaviour: invariants over long seeded runs, population rules,
the terminal check and the World host.
"""

import math
from dataclasses import replace

import matplotlib.pyplot as plt
import numpy as np
import pytest

from ring_escape.core import (
    BallGrewEvent,
    BallSpawnedEvent,
    GameOverEvent,
    ParticlesSpawnedEvent,
    RingDestroyedEvent,
    SimConfig,
    World,
    create_ball,
    game_over_reason,
    grow_ball,
    spawn_balls_on_destroy,
    step,
)
from ring_escape.core.rings import angle_in_gate, normalize_angle
from ring_escape.core.state import IdAllocator
from ring_escape.presets import config_for_mode, make_world

from conftest import make_state, radial_ball, static_rings


def run_states(world, n_steps):
    states = []
    for _ in range(n_steps):
        world.step(1.0)
        states.append(world.state)
    return states


# ── Invariants over seeded runs ──────────────────────────

class TestInvariants:

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_collapsing_rings(self, seed):
        config = config_for_mode("collapsing_rotating_circles", {"balls_on_destroy": 1})
        world = make_world(config, seed=seed)
        destroyed_before = set()

        for state in run_states(world, 600):
            for ball in state.balls:
                assert ball.speed <= config.max_velocity + 1e-9
                x, y = ball.pos
                assert ball.radius - 1e-9 <= x <= config.width - ball.radius + 1e-9
                assert ball.radius - 1e-9 <= y <= config.height - ball.radius + 1e-9

            destroyed_now = {r.id for r in state.rings if r.destroyed}
            assert destroyed_before <= destroyed_now
            destroyed_before = destroyed_now

            targets = [r.target_radius for r in state.active_rings]
            assert all(a < b for a, b in zip(targets, targets[1:]))
            assert all(r.radius > 0 for r in state.rings)

    @pytest.mark.parametrize("seed", [3, 4])
    def test_balls_never_sit_in_a_solid_arc(self, seed):
        config = config_for_mode("rotating_circle")
        world = make_world(config, seed=seed)
        center = np.asarray(config.center)

        for state in run_states(world, 600):
            for ring in state.active_rings:
                for ball in state.balls:
                    offset = np.asarray(ball.pos) - center
                    if abs(np.linalg.norm(offset) - ring.radius) < ball.radius - 1e-6:
                        angle = normalize_angle(math.atan2(offset[1], offset[0]))
                        assert angle_in_gate(angle, ring.rotation, config.gate_width_radians, config.gate_margin_ratio)

    @pytest.mark.parametrize("seed", [5, 6])
    def test_fast_small_balls_stay_inside_an_intact_ring(self, seed):
        # balls cover more than their own radius every frame
        config = config_for_mode(
            "rotating_circle",
            {"base_ball_radius": 4.0, "ball_speed": 12.0, "min_velocity": 9.0, "max_velocity": 14.0},
        )
        world = make_world(config, seed=seed)
        center = np.asarray(config.center)

        for state in run_states(world, 600):
            for ring in state.active_rings:
                for ball in state.balls:
                    assert np.linalg.norm(np.asarray(ball.pos) - center) < ring.radius

    def test_walls_only_mode_keeps_balls_in_the_box(self):
        config = config_for_mode("bouncing_ball")
        world = make_world(config, seed=9)
        for state in run_states(world, 900):
            assert not state.rings
            for ball in state.balls:
                assert world.boundary.contains(ball.pos, radius=ball.radius - 1e-9)
                assert ball.speed <= config.max_velocity + 1e-9

    def test_determinism(self):
        config = config_for_mode("collapsing_rotating_circles", {"balls_on_destroy": 2})
        a = make_world(config, seed=42)
        b = make_world(config, seed=42)
        for _ in range(400):
            a.step(1.0)
            b.step(1.0)
        assert a.state == b.state

    def test_different_seeds_differ(self):
        config = config_for_mode("bouncing_ball")
        a = make_world(config, seed=1)
        b = make_world(config, seed=2)
        assert a.state != b.state

    def test_step_is_pure(self, still_config, rng):
        state = make_state([radial_ball(still_config, 90.0, 0.2, 5.0)], static_rings([100.0]))
        step(state, 1.0, still_config, rng)
        assert state.time == 0.0
        assert state.score == 0
        assert not state.rings[0].destroyed

    def test_entity_ids_are_unique(self):
        config = config_for_mode("rotating_circle")
        world = make_world(config, seed=5)
        run_states(world, 600)
        state = world.state
        ids = [b.id for b in state.balls] + [r.id for r in state.rings] + [p.id for p in state.particles]
        assert len(ids) == len(set(ids))
        assert all(i < state.next_id for i in ids)


# ── Population ───────────────────────────────────────────

class TestPopulation:

    def test_spawn_respects_max_ball_count(self, rng):
        config = SimConfig(balls_on_destroy=3, max_ball_count=5)
        ids = IdAllocator(10)
        balls, events = spawn_balls_on_destroy(config.center, 100.0, 4, config, rng, ids, t=1.0)
        assert len(balls) == 1
        assert len(events) == 1
        assert events[0].ball is balls[0]
        assert ids.next_id == 11

    def test_spawned_balls_fly_outward(self, rng):
        config = SimConfig(balls_on_destroy=4, max_ball_count=10)
        balls, _ = spawn_balls_on_destroy(config.center, 100.0, 1, config, rng, IdAllocator(0), t=1.0)
        assert len(balls) == 4
        for ball in balls:
            offset = np.subtract(ball.pos, config.center)
            assert np.linalg.norm(offset) == pytest.approx(80.0)
            assert 1.0 <= ball.speed < 4.0
            assert np.dot(offset, ball.vel) > 0
            assert ball.radius == config.base_ball_radius

    def test_escape_spawns_balls_through_step(self, still_config, rng):
        config = still_config.with_overrides(balls_on_destroy=2, max_ball_count=5)
        state = make_state([radial_ball(config, 90.0, math.radians(15), 5.0)], static_rings([100.0]))

        new_state, events = step(state, 1.0, config, rng)

        assert new_state.n_balls == 3
        spawned = [e for e in events if isinstance(e, BallSpawnedEvent)]
        assert [e.ball.id for e in spawned] == [b.id for b in new_state.balls[1:]]

    def test_grow_ball(self):
        config = SimConfig(growth_rate=0.7, max_radius_ratio=0.9)
        ball = create_ball(0, (400.0, 300.0), (1.0, 0.0), 10.0)
        grown, event = grow_ball(ball, config, 240.0, t=2.0)
        assert grown.radius == pytest.approx(10.7)
        assert grown.growing
        assert isinstance(event, BallGrewEvent)
        assert event.new_radius == pytest.approx(10.7)

    def test_growth_is_capped(self):
        config = SimConfig(growth_rate=0.7, max_radius_ratio=0.9)
        near = create_ball(0, (400.0, 300.0), (1.0, 0.0), 215.9)
        capped, _ = grow_ball(near, config, 240.0, t=2.0)
        assert capped.radius == pytest.approx(216.0)
        same, event = grow_ball(capped, config, 240.0, t=3.0)
        assert event is None
        assert same is capped

    def test_no_growth_by_default(self):
        ball = create_ball(0, (400.0, 300.0), (1.0, 0.0), 10.0)
        assert grow_ball(ball, SimConfig(), 240.0, t=1.0) == (ball, None)

    def test_bounce_grows_the_ball(self, still_config, rng):
        config = still_config.with_overrides(growth_rate=0.5)
        state = make_state([radial_ball(config, 90.0, math.radians(45), 5.0)], static_rings([100.0]))
        new_state, events = step(state, 1.0, config, rng)
        assert new_state.balls[0].radius == pytest.approx(15.5)
        assert any(isinstance(e, BallGrewEvent) for e in events)


# ── Game over ────────────────────────────────────────────

class TestGameOver:

    def test_reasons(self):
        config = SimConfig(growth_game_over=True, max_radius_ratio=0.9)
        rings = static_rings([100.0, 200.0])
        small = create_ball(0, (400.0, 300.0), (1.0, 0.0), 10.0)
        big = create_ball(1, (400.0, 300.0), (1.0, 0.0), 180.0)

        assert game_over_reason([small], rings, config, 200.0) is None
        assert game_over_reason([big], rings, config, 200.0) == "ball_too_large"
        destroyed = tuple(replace(r, destroyed=True) for r in rings)
        assert game_over_reason([small], destroyed, config, 200.0) == "all_rings_destroyed"

    def test_walls_only_never_ends(self):
        config = SimConfig(rings_enabled=False)
        ball = create_ball(0, (400.0, 300.0), (1.0, 0.0), 10.0)
        assert game_over_reason([ball], (), config, 300.0) is None

    def test_last_ring_ends_the_game_once(self, still_config, rng):
        state = make_state([radial_ball(still_config, 90.0, math.radians(15), 5.0)], static_rings([100.0]))

        state, events = step(state, 1.0, still_config, rng)
        over = [e for e in events if isinstance(e, GameOverEvent)]
        assert state.game_over
        assert len(over) == 1
        assert over[0].score == 10
        assert over[0].reason == "all_rings_destroyed"
        assert isinstance(events[-1], GameOverEvent)

        state, events = step(state, 1.0, still_config, rng)
        assert state.game_over
        assert not any(isinstance(e, GameOverEvent) for e in events)

    def test_event_order_on_destruction(self, still_config, rng):
        state = make_state([radial_ball(still_config, 90.0, math.radians(15), 5.0)], static_rings([100.0]))
        _, events = step(state, 1.0, still_config, rng)
        kinds = [type(e) for e in events]
        assert kinds == [RingDestroyedEvent, ParticlesSpawnedEvent, GameOverEvent]

    def test_effects_can_be_turned_off(self, still_config, rng):
        config = still_config.with_overrides(effects_enabled=False)
        state = make_state([radial_ball(config, 90.0, math.radians(15), 5.0)], static_rings([100.0]))
        new_state, events = step(state, 1.0, config, rng)
        assert new_state.particles == ()
        assert not any(isinstance(e, ParticlesSpawnedEvent) for e in events)


# ── World host ───────────────────────────────────────────

class TestWorld:

    def test_add_ball(self):
        world = World(SimConfig())
        ball = world.add_ball((100.0, 100.0), (2.0, 0.0))
        assert world.state.balls == (ball,)
        assert ball.radius == world.config.base_ball_radius
        assert world.state.next_id == ball.id + 1

    def test_add_ball_outside_raises(self):
        world = World(SimConfig())
        with pytest.raises(ValueError):
            world.add_ball((5.0, 100.0), (2.0, 0.0))

    def test_step_advances_time(self):
        world = make_world(config_for_mode("collapsing_rotating_circles"), seed=0)
        world.step(1.0)
        world.step(0.5)
        assert world.state.time == pytest.approx(1.5)

    def test_plot(self):
        world = make_world(config_for_mode("collapsing_rotating_circles"), seed=0)
        for _ in range(5):
            world.step(1.0)
        fig, ax = world.plot()
        assert len(ax.patches) >= len(world.state.active_rings) + world.state.n_balls
        plt.close(fig)
