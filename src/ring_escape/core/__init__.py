# src/ring_escape/core/__init__.py

from .config import SimConfig, ParticleStyle
from .shapes import Ball, Ring, create_ball, create_ring
from .particles import Particle, PARTICLE_STYLES, spawn_particles, update_particles
from .state import SimulationState
from .physics import integrate_ball, enforce_speed_bounds
from .boundary import Boundary, BoxBoundary
from .rings import (
    ContactKind,
    animate_ring,
    classify_ring_contact,
    resolve_ring_collisions,
    retarget_rings,
)
from .population import grow_ball, spawn_balls_on_destroy, game_over_reason
from .world import World, step, run_simulation
from .recording import EventSnapshot, FrameSnapshot, SimulationRecording
from .sim_decisions import SimAction, SimDecision, SimStopPolicy
from .events import (
    BaseEvent,
    Wall,
    WallCollisionEvent,
    RingBounceEvent,
    RingDestroyedEvent,
    ParticlesSpawnedEvent,
    BallGrewEvent,
    BallSpawnedEvent,
    GameOverEvent,
)

__all__ = [
    "SimConfig",
    "ParticleStyle",
    "Ball",
    "Ring",
    "Particle",
    "create_ball",
    "create_ring",
    "PARTICLE_STYLES",
    "spawn_particles",
    "update_particles",
    "SimulationState",
    "integrate_ball",
    "enforce_speed_bounds",
    "Boundary",
    "BoxBoundary",
    "ContactKind",
    "animate_ring",
    "classify_ring_contact",
    "resolve_ring_collisions",
    "retarget_rings",
    "grow_ball",
    "spawn_balls_on_destroy",
    "game_over_reason",
    "World",
    "step",
    "run_simulation",
    "EventSnapshot",
    "FrameSnapshot",
    "SimulationRecording",
    "SimAction",
    "SimDecision",
    "SimStopPolicy",
    "BaseEvent",
    "Wall",
    "WallCollisionEvent",
    "RingBounceEvent",
    "RingDestroyedEvent",
    "ParticlesSpawnedEvent",
    "BallGrewEvent",
    "BallSpawnedEvent",
    "GameOverEvent",
]
