# src/ring_escape/core/recording.py

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Iterator
from pathlib import Path
import pickle
import lzma

if TYPE_CHECKING:
    from .state import SimulationState
    from .events import BaseEvent


@dataclass
class EventSnapshot:
    t: float
    type: str               # e.g. "WallCollisionEvent", "RingDestroyedEvent", ...
    a_id: int | None = None
    b_id: int | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    # payload can carry extra info like impact speed, ring radius, etc.


@dataclass
class FrameSnapshot:
    t: float
    state: SimulationState
    events: list[EventSnapshot] = field(default_factory=list)


@dataclass
class SimulationRecording:
    """
    Frozen record of a full simulation run.

    States are immutable, so frames hold them directly. `meta` holds config,
    seed, mode, etc.
    """
    frames: list[FrameSnapshot] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)

    def add_frame(self, frame: FrameSnapshot) -> None:
        self.frames.append(frame)

    @property
    def times(self) -> list[float]:
        return [f.t for f in self.frames]

    @property
    def t_end(self) -> float | None:
        """Time of the last frame, or None if no frames."""
        if not self.frames:
            return None
        return self.frames[-1].t

    @property
    def final_state(self) -> SimulationState | None:
        if not self.frames:
            return None
        return self.frames[-1].state

    def iter_events(self) -> Iterator[EventSnapshot]:
        """Iterate over all EventSnapshots in time order."""
        for frame in self.frames:
            for ev in frame.events:
                yield ev

    def event_counts(self) -> dict[str, int]:
        return dict(Counter(ev.type for ev in self.iter_events()))

    def save(self, path: str | Path) -> None:
        path = Path(path)
        with lzma.open(path, "wb") as f:
            pickle.dump(self, f, protocol=pickle.HIGHEST_PROTOCOL)

    @classmethod
    def load(cls, path: str | Path) -> "SimulationRecording":
        path = Path(path)
        with lzma.open(path, "rb") as f:
            rec = pickle.load(f)
        if not isinstance(rec, cls):
            raise ValueError(f"{path} does not contain a {cls.__name__}")
        return rec


def snapshot_event(event: BaseEvent) -> EventSnapshot:
    return EventSnapshot(
        t=event.t,
        type=type(event).__name__,
        a_id=event.a_id,
        b_id=event.b_id,
        payload=event.to_payload_dict(),
    )


def snapshot_state(
    state: SimulationState,
    events: list[BaseEvent],
    *,
    record_particles: bool = False,
) -> FrameSnapshot:
    """Particles are cosmetic and numerous; they are dropped unless asked for."""
    if not record_particles and state.particles:
        state = replace(state, particles=())
    return FrameSnapshot(
        t=state.time,
        state=state,
        events=[snapshot_event(e) for e in events],
    )
