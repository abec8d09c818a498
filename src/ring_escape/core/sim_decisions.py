from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .state import SimulationState


class SimAction(str, Enum):
    CONTINUE = "continue"
    STOP = "stop"


@dataclass
class SimDecision:
    action: SimAction
    reason: str = ""


@dataclass
class SimStopPolicy:
    """
    Host-side decision of when to stop calling `step`.

    The engine itself never stops: a finished game still steps (particles keep
    fading, balls keep bouncing). This policy ends a run on:
      - game over, optionally after `linger_steps` more steps so the last
        destruction burst can play out
      - a step limit (n_steps)
      - a ball-count limit (max_balls)

    Intended usage:
        policy = SimStopPolicy(...)
        policy.reset()  # per run / per seed
        for step in ...:
            # step world, build snapshot/recording
            decision = policy.decide(step=step, state=world.state)
            if decision.action == SimAction.STOP: ...
    """

    n_steps: Optional[int] = None
    max_balls: Optional[int] = None
    stop_on_game_over: bool = True
    linger_steps: int = 0

    # internal state (set by reset / during run)
    _game_over_step: Optional[int] = None

    def reset(self) -> None:
        """Call at the start of each simulation run (new seed/world)."""
        self._game_over_step = None

    def decide(self, *, step: int, state: SimulationState) -> SimDecision:
        """
        Return what the simulation should do *after* observing the current state.
        """
        if state.game_over and self.stop_on_game_over:
            if self._game_over_step is None:
                self._game_over_step = step
            if step - self._game_over_step >= self.linger_steps:
                return SimDecision(
                    action=SimAction.STOP,
                    reason=f"stop: game over at step {self._game_over_step} (score {state.score})",
                )

        if self.n_steps is not None and step >= self.n_steps:
            return SimDecision(
                action=SimAction.STOP,
                reason=f"stop: step {step} >= n_steps {self.n_steps}",
            )

        if self.max_balls is not None and state.n_balls >= self.max_balls:
            return SimDecision(
                action=SimAction.STOP,
                reason=f"stop: n_balls {state.n_balls} >= max_balls {self.max_balls}",
            )

        return SimDecision(action=SimAction.CONTINUE)

    @property
    def game_over_step(self) -> Optional[int]:
        """Step at which game over was first seen in this run, or None."""
        return self._game_over_step
