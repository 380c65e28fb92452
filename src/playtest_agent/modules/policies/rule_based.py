"""Deterministic wander-and-unstick policy.

Needs no network access, so it is the default for ``serve`` and the only
policy used by ``replay``. The behaviour mirrors a simple in-level test
agent: walk forward, turn away from walls, and escalate to a jump or a
large turn when the actor stops making progress.
"""

from __future__ import annotations

import logging

from playtest_agent.core.interfaces import DecisionPolicy
from playtest_agent.schemas import Command, Decision, DecisionContext, Observation

logger = logging.getLogger(__name__)


class RuleBasedPolicy(DecisionPolicy):
    """Walk forward, steer around obstacles, unstick when idle."""

    def __init__(
        self,
        step_seconds: float = 1.0,
        obstacle_distance: float = 1.0,
        turn_degrees: float = 45.0,
        unstick_after: int = 2,
    ) -> None:
        """Initialize the policy.

        Args:
            step_seconds: Duration of a normal forward move.
            obstacle_distance: Forward ray distance below which the actor turns.
            turn_degrees: Heading change used to steer around obstacles.
            unstick_after: Idle steps before the unstick routine kicks in.
        """
        self._step_seconds = step_seconds
        self._obstacle_distance = obstacle_distance
        self._turn_degrees = turn_degrees
        self._unstick_after = unstick_after

    def decide(self, observation: Observation, context: DecisionContext) -> Decision:
        idle = int(context.counters.get("idle_steps", 0))

        if idle >= self._unstick_after:
            # Alternate jump and a wide turn so repeated idles do not loop
            if idle % 2 == 0:
                return Decision(command=Command.jump().to_wire(), note=f"unstick: idle for {idle} steps")
            return Decision(
                command=Command.turn_right(self._turn_degrees * 2).to_wire(),
                note=f"unstick: idle for {idle} steps",
            )

        if 0.0 <= observation.forward_hit < self._obstacle_distance:
            command = self._steer(observation)
            return Decision(
                command=command.to_wire(),
                note=f"obstacle ahead at {observation.forward_hit:.2f}",
            )

        return Decision(
            command=Command.move_forward(self._step_seconds).to_wire(),
            note="path clear",
        )

    def _steer(self, observation: Observation) -> Command:
        """Turn toward the side with more room. -1 means open."""
        left = observation.left_hit if observation.left_hit >= 0 else float("inf")
        right = observation.right_hit if observation.right_hit >= 0 else float("inf")
        if left > right:
            return Command.turn_left(self._turn_degrees)
        return Command.turn_right(self._turn_degrees)
