"""Progress tracking: idle detection and out-of-bounds detection.

Pose samples jitter around zero even when the actor stands still, so
"idle" means every axis and the heading moved less than a small epsilon
since the previous sample. The idle counter counts a consecutive run
and resets on the first real movement.
"""

from __future__ import annotations

from playtest_agent.schemas import Observation, ScenarioDefinition, Session, Vector3
from playtest_agent.utils.config import FLOOR_THRESHOLD, POSITION_EPSILON, YAW_EPSILON


def yaw_delta(previous: float, current: float) -> float:
    """Smallest absolute angle between two headings, in degrees."""
    diff = abs(current - previous) % 360.0
    return min(diff, 360.0 - diff)


class ProgressTracker:
    """Maintains the idle run counter and the fall check for a session."""

    def __init__(
        self,
        position_epsilon: float = POSITION_EPSILON,
        yaw_epsilon: float = YAW_EPSILON,
        floor_threshold: float = FLOOR_THRESHOLD,
    ) -> None:
        self._position_epsilon = position_epsilon
        self._yaw_epsilon = yaw_epsilon
        self._floor_threshold = floor_threshold

    @property
    def floor_threshold(self) -> float:
        return self._floor_threshold

    def is_idle(
        self,
        previous_position: Vector3 | None,
        previous_yaw: float | None,
        position: Vector3,
        yaw: float,
    ) -> bool:
        """Whether the pose is unchanged (within epsilon) since the last sample.

        The first sample of a session has no predecessor and is never idle.
        """
        if previous_position is None or previous_yaw is None:
            return False
        still = all(
            abs(now - before) < self._position_epsilon
            for now, before in zip(position.as_tuple(), previous_position.as_tuple())
        )
        return still and yaw_delta(previous_yaw, yaw) < self._yaw_epsilon

    def has_fallen(self, scenario: ScenarioDefinition, position: Vector3) -> bool:
        """Whether the actor is below the floor while falling is forbidden."""
        return scenario.constraints.avoid_falling and position.y < self._floor_threshold

    def update(self, session: Session, observation: Observation) -> bool:
        """Fold one observation into the session's idle state.

        Args:
            session: Session to mutate.
            observation: Decoded observation for this step.

        Returns:
            True if this step was idle.
        """
        idle = self.is_idle(
            session.last_position,
            session.last_yaw,
            observation.position,
            observation.yaw,
        )
        if idle:
            session.idle_steps += 1
            session.peak_idle_steps = max(session.peak_idle_steps, session.idle_steps)
        else:
            session.idle_steps = 0

        session.last_position = observation.position
        session.last_yaw = observation.yaw
        return idle
