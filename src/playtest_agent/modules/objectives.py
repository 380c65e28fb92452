"""Objective sequencing.

One objective is active at a time. Each step the active objective's
predicate is evaluated; a success or an expired time budget resolves
the attempt, records an ``ObjectiveResult`` and moves on. Reaching the
end of the list wraps back to the first objective while attempts remain
under the global cap, so a scenario behaves as a repeatable probe
rather than a one-shot checklist.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from playtest_agent.schemas import (
    Objective,
    ObjectiveResult,
    ObjectiveStatus,
    ObjectiveType,
    Session,
)
from playtest_agent.utils.config import MAX_OBJECTIVE_ATTEMPTS, OBJECTIVE_TIME_LIMIT

logger = logging.getLogger(__name__)

# (objective, session) -> (satisfied, observed value)
ObjectivePredicate = Callable[[Objective, Session], tuple[bool, float]]


def _goal_count_at_least(objective: Objective, session: Session) -> tuple[bool, float]:
    minimum = int(objective.params.get("minimum", 1))
    return session.goal_found >= minimum, float(session.goal_found)


def _goal_count_complete(objective: Objective, session: Session) -> tuple[bool, float]:
    done = session.goal_total > 0 and session.goal_found >= session.goal_total
    return done, float(session.goal_found)


def _reach_distance(objective: Objective, session: Session) -> tuple[bool, float]:
    max_distance = float(objective.params.get("maxDistance", 1.5))
    obs = session.last_observation
    distance = obs.nearest_goal_distance if obs is not None else -1.0
    # -1 means no undiscovered goal is in sensor range
    return 0.0 <= distance <= max_distance, distance


PREDICATES: dict[ObjectiveType, ObjectivePredicate] = {
    ObjectiveType.GOAL_COUNT_AT_LEAST: _goal_count_at_least,
    ObjectiveType.GOAL_COUNT_COMPLETE: _goal_count_complete,
    ObjectiveType.REACH_DISTANCE: _reach_distance,
}


def register_predicate(
    objective_type: ObjectiveType,
) -> Callable[[ObjectivePredicate], ObjectivePredicate]:
    """Decorator to register (or replace) the predicate for an objective type."""
    def decorator(func: ObjectivePredicate) -> ObjectivePredicate:
        PREDICATES[objective_type] = func
        return func
    return decorator


class ObjectiveSequencer:
    """Advances a session through its scenario's objectives."""

    def __init__(
        self,
        time_limit: float = OBJECTIVE_TIME_LIMIT,
        max_attempts: int = MAX_OBJECTIVE_ATTEMPTS,
    ) -> None:
        """Initialize the sequencer.

        Args:
            time_limit: Seconds an objective may stay active before timing out.
            max_attempts: Global cap on resolved attempts per session.
        """
        self._time_limit = time_limit
        self._max_attempts = max_attempts

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def exhausted(self, session: Session) -> bool:
        """Whether the session has used up its attempt budget."""
        return session.objective_attempts >= self._max_attempts

    def advance(self, session: Session, now: datetime) -> ObjectiveResult | None:
        """Evaluate the active objective for this step.

        Args:
            session: Session to mutate.
            now: Current time.

        Returns:
            The ObjectiveResult recorded this step, or None if the active
            objective is still pending (or there is nothing to evaluate).
        """
        objectives = session.scenario.objectives
        if not objectives or self.exhausted(session):
            return None

        if session.objective_index >= len(objectives):
            session.objective_index = 0
            session.objective_started_at = None

        if session.objective_started_at is None:
            session.objective_started_at = now

        objective = objectives[session.objective_index]
        elapsed = max(0.0, (now - session.objective_started_at).total_seconds())
        satisfied, observed = PREDICATES[objective.type](objective, session)

        if satisfied:
            status = ObjectiveStatus.SUCCESS
        elif elapsed >= self._time_limit:
            status = ObjectiveStatus.TIMEOUT
        else:
            return None

        result = ObjectiveResult(
            id=objective.id or f"objective_{session.objective_index + 1}",
            type=objective.type,
            status=status,
            elapsed_seconds=elapsed,
            observed=observed,
            step=session.steps_taken,
        )
        session.objective_results.append(result)
        session.objective_attempts += 1
        session.objective_index += 1
        session.objective_started_at = now

        # Cycle back to the first objective while budget remains
        if session.objective_index >= len(objectives) and not self.exhausted(session):
            session.objective_index = 0

        logger.debug(
            "Objective %s resolved as %s after %.2fs (attempt %d/%d)",
            result.id, status.value, elapsed,
            session.objective_attempts, self._max_attempts,
        )
        return result
