"""Termination evaluation.

Checks run in strict priority order and the first match wins:

1. attempt cap reached         -> attemptsComplete
2. step budget exhausted       -> maxSteps
3. idle run above the limit    -> idleTooLong
4. actor below the floor       -> fellOutOfLevel

Attempt exhaustion is the scenario's own completion signal, so it is
checked before the incidental limits.
"""

from __future__ import annotations

from playtest_agent.modules.progress import ProgressTracker
from playtest_agent.schemas import DoneReason, Observation, Session
from playtest_agent.utils.config import MAX_OBJECTIVE_ATTEMPTS


class TerminationEvaluator:
    """Combines session state into a single done/not-done decision."""

    def __init__(
        self,
        tracker: ProgressTracker | None = None,
        max_attempts: int = MAX_OBJECTIVE_ATTEMPTS,
    ) -> None:
        self._tracker = tracker or ProgressTracker()
        self._max_attempts = max_attempts

    def evaluate(self, session: Session, observation: Observation) -> DoneReason | None:
        """Return the reason the session must stop, or None to keep going."""
        if session.objective_attempts >= self._max_attempts:
            return DoneReason.ATTEMPTS_COMPLETE

        if session.steps_taken >= session.scenario.max_steps:
            return DoneReason.MAX_STEPS

        max_idle = session.scenario.constraints.max_idle_steps
        if max_idle is not None and session.idle_steps > max_idle:
            return DoneReason.IDLE_TOO_LONG

        if self._tracker.has_fallen(session.scenario, observation.position):
            return DoneReason.FELL_OUT_OF_LEVEL

        return None
