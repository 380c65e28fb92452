"""Exception hierarchy for the playtest orchestrator.

Only scenario errors are meant to reach callers of the orchestrator;
the rest are recovered inside the step/report loop.
"""

from __future__ import annotations


class PlaytestError(Exception):
    """Base class for all playtest orchestrator errors."""


class ScenarioError(PlaytestError):
    """A scenario could not be provided for the requested name."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(message)


class ScenarioNotFoundError(ScenarioError):
    """No scenario definition exists for the requested name."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.available = sorted(available or [])
        message = f"Scenario not found: {name}"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(name, message)


class ScenarioLoadError(ScenarioError):
    """A scenario definition exists but could not be parsed."""

    def __init__(self, name: str, reason: str) -> None:
        self.reason = reason
        super().__init__(name, f"Scenario {name!r} could not be loaded: {reason}")


class PolicyError(PlaytestError):
    """The decision policy or narrative generator failed to answer."""
