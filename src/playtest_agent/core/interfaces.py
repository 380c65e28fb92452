"""Abstract base classes for the orchestrator's swappable collaborators.

The orchestrator depends only on these interfaces and the schemas,
never on a concrete policy, narrator or scenario source.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from playtest_agent.schemas import (
        Decision,
        DecisionContext,
        Observation,
        ScenarioDefinition,
    )


# =============================================================================
# Decision Interfaces
# =============================================================================


class DecisionPolicy(ABC):
    """Chooses the actor's next command.

    Implementations might include:
    - Deterministic wander-and-unstick rules
    - A hosted language model
    - A scripted replay
    """

    @abstractmethod
    def decide(self, observation: Observation, context: DecisionContext) -> Decision:
        """Pick the next command.

        Args:
            observation: Decoded observation for the current step.
            context: Scenario template, counters and recent history.

        Returns:
            Decision holding a wire command and a short note. Any exception
            raised here is absorbed by the orchestrator's fallback.
        """
        ...


class NarrativeGenerator(ABC):
    """Writes the free-text summary section of a report."""

    @abstractmethod
    def narrate(self, context: dict[str, Any]) -> str:
        """Produce a narrative summary.

        Args:
            context: Report facts (status, counters, reason, timeline).

        Returns:
            Markdown text.
        """
        ...


# =============================================================================
# Scenario Interfaces
# =============================================================================


class ScenarioLoader(ABC):
    """Resolves scenario names to definitions."""

    @abstractmethod
    def load(self, name: str) -> ScenarioDefinition:
        """Load a scenario by name.

        Raises:
            ScenarioNotFoundError: If no scenario has this name.
            ScenarioLoadError: If the scenario exists but is malformed.
        """
        ...

    @abstractmethod
    def list_names(self) -> list[str]:
        """Names of all scenarios this loader can resolve."""
        ...
