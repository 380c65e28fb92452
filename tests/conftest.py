"""Configuration for pytest."""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from typing import Any, Callable

import pytest

from playtest_agent.core.interfaces import DecisionPolicy
from playtest_agent.schemas import (
    Decision,
    DecisionContext,
    Objective,
    ObjectiveType,
    Observation,
    ScenarioConstraints,
    ScenarioDefinition,
)


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class RecordingPolicy(DecisionPolicy):
    """Policy that always answers the same command and records its calls."""

    def __init__(self, command: str = "move_fwd:1.0", note: str = "ok") -> None:
        self.command = command
        self.note = note
        self.calls: list[tuple[Observation, DecisionContext]] = []

    def decide(self, observation: Observation, context: DecisionContext) -> Decision:
        self.calls.append((observation, context))
        return Decision(command=self.command, note=self.note)


@pytest.fixture
def clock() -> ManualClock:
    """A manually advanced clock."""
    return ManualClock()


@pytest.fixture
def policy() -> RecordingPolicy:
    """A recording policy answering move_fwd:1.0."""
    return RecordingPolicy()


@pytest.fixture
def goal_scenario() -> ScenarioDefinition:
    """One goalCountAtLeast objective, 50 steps, idle limit 10, no falling."""
    return ScenarioDefinition(
        name="find_one_goal",
        description="Find at least one goal",
        max_steps=50,
        objectives=[
            Objective(type=ObjectiveType.GOAL_COUNT_AT_LEAST, params={"minimum": 1}),
        ],
        constraints=ScenarioConstraints(max_idle_steps=10, avoid_falling=True),
    )


@pytest.fixture
def make_observation() -> Callable[..., str]:
    """Factory for serialized actor observations."""

    def _make(
        x: float = 0.0,
        y: float = 0.0,
        z: float = 0.0,
        yaw: float = 0.0,
        goal_found: int = 0,
        goal_total: int = 1,
        **extra: Any,
    ) -> str:
        data = {
            "position": {"x": x, "y": y, "z": z},
            "yaw": yaw,
            "goalFound": goal_found,
            "goalTotal": goal_total,
        }
        data.update(extra)
        return json.dumps(data)

    return _make
