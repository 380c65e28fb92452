"""Tests for idle and fall tracking."""

from __future__ import annotations

import pytest

from playtest_agent.modules.progress import ProgressTracker, yaw_delta
from playtest_agent.schemas import (
    Observation,
    ScenarioConstraints,
    ScenarioDefinition,
    Session,
    Vector3,
)


def _obs(x: float = 0.0, y: float = 0.0, z: float = 0.0, yaw: float = 0.0) -> Observation:
    return Observation(position=Vector3(x=x, y=y, z=z), yaw=yaw)


@pytest.fixture
def session() -> Session:
    return Session.new(ScenarioDefinition(name="t"))


class TestYawDelta:
    """Tests for circular yaw difference."""

    def test_simple(self) -> None:
        assert yaw_delta(10.0, 30.0) == pytest.approx(20.0)

    def test_wraps_around(self) -> None:
        assert yaw_delta(359.9, 0.1) == pytest.approx(0.2)
        assert yaw_delta(-180.0, 180.0) == pytest.approx(0.0)


class TestIdleDetection:
    """Tests for the consecutive idle counter."""

    def test_first_sample_never_idle(self, session) -> None:
        tracker = ProgressTracker()
        assert tracker.update(session, _obs()) is False
        assert session.idle_steps == 0

    def test_identical_pose_increments(self, session) -> None:
        tracker = ProgressTracker()
        tracker.update(session, _obs(1.0, 0.0, 1.0, 90.0))
        tracker.update(session, _obs(1.0, 0.0, 1.0, 90.0))
        assert session.idle_steps == 1
        tracker.update(session, _obs(1.005, 0.0, 1.0, 90.2))
        assert session.idle_steps == 2

    def test_position_change_resets(self, session) -> None:
        tracker = ProgressTracker()
        for _ in range(4):
            tracker.update(session, _obs())
        assert session.idle_steps == 3
        tracker.update(session, _obs(z=0.02))
        assert session.idle_steps == 0
        assert session.peak_idle_steps == 3

    def test_turning_in_place_is_not_idle(self, session) -> None:
        tracker = ProgressTracker()
        tracker.update(session, _obs(yaw=0.0))
        tracker.update(session, _obs(yaw=5.0))
        assert session.idle_steps == 0

    def test_last_pose_updated(self, session) -> None:
        tracker = ProgressTracker()
        tracker.update(session, _obs(3.0, 1.0, 2.0, 45.0))
        assert session.last_position == Vector3(x=3.0, y=1.0, z=2.0)
        assert session.last_yaw == 45.0


class TestFallDetection:
    """Tests for has_fallen."""

    def test_below_floor_with_constraint(self) -> None:
        scenario = ScenarioDefinition(
            name="t", constraints=ScenarioConstraints(avoid_falling=True)
        )
        tracker = ProgressTracker()
        assert tracker.has_fallen(scenario, Vector3(y=-2.0))
        assert not tracker.has_fallen(scenario, Vector3(y=-0.5))

    def test_constraint_disabled(self) -> None:
        scenario = ScenarioDefinition(name="t")
        assert not ProgressTracker().has_fallen(scenario, Vector3(y=-50.0))
