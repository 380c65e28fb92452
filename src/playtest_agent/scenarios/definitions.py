"""Built-in playtest scenarios.

Contains the standard scenarios for the maze and treasure-hunt levels:
- explore_maze: wander the maze and find at least one goal
- treasure_hunt: open every chest in the level
- reach_goal: get within reach of the nearest goal
"""

from __future__ import annotations

from typing import Callable

from playtest_agent.errors import ScenarioNotFoundError
from playtest_agent.schemas import (
    Objective,
    ObjectiveType,
    ScenarioConstraints,
    ScenarioDefinition,
)

ScenarioFactory = Callable[[], ScenarioDefinition]

# Registry of built-in scenarios, keyed by canonical name
SCENARIOS: dict[str, ScenarioFactory] = {}


def register_scenario(factory: ScenarioFactory) -> ScenarioFactory:
    """Decorator to register a scenario factory under its scenario's name."""
    SCENARIOS[factory().name] = factory
    return factory


_QA_GOAL = (
    'explore the map, try to reach the object named "GoalPoint", and detect '
    "bugs such as: getting stuck, falling off the level, weird "
    "rotations/camera, NavMesh issues or blocked paths."
)


@register_scenario
def explore_maze() -> ScenarioDefinition:
    """Explore the maze and find at least one goal.

    Tests:
    - Basic navigation without getting stuck
    - Staying inside the level bounds
    - Goal discovery
    """
    return ScenarioDefinition(
        name="explore_maze",
        description="Explore the maze level and find at least one goal",
        max_steps=200,
        objectives=[
            Objective(
                id="find_goal",
                type=ObjectiveType.GOAL_COUNT_AT_LEAST,
                params={"minimum": 1},
            ),
        ],
        constraints=ScenarioConstraints(max_idle_steps=10, avoid_falling=True),
        decision_context={
            "role": "You are a QA test bot in a Unity maze level.",
            "goal": _QA_GOAL,
        },
    )


@register_scenario
def treasure_hunt() -> ScenarioDefinition:
    """Open every treasure chest in the level."""
    return ScenarioDefinition(
        name="treasure_hunt",
        description="Find and open every treasure chest in the level",
        max_steps=300,
        objectives=[
            Objective(
                id="first_chest",
                type=ObjectiveType.GOAL_COUNT_AT_LEAST,
                params={"minimum": 1},
            ),
            Objective(id="all_chests", type=ObjectiveType.GOAL_COUNT_COMPLETE),
        ],
        constraints=ScenarioConstraints(max_idle_steps=15, avoid_falling=True),
        decision_context={
            "role": "You are a QA test bot in a Unity treasure-hunt level.",
            "goal": (
                "find every treasure chest (chestsFound / totalChests in the "
                "observation). Use nearestChestDistance and the forward/left/right "
                "ray hits to steer. Report getting stuck or falling off the level."
            ),
        },
    )


@register_scenario
def reach_goal() -> ScenarioDefinition:
    """Get within reach radius of the nearest goal."""
    return ScenarioDefinition(
        name="reach_goal",
        description="Walk to within 1.5 units of the nearest goal",
        max_steps=120,
        objectives=[
            Objective(
                id="reach_goal",
                type=ObjectiveType.REACH_DISTANCE,
                params={"maxDistance": 1.5},
            ),
        ],
        constraints=ScenarioConstraints(max_idle_steps=10, avoid_falling=True),
        decision_context={
            "role": "You are a QA test bot in a Unity level.",
            "goal": (
                "walk to the nearest goal (nearestGoalDistance in the observation) "
                "and stop within reach. Report blocked paths."
            ),
        },
    )


# Alternate names accepted by get_scenario
SCENARIO_ALIASES = {
    "explore": "explore_maze",
    "maze": "explore_maze",
    "treasure": "treasure_hunt",
    "chests": "treasure_hunt",
    "goal": "reach_goal",
}


def get_scenario(name: str) -> ScenarioDefinition:
    """Get a built-in scenario by name.

    Args:
        name: Scenario name or alias (case-insensitive).

    Returns:
        A fresh ScenarioDefinition.

    Raises:
        ScenarioNotFoundError: If no built-in scenario has this name.
    """
    key = name.strip().lower()
    key = SCENARIO_ALIASES.get(key, key)
    if key in SCENARIOS:
        return SCENARIOS[key]()
    raise ScenarioNotFoundError(name, list(SCENARIOS))


def list_scenarios() -> list[tuple[str, str]]:
    """List built-in scenarios.

    Returns:
        List of (name, description) tuples.
    """
    return [(name, factory().description) for name, factory in sorted(SCENARIOS.items())]
