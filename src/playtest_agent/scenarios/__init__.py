"""Scenario definitions and loaders.

Scenarios come either from the built-in registry or from JSON files in
a scenarios directory; both are served through the ``ScenarioLoader``
interface.
"""

from playtest_agent.scenarios.definitions import (
    SCENARIO_ALIASES,
    SCENARIOS,
    explore_maze,
    get_scenario,
    list_scenarios,
    reach_goal,
    register_scenario,
    treasure_hunt,
)
from playtest_agent.scenarios.loader import (
    BuiltinScenarioLoader,
    DirectoryScenarioLoader,
)

__all__ = [
    "BuiltinScenarioLoader",
    "DirectoryScenarioLoader",
    "SCENARIO_ALIASES",
    "SCENARIOS",
    "explore_maze",
    "get_scenario",
    "list_scenarios",
    "reach_goal",
    "register_scenario",
    "treasure_hunt",
]
