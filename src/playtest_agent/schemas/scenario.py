"""Scenario definition data contracts.

A scenario is the immutable description of one playtest: its step
budget, the ordered objectives the session cycles through, the
constraints that end a run early, and opaque template data handed to
the decision policy.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class ObjectiveType(str, Enum):
    """Kinds of objective success predicates."""

    GOAL_COUNT_AT_LEAST = "goalCountAtLeast"    # goal_found >= params.minimum
    GOAL_COUNT_COMPLETE = "goalCountComplete"   # every goal in the level found
    REACH_DISTANCE = "reachDistance"            # nearest goal within params.maxDistance


class Objective(BaseModel):
    """A single success condition attempted by the session."""

    id: str | None = Field(
        default=None,
        description="Objective identifier (defaults to objective_<position>)",
    )
    type: ObjectiveType = Field(..., description="Success predicate kind")
    params: dict[str, Any] = Field(
        default_factory=dict,
        description="Predicate parameters, e.g. {'minimum': 1}",
    )

    model_config = {"frozen": True}


class ScenarioConstraints(BaseModel):
    """Limits that end a session before its objectives are exhausted."""

    max_idle_steps: int | None = Field(
        default=None,
        ge=0,
        alias="maxIdleSteps",
        description="Consecutive idle steps tolerated (None disables the check)",
    )
    avoid_falling: bool = Field(
        default=False,
        alias="avoidFalling",
        description="Fail the session when the actor drops below the floor",
    )

    model_config = {"frozen": True, "populate_by_name": True}


class ScenarioDefinition(BaseModel):
    """Immutable description of a playtest scenario."""

    name: str = Field(..., min_length=1, description="Scenario name")
    description: str = Field(default="", description="Human-readable summary")
    max_steps: int = Field(
        default=200,
        ge=1,
        alias="maxSteps",
        description="Step budget for the whole session",
    )
    objectives: list[Objective] = Field(
        default_factory=list,
        description="Ordered objectives, cycled until the attempt cap",
    )
    constraints: ScenarioConstraints = Field(default_factory=ScenarioConstraints)
    decision_context: dict[str, Any] = Field(
        default_factory=dict,
        alias="decisionContext",
        description="Template data passed through to the decision policy",
    )

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("objectives")
    @classmethod
    def _assign_positional_ids(cls, objectives: list[Objective]) -> list[Objective]:
        return [
            obj if obj.id else obj.model_copy(update={"id": f"objective_{index + 1}"})
            for index, obj in enumerate(objectives)
        ]

    def objective_by_id(self, objective_id: str) -> Objective | None:
        """Look up an objective by its (possibly defaulted) id."""
        for obj in self.objectives:
            if obj.id == objective_id:
                return obj
        return None
