"""Session state and step/response data contracts."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from playtest_agent.schemas.observation import Observation, Vector3
from playtest_agent.schemas.scenario import ObjectiveType, ScenarioDefinition
from playtest_agent.utils.config import DEFAULT_SESSION_ID, LOG_VERSION


class ObjectiveStatus(str, Enum):
    """Outcome of one objective attempt."""

    SUCCESS = "success"
    TIMEOUT = "timeout"


class DoneReason(str, Enum):
    """Why a session stopped."""

    ATTEMPTS_COMPLETE = "attemptsComplete"   # attempt cap reached
    MAX_STEPS = "maxSteps"                   # step budget exhausted
    IDLE_TOO_LONG = "idleTooLong"            # actor stood still too long
    FELL_OUT_OF_LEVEL = "fellOutOfLevel"     # actor dropped below the floor


# Reasons that count as the scenario completing as intended
SUCCESS_REASONS = frozenset({DoneReason.ATTEMPTS_COMPLETE})


class ObjectiveResult(BaseModel):
    """Record of one resolved objective attempt. Never mutated."""

    id: str = Field(..., description="Objective id")
    type: ObjectiveType = Field(..., description="Objective predicate kind")
    status: ObjectiveStatus = Field(..., description="success or timeout")
    elapsed_seconds: float = Field(..., ge=0.0, description="Time the attempt was active")
    observed: float = Field(
        default=0.0,
        description="Value the predicate saw when the attempt resolved",
    )
    step: int = Field(default=0, ge=0, description="Step number at resolution")

    model_config = {"frozen": True}


class StepRecord(BaseModel):
    """Audit trail entry appended once per ingested observation."""

    log_version: str = Field(default=LOG_VERSION)
    step: int = Field(..., ge=1, description="1-based step number")
    timestamp: datetime = Field(..., description="When the observation was ingested")
    raw_observation: str = Field(default="", description="Observation payload as received")
    command_issued: str | None = Field(
        default=None,
        description="Command returned to the actor for this step",
    )
    note: str | None = Field(default=None, description="Decision note or done reason")

    model_config = {"frozen": False}


class Session(BaseModel):
    """The live, mutable state of one playtest run.

    Created wholesale by ``start``, mutated in place by ``step`` and only
    read by ``report``.
    """

    session_id: str = Field(default=DEFAULT_SESSION_ID)
    scenario: ScenarioDefinition

    # Counters
    steps_taken: int = Field(default=0, ge=0)
    idle_steps: int = Field(default=0, ge=0)
    peak_idle_steps: int = Field(default=0, ge=0)
    last_position: Vector3 | None = None
    last_yaw: float | None = None
    goal_found: int = Field(default=0, ge=0)
    goal_total: int = Field(default=0, ge=0)
    last_observation: Observation | None = None

    # Audit trail
    history: list[StepRecord] = Field(default_factory=list)

    # Termination
    done: bool = False
    done_reason: DoneReason | None = None
    started_at: datetime = Field(default_factory=datetime.now)

    # Objective sequencing
    objective_index: int = Field(default=0, ge=0)
    objective_attempts: int = Field(default=0, ge=0)
    objective_started_at: datetime | None = None
    objective_results: list[ObjectiveResult] = Field(default_factory=list)

    model_config = {"frozen": False}

    @classmethod
    def new(
        cls,
        scenario: ScenarioDefinition,
        session_id: str = DEFAULT_SESSION_ID,
        now: datetime | None = None,
    ) -> "Session":
        """Create a freshly initialized session bound to ``scenario``."""
        return cls(
            session_id=session_id,
            scenario=scenario,
            started_at=now or datetime.now(),
        )

    def mark_done(self, reason: DoneReason) -> None:
        """Close the session. A closed session never reopens."""
        if self.done:
            return
        self.done = True
        self.done_reason = reason

    def counters(self) -> dict[str, Any]:
        """Counter snapshot handed to the decision policy."""
        return {
            "steps_taken": self.steps_taken,
            "max_steps": self.scenario.max_steps,
            "idle_steps": self.idle_steps,
            "goal_found": self.goal_found,
            "goal_total": self.goal_total,
            "objective_index": self.objective_index,
            "objective_attempts": self.objective_attempts,
        }


class StepResponse(BaseModel):
    """What the actor receives for each step."""

    command: str = Field(default="", description="Wire command, empty once terminal")
    note: str = Field(default="", description="Decision note or done reason")


class StartResponse(BaseModel):
    """Result of starting a named scenario."""

    ok: bool = True
    active_test: str = Field(..., alias="activeTest")

    model_config = {"populate_by_name": True}
