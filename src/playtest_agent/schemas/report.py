"""Structured report data contracts."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from playtest_agent.schemas.observation import Vector3
from playtest_agent.schemas.session import DoneReason


class ReportStatus(str, Enum):
    """Overall verdict of a playtest run.

    ``PASS`` requires both a success done reason (``attemptsComplete``)
    and at least one successful objective attempt. A run whose every
    attempt timed out is ``FAIL`` even though it ended on the attempt cap.
    """

    PASS = "PASS"
    FAIL = "FAIL"


class ObjectiveRow(BaseModel):
    """One resolved objective attempt as shown in the report."""

    attempt: int = Field(..., ge=1)
    id: str
    type: str
    target: str
    actual: str
    elapsed_seconds: float = Field(..., ge=0.0)
    passed: bool

    model_config = {"frozen": True}


class ConstraintRow(BaseModel):
    """Compliance of the run with one scenario constraint."""

    name: str
    limit: str
    actual: str
    compliant: bool

    model_config = {"frozen": True}


class ReportDocument(BaseModel):
    """Deterministic summary of a session.

    Everything except ``reported_at`` is a pure function of the session
    state, so two reports taken without an intervening step are equal
    once that field is ignored.
    """

    status: ReportStatus

    # Run metadata
    scenario_name: str
    scenario_description: str = ""
    session_id: str
    started_at: datetime
    reported_at: datetime
    elapsed_seconds: float = Field(default=0.0, ge=0.0)
    done: bool = False
    done_reason: DoneReason | None = None
    steps_taken: int = Field(default=0, ge=0)
    max_steps: int = Field(default=0, ge=0)

    # Objectives
    objectives: list[ObjectiveRow] = Field(default_factory=list)
    objective_attempts: int = Field(default=0, ge=0)
    max_objective_attempts: int = Field(default=0, ge=0)

    # Constraints and progress
    constraints: list[ConstraintRow] = Field(default_factory=list)
    progress: dict[str, float] = Field(default_factory=dict)
    command_histogram: dict[str, int] = Field(default_factory=dict)

    # Final pose
    last_position: Vector3 | None = None
    last_yaw: float | None = None

    # Diagnostics
    issue: str = ""
    recommendation: str = ""
    timeline: list[str] = Field(default_factory=list)
    narrative: str = ""

    model_config = {"frozen": True}

    def without_timestamp(self) -> dict:
        """Dump everything except ``reported_at`` for equality checks."""
        return self.model_dump(mode="json", exclude={"reported_at"})

    def to_markdown(self) -> str:
        """Render as a Markdown bug report."""
        from playtest_agent.report import render_markdown

        return render_markdown(self)
