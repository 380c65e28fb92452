"""Decision policy input and output contracts."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class DecisionContext(BaseModel):
    """Everything a decision policy may consult besides the observation."""

    scenario_name: str = Field(..., description="Active scenario name")
    template: dict[str, Any] = Field(
        default_factory=dict,
        description="Scenario decision context (prompt template data)",
    )
    counters: dict[str, Any] = Field(
        default_factory=dict,
        description="Session counters at decision time",
    )
    history_summary: list[str] = Field(
        default_factory=list,
        description="One line per recent step, oldest first",
    )
    raw_observation: str = Field(default="", description="Observation payload as received")

    model_config = {"frozen": True}


class Decision(BaseModel):
    """A policy's chosen command, still in wire form."""

    command: str = Field(..., description="Wire command for the actor")
    note: str = Field(default="", description="Short rationale")

    model_config = {"frozen": True}
