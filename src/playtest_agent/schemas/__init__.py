"""Data contracts for the playtest orchestrator."""

from playtest_agent.schemas.commands import (
    Command,
    CommandKind,
    command_verb,
    parse_command,
)
from playtest_agent.schemas.decision import Decision, DecisionContext
from playtest_agent.schemas.observation import Observation, Vector3
from playtest_agent.schemas.report import (
    ConstraintRow,
    ObjectiveRow,
    ReportDocument,
    ReportStatus,
)
from playtest_agent.schemas.scenario import (
    Objective,
    ObjectiveType,
    ScenarioConstraints,
    ScenarioDefinition,
)
from playtest_agent.schemas.session import (
    DoneReason,
    ObjectiveResult,
    ObjectiveStatus,
    Session,
    StartResponse,
    StepRecord,
    StepResponse,
    SUCCESS_REASONS,
)

__all__ = [
    "Command",
    "CommandKind",
    "ConstraintRow",
    "Decision",
    "DecisionContext",
    "DoneReason",
    "Objective",
    "ObjectiveResult",
    "ObjectiveRow",
    "ObjectiveStatus",
    "ObjectiveType",
    "Observation",
    "ReportDocument",
    "ReportStatus",
    "ScenarioConstraints",
    "ScenarioDefinition",
    "Session",
    "StartResponse",
    "StepRecord",
    "StepResponse",
    "SUCCESS_REASONS",
    "Vector3",
    "command_verb",
    "parse_command",
]
