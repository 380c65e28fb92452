"""Core orchestration and interfaces."""

from playtest_agent.core.interfaces import (
    DecisionPolicy,
    NarrativeGenerator,
    ScenarioLoader,
)
from playtest_agent.core.session_store import SessionStore
from playtest_agent.core.orchestrator import SessionOrchestrator

__all__ = [
    "DecisionPolicy",
    "NarrativeGenerator",
    "ScenarioLoader",
    "SessionOrchestrator",
    "SessionStore",
]
