"""Configuration constants for the playtest orchestrator."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

# Log format version for JSONL records
LOG_VERSION: str = "v1"

# Session identifier used when a caller does not supply one
DEFAULT_SESSION_ID: str = "default"

# Scenario started lazily by step()/report() when no session exists
DEFAULT_SCENARIO_NAME: str = "explore_maze"

# =============================================================================
# Progress Tracking
# =============================================================================

# Per-axis position change (world units) below which the actor counts as still
POSITION_EPSILON: float = 0.01

# Yaw change (degrees) below which the actor counts as not turning
YAW_EPSILON: float = 0.5

# Vertical coordinate below which the actor has fallen out of the level
FLOOR_THRESHOLD: float = -1.0

# =============================================================================
# Objectives
# =============================================================================

# Global cap on resolved objective attempts (success or timeout)
MAX_OBJECTIVE_ATTEMPTS: int = 5

# Seconds an objective may stay active before it is recorded as a timeout
OBJECTIVE_TIME_LIMIT: float = 30.0

# =============================================================================
# Decision Policy
# =============================================================================

# Command issued whenever the decision policy fails or answers garbage
FALLBACK_COMMAND: str = "move_fwd:0.5"

# Upper bound on a single decision-policy call
DECISION_TIMEOUT_SECONDS: float = 10.0

# Upper bound on a narrative-generation call
NARRATIVE_TIMEOUT_SECONDS: float = 20.0

# Gemini model used by the LLM-backed policy and narrator
DEFAULT_MODEL: str = "gemini-2.5-flash"

# Steps of history summarized into the decision prompt
DECISION_HISTORY_WINDOW: int = 10

# Steps of history summarized into the report
REPORT_HISTORY_WINDOW: int = 10

# Characters of raw observation kept in summaries and audit logs
OBSERVATION_SUMMARY_CHARS: int = 200

# =============================================================================
# Transport
# =============================================================================

DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 3000

# Request bodies above this size are rejected by the HTTP binding
MAX_REQUEST_BYTES: int = 1024 * 1024


@dataclass
class Settings:
    """Runtime settings resolved from the environment."""

    gemini_api_key: str | None = None
    model: str = DEFAULT_MODEL
    scenarios_dir: Path | None = None
    run_dir: Path | None = None
    decision_timeout: float = DECISION_TIMEOUT_SECONDS
    narrative_timeout: float = NARRATIVE_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> "Settings":
        """Build settings from ``GEMINI_API_KEY`` and ``PLAYTEST_*`` variables.

        Variables from a ``.env`` file (``env_file``, or the nearest one
        above the working directory) are loaded first. Variables already
        set in the process environment take precedence.
        """
        load_dotenv(env_file or find_dotenv(usecwd=True))
        scenarios_dir = os.environ.get("PLAYTEST_SCENARIOS_DIR")
        run_dir = os.environ.get("PLAYTEST_RUN_DIR")
        return cls(
            gemini_api_key=os.environ.get("GEMINI_API_KEY") or None,
            model=os.environ.get("PLAYTEST_MODEL", DEFAULT_MODEL),
            scenarios_dir=Path(scenarios_dir) if scenarios_dir else None,
            run_dir=Path(run_dir) if run_dir else None,
        )
