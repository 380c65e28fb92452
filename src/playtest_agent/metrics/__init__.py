"""Audit trail output."""

from playtest_agent.metrics.logging import (
    LogWriter,
    read_log,
    session_log_path,
    step_log_dict,
)

__all__ = [
    "LogWriter",
    "read_log",
    "session_log_path",
    "step_log_dict",
]
