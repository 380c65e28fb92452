"""Utility functions and configuration."""

from playtest_agent.utils.config import (
    DEFAULT_SESSION_ID,
    FALLBACK_COMMAND,
    MAX_OBJECTIVE_ATTEMPTS,
    OBJECTIVE_TIME_LIMIT,
    Settings,
)
from playtest_agent.utils.logging import (
    get_logger,
    LogCategory,
    LogEntry,
    LogLevel,
    set_logger,
    StructuredLogger,
)

__all__ = [
    "DEFAULT_SESSION_ID",
    "FALLBACK_COMMAND",
    "MAX_OBJECTIVE_ATTEMPTS",
    "OBJECTIVE_TIME_LIMIT",
    "Settings",
    "get_logger",
    "LogCategory",
    "LogEntry",
    "LogLevel",
    "set_logger",
    "StructuredLogger",
]
