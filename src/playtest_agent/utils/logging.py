"""Structured logging for the playtest orchestrator.

Every decision the orchestrator takes (step ingestion, objective
resolution, termination, policy fallback) is logged with its session
context so a run can be reconstructed afterwards.

This module provides:
- LogCategory: Predefined log categories for consistent filtering
- StructuredLogger: Category-prefixed logging with timestamps and context
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any, TextIO

# =============================================================================
# LOG CATEGORIES
# =============================================================================

class LogCategory(str, Enum):
    """Log categories for structured filtering and analysis."""
    SESSION = "SESSION"            # Session lifecycle (start, lazy start)
    OBSERVATION = "OBSERVATION"    # Observation ingestion and decoding
    OBJECTIVE = "OBJECTIVE"        # Objective resolution
    TERMINATION = "TERMINATION"    # Termination decisions
    POLICY = "POLICY"              # Decision policy calls and fallbacks
    REPORT = "REPORT"              # Report synthesis and narrative
    SERVER = "SERVER"              # Transport binding
    SYSTEM = "SYSTEM"              # System-level operations


class LogLevel(str, Enum):
    """Log levels for filtering."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


_LEVEL_MAP = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


# =============================================================================
# LOG ENTRY
# =============================================================================

class LogEntry:
    """A structured log entry with optional session context."""

    def __init__(
        self,
        category: LogCategory,
        level: LogLevel,
        message: str,
        session_id: str | None = None,
        step: int | None = None,
        **kwargs: Any,
    ):
        self.timestamp = datetime.now()
        self.category = category
        self.level = level
        self.message = message
        self.session_id = session_id
        self.step = step
        self.context = dict(kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        d: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "category": self.category.value,
            "level": self.level.value,
            "message": self.message,
        }
        if self.session_id is not None:
            d["session_id"] = self.session_id
        if self.step is not None:
            d["step"] = self.step
        if self.context:
            d["context"] = self.context
        return d

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def format_console(self) -> str:
        """Format for console output with category prefix."""
        prefix = f"[{self.category.value}]"
        parts = []
        if self.session_id is not None:
            parts.append(f"session={self.session_id}")
        if self.step is not None:
            parts.append(f"step={self.step}")
        parts.extend(f"{k}={v}" for k, v in self.context.items())
        context_str = f" ({', '.join(parts)})" if parts else ""
        return f"{prefix:14} {self.message}{context_str}"


# =============================================================================
# STRUCTURED LOGGER
# =============================================================================

class StructuredLogger:
    """Category-prefixed structured logger.

    Entries are forwarded to the stdlib ``logging`` hierarchy (so the
    CLI's ``basicConfig`` controls where they go), counted per category,
    kept in a bounded history and optionally mirrored to a file.
    """

    def __init__(
        self,
        name: str = "playtest_agent",
        level: LogLevel = LogLevel.INFO,
        file_output: TextIO | None = None,
        json_output: bool = True,
        max_history: int = 1000,
    ):
        self._logger = logging.getLogger(name)
        self._level = level
        self._file_output = file_output
        self._json_output = json_output
        self._counts: dict[LogCategory, int] = {cat: 0 for cat in LogCategory}
        self._warning_count = 0
        self._error_count = 0
        self._entries: list[LogEntry] = []
        self._max_history = max_history

    def log(
        self,
        category: LogCategory,
        level: LogLevel,
        message: str,
        **kwargs: Any,
    ) -> LogEntry:
        """Log a structured entry.

        Args:
            category: Log category
            level: Log level
            message: Log message
            **kwargs: Additional context (session_id, step, ...)

        Returns:
            The created LogEntry
        """
        entry = LogEntry(category, level, message, **kwargs)

        if _LEVEL_MAP[level] < _LEVEL_MAP[self._level]:
            return entry

        self._counts[category] += 1
        if level == LogLevel.ERROR:
            self._error_count += 1
        elif level == LogLevel.WARNING:
            self._warning_count += 1

        self._entries.append(entry)
        if len(self._entries) > self._max_history:
            self._entries = self._entries[-self._max_history:]

        self._logger.log(_LEVEL_MAP[level], entry.format_console())

        if self._file_output:
            line = entry.to_json() if self._json_output else entry.format_console()
            self._file_output.write(line + "\n")
            self._file_output.flush()

        return entry

    # -------------------------------------------------------------------------
    # CATEGORY-SPECIFIC METHODS
    # -------------------------------------------------------------------------

    def session(self, message: str, level: LogLevel = LogLevel.INFO, **kwargs: Any) -> LogEntry:
        return self.log(LogCategory.SESSION, level, message, **kwargs)

    def observation(self, message: str, level: LogLevel = LogLevel.DEBUG, **kwargs: Any) -> LogEntry:
        return self.log(LogCategory.OBSERVATION, level, message, **kwargs)

    def objective(self, message: str, level: LogLevel = LogLevel.INFO, **kwargs: Any) -> LogEntry:
        return self.log(LogCategory.OBJECTIVE, level, message, **kwargs)

    def termination(self, message: str, level: LogLevel = LogLevel.INFO, **kwargs: Any) -> LogEntry:
        return self.log(LogCategory.TERMINATION, level, message, **kwargs)

    def policy(self, message: str, level: LogLevel = LogLevel.DEBUG, **kwargs: Any) -> LogEntry:
        return self.log(LogCategory.POLICY, level, message, **kwargs)

    def report(self, message: str, level: LogLevel = LogLevel.INFO, **kwargs: Any) -> LogEntry:
        return self.log(LogCategory.REPORT, level, message, **kwargs)

    def server(self, message: str, level: LogLevel = LogLevel.INFO, **kwargs: Any) -> LogEntry:
        return self.log(LogCategory.SERVER, level, message, **kwargs)

    def system(self, message: str, level: LogLevel = LogLevel.INFO, **kwargs: Any) -> LogEntry:
        return self.log(LogCategory.SYSTEM, level, message, **kwargs)

    # -------------------------------------------------------------------------
    # CONFIGURATION / STATISTICS
    # -------------------------------------------------------------------------

    def set_level(self, level: LogLevel) -> None:
        """Set minimum log level."""
        self._level = level

    def set_file_output(self, file_output: TextIO | None, json_format: bool = True) -> None:
        """Mirror entries to a file handle."""
        self._file_output = file_output
        self._json_output = json_format

    def get_statistics(self) -> dict[str, Any]:
        """Get logging statistics."""
        return {
            "total": sum(self._counts.values()),
            "by_category": {cat.value: count for cat, count in self._counts.items()},
            "warnings": self._warning_count,
            "errors": self._error_count,
        }

    def get_recent_entries(self, count: int = 100) -> list[LogEntry]:
        """Get the most recent log entries."""
        return self._entries[-count:]

    def filter_by_category(self, category: LogCategory) -> list[LogEntry]:
        """Get all retained entries of a specific category."""
        return [e for e in self._entries if e.category == category]


# =============================================================================
# GLOBAL LOGGER INSTANCE
# =============================================================================

_global_logger: StructuredLogger | None = None


def get_logger() -> StructuredLogger:
    """Get the global logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = StructuredLogger()
    return _global_logger


def set_logger(logger: StructuredLogger) -> None:
    """Set the global logger instance."""
    global _global_logger
    _global_logger = logger


__all__ = [
    "LogCategory",
    "LogLevel",
    "LogEntry",
    "StructuredLogger",
    "get_logger",
    "set_logger",
]
