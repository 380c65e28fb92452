"""JSONL audit trail for playtest sessions.

One JSON object per ingested step, appended to
``<run_dir>/<session_id>.jsonl``.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from playtest_agent.modules.codec import short_observation
from playtest_agent.schemas import StepRecord
from playtest_agent.utils.config import LOG_VERSION, OBSERVATION_SUMMARY_CHARS

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9_.-]")


def session_log_path(run_dir: Path, session_id: str) -> Path:
    """Log file path for a session id (unsafe characters become ``_``)."""
    safe = _UNSAFE_FILENAME.sub("_", session_id) or "session"
    return run_dir / f"{safe}.jsonl"


def step_log_dict(
    record: StepRecord,
    session_id: str,
    done_reason: str | None = None,
) -> dict[str, Any]:
    """Flatten a step record into a compact log line."""
    return {
        "v": LOG_VERSION,
        "session": session_id,
        "step": record.step,
        "ts": record.timestamp.isoformat(),
        "obs": short_observation(record.raw_observation, OBSERVATION_SUMMARY_CHARS),
        "cmd": record.command_issued,
        "note": record.note,
        "done": done_reason,
    }


class LogWriter:
    """Writes step records to a JSONL log file.

    Creates a consistent log format with one JSON object per line.
    """

    def __init__(self, log_path: Path) -> None:
        """Initialize the log writer.

        Args:
            log_path: Path to the JSONL log file.
        """
        self._log_path = log_path
        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        # Append so a restarted session keeps its earlier lines
        self._file = open(self._log_path, "a", encoding="utf-8")

    @property
    def path(self) -> Path:
        return self._log_path

    def write(self, entry: dict[str, Any]) -> None:
        """Write one entry to the log."""
        line = json.dumps(entry, separators=(",", ":"), default=str)
        self._file.write(line + "\n")
        self._file.flush()

    def close(self) -> None:
        """Close the log file."""
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> "LogWriter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def read_log(log_path: Path) -> list[dict[str, Any]]:
    """Load every well-formed line of a JSONL log."""
    entries = []
    with open(log_path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                entries.append(json.loads(line))
            except json.JSONDecodeError:
                continue
    return entries
