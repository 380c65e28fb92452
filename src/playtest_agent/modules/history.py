"""Compact text summaries of a session's step history."""

from __future__ import annotations

from typing import Sequence

from playtest_agent.schemas import StepRecord
from playtest_agent.utils.config import OBSERVATION_SUMMARY_CHARS


def summarize_history(
    history: Sequence[StepRecord],
    max_items: int,
    obs_chars: int = OBSERVATION_SUMMARY_CHARS,
) -> list[str]:
    """One line per recent step, oldest first.

    Lines read ``#<step> <iso timestamp> cmd=<command> obs=<payload prefix>``.
    """
    if max_items <= 0:
        return []
    lines = []
    for record in history[-max_items:]:
        cmd = record.command_issued or "(none)"
        obs = record.raw_observation[:obs_chars]
        lines.append(f"#{record.step} {record.timestamp.isoformat()} cmd={cmd} obs={obs}")
    return lines
