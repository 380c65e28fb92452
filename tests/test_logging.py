"""Tests for structured logging and the JSONL audit trail."""

from __future__ import annotations

import io
import json
from datetime import datetime

from playtest_agent.metrics import LogWriter, read_log, session_log_path, step_log_dict
from playtest_agent.schemas import StepRecord
from playtest_agent.utils.logging import LogCategory, LogLevel, StructuredLogger


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_counts_by_category(self) -> None:
        log = StructuredLogger(name="test.structured", level=LogLevel.DEBUG)
        log.session("started", session_id="s1")
        log.policy("fallback", level=LogLevel.WARNING, session_id="s1", step=3)
        log.report("failed", level=LogLevel.ERROR)

        stats = log.get_statistics()
        assert stats["total"] == 3
        assert stats["by_category"]["SESSION"] == 1
        assert stats["warnings"] == 1
        assert stats["errors"] == 1
        assert len(log.filter_by_category(LogCategory.POLICY)) == 1

    def test_level_filtering(self) -> None:
        log = StructuredLogger(name="test.structured", level=LogLevel.INFO)
        log.observation("decoded")  # DEBUG by default
        assert log.get_statistics()["total"] == 0
        assert log.get_recent_entries() == []

    def test_history_is_bounded(self) -> None:
        log = StructuredLogger(name="test.structured", max_history=3)
        for i in range(5):
            log.system(f"tick {i}")
        assert [e.message for e in log.get_recent_entries()] == ["tick 2", "tick 3", "tick 4"]

    def test_file_mirror(self) -> None:
        buffer = io.StringIO()
        log = StructuredLogger(name="test.structured", file_output=buffer)
        log.termination("done", session_id="s1", step=7, reason="maxSteps")
        entry = json.loads(buffer.getvalue())
        assert entry["category"] == "TERMINATION"
        assert entry["session_id"] == "s1"
        assert entry["step"] == 7
        assert entry["context"] == {"reason": "maxSteps"}

    def test_console_format(self) -> None:
        log = StructuredLogger(name="test.structured")
        entry = log.objective("success", session_id="s1", step=2)
        text = entry.format_console()
        assert text.startswith("[OBJECTIVE]")
        assert "session=s1" in text
        assert "step=2" in text


class TestAuditLog:
    """Tests for the per-session JSONL log."""

    def test_session_log_path_sanitizes(self, tmp_path) -> None:
        path = session_log_path(tmp_path, "../run 1")
        assert path.parent == tmp_path
        assert path.name == ".._run_1.jsonl"
        assert session_log_path(tmp_path, "").name == "session.jsonl"

    def test_step_log_dict(self) -> None:
        record = StepRecord(
            step=4,
            timestamp=datetime(2024, 1, 1, 12, 0, 4),
            raw_observation='{"yaw":   10}',
            command_issued="jump",
            note="unstick",
        )
        line = step_log_dict(record, "s1")
        assert line["v"] == "v1"
        assert line["step"] == 4
        assert line["ts"] == "2024-01-01T12:00:04"
        assert line["obs"] == '{"yaw": 10}'
        assert line["cmd"] == "jump"
        assert line["done"] is None

    def test_writer_and_reader(self, tmp_path) -> None:
        path = tmp_path / "logs" / "s1.jsonl"
        with LogWriter(path) as writer:
            writer.write({"step": 1})
            writer.write({"step": 2})
        with open(path, "a", encoding="utf-8") as f:
            f.write("{truncated\n")
        assert read_log(path) == [{"step": 1}, {"step": 2}]

    def test_writer_appends(self, tmp_path) -> None:
        path = tmp_path / "s1.jsonl"
        with LogWriter(path) as writer:
            writer.write({"step": 1})
        with LogWriter(path) as writer:
            writer.write({"step": 2})
        assert [e["step"] for e in read_log(path)] == [1, 2]
