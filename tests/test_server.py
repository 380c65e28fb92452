"""Tests for the HTTP binding.

Runs a real server on an ephemeral port and talks to it with urllib.
"""

from __future__ import annotations

import json
import urllib.error
import urllib.request

import pytest

from conftest import RecordingPolicy
from playtest_agent.core.orchestrator import SessionOrchestrator
from playtest_agent.server import PlaytestServer

pytestmark = pytest.mark.integration


@pytest.fixture
def server(clock):
    orchestrator = SessionOrchestrator(policy=RecordingPolicy(), clock=clock)
    srv = PlaytestServer(orchestrator, host="127.0.0.1", port=0)
    srv.start()
    yield srv
    srv.stop()
    orchestrator.close()


def _url(srv: PlaytestServer, path: str) -> str:
    host, port = srv.address
    return f"http://{host}:{port}{path}"


def _post(srv: PlaytestServer, path: str, body: bytes | dict) -> tuple[int, dict]:
    data = body if isinstance(body, bytes) else json.dumps(body).encode()
    request = urllib.request.Request(
        _url(srv, path),
        data=data,
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    try:
        with urllib.request.urlopen(request, timeout=5) as response:
            return response.status, json.loads(response.read())
    except urllib.error.HTTPError as exc:
        return exc.code, json.loads(exc.read())


def _get(srv: PlaytestServer, path: str) -> tuple[int, dict]:
    try:
        with urllib.request.urlopen(_url(srv, path), timeout=5) as response:
            return response.status, json.loads(response.read())
    except urllib.error.HTTPError as exc:
        return exc.code, json.loads(exc.read())


class TestStart:
    """Tests for POST /start."""

    def test_start_named(self, server) -> None:
        status, body = _post(server, "/start", {"testName": "explore_maze"})
        assert status == 200
        assert body == {"ok": True, "activeTest": "explore_maze"}

    def test_start_default(self, server) -> None:
        status, body = _post(server, "/start", {})
        assert status == 200
        assert body["activeTest"] == "explore_maze"

    def test_start_unknown(self, server) -> None:
        status, body = _post(server, "/start", {"testName": "moon_base"})
        assert status == 404
        assert body["ok"] is False
        assert "moon_base" in body["error"]


class TestStep:
    """Tests for POST /step."""

    def test_step_returns_command(self, server) -> None:
        _post(server, "/start", {"testName": "explore_maze"})
        status, body = _post(server, "/step", {
            "observationJson": json.dumps({"position": {"x": 0, "y": 0, "z": 0}, "yaw": 0}),
        })
        assert status == 200
        assert body["command"] == "move_fwd:1.0"
        assert body["note"] == "ok"

    def test_step_accepts_object(self, server) -> None:
        status, body = _post(server, "/step", {"observation": {"yaw": 10}})
        assert status == 200
        assert body["command"]

    def test_malformed_body_still_answers(self, server) -> None:
        status, body = _post(server, "/step", b"{not json")
        assert status == 200
        assert body["command"] == "move_fwd:1.0"

    def test_sessions_are_separate(self, server) -> None:
        _post(server, "/step", {"sessionId": "a", "observationJson": "{}"})
        _post(server, "/step", {"sessionId": "a", "observationJson": "{}"})
        _post(server, "/step", {"sessionId": "b", "observationJson": "{}"})
        orchestrator = server.orchestrator
        assert orchestrator.get_session("a").steps_taken == 2
        assert orchestrator.get_session("b").steps_taken == 1


class TestReport:
    """Tests for POST /report."""

    def test_report_markdown_and_document(self, server) -> None:
        _post(server, "/start", {"testName": "explore_maze"})
        _post(server, "/step", {"observationJson": "{}"})
        status, body = _post(server, "/report", {})
        assert status == 200
        assert "## Summary" in body["reportMarkdown"]
        assert body["report"]["scenario_name"] == "explore_maze"
        assert body["report"]["steps_taken"] == 1


class TestMisc:
    """Tests for the read-only endpoints and routing."""

    def test_health(self, server) -> None:
        _post(server, "/step", {"sessionId": "run-1", "observationJson": "{}"})
        status, body = _get(server, "/health")
        assert status == 200
        assert body["ok"] is True
        assert "run-1" in body["sessions"]

    def test_scenarios(self, server) -> None:
        status, body = _get(server, "/scenarios")
        assert status == 200
        assert "explore_maze" in body["scenarios"]

    def test_unknown_routes(self, server) -> None:
        assert _get(server, "/nope")[0] == 404
        assert _post(server, "/nope", {})[0] == 404
