"""HTTP binding for the session orchestrator.

Serves a small JSON API for the in-level actor. Built on stdlib
``http.server`` (no Flask/FastAPI dependency).

Endpoints
---------
POST /start      {testName?, sessionId?}                  -> {ok, activeTest}
POST /step       {observationJson | observation, sessionId?} -> {command, note}
POST /report     {sessionId?}                             -> {reportMarkdown, report}
GET  /health     liveness and active session ids
GET  /scenarios  scenario names known to the loader

Malformed request bodies are treated as empty; ``/step`` always answers
with a command.
"""

from __future__ import annotations

import json
import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Mapping

from playtest_agent import __version__
from playtest_agent.core.orchestrator import SessionOrchestrator
from playtest_agent.errors import ScenarioError, ScenarioNotFoundError
from playtest_agent.modules.codec import load_mapping, payload_text, short_observation
from playtest_agent.utils.config import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_SESSION_ID,
    FALLBACK_COMMAND,
    MAX_REQUEST_BYTES,
)
from playtest_agent.utils.logging import LogLevel, get_logger

logger = logging.getLogger(__name__)


def _session_id(body: Mapping[str, Any]) -> str:
    value = body.get("sessionId") or body.get("runId")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return DEFAULT_SESSION_ID


# =====================================================================
# HTTP Request Handler
# =====================================================================

class PlaytestRequestHandler(BaseHTTPRequestHandler):
    """Routes actor requests to the orchestrator."""

    # Injected by PlaytestServer via a per-server subclass
    _orchestrator: SessionOrchestrator

    server_version = f"playtest-agent/{__version__}"

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)

    def _send_json(self, data: Any, status: int = 200) -> None:
        body = json.dumps(data, default=str).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()
        self.wfile.write(body)

    def _read_body(self) -> Mapping[str, Any] | None:
        """Read the JSON body. Returns None when it is too large."""
        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            length = 0
        if length > MAX_REQUEST_BYTES:
            return None
        raw = self.rfile.read(length) if length > 0 else b""
        return load_mapping(raw) if raw else {}

    def do_OPTIONS(self) -> None:
        """Handle CORS preflight."""
        self.send_response(204)
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()

    def do_GET(self) -> None:
        path = self.path.split("?")[0]
        if path == "/health":
            self._send_json({
                "ok": True,
                "version": __version__,
                "sessions": self._orchestrator.store.ids(),
            })
        elif path == "/scenarios":
            self._send_json({"scenarios": self._orchestrator.loader.list_names()})
        else:
            self._send_json({"error": "Not found"}, 404)

    def do_POST(self) -> None:
        path = self.path.split("?")[0]
        if path not in ("/start", "/step", "/report"):
            self._send_json({"error": "Not found"}, 404)
            return

        body = self._read_body()
        if body is None:
            self._send_json({"error": "request body too large"}, 413)
            return

        if path == "/start":
            self._handle_start(body)
        elif path == "/step":
            self._handle_step(body)
        else:
            self._handle_report(body)

    # ------------------------------------------------------------------
    # Route handlers
    # ------------------------------------------------------------------

    def _handle_start(self, body: Mapping[str, Any]) -> None:
        name = body.get("testName")
        try:
            response = self._orchestrator.start_named(
                name if isinstance(name, str) else None,
                session_id=_session_id(body),
            )
        except ScenarioNotFoundError as exc:
            self._send_json({"ok": False, "error": str(exc)}, 404)
            return
        except ScenarioError as exc:
            self._send_json({"ok": False, "error": str(exc)}, 422)
            return
        self._send_json(response.model_dump(by_alias=True))

    def _handle_step(self, body: Mapping[str, Any]) -> None:
        payload = body.get("observationJson")
        if payload is None:
            payload = body.get("observation")
        session_id = _session_id(body)
        get_logger().server(
            "/step",
            session_id=session_id,
            obs=short_observation(payload_text(payload)),
        )
        try:
            response = self._orchestrator.step(payload, session_id=session_id)
        except Exception:
            logger.exception("/step failed for session %s", session_id)
            self._send_json(
                {"command": FALLBACK_COMMAND, "note": "server error; using fallback"},
                500,
            )
            return
        self._send_json(response.model_dump())

    def _handle_report(self, body: Mapping[str, Any]) -> None:
        session_id = _session_id(body)
        try:
            document = self._orchestrator.report(session_id=session_id)
        except Exception:
            logger.exception("/report failed for session %s", session_id)
            self._send_json(
                {"reportMarkdown": "## Summary\n- Server error while generating report."},
                500,
            )
            return
        self._send_json({
            "reportMarkdown": document.to_markdown(),
            "report": document.model_dump(mode="json"),
        })


# =====================================================================
# Server
# =====================================================================

class PlaytestServer:
    """Runs the HTTP binding, in the foreground or in a daemon thread."""

    def __init__(
        self,
        orchestrator: SessionOrchestrator,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
    ) -> None:
        self.orchestrator = orchestrator
        self.host = host
        self.port = port
        self._server: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port); the port is resolved once the server is bound."""
        if self._server is not None:
            host, port = self._server.server_address[:2]
            return str(host), int(port)
        return self.host, self.port

    def _bind(self) -> ThreadingHTTPServer:
        handler = type(
            "BoundPlaytestRequestHandler",
            (PlaytestRequestHandler,),
            {"_orchestrator": self.orchestrator},
        )
        self._server = ThreadingHTTPServer((self.host, self.port), handler)
        self._server.daemon_threads = True
        host, port = self.address
        get_logger().server(f"Listening on http://{host}:{port}", level=LogLevel.INFO)
        return self._server

    def start(self) -> None:
        """Serve from a daemon thread."""
        server = self._bind()
        self._thread = threading.Thread(
            target=server.serve_forever,
            daemon=True,
            name="playtest-server",
        )
        self._thread.start()

    def serve_forever(self) -> None:
        """Serve in the calling thread until interrupted."""
        server = self._bind()
        try:
            server.serve_forever()
        finally:
            server.server_close()

    def stop(self) -> None:
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        logger.info("Playtest server stopped")
