"""In-memory session store.

Sessions are keyed by id. Each id owns a re-entrant lock that the
orchestrator holds for the whole of start/step/report, so operations on
one session are serialized while different sessions proceed in parallel.
Nothing is persisted; a restarted process starts empty.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from playtest_agent.schemas import Session


class SessionStore:
    """Thread-safe map of session id to live ``Session``."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, session_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[session_id] = lock
            return lock

    @contextmanager
    def locked(self, session_id: str) -> Iterator[None]:
        """Hold the per-session lock for the duration of the block."""
        lock = self._lock_for(session_id)
        with lock:
            yield

    def get(self, session_id: str) -> Session | None:
        with self._guard:
            return self._sessions.get(session_id)

    def put(self, session: Session) -> None:
        """Install ``session``, replacing any previous one with the same id."""
        with self._guard:
            self._sessions[session.session_id] = session

    def remove(self, session_id: str) -> Session | None:
        """Forget ``session_id`` along with its lock."""
        with self._guard:
            self._locks.pop(session_id, None)
            return self._sessions.pop(session_id, None)

    def ids(self) -> list[str]:
        with self._guard:
            return sorted(self._sessions)

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._guard:
            return session_id in self._sessions
