"""Session orchestrator - runs the playtest step loop.

Each ``step`` call enforces a fixed order:
1. Terminal check → a finished session answers immediately, untouched
2. Codec → decode the raw observation (never fails)
3. Progress tracker → step counter, idle run, last pose
4. History → append the step record
5. Objective sequencer → resolve the active objective
6. Termination evaluator → stop with a reason, or
7. Decision policy → next command (bounded, with a fixed fallback)
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from playtest_agent.core.session_store import SessionStore
from playtest_agent.errors import ScenarioError
from playtest_agent.metrics.logging import LogWriter, session_log_path, step_log_dict
from playtest_agent.modules.codec import decode_observation, payload_text, short_observation
from playtest_agent.modules.history import summarize_history
from playtest_agent.modules.objectives import ObjectiveSequencer
from playtest_agent.modules.progress import ProgressTracker
from playtest_agent.modules.termination import TerminationEvaluator
from playtest_agent.report import ReportSynthesizer
from playtest_agent.schemas import (
    Decision,
    DecisionContext,
    Observation,
    ReportDocument,
    ScenarioDefinition,
    Session,
    StartResponse,
    StepRecord,
    StepResponse,
    parse_command,
)
from playtest_agent.utils.config import (
    DECISION_HISTORY_WINDOW,
    DECISION_TIMEOUT_SECONDS,
    DEFAULT_SCENARIO_NAME,
    DEFAULT_SESSION_ID,
    FALLBACK_COMMAND,
    MAX_OBJECTIVE_ATTEMPTS,
    NARRATIVE_TIMEOUT_SECONDS,
)
from playtest_agent.utils.logging import LogLevel, StructuredLogger, get_logger

if TYPE_CHECKING:
    from playtest_agent.core.interfaces import (
        DecisionPolicy,
        NarrativeGenerator,
        ScenarioLoader,
    )

logger = logging.getLogger(__name__)


class SessionOrchestrator:
    """Owns playtest sessions and drives them one observation at a time.

    All collaborators are injected via the constructor, so policies,
    scenario sources and narrators can be swapped without touching the
    step loop. ``start``, ``step`` and ``report`` on the same session id
    are serialized by the session store's per-session lock.
    """

    def __init__(
        self,
        policy: DecisionPolicy | None = None,
        loader: ScenarioLoader | None = None,
        narrator: NarrativeGenerator | None = None,
        store: SessionStore | None = None,
        clock: Callable[[], datetime] = datetime.now,
        tracker: ProgressTracker | None = None,
        sequencer: ObjectiveSequencer | None = None,
        max_attempts: int = MAX_OBJECTIVE_ATTEMPTS,
        decision_timeout: float = DECISION_TIMEOUT_SECONDS,
        narrative_timeout: float = NARRATIVE_TIMEOUT_SECONDS,
        history_window: int = DECISION_HISTORY_WINDOW,
        run_dir: Path | None = None,
        structured_logger: StructuredLogger | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            policy: Chooses the next command (rule-based policy if None).
            loader: Resolves scenario names (built-in registry if None).
            narrator: Optional narrative generator for reports.
            store: Session store (a fresh in-memory store if None).
            clock: Time source for step timestamps and objective timers.
            tracker: Idle/fall tracker.
            sequencer: Objective sequencer.
            max_attempts: Global objective attempt cap.
            decision_timeout: Upper bound on one policy call, in seconds.
            narrative_timeout: Upper bound on one narrator call, in seconds.
            history_window: Recent steps summarized for the policy.
            run_dir: Directory for per-session JSONL audit logs (disabled if None).
            structured_logger: Category logger (the global one if None).
        """
        if policy is None:
            from playtest_agent.modules.policies.rule_based import RuleBasedPolicy

            policy = RuleBasedPolicy()
        if loader is None:
            from playtest_agent.scenarios.loader import BuiltinScenarioLoader

            loader = BuiltinScenarioLoader()

        self._policy = policy
        self._loader = loader
        self._store = store or SessionStore()
        self._clock = clock
        self._tracker = tracker or ProgressTracker()
        self._sequencer = sequencer or ObjectiveSequencer(max_attempts=max_attempts)
        self._evaluator = TerminationEvaluator(
            tracker=self._tracker,
            max_attempts=self._sequencer.max_attempts,
        )
        self._synthesizer = ReportSynthesizer(
            narrator=narrator,
            max_attempts=self._sequencer.max_attempts,
            narrative_timeout=narrative_timeout,
        )
        self._decision_timeout = decision_timeout
        self._history_window = history_window
        self._run_dir = run_dir
        self._log = structured_logger or get_logger()

        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="decision")
        self._writers: dict[str, LogWriter] = {}

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def loader(self) -> ScenarioLoader:
        return self._loader

    def get_session(self, session_id: str = DEFAULT_SESSION_ID) -> Session | None:
        """Return the live session for ``session_id``, if any."""
        return self._store.get(session_id)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(
        self,
        scenario: ScenarioDefinition,
        session_id: str = DEFAULT_SESSION_ID,
    ) -> Session:
        """Install a fresh session for ``scenario``, replacing any previous one."""
        with self._store.locked(session_id):
            return self._install(scenario, session_id)

    def start_named(
        self,
        name: str | None = None,
        session_id: str = DEFAULT_SESSION_ID,
    ) -> StartResponse:
        """Load a scenario by name and start it.

        Args:
            name: Scenario name (the default scenario if None or blank).
            session_id: Session to (re)start.

        Returns:
            StartResponse naming the active scenario.

        Raises:
            ScenarioError: If the scenario cannot be loaded. The existing
                session, if any, is left untouched.
        """
        name = (name or "").strip() or DEFAULT_SCENARIO_NAME
        with self._store.locked(session_id):
            try:
                scenario = self._loader.load(name)
            except ScenarioError as exc:
                self._log.session(
                    f"Scenario load failed: {exc}",
                    level=LogLevel.WARNING,
                    session_id=session_id,
                )
                raise
            self._install(scenario, session_id)
        return StartResponse(ok=True, active_test=scenario.name)

    def discard(self, session_id: str) -> bool:
        """Drop a session and close its audit log. Returns whether it existed."""
        with self._store.locked(session_id):
            writer = self._writers.pop(session_id, None)
            if writer is not None:
                writer.close()
            removed = self._store.remove(session_id)
        if removed is not None:
            self._log.session("Session discarded", session_id=session_id)
        return removed is not None

    def close(self) -> None:
        """Release the worker pool and close audit logs."""
        self._executor.shutdown(wait=False)
        for writer in self._writers.values():
            writer.close()
        self._writers.clear()

    def __enter__(self) -> "SessionOrchestrator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _install(self, scenario: ScenarioDefinition, session_id: str) -> Session:
        session = Session.new(scenario, session_id=session_id, now=self._clock())
        self._store.put(session)
        self._open_writer(session_id)
        self._log.session(
            f"Started scenario {scenario.name}",
            session_id=session_id,
            max_steps=scenario.max_steps,
            objectives=len(scenario.objectives),
        )
        return session

    def _lazy_start(self, session_id: str) -> Session:
        try:
            scenario = self._loader.load(DEFAULT_SCENARIO_NAME)
        except ScenarioError:
            from playtest_agent.scenarios.definitions import explore_maze

            scenario = explore_maze()
        self._log.session(
            "No active session; starting default scenario",
            session_id=session_id,
        )
        return self._install(scenario, session_id)

    # -------------------------------------------------------------------------
    # Step loop
    # -------------------------------------------------------------------------

    def step(self, payload: Any, session_id: str = DEFAULT_SESSION_ID) -> StepResponse:
        """Ingest one observation and answer with the next command.

        Never raises for bad input or policy failures. Once the session is
        done every call returns an empty command and the done reason,
        without touching the session.
        """
        with self._store.locked(session_id):
            session = self._store.get(session_id)
            if session is None:
                session = self._lazy_start(session_id)

            if session.done:
                reason = session.done_reason.value if session.done_reason else ""
                return StepResponse(command="", note=reason)

            now = self._clock()
            raw_text = payload_text(payload)
            observation = decode_observation(payload)

            session.steps_taken += 1
            idle = self._tracker.update(session, observation)
            session.goal_found = observation.goal_found
            session.goal_total = observation.goal_total
            session.last_observation = observation

            record = StepRecord(step=session.steps_taken, timestamp=now, raw_observation=raw_text)
            session.history.append(record)
            self._log.observation(
                short_observation(raw_text),
                session_id=session_id,
                step=record.step,
                idle=idle,
            )

            result = self._sequencer.advance(session, now)
            if result is not None:
                self._log.objective(
                    f"Objective {result.id} {result.status.value}",
                    session_id=session_id,
                    step=record.step,
                    attempt=session.objective_attempts,
                    elapsed=round(result.elapsed_seconds, 2),
                )

            reason = self._evaluator.evaluate(session, observation)
            if reason is not None:
                session.mark_done(reason)
                record.note = reason.value
                self._log.termination(
                    f"Session done: {reason.value}",
                    session_id=session_id,
                    step=record.step,
                )
                self._audit(session, record)
                return StepResponse(command="", note=reason.value)

            decision = self._decide(session, observation, raw_text)
            record.command_issued = decision.command
            record.note = decision.note
            self._audit(session, record)
            return StepResponse(command=decision.command, note=decision.note)

    def _decide(self, session: Session, observation: Observation, raw_text: str) -> Decision:
        context = DecisionContext(
            scenario_name=session.scenario.name,
            template=session.scenario.decision_context,
            counters=session.counters(),
            history_summary=summarize_history(session.history[:-1], self._history_window),
            raw_observation=raw_text,
        )

        future = self._executor.submit(self._policy.decide, observation, context)
        try:
            decision = future.result(timeout=self._decision_timeout)
        except FutureTimeoutError:
            future.cancel()
            return self._fallback(session, "decision policy timed out")
        except Exception as exc:
            return self._fallback(session, f"decision policy error: {exc}")

        command = parse_command(decision.command) if isinstance(decision, Decision) else None
        if command is None:
            return self._fallback(session, "invalid policy response")

        self._log.policy(
            f"Decided {command.to_wire()}",
            session_id=session.session_id,
            step=session.steps_taken,
            note=decision.note,
        )
        return Decision(command=command.to_wire(), note=decision.note)

    def _fallback(self, session: Session, reason: str) -> Decision:
        self._log.policy(
            f"Falling back to {FALLBACK_COMMAND}: {reason}",
            level=LogLevel.WARNING,
            session_id=session.session_id,
            step=session.steps_taken,
        )
        return Decision(command=FALLBACK_COMMAND, note=f"fallback: {reason}")

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def report(self, session_id: str = DEFAULT_SESSION_ID) -> ReportDocument:
        """Build the report for a session.

        Apart from ``reported_at`` the document depends only on session
        state, so repeated calls without an intervening step agree.
        """
        with self._store.locked(session_id):
            session = self._store.get(session_id)
            if session is None:
                session = self._lazy_start(session_id)
            document = self._synthesizer.build(session, self._clock())
        # Narration can be slow; steps on this session may proceed meanwhile
        document = self._synthesizer.narrate(document)
        self._log.report(
            f"Report {document.status.value}",
            session_id=session_id,
            steps=document.steps_taken,
            reason=document.done_reason.value if document.done_reason else None,
        )
        return document

    # -------------------------------------------------------------------------
    # Audit trail
    # -------------------------------------------------------------------------

    def _open_writer(self, session_id: str) -> None:
        previous = self._writers.pop(session_id, None)
        if previous is not None:
            previous.close()
        if self._run_dir is None:
            return
        self._writers[session_id] = LogWriter(session_log_path(self._run_dir, session_id))

    def _audit(self, session: Session, record: StepRecord) -> None:
        writer = self._writers.get(session.session_id)
        if writer is None:
            return
        reason = session.done_reason.value if session.done_reason else None
        try:
            writer.write(step_log_dict(record, session.session_id, reason))
        except OSError as exc:
            logger.warning("Audit log write failed for %s: %s", session.session_id, exc)
