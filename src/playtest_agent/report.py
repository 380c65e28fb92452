"""Report synthesis for playtest sessions.

Reduces a ``Session`` into a ``ReportDocument`` and renders it as a
Markdown bug report with the sections testers expect:

- Summary (verdict plus optional narrative)
- Environment (scenario and run metadata)
- Objectives and Constraints tables
- Progress percentages
- Steps Performed (command histogram and recent timeline)
- Issues Found and Suggestions
"""

from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import datetime
from typing import TYPE_CHECKING, Any

from playtest_agent.modules.history import summarize_history
from playtest_agent.schemas import (
    ConstraintRow,
    DoneReason,
    Objective,
    ObjectiveRow,
    ObjectiveStatus,
    ObjectiveType,
    ReportDocument,
    ReportStatus,
    Session,
    SUCCESS_REASONS,
    command_verb,
)
from playtest_agent.utils.config import (
    MAX_OBJECTIVE_ATTEMPTS,
    NARRATIVE_TIMEOUT_SECONDS,
    REPORT_HISTORY_WINDOW,
)

if TYPE_CHECKING:
    from playtest_agent.core.interfaces import NarrativeGenerator

logger = logging.getLogger(__name__)

NARRATIVE_UNCONFIGURED = "Narrative summary unavailable (no narrative generator configured)."
NARRATIVE_FAILED = "Narrative summary unavailable (generator error)."

# done reason -> (issue, recommendation); None is a session still running
REASON_TABLE: dict[DoneReason | None, tuple[str, str]] = {
    DoneReason.ATTEMPTS_COMPLETE: (
        "No blocking issue detected; every objective attempt was used.",
        "Add harder objectives or a larger level to probe further.",
    ),
    DoneReason.MAX_STEPS: (
        "Step budget exhausted before the objectives completed.",
        "Check for unreachable goals or blocked paths, or raise maxSteps.",
    ),
    DoneReason.IDLE_TOO_LONG: (
        "Actor stopped moving for too long (possible stuck spot or blocked path).",
        "Inspect collision geometry and NavMesh coverage near the last position.",
    ),
    DoneReason.FELL_OUT_OF_LEVEL: (
        "Actor fell below the level floor.",
        "Check level boundaries, colliders and gaps near the last position.",
    ),
    None: (
        "Session still running; no termination reason yet.",
        "Keep stepping the session, or review the partial timeline below.",
    ),
}

NO_SUCCESS_ISSUE = "Every objective attempt timed out; no goal was reached."
NO_SUCCESS_RECOMMENDATION = (
    "Verify the goals are reachable and visible to the actor, or raise the time limit."
)


# =============================================================================
# Formatting helpers
# =============================================================================

def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


def objective_target(objective: Objective | None) -> str:
    """Human-readable success condition of an objective."""
    if objective is None:
        return "n/a"
    if objective.type == ObjectiveType.GOAL_COUNT_AT_LEAST:
        return f"goalFound >= {objective.params.get('minimum', 1)}"
    if objective.type == ObjectiveType.GOAL_COUNT_COMPLETE:
        return "goalFound == goalTotal"
    if objective.type == ObjectiveType.REACH_DISTANCE:
        return f"goal distance <= {objective.params.get('maxDistance', 1.5)}"
    return objective.type.value


def _percent(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    return round(100.0 * numerator / denominator, 1)


# =============================================================================
# Synthesis
# =============================================================================

class ReportSynthesizer:
    """Builds ``ReportDocument`` values from sessions."""

    def __init__(
        self,
        narrator: NarrativeGenerator | None = None,
        max_attempts: int = MAX_OBJECTIVE_ATTEMPTS,
        narrative_timeout: float = NARRATIVE_TIMEOUT_SECONDS,
        timeline_window: int = REPORT_HISTORY_WINDOW,
    ) -> None:
        """Initialize the synthesizer.

        Args:
            narrator: Optional narrative generator for the Summary section.
            max_attempts: Objective attempt cap shown in the report.
            narrative_timeout: Upper bound on the narrator call, in seconds.
            timeline_window: Number of recent steps listed in the timeline.
        """
        self._narrator = narrator
        self._max_attempts = max_attempts
        self._narrative_timeout = narrative_timeout
        self._timeline_window = timeline_window

    def synthesize(self, session: Session, reported_at: datetime) -> ReportDocument:
        """Reduce ``session`` into a report. Never raises on narrator failure."""
        return self.narrate(self.build(session, reported_at))

    def build(self, session: Session, reported_at: datetime) -> ReportDocument:
        """Reduce ``session`` into a report without the narrative.

        Reads session state only, so callers can hold the session lock for
        this part and release it before the slower ``narrate``.
        """
        successes = sum(
            1 for r in session.objective_results if r.status == ObjectiveStatus.SUCCESS
        )
        passed = session.done_reason in SUCCESS_REASONS and successes > 0
        status = ReportStatus.PASS if passed else ReportStatus.FAIL

        issue, recommendation = REASON_TABLE[session.done_reason]
        if session.done_reason in SUCCESS_REASONS and successes == 0:
            issue, recommendation = NO_SUCCESS_ISSUE, NO_SUCCESS_RECOMMENDATION

        elapsed = 0.0
        if session.history:
            elapsed = max(
                0.0,
                (session.history[-1].timestamp - session.history[0].timestamp).total_seconds(),
            )

        last_obs = session.last_observation
        document = ReportDocument(
            status=status,
            scenario_name=session.scenario.name,
            scenario_description=session.scenario.description,
            session_id=session.session_id,
            started_at=session.started_at,
            reported_at=reported_at,
            elapsed_seconds=elapsed,
            done=session.done,
            done_reason=session.done_reason,
            steps_taken=session.steps_taken,
            max_steps=session.scenario.max_steps,
            objectives=self._objective_rows(session),
            objective_attempts=session.objective_attempts,
            max_objective_attempts=self._max_attempts,
            constraints=self._constraint_rows(session),
            progress=self._progress(session, successes),
            command_histogram=self._histogram(session),
            last_position=last_obs.position if last_obs is not None else None,
            last_yaw=last_obs.yaw if last_obs is not None else None,
            issue=issue,
            recommendation=recommendation,
            timeline=summarize_history(session.history, self._timeline_window),
        )
        return document

    def narrate(self, document: ReportDocument) -> ReportDocument:
        """Attach the narrative (or its placeholder) to ``document``."""
        return document.model_copy(update={"narrative": self._narrate(document)})

    def _objective_rows(self, session: Session) -> list[ObjectiveRow]:
        rows = []
        for attempt, result in enumerate(session.objective_results, start=1):
            objective = session.scenario.objective_by_id(result.id)
            rows.append(
                ObjectiveRow(
                    attempt=attempt,
                    id=result.id,
                    type=result.type.value,
                    target=objective_target(objective),
                    actual=_format_number(result.observed),
                    elapsed_seconds=round(result.elapsed_seconds, 3),
                    passed=result.status == ObjectiveStatus.SUCCESS,
                )
            )
        return rows

    def _constraint_rows(self, session: Session) -> list[ConstraintRow]:
        constraints = session.scenario.constraints
        rows = [
            ConstraintRow(
                name="steps",
                limit=str(session.scenario.max_steps),
                actual=str(session.steps_taken),
                compliant=session.done_reason != DoneReason.MAX_STEPS,
            )
        ]
        if constraints.max_idle_steps is None:
            rows.append(
                ConstraintRow(
                    name="idle",
                    limit="disabled",
                    actual=str(session.peak_idle_steps),
                    compliant=True,
                )
            )
        else:
            rows.append(
                ConstraintRow(
                    name="idle",
                    limit=str(constraints.max_idle_steps),
                    actual=str(session.peak_idle_steps),
                    compliant=session.peak_idle_steps <= constraints.max_idle_steps,
                )
            )
        fell = session.done_reason == DoneReason.FELL_OUT_OF_LEVEL
        rows.append(
            ConstraintRow(
                name="falling",
                limit="forbidden" if constraints.avoid_falling else "allowed",
                actual="fell out of level" if fell else "stayed above floor",
                compliant=not fell,
            )
        )
        return rows

    def _progress(self, session: Session, successes: int) -> dict[str, float]:
        return {
            "goals_found_pct": _percent(session.goal_found, session.goal_total),
            "step_budget_used_pct": _percent(session.steps_taken, session.scenario.max_steps),
            "attempts_used_pct": _percent(session.objective_attempts, self._max_attempts),
            "objective_success_pct": _percent(successes, session.objective_attempts),
        }

    @staticmethod
    def _histogram(session: Session) -> dict[str, int]:
        counts = Counter(
            command_verb(record.command_issued)
            for record in session.history
            if record.command_issued
        )
        return {verb: counts[verb] for verb in sorted(counts)}

    def _narrate(self, document: ReportDocument) -> str:
        if self._narrator is None:
            return NARRATIVE_UNCONFIGURED

        context = narrative_context(document)
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="narrative")
        try:
            future = executor.submit(self._narrator.narrate, context)
            text = future.result(timeout=self._narrative_timeout)
        except FutureTimeoutError:
            logger.warning("Narrative generator timed out after %.1fs", self._narrative_timeout)
            return NARRATIVE_FAILED
        except Exception as exc:
            logger.warning("Narrative generator failed: %s", exc)
            return NARRATIVE_FAILED
        finally:
            executor.shutdown(wait=False)

        if not isinstance(text, str) or not text.strip():
            return NARRATIVE_FAILED
        return text.strip()


def narrative_context(document: ReportDocument) -> dict[str, Any]:
    """Facts handed to a narrative generator."""
    return {
        "scenario": document.scenario_name,
        "status": document.status.value,
        "done_reason": document.done_reason.value if document.done_reason else "running",
        "steps_taken": document.steps_taken,
        "max_steps": document.max_steps,
        "objective_attempts": document.objective_attempts,
        "objective_successes": sum(1 for row in document.objectives if row.passed),
        "commands": document.command_histogram,
        "issue": document.issue,
        "timeline": document.timeline,
    }


# =============================================================================
# Rendering
# =============================================================================

def render_markdown(document: ReportDocument) -> str:
    """Render a report as Markdown."""
    reason = document.done_reason.value if document.done_reason else "running"
    lines = [
        f"# Playtest Report: {document.scenario_name}",
        "",
        f"**Status:** {document.status.value}",
        "",
        "## Summary",
        "",
        document.narrative,
        "",
        f"- Result: {document.status.value} ({reason})",
        f"- Steps: {document.steps_taken} / {document.max_steps}",
        f"- Objective attempts: {document.objective_attempts} / {document.max_objective_attempts}",
        "",
        "## Environment",
        "",
        f"- Scenario: {document.scenario_name}",
    ]
    if document.scenario_description:
        lines.append(f"- Description: {document.scenario_description}")
    lines.append(f"- Session: {document.session_id}")
    lines.append(f"- Started: {document.started_at.isoformat()}")
    lines.append(f"- Elapsed: {document.elapsed_seconds:.1f}s")
    if document.last_position is not None:
        pos = document.last_position
        lines.append(f"- Last position: ({pos.x:.2f}, {pos.y:.2f}, {pos.z:.2f})")
    if document.last_yaw is not None:
        lines.append(f"- Last yaw: {document.last_yaw:.1f}")

    lines.extend(["", "## Objectives", ""])
    if document.objectives:
        lines.append("| # | Objective | Type | Target | Actual | Elapsed (s) | Result |")
        lines.append("|---|---|---|---|---|---|---|")
        for row in document.objectives:
            lines.append(
                f"| {row.attempt} | {row.id} | {row.type} | {row.target} | {row.actual} "
                f"| {row.elapsed_seconds:.2f} | {'pass' if row.passed else 'fail'} |"
            )
    else:
        lines.append("- No objective attempts resolved.")
    lines.append("")
    lines.append(
        f"Attempts: {document.objective_attempts} / {document.max_objective_attempts}"
    )

    lines.extend(["", "## Constraints", ""])
    lines.append("| Constraint | Limit | Actual | Compliant |")
    lines.append("|---|---|---|---|")
    for row in document.constraints:
        lines.append(
            f"| {row.name} | {row.limit} | {row.actual} | {'yes' if row.compliant else 'no'} |"
        )

    lines.extend(["", "## Progress", ""])
    for key, value in document.progress.items():
        lines.append(f"- {key.replace('_pct', '').replace('_', ' ')}: {value:.1f}%")

    lines.extend(["", "## Steps Performed", ""])
    if document.command_histogram:
        for verb, count in document.command_histogram.items():
            lines.append(f"- {verb}: {count}")
    else:
        lines.append("- No commands issued.")
    if document.timeline:
        lines.extend(["", "Recent steps:", "", "```"])
        lines.extend(document.timeline)
        lines.append("```")

    lines.extend([
        "",
        "## Issues Found",
        "",
        f"- {document.issue}",
        "",
        "## Suggestions",
        "",
        f"- {document.recommendation}",
        "",
    ])
    return "\n".join(lines)
