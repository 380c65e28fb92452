"""Prompt construction for model-backed policies and narrators.

Scenario templates (``ScenarioDefinition.decision_context``) supply the
role, goal and guidance text; everything else is assembled here so the
hosted model always sees the same layout.
"""

from __future__ import annotations

from typing import Any, Sequence

DEFAULT_ROLE = "You are a QA test bot in a Unity level."
DEFAULT_COMMANDS = (
    "You can issue commands: move_fwd:X, move_back:X, turn_left:deg, "
    "turn_right:deg, jump."
)
DEFAULT_GUIDANCE = (
    "Use short, safe movements. Avoid repeating the same command if no "
    "position change."
)

# JSON schema the decision model must answer with
DECISION_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "command": {"type": "string"},
        "note": {"type": "string"},
    },
    "required": ["command", "note"],
}

NARRATIVE_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "reportMarkdown": {"type": "string"},
    },
    "required": ["reportMarkdown"],
}


def build_decision_prompt(
    template: dict[str, Any],
    counters: dict[str, Any],
    history_summary: Sequence[str],
    raw_observation: str,
) -> str:
    """Assemble the next-command prompt."""
    role = template.get("role", DEFAULT_ROLE)
    commands = template.get("commands", DEFAULT_COMMANDS)
    goal = template.get("goal")
    guidance = template.get("guidance", DEFAULT_GUIDANCE)

    parts = [role, "", commands]
    if goal:
        parts.append(f"Goal: {goal}")
    parts.append(guidance)
    parts.append("")
    if counters:
        parts.append(
            "Session counters: "
            + ", ".join(f"{key}={value}" for key, value in counters.items())
        )
        parts.append("")
    parts.append("Recent history (summarized):")
    parts.append("\n".join(history_summary) or "(none)")
    parts.append("")
    parts.append("Latest observationJson:")
    parts.append(raw_observation or "{}")
    parts.append("")
    parts.append("Return JSON with fields: command, note.")
    return "\n".join(parts)


def build_narrative_prompt(context: dict[str, Any]) -> str:
    """Assemble the report-narrative prompt from report facts."""
    timeline = context.get("timeline") or []
    facts = {key: value for key, value in context.items() if key != "timeline"}
    lines = [
        "You are a QA tester. Based on this playtest session, write a short "
        "Markdown narrative of what the actor did and any problems observed.",
        "Be concise and specific. If no issues are found, say so.",
        "Do not add top-level headings; the text is embedded in a larger report.",
        "",
        "Session facts:",
    ]
    lines.extend(f"- {key}: {value}" for key, value in facts.items())
    lines.append("")
    lines.append("History summary:")
    lines.append("\n".join(timeline) or "(none)")
    return "\n".join(lines)
