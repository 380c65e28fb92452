"""Decision policies."""

from playtest_agent.modules.policies.gemini import GeminiDecisionPolicy, GeminiJsonClient
from playtest_agent.modules.policies.prompts import (
    build_decision_prompt,
    build_narrative_prompt,
)
from playtest_agent.modules.policies.rule_based import RuleBasedPolicy

POLICY_NAMES = ("rule", "gemini")

__all__ = [
    "GeminiDecisionPolicy",
    "GeminiJsonClient",
    "POLICY_NAMES",
    "RuleBasedPolicy",
    "build_decision_prompt",
    "build_narrative_prompt",
]
