"""Session processing modules: codec, tracking, objectives, termination.

Decision policies and the narrative generator implement the interfaces
in ``playtest_agent.core`` and are imported from their own modules
(``playtest_agent.modules.policies``, ``playtest_agent.modules.narrative``).
"""

from playtest_agent.modules.codec import (
    decode_observation,
    load_mapping,
    parse_or_default,
    payload_text,
    short_observation,
)
from playtest_agent.modules.history import summarize_history
from playtest_agent.modules.objectives import (
    PREDICATES,
    ObjectiveSequencer,
    register_predicate,
)
from playtest_agent.modules.progress import ProgressTracker, yaw_delta
from playtest_agent.modules.termination import TerminationEvaluator

__all__ = [
    "ObjectiveSequencer",
    "PREDICATES",
    "ProgressTracker",
    "TerminationEvaluator",
    "decode_observation",
    "load_mapping",
    "parse_or_default",
    "payload_text",
    "register_predicate",
    "short_observation",
    "summarize_history",
    "yaw_delta",
]
