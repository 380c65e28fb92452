"""Report narrative generation."""

from __future__ import annotations

import logging
from typing import Any

from playtest_agent.core.interfaces import NarrativeGenerator
from playtest_agent.errors import PolicyError
from playtest_agent.modules.policies.gemini import GeminiJsonClient
from playtest_agent.modules.policies.prompts import (
    NARRATIVE_RESPONSE_SCHEMA,
    build_narrative_prompt,
)
from playtest_agent.utils.config import DEFAULT_MODEL

logger = logging.getLogger(__name__)


class GeminiNarrativeGenerator(NarrativeGenerator):
    """Asks Gemini to narrate a finished (or in-progress) session."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        client: Any = None,
    ) -> None:
        self._llm = GeminiJsonClient(model=model, api_key=api_key, client=client)

    def narrate(self, context: dict[str, Any]) -> str:
        parsed = self._llm.generate_json(
            build_narrative_prompt(context),
            NARRATIVE_RESPONSE_SCHEMA,
        )
        text = parsed.get("reportMarkdown")
        if not isinstance(text, str) or not text.strip():
            raise PolicyError("model response has no 'reportMarkdown' text")
        return text.strip()
