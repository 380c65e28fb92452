"""Gemini-backed decision policy.

Uses the ``google-genai`` SDK with a JSON response schema so the model
answers ``{"command": ..., "note": ...}``. The client is created lazily
(or injected, for tests) so importing this module never needs network
access or credentials.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from playtest_agent.core.interfaces import DecisionPolicy
from playtest_agent.errors import PolicyError
from playtest_agent.modules.policies.prompts import (
    DECISION_RESPONSE_SCHEMA,
    build_decision_prompt,
)
from playtest_agent.schemas import Decision, DecisionContext, Observation
from playtest_agent.utils.config import DEFAULT_MODEL

logger = logging.getLogger(__name__)


class GeminiJsonClient:
    """Thin wrapper that sends a prompt and returns the parsed JSON object."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        client: Any = None,
        temperature: float | None = 0.4,
    ) -> None:
        """Initialize the wrapper.

        Args:
            model: Gemini model identifier.
            api_key: API key (the SDK falls back to its own env vars if None).
            client: Pre-built ``genai.Client``-compatible object.
            temperature: Sampling temperature, None for the model default.
        """
        self.model = model
        self._api_key = api_key
        self._client = client
        self._temperature = temperature

    def _get_client(self) -> Any:
        if self._client is None:
            from google import genai

            self._client = genai.Client(api_key=self._api_key) if self._api_key else genai.Client()
        return self._client

    def generate_json(self, prompt: str, schema: dict[str, Any]) -> dict[str, Any]:
        """Send ``prompt`` and parse the JSON object in the reply.

        Raises:
            PolicyError: If the reply is empty or not a JSON object.
        """
        from google.genai import types

        config_kwargs: dict[str, Any] = {
            "response_mime_type": "application/json",
            "response_schema": schema,
        }
        if self._temperature is not None:
            config_kwargs["temperature"] = self._temperature

        response = self._get_client().models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(**config_kwargs),
        )

        text = getattr(response, "text", None)
        if not text:
            raise PolicyError("empty model response")
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            raise PolicyError(f"model response is not JSON: {exc}") from exc
        if not isinstance(parsed, dict):
            raise PolicyError("model response is not a JSON object")
        return parsed


class GeminiDecisionPolicy(DecisionPolicy):
    """Asks Gemini for the next command."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        client: Any = None,
    ) -> None:
        self._llm = GeminiJsonClient(model=model, api_key=api_key, client=client)

    def decide(self, observation: Observation, context: DecisionContext) -> Decision:
        prompt = build_decision_prompt(
            context.template,
            context.counters,
            context.history_summary,
            context.raw_observation,
        )
        parsed = self._llm.generate_json(prompt, DECISION_RESPONSE_SCHEMA)

        command = parsed.get("command")
        if not isinstance(command, str):
            raise PolicyError("model response has no string 'command'")
        note = parsed.get("note")
        logger.debug("Gemini chose %r (%s)", command, note)
        return Decision(command=command, note=note if isinstance(note, str) else "")
