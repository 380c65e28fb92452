"""Scenario loaders: built-in registry and JSON files on disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from playtest_agent.core.interfaces import ScenarioLoader
from playtest_agent.errors import ScenarioLoadError, ScenarioNotFoundError
from playtest_agent.scenarios.definitions import SCENARIOS, get_scenario
from playtest_agent.schemas import ScenarioDefinition

logger = logging.getLogger(__name__)


class BuiltinScenarioLoader(ScenarioLoader):
    """Serves the scenarios registered in ``scenarios.definitions``."""

    def load(self, name: str) -> ScenarioDefinition:
        return get_scenario(name)

    def list_names(self) -> list[str]:
        return sorted(SCENARIOS)


class DirectoryScenarioLoader(ScenarioLoader):
    """Loads ``<directory>/<name>.json`` files, falling back to another loader.

    File contents use the camelCase wire names::

        {"name": "stairs", "maxSteps": 80,
         "objectives": [{"type": "goalCountAtLeast", "params": {"minimum": 1}}],
         "constraints": {"maxIdleSteps": 8, "avoidFalling": true}}

    A missing ``name`` defaults to the file stem.
    """

    def __init__(
        self,
        directory: Path,
        fallback: ScenarioLoader | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            directory: Directory holding scenario JSON files.
            fallback: Loader consulted when no file matches (built-ins by default).
        """
        self._directory = Path(directory)
        self._fallback = fallback if fallback is not None else BuiltinScenarioLoader()

    @property
    def directory(self) -> Path:
        return self._directory

    def _path_for(self, name: str) -> Path | None:
        # Names are file stems only; reject anything that could escape the directory
        if not name or Path(name).name != name or name.startswith("."):
            return None
        path = self._directory / f"{name}.json"
        return path if path.is_file() else None

    def load(self, name: str) -> ScenarioDefinition:
        path = self._path_for(name)
        if path is None:
            try:
                return self._fallback.load(name)
            except ScenarioNotFoundError:
                raise ScenarioNotFoundError(name, self.list_names()) from None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise ScenarioLoadError(name, str(exc)) from exc
        if not isinstance(data, dict):
            raise ScenarioLoadError(name, "scenario file must hold a JSON object")

        data.setdefault("name", name)
        try:
            scenario = ScenarioDefinition.model_validate(data)
        except ValidationError as exc:
            raise ScenarioLoadError(name, str(exc)) from exc

        logger.debug("Loaded scenario %s from %s", scenario.name, path)
        return scenario

    def list_names(self) -> list[str]:
        names = set(self._fallback.list_names())
        if self._directory.is_dir():
            names.update(p.stem for p in self._directory.glob("*.json"))
        return sorted(names)
