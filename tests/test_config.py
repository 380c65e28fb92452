"""Tests for runtime settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from playtest_agent.utils.config import DEFAULT_MODEL, Settings

_VARIABLES = ("GEMINI_API_KEY", "PLAYTEST_MODEL", "PLAYTEST_SCENARIOS_DIR", "PLAYTEST_RUN_DIR")


@pytest.fixture
def clean_env(monkeypatch):
    # setenv first so teardown also removes values loaded from .env files
    for name in _VARIABLES:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self, clean_env, tmp_path) -> None:
        clean_env.chdir(tmp_path)
        settings = Settings.from_env()
        assert settings.gemini_api_key is None
        assert settings.model == DEFAULT_MODEL
        assert settings.scenarios_dir is None
        assert settings.run_dir is None

    def test_reads_process_environment(self, clean_env, tmp_path) -> None:
        clean_env.chdir(tmp_path)
        clean_env.setenv("GEMINI_API_KEY", "from-env")
        clean_env.setenv("PLAYTEST_RUN_DIR", "runs")
        settings = Settings.from_env()
        assert settings.gemini_api_key == "from-env"
        assert settings.run_dir == Path("runs")

    def test_loads_env_file(self, clean_env, tmp_path) -> None:
        env_file = tmp_path / "playtest.env"
        env_file.write_text("GEMINI_API_KEY=from-file\nPLAYTEST_MODEL=gemini-test\n")
        settings = Settings.from_env(env_file)
        assert settings.gemini_api_key == "from-file"
        assert settings.model == "gemini-test"

    def test_finds_dotenv_in_working_directory(self, clean_env, tmp_path) -> None:
        (tmp_path / ".env").write_text("PLAYTEST_SCENARIOS_DIR=scenarios\n")
        nested = tmp_path / "sub"
        nested.mkdir()
        clean_env.chdir(nested)
        assert Settings.from_env().scenarios_dir == Path("scenarios")

    def test_process_environment_wins(self, clean_env, tmp_path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("GEMINI_API_KEY=from-file\n")
        clean_env.setenv("GEMINI_API_KEY", "from-env")
        assert Settings.from_env(env_file).gemini_api_key == "from-env"
