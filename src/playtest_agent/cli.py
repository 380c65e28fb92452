"""CLI entry point for the playtest orchestrator."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Iterator, Optional

import typer

from playtest_agent.core.interfaces import DecisionPolicy, NarrativeGenerator, ScenarioLoader
from playtest_agent.core.orchestrator import SessionOrchestrator
from playtest_agent.errors import ScenarioError
from playtest_agent.modules.policies import POLICY_NAMES, RuleBasedPolicy
from playtest_agent.scenarios import BuiltinScenarioLoader, DirectoryScenarioLoader
from playtest_agent.utils.config import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_SCENARIO_NAME, Settings

app = typer.Typer(
    name="playtest-agent",
    help="Playtest session orchestrator for autonomous in-level test actors",
    add_completion=False,
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_loader(scenarios_dir: Path | None) -> ScenarioLoader:
    """Directory loader when a scenarios directory is given, else built-ins."""
    if scenarios_dir is not None:
        return DirectoryScenarioLoader(scenarios_dir)
    return BuiltinScenarioLoader()


def build_policy(name: str, settings: Settings) -> tuple[DecisionPolicy, NarrativeGenerator | None]:
    """Create the decision policy (and matching narrator) for ``--policy``."""
    if name == "rule":
        return RuleBasedPolicy(), None
    if name == "gemini":
        from playtest_agent.modules.narrative import GeminiNarrativeGenerator
        from playtest_agent.modules.policies.gemini import GeminiDecisionPolicy

        if not settings.gemini_api_key:
            typer.echo("[WARN] GEMINI_API_KEY is not set. Model calls will fall back.", err=True)
        return (
            GeminiDecisionPolicy(model=settings.model, api_key=settings.gemini_api_key),
            GeminiNarrativeGenerator(model=settings.model, api_key=settings.gemini_api_key),
        )
    raise typer.BadParameter(f"Unknown policy {name!r}. Choose from: {', '.join(POLICY_NAMES)}")


@app.command()
def serve(
    host: str = typer.Option(DEFAULT_HOST, "--host", help="Interface to bind"),
    port: int = typer.Option(DEFAULT_PORT, "--port", "-p", help="Port to listen on"),
    policy: str = typer.Option(
        "rule",
        "--policy",
        help=f"Decision policy: {', '.join(POLICY_NAMES)}",
    ),
    scenarios_dir: Optional[Path] = typer.Option(
        None,
        "--scenarios-dir",
        help="Directory of <name>.json scenario files (overrides PLAYTEST_SCENARIOS_DIR)",
    ),
    run_dir: Optional[Path] = typer.Option(
        None,
        "--run-dir",
        help="Directory for per-session JSONL logs (overrides PLAYTEST_RUN_DIR)",
    ),
    env_file: Optional[Path] = typer.Option(
        None,
        "--env-file",
        help="Load variables from this .env file (default: nearest .env)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Serve the start/step/report HTTP API for the actor."""
    from playtest_agent.server import PlaytestServer

    setup_logging(verbose)
    settings = Settings.from_env(env_file)
    decision_policy, narrator = build_policy(policy, settings)

    orchestrator = SessionOrchestrator(
        policy=decision_policy,
        loader=build_loader(scenarios_dir or settings.scenarios_dir),
        narrator=narrator,
        decision_timeout=settings.decision_timeout,
        narrative_timeout=settings.narrative_timeout,
        run_dir=run_dir or settings.run_dir,
    )
    server = PlaytestServer(orchestrator, host=host, port=port)

    typer.echo(f"playtest-agent listening on http://{host}:{port} (policy={policy})")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        typer.echo("Interrupted by user")
    finally:
        orchestrator.close()


@app.command()
def scenarios(
    scenarios_dir: Optional[Path] = typer.Option(
        None,
        "--scenarios-dir",
        help="Also list <name>.json files from this directory",
    ),
) -> None:
    """List available scenarios."""
    loader = build_loader(scenarios_dir or Settings.from_env().scenarios_dir)
    typer.echo("Available scenarios:\n")
    for name in loader.list_names():
        try:
            scenario = loader.load(name)
        except ScenarioError as e:
            typer.echo(f"  {name:<16} [invalid: {e}]")
            continue
        typer.echo(f"  {name:<16} {scenario.description}")


class ReplayClock:
    """Deterministic clock advancing a fixed interval per reading."""

    def __init__(self, interval: float, start: datetime | None = None) -> None:
        self._interval = timedelta(seconds=interval)
        self._now = start or datetime(2000, 1, 1)

    def __call__(self) -> datetime:
        current = self._now
        self._now = current + self._interval
        return current


def iter_observations(path: Path) -> Iterator[Any]:
    """Yield observation payloads from a JSONL file.

    Each line may be a bare observation object or a request body holding
    ``observationJson`` / ``observation``. Unparsable lines are passed
    through as text and decode to the default observation.
    """
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError:
                yield line
                continue
            if isinstance(data, dict):
                if "observationJson" in data:
                    yield data["observationJson"]
                    continue
                if "observation" in data:
                    yield data["observation"]
                    continue
            yield data


@app.command()
def replay(
    observations: Path = typer.Argument(..., help="JSONL file of recorded observations"),
    scenario: str = typer.Option(DEFAULT_SCENARIO_NAME, "--scenario", "-s", help="Scenario name"),
    scenarios_dir: Optional[Path] = typer.Option(None, "--scenarios-dir", help="Scenario directory"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the Markdown report here"),
    interval: float = typer.Option(1.0, "--interval", help="Seconds between recorded observations"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Feed recorded observations through a session and print the report."""
    setup_logging(verbose)
    if not observations.exists():
        typer.echo(f"Error: {observations} not found", err=True)
        raise typer.Exit(1)

    orchestrator = SessionOrchestrator(
        policy=RuleBasedPolicy(),
        loader=build_loader(scenarios_dir),
        clock=ReplayClock(interval),
    )
    try:
        try:
            orchestrator.start_named(scenario)
        except ScenarioError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)

        fed = 0
        for payload in iter_observations(observations):
            response = orchestrator.step(payload)
            fed += 1
            if not response.command:
                typer.echo(f"Session done after {fed} observations: {response.note}")
                break

        markdown = orchestrator.report().to_markdown()
    finally:
        orchestrator.close()

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(markdown, encoding="utf-8")
        typer.echo(f"Report written to: {output}")
    else:
        typer.echo(markdown)


@app.command()
def version() -> None:
    """Show version information."""
    from playtest_agent import __version__
    typer.echo(f"playtest-agent v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
