"""Command line interface for running stepline workflows."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import typer

from stepline.cli_utils.loader import build_engine
from stepline.cli_utils.render import (
    format_history,
    format_result,
    format_stats,
    to_json,
)
from stepline.config import load_config
from stepline.engine import WorkflowEngine

app = typer.Typer(help="CLI for stepline workflows")

workflow_app = typer.Typer(help="Commands for listing and running workflows")

app.add_typer(workflow_app, name="workflow")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, help="Logging level (defaults to the configured log_level)"
    ),
) -> None:
    """stepline CLI entry point."""
    level = (log_level or load_config().log_level).upper()
    logging.basicConfig(level=level)


def _load_engine(target: str) -> WorkflowEngine:
    try:
        return build_engine(target)
    except (ImportError, AttributeError, FileNotFoundError, ValueError, TypeError) as exc:
        typer.secho(f"Could not load workflows from {target}: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _parse_inputs(args: Optional[str], pairs: Optional[List[str]]) -> Dict[str, Any]:
    inputs: Dict[str, Any] = {}
    if args:
        try:
            loaded = json.loads(args)
        except json.JSONDecodeError as exc:
            typer.secho(f"--args is not valid JSON: {exc}", fg=typer.colors.RED)
            raise typer.Exit(code=2)
        if not isinstance(loaded, dict):
            typer.secho("--args must be a JSON object", fg=typer.colors.RED)
            raise typer.Exit(code=2)
        inputs.update(loaded)
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            typer.secho(f"Invalid --input {pair!r}, expected key=value", fg=typer.colors.RED)
            raise typer.Exit(code=2)
        inputs[key] = _parse_value(value)
    return inputs


@workflow_app.command("list")
def workflow_list(target: str) -> None:
    """
    List registered workflows.

    Args:
        target: Where to load workflows from, as ``module:attr`` or ``file.py:attr``

    Example:
        stepline workflow list myapp.workflows:register_workflows
        # Output: [SEO] seo-audit - Run a technical SEO audit on a URL
    """
    engine = _load_engine(target)
    definitions = engine.list()
    if not definitions:
        typer.echo("No workflows registered")
        return
    for definition in definitions:
        category = f"[{definition.category}] " if definition.category else ""
        typer.echo(f"{category}{definition.name} - {definition.description}")


@workflow_app.command("describe")
def workflow_describe(target: str, name: str) -> None:
    """Show steps and declared inputs of a workflow as JSON."""
    engine = _load_engine(target)
    definition = engine.get(name)
    if definition is None:
        typer.echo("Workflow not found")
        raise typer.Exit(code=1)
    typer.echo(to_json(definition.summary()))


@workflow_app.command("run")
def workflow_run(
    target: str,
    name: str,
    args: Optional[str] = typer.Option(None, help="JSON object of workflow inputs"),
    inputs: Optional[List[str]] = typer.Option(
        None, "--input", "-i", help="Workflow input as key=value (repeatable)"
    ),
    show_logs: bool = typer.Option(True, help="Print the run's log trail"),
) -> None:
    """
    Run a workflow once and print its result.

    Exits with code 1 when the run fails.

    Example:
        stepline workflow run ./workflows.py seo-audit -i url=https://example.com
    """
    engine = _load_engine(target)
    run_inputs = _parse_inputs(args, inputs)
    result = asyncio.run(engine.run(name, run_inputs))
    for line in format_result(result, show_logs=show_logs):
        typer.echo(line)
    if not result.success:
        raise typer.Exit(code=1)


@workflow_app.command("stats")
def workflow_stats(
    target: str,
    name: str,
    times: int = typer.Option(5, min=1, help="Number of concurrent runs"),
    args: Optional[str] = typer.Option(None, help="JSON object of workflow inputs"),
) -> None:
    """
    Run a workflow several times concurrently, then print stats and history.
    """
    engine = _load_engine(target)
    if engine.get(name) is None:
        typer.echo("Workflow not found")
        raise typer.Exit(code=1)
    run_inputs = _parse_inputs(args, None)

    async def _run_all() -> None:
        await asyncio.gather(*(engine.run(name, run_inputs) for _ in range(times)))

    asyncio.run(_run_all())
    for line in format_stats(engine.get_stats()):
        typer.echo(line)
    typer.echo("Recent runs:")
    for line in format_history(engine.get_history()):
        typer.echo(f"  {line}")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
