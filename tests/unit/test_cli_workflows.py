"""CLI command tests."""

import json
from pathlib import Path

from typer.testing import CliRunner

from stepline.cli import app

FIXTURES = Path(__file__).parent.parent / "fixtures" / "sample_workflows.py"
TARGET = f"{FIXTURES}:register_workflows"

runner = CliRunner()


def test_list_shows_registered_workflows():
    result = runner.invoke(app, ["workflow", "list", TARGET])
    assert result.exit_code == 0, f"Command failed. Output: {result.stdout}"
    assert "[Demo] greet - Say hello" in result.stdout
    assert "always-fails - Fails after one retry" in result.stdout


def test_default_attribute_is_register_workflows():
    result = runner.invoke(app, ["workflow", "list", str(FIXTURES)])
    assert result.exit_code == 0, f"Command failed. Output: {result.stdout}"
    assert "greet" in result.stdout


def test_describe_and_missing_workflow():
    result = runner.invoke(app, ["workflow", "describe", TARGET, "greet"])
    assert result.exit_code == 0, f"Command failed. Output: {result.stdout}"
    summary = json.loads(result.stdout)
    assert [step["id"] for step in summary["steps"]] == ["greet", "shout"]
    assert summary["inputs"]["name"]["default"] == "world"

    missing = runner.invoke(app, ["workflow", "describe", TARGET, "nope"])
    assert missing.exit_code == 1
    assert "Workflow not found" in missing.stdout


def test_run_prints_results_and_logs():
    result = runner.invoke(app, ["workflow", "run", TARGET, "greet", "--input", "name=ada"])
    assert result.exit_code == 0, f"Command failed. Output: {result.stdout}"
    assert "Workflow greet: SUCCESS" in result.stdout
    assert '"shout": "HELLO ADA"' in result.stdout
    assert "Starting workflow: greet" in result.stdout


def test_run_with_json_args_and_no_logs():
    result = runner.invoke(
        app, ["workflow", "run", TARGET, "greet", "--args", '{"name": "bob"}', "--no-show-logs"]
    )
    assert result.exit_code == 0, f"Command failed. Output: {result.stdout}"
    assert '"greet": "hello bob"' in result.stdout
    assert "Logs:" not in result.stdout


def test_failed_run_exits_non_zero():
    result = runner.invoke(app, ["workflow", "run", TARGET, "always-fails"])
    assert result.exit_code == 1
    assert "Workflow always-fails: FAILED" in result.stdout
    assert "Error at step boom: kaboom" in result.stdout
    assert 'Retrying step "boom" (attempt 2/2)' in result.stdout


def test_unknown_workflow_run_exits_non_zero():
    result = runner.invoke(app, ["workflow", "run", TARGET, "missing"])
    assert result.exit_code == 1
    assert 'Workflow "missing" not found.' in result.stdout


def test_bad_inputs_rejected():
    result = runner.invoke(app, ["workflow", "run", TARGET, "greet", "--input", "novalue"])
    assert result.exit_code == 2

    result = runner.invoke(app, ["workflow", "run", TARGET, "greet", "--args", "[1]"])
    assert result.exit_code == 2


def test_stats_runs_concurrently_and_reports():
    result = runner.invoke(app, ["workflow", "stats", TARGET, "greet", "--times", "3"])
    assert result.exit_code == 0, f"Command failed. Output: {result.stdout}"
    assert "Total runs: 3" in result.stdout
    assert "Successes: 3" in result.stdout
    assert "greet: 3 runs, 3 ok" in result.stdout
    assert result.stdout.count("+ greet [run_") == 3


def test_unloadable_target_exits_non_zero(tmp_path):
    result = runner.invoke(app, ["workflow", "list", f"{tmp_path / 'missing.py'}:register"])
    assert result.exit_code == 1
    assert "Could not load workflows" in result.stdout
