"""Plain-text rendering of results, stats and history for the CLI."""

from __future__ import annotations

import json
from typing import Any, Iterable, List

from stepline.contracts import RunStatus, WorkflowResult, WorkflowRun, WorkflowStats

_STATUS_MARKERS = {
    RunStatus.SUCCESS: "+",
    RunStatus.FAILED: "-",
    RunStatus.RUNNING: "~",
}


def to_json(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


def format_result(result: WorkflowResult, show_logs: bool = True) -> List[str]:
    status = "SUCCESS" if result.success else "FAILED"
    lines = [f"Workflow {result.workflow}: {status} ({result.duration_ms}ms)"]
    if not result.success:
        where = f" at step {result.failed_step}" if result.failed_step else ""
        lines.append(f"Error{where}: {result.error}")
    lines.append(f"Step results: {to_json(result.step_results)}")
    if show_logs and result.logs:
        lines.append("Logs:")
        lines.extend(f"  {line}" for line in result.logs)
    return lines


def format_stats(stats: WorkflowStats) -> List[str]:
    lines = [
        f"Total runs: {stats.total}",
        f"Successes: {stats.successes}",
        f"Failures: {stats.failures}",
        f"Running: {stats.running}",
        f"Avg duration: {stats.avg_duration}ms",
    ]
    if stats.by_workflow:
        lines.append("By workflow:")
        for name, entry in stats.by_workflow.items():
            lines.append(
                f"  {name}: {entry.runs} runs, {entry.successes} ok, avg {entry.avg_ms}ms"
            )
    return lines


def format_history(runs: Iterable[WorkflowRun], limit: int = 10) -> List[str]:
    """One line per run, most recent first, capped at ``limit``."""
    lines = []
    for run in list(runs)[:limit]:
        marker = _STATUS_MARKERS.get(run.status, "?")
        duration = f"{run.duration_ms}ms" if run.duration_ms is not None else "?"
        lines.append(
            f"{marker} {run.workflow} [{run.id}] {run.status.value} ({duration}) "
            f"{run.started_at.isoformat()}"
        )
    return lines
