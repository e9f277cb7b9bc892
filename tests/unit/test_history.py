"""Run history capacity and statistics tests."""

from datetime import datetime, timedelta, timezone

import pytest

from stepline import (
    RunHistory,
    RunStatus,
    StepLineConfig,
    WorkflowDefinition,
    WorkflowEngine,
    WorkflowRun,
    WorkflowStep,
    compute_stats,
)

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _run(i: int, workflow: str = "wf", status=RunStatus.RUNNING, duration=None) -> WorkflowRun:
    return WorkflowRun(
        id=f"run_{i}",
        workflow=workflow,
        status=status,
        started_at=BASE + timedelta(seconds=i),
        duration_ms=duration,
    )


def test_history_is_most_recent_first_and_capped():
    history = RunHistory(limit=200)
    for i in range(201):
        history.record(_run(i))

    runs = history.snapshot()
    assert len(runs) == 200
    assert runs[0].id == "run_200"
    assert "run_0" not in {run.id for run in runs}
    assert min(run.started_at for run in runs) == BASE + timedelta(seconds=1)


def test_finish_updates_record_in_place():
    history = RunHistory()
    history.record(_run(1))

    assert history.finish("run_1", RunStatus.SUCCESS, BASE, 42) is True
    run = history.snapshot()[0]
    assert run.status == RunStatus.SUCCESS
    assert run.duration_ms == 42
    assert run.completed_at == BASE


def test_finish_evicted_run_is_a_no_op():
    history = RunHistory(limit=1)
    history.record(_run(1))
    history.record(_run(2))

    assert history.finish("run_1", RunStatus.FAILED, BASE, 5) is False
    assert [run.id for run in history.snapshot()] == ["run_2"]


def test_snapshot_is_a_defensive_copy():
    history = RunHistory()
    original = _run(1)
    original.inputs["key"] = "value"
    history.record(original)

    copy = history.snapshot()[0]
    copy.status = RunStatus.FAILED
    copy.inputs["key"] = "changed"

    fresh = history.snapshot()[0]
    assert fresh.status == RunStatus.RUNNING
    assert fresh.inputs == {"key": "value"}


@pytest.mark.asyncio
async def test_engine_history_is_isolated_from_callers():
    engine = WorkflowEngine(config=StepLineConfig())
    engine.register(WorkflowDefinition(name="iso", steps=(WorkflowStep(id="a", action=lambda ctx: 1),)))
    supplied = {"tags": ["x"]}

    result = await engine.run("iso", supplied)

    snap = engine.get_history()[0]
    snap.result.step_results["a"] = "tampered"
    snap.result.logs.append("injected")
    snap.inputs["tags"].append("y")
    result.step_results["b"] = "from caller"
    result.logs.clear()
    supplied["tags"].append("z")

    fresh = engine.get_history()[0]
    assert fresh.result is not snap.result
    assert fresh.result.step_results == {"a": 1}
    assert "injected" not in fresh.result.logs
    assert fresh.result.logs
    assert fresh.inputs == {"tags": ["x"]}


def test_stats_read_under_lock_match_snapshot():
    history = RunHistory()
    history.record(_run(1))
    history.finish("run_1", RunStatus.SUCCESS, BASE, 40)

    stats = history.stats()
    assert stats.successes == 1
    assert stats.avg_duration == 40


def test_invalid_limit_rejected():
    with pytest.raises(ValueError):
        RunHistory(limit=0)


def test_stats_exclude_running_runs_from_averages():
    runs = [
        _run(1, "a", RunStatus.SUCCESS, 100),
        _run(2, "a", RunStatus.FAILED, 300),
        _run(3, "a", RunStatus.RUNNING),
        _run(4, "b", RunStatus.SUCCESS, 0),
        _run(5, "b", RunStatus.SUCCESS, 51),
    ]

    stats = compute_stats(runs)

    assert stats.total == 5
    assert stats.successes == 3
    assert stats.failures == 1
    assert stats.running == 1
    assert stats.avg_duration == round(451 / 4)
    assert stats.by_workflow["a"].runs == 3
    assert stats.by_workflow["a"].successes == 1
    assert stats.by_workflow["a"].avg_ms == 200
    assert stats.by_workflow["b"].avg_ms == round(51 / 2)
    assert sum(entry.runs for entry in stats.by_workflow.values()) == stats.total


def test_stats_of_empty_history():
    stats = RunHistory().stats()
    assert stats.total == 0
    assert stats.avg_duration == 0
    assert stats.by_workflow == {}


@pytest.mark.asyncio
async def test_engine_history_window_drops_oldest_run():
    engine = WorkflowEngine(config=StepLineConfig())
    engine.register(WorkflowDefinition(name="tick", steps=(WorkflowStep(id="t", action=lambda ctx: 1),)))

    for _ in range(201):
        await engine.run("tick")

    history = engine.get_history()
    stats = engine.get_stats()
    assert len(history) == 200
    assert stats.total == len(history) == 200
    assert stats.by_workflow["tick"].runs == 200
    assert history[0].started_at >= history[-1].started_at
