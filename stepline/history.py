"""Bounded run history and the statistics derived from it."""

from __future__ import annotations

import threading
from collections import deque
from datetime import datetime
from typing import Deque, Dict, Iterable, List, Optional

from .constants import DEFAULT_HISTORY_LIMIT
from .contracts import (
    RunStatus,
    WorkflowBreakdown,
    WorkflowResult,
    WorkflowRun,
    WorkflowStats,
)


class RunHistory:
    """Most-recent-first log of runs capped at ``limit`` entries.

    New runs are inserted at the head; once the cap is reached the oldest
    run is evicted from the tail and no longer counts towards stats.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("history limit must be at least 1")
        self.limit = limit
        self._runs: Deque[WorkflowRun] = deque(maxlen=limit)
        self._lock = threading.RLock()

    def record(self, run: WorkflowRun) -> None:
        with self._lock:
            self._runs.appendleft(run)

    def finish(
        self,
        run_id: str,
        status: RunStatus,
        completed_at: datetime,
        duration_ms: int,
        result: Optional[WorkflowResult] = None,
    ) -> bool:
        """Move run ``run_id`` to a terminal state.

        Returns ``False`` when the run has already been evicted.
        """
        with self._lock:
            for run in self._runs:
                if run.id == run_id:
                    run.status = status
                    run.completed_at = completed_at
                    run.duration_ms = duration_ms
                    run.result = result
                    return True
        return False

    def snapshot(self) -> List[WorkflowRun]:
        with self._lock:
            return [run.snapshot() for run in self._runs]

    def stats(self) -> WorkflowStats:
        with self._lock:
            return compute_stats(self._runs)

    def __len__(self) -> int:
        with self._lock:
            return len(self._runs)


def _average(total: int, count: int) -> int:
    return round(total / count) if count else 0


def compute_stats(runs: Iterable[WorkflowRun]) -> WorkflowStats:
    """Aggregate ``runs``; running entries are left out of every average."""
    stats = WorkflowStats()
    duration_sum = 0
    per_workflow_sum: Dict[str, int] = {}
    per_workflow_done: Dict[str, int] = {}

    for run in runs:
        stats.total += 1
        entry = stats.by_workflow.setdefault(run.workflow, WorkflowBreakdown())
        entry.runs += 1

        if run.status == RunStatus.RUNNING:
            stats.running += 1
            continue
        if run.status == RunStatus.SUCCESS:
            stats.successes += 1
            entry.successes += 1
        else:
            stats.failures += 1

        duration = run.duration_ms or 0
        duration_sum += duration
        per_workflow_sum[run.workflow] = per_workflow_sum.get(run.workflow, 0) + duration
        per_workflow_done[run.workflow] = per_workflow_done.get(run.workflow, 0) + 1

    stats.avg_duration = _average(duration_sum, stats.successes + stats.failures)
    for name, entry in stats.by_workflow.items():
        entry.avg_ms = _average(per_workflow_sum.get(name, 0), per_workflow_done.get(name, 0))
    return stats
