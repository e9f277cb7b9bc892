"""Workflow engine: registry, run orchestration and history."""

from __future__ import annotations

import asyncio
import copy
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from .config import StepLineConfig, load_config
from .context import WorkflowContext
from .contracts import (
    RunStatus,
    WorkflowDefinition,
    WorkflowResult,
    WorkflowRun,
    WorkflowStats,
)
from .errors import StepFailedError, WorkflowNotFoundError
from .history import RunHistory
from .inputs import resolve_inputs
from .registry import DefinitionRegistry
from .steps import StepExecutor, error_message

logger = logging.getLogger(__name__)


def _new_run_id() -> str:
    return f"run_{uuid.uuid4().hex}"


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class WorkflowEngine:
    """Register workflow definitions and execute them.

    Many runs may be in flight at once on the same event loop; each run
    executes its own steps strictly in definition order. The registry and
    the history are the only state shared between runs.
    """

    def __init__(
        self,
        config: Optional[StepLineConfig] = None,
        history_limit: Optional[int] = None,
    ) -> None:
        self.config = config or load_config()
        engine_conf = self.config.engine
        self._registry = DefinitionRegistry()
        self._history = RunHistory(history_limit or engine_conf.history_limit)
        self._executor = StepExecutor(engine_conf.default_retry_delay_ms)

    # ── Definitions ──

    def register(self, definition: WorkflowDefinition | Mapping[str, Any]) -> None:
        """Validate and store ``definition``, replacing one with the same name.

        Raises:
            WorkflowValidationError: The definition is malformed. The registry
                is left unchanged.
        """
        self._registry.register(definition)

    def unregister(self, name: str) -> bool:
        return self._registry.unregister(name)

    def get(self, name: str) -> Optional[WorkflowDefinition]:
        return self._registry.get(name)

    def require(self, name: str) -> WorkflowDefinition:
        """Like :meth:`get` but raise :class:`WorkflowNotFoundError` on a miss."""
        definition = self._registry.get(name)
        if definition is None:
            raise WorkflowNotFoundError(name)
        return definition

    def list(self) -> List[WorkflowDefinition]:
        return self._registry.list()

    # ── History ──

    def get_history(self) -> List[WorkflowRun]:
        """Most-recent-first copies of the retained runs."""
        return self._history.snapshot()

    def get_stats(self) -> WorkflowStats:
        return self._history.stats()

    # ── Execution ──

    async def run(
        self, name: str, inputs: Optional[Dict[str, Any]] = None
    ) -> WorkflowResult:
        """Execute workflow ``name`` and return its result.

        Step failures are reported through the returned result rather than
        raised. An unknown name yields a failed result and leaves no trace in
        the history.
        """
        inputs = dict(inputs or {})
        definition = self._registry.get(name)
        if definition is None:
            message = str(WorkflowNotFoundError(name))
            logger.warning(message)
            return WorkflowResult(
                success=False,
                workflow=name,
                logs=[message],
                duration_ms=0,
                error=message,
            )

        run_id = _new_run_id()
        self._history.record(
            WorkflowRun(
                id=run_id,
                workflow=name,
                started_at=datetime.now(timezone.utc),
                inputs=copy.deepcopy(inputs),
            )
        )
        start = time.monotonic()

        ctx = WorkflowContext(
            inputs=resolve_inputs(definition, inputs),
            workflow=name,
            run_id=run_id,
        )
        ctx.log(f"Starting workflow: {name}")
        logger.info(f"Starting workflow {name} (run {run_id})")

        try:
            result = await self._run_steps(definition, ctx, start)
        except asyncio.CancelledError:
            ctx.log(f'Workflow "{name}" cancelled')
            self._finish(
                run_id,
                WorkflowResult(
                    success=False,
                    workflow=name,
                    step_results=dict(ctx.results),
                    logs=list(ctx.logs),
                    duration_ms=_elapsed_ms(start),
                    error="cancelled",
                ),
            )
            raise

        self._finish(run_id, result)
        return result

    async def _run_steps(
        self, definition: WorkflowDefinition, ctx: WorkflowContext, start: float
    ) -> WorkflowResult:
        name = definition.name
        for step in definition.steps:
            try:
                if not self._executor.should_run(step, ctx):
                    ctx.log(f'Skipping step "{step.id}" (condition not met)')
                    logger.debug(f"Skipping step {step.id} of {name}")
                    continue

                label = f": {step.description}" if step.description else ""
                ctx.log(f"Running step: {step.id}{label}")
                value = await self._executor.execute(step, ctx)
            except Exception as exc:
                message = (
                    exc.message if isinstance(exc, StepFailedError) else error_message(exc)
                )
                ctx.log(f'Step "{step.id}" failed: {message}')
                logger.error(f"Workflow {name} failed at step {step.id}: {message}")
                return WorkflowResult(
                    success=False,
                    workflow=name,
                    step_results=dict(ctx.results),
                    logs=list(ctx.logs),
                    duration_ms=_elapsed_ms(start),
                    error=message,
                    failed_step=step.id,
                )

            ctx.results[step.id] = value
            ctx.log(f'Step "{step.id}" completed')

        ctx.log(f'Workflow "{name}" completed')
        result = WorkflowResult(
            success=True,
            workflow=name,
            step_results=dict(ctx.results),
            logs=list(ctx.logs),
            duration_ms=_elapsed_ms(start),
        )
        logger.info(f"Workflow {name} completed in {result.duration_ms}ms")
        return result

    def _finish(self, run_id: str, result: WorkflowResult) -> None:
        status = RunStatus.SUCCESS if result.success else RunStatus.FAILED
        if not self._history.finish(
            run_id,
            status=status,
            completed_at=datetime.now(timezone.utc),
            duration_ms=result.duration_ms,
            result=result.model_copy(deep=True),
        ):
            logger.debug(f"Run {run_id} evicted from history before it finished")
