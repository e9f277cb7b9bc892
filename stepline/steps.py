"""Single-step execution: retry policy and error recovery."""

from __future__ import annotations

import logging
from typing import Any

from .constants import DEFAULT_RETRY_DELAY_MS
from .context import WorkflowContext
from .contracts import WorkflowStep
from .errors import StepFailedError
from .utils import retry
from .utils.awaitables import resolve

logger = logging.getLogger(__name__)


def error_message(error: BaseException) -> str:
    """Human-readable message for ``error``, falling back to its type name."""
    return str(error) or type(error).__name__


class StepExecutor:
    """Run one step with its retry budget and optional ``on_error`` hook."""

    def __init__(self, default_retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS) -> None:
        self.default_retry_delay_ms = default_retry_delay_ms

    def should_run(self, step: WorkflowStep, ctx: WorkflowContext) -> bool:
        """Evaluate the step's condition; steps without one always run."""
        if step.condition is None:
            return True
        return bool(step.condition(ctx))

    async def execute(self, step: WorkflowStep, ctx: WorkflowContext) -> Any:
        """Invoke ``step.action`` until it succeeds or attempts run out.

        Returns the action's value, or the ``on_error`` fallback when the final
        attempt fails and a hook is declared.

        Raises:
            StepFailedError: The final attempt failed and no hook is declared.
                The action's exception is chained as ``__cause__``.
        """
        max_attempts = step.retries + 1
        delay_ms = (
            step.retry_delay
            if step.retry_delay is not None
            else self.default_retry_delay_ms
        )

        for attempt in range(1, max_attempts + 1):
            try:
                return await resolve(step.action.execute(ctx))
            except Exception as exc:
                if attempt < max_attempts:
                    ctx.log(
                        f'Retrying step "{step.id}" (attempt {attempt + 1}/{max_attempts})'
                    )
                    logger.warning(
                        f"Step {step.id} failed on attempt {attempt}/{max_attempts}: "
                        f"{error_message(exc)}; retrying in {delay_ms}ms"
                    )
                    await retry.schedule_retry(attempt, delay_ms)
                    continue

                if step.on_error is not None:
                    logger.info(
                        f"Step {step.id} exhausted {max_attempts} attempt(s); "
                        "using on_error fallback"
                    )
                    # Hook failures propagate to the orchestrator untouched.
                    return await resolve(step.on_error(exc, ctx))

                raise StepFailedError(step.id, error_message(exc)) from exc

        raise AssertionError("unreachable")  # pragma: no cover
