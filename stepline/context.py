"""Per-run execution context threaded through every step."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class WorkflowContext:
    """Mutable scratch space owned by exactly one run.

    Attributes:
        inputs: Resolved input values, defaults merged in.
        results: Step id -> successful return value, in execution order.
        state: Free-form data steps pass to each other outside ``results``.
        logs: Timestamped lines appended through :meth:`log`.
    """

    def __init__(
        self,
        inputs: Optional[Dict[str, Any]] = None,
        workflow: str = "",
        run_id: Optional[str] = None,
    ) -> None:
        self.inputs: Dict[str, Any] = dict(inputs or {})
        self.results: Dict[str, Any] = {}
        self.state: Dict[str, Any] = {}
        self.logs: List[str] = []
        self.workflow = workflow
        self.run_id = run_id

    def log(self, message: str) -> None:
        """Append a timestamped line to the run's log trail."""
        timestamp = datetime.now(timezone.utc).isoformat()
        self.logs.append(f"[{timestamp}] {message}")
        logger.debug(f"[{self.workflow}:{self.run_id}] {message}")

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return (
            f"WorkflowContext(workflow={self.workflow!r}, run_id={self.run_id!r}, "
            f"results={list(self.results)})"
        )
