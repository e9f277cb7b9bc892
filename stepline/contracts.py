"""Core data contracts for stepline workflows."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Literal,
    Optional,
    Protocol,
    Tuple,
    runtime_checkable,
)

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .context import WorkflowContext
from .utils.awaitables import resolve

InputType = Literal["string", "number", "boolean", "array", "object"]


@runtime_checkable
class StepAction(Protocol):
    """Executable body of a workflow step."""

    async def execute(self, ctx: "WorkflowContext") -> Any:
        """A plain method also works; a non-awaitable return is used as-is."""


class CallableAction:
    """Adapt a plain sync or async callable to :class:`StepAction`."""

    def __init__(self, fn: Callable[["WorkflowContext"], Any]) -> None:
        self.fn = fn

    async def execute(self, ctx: "WorkflowContext") -> Any:
        return await resolve(self.fn(ctx))

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"CallableAction({getattr(self.fn, '__name__', self.fn)!r})"


class InputSpec(BaseModel):
    """Canonical descriptor of a declared workflow input."""

    type: InputType = "string"
    description: Optional[str] = None
    required: bool = False
    default: Any = None

    model_config = ConfigDict(frozen=True)

    @property
    def has_default(self) -> bool:
        """``True`` when a default was declared, even if it is ``None``."""
        return "default" in self.model_fields_set

    def describe(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type, "required": self.required}
        if self.description:
            data["description"] = self.description
        if self.has_default:
            data["default"] = self.default
        return data


class WorkflowStep(BaseModel):
    """One unit of work with its own retry, condition and recovery policy."""

    id: str
    description: Optional[str] = None
    action: StepAction
    condition: Optional[Callable[["WorkflowContext"], bool]] = None
    on_error: Optional[Callable[[BaseException, "WorkflowContext"], Any]] = None
    retries: int = Field(default=0, ge=0)
    retry_delay: Optional[int] = Field(
        default=None, ge=0, description="Milliseconds between attempts"
    )

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @field_validator("action", mode="before")
    @classmethod
    def _wrap_callable(cls, v: Any) -> Any:
        if isinstance(v, StepAction):
            return v
        if callable(v):
            return CallableAction(v)
        raise ValueError("action must be callable or implement execute(ctx)")


class WorkflowDefinition(BaseModel):
    """A named, ordered recipe of steps plus declared inputs."""

    name: str
    description: str = ""
    steps: Tuple[WorkflowStep, ...] = ()
    inputs: Dict[str, InputSpec] = Field(default_factory=dict)
    tags: Tuple[str, ...] = ()
    category: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("inputs", mode="before")
    @classmethod
    def _normalise_inputs(cls, v: Any) -> Any:
        # A bare type tag is shorthand for a descriptor with only a type.
        if v is None:
            return {}
        if isinstance(v, dict):
            return {
                name: {"type": spec} if isinstance(spec, str) else spec
                for name, spec in v.items()
            }
        return v

    def step_ids(self) -> List[str]:
        return [step.id for step in self.steps]

    def summary(self) -> Dict[str, Any]:
        """Return a JSON-friendly description for catalogues and dashboards."""
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "tags": list(self.tags),
            "steps": [
                {
                    "id": step.id,
                    "description": step.description,
                    "has_condition": step.condition is not None,
                    "retries": step.retries,
                }
                for step in self.steps
            ],
            "inputs": {name: spec.describe() for name, spec in self.inputs.items()},
        }


class WorkflowResult(BaseModel):
    """Outcome of a completed run."""

    success: bool
    workflow: str
    step_results: Dict[str, Any] = Field(default_factory=dict)
    logs: List[str] = Field(default_factory=list)
    duration_ms: int = 0
    error: Optional[str] = None
    failed_step: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class RunStatus(str, Enum):
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class WorkflowRun(BaseModel):
    """History record of one run, created ``running`` and finished in place."""

    id: str
    workflow: str
    status: RunStatus = RunStatus.RUNNING
    started_at: datetime
    completed_at: Optional[datetime] = None
    duration_ms: Optional[int] = None
    inputs: Dict[str, Any] = Field(default_factory=dict)
    result: Optional[WorkflowResult] = None

    def snapshot(self) -> "WorkflowRun":
        """Return a copy that shares no mutable state with this record."""
        return self.model_copy(deep=True)


class WorkflowBreakdown(BaseModel):
    """Per-workflow slice of :class:`WorkflowStats`."""

    runs: int = 0
    successes: int = 0
    avg_ms: int = 0


class WorkflowStats(BaseModel):
    """Aggregate view over the retained run history."""

    total: int = 0
    successes: int = 0
    failures: int = 0
    running: int = 0
    avg_duration: int = 0
    by_workflow: Dict[str, WorkflowBreakdown] = Field(default_factory=dict)
