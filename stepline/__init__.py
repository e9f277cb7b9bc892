"""stepline: declarative step-based workflow engine."""

from .config import EngineConfig, StepLineConfig, load_config
from .context import WorkflowContext
from .contracts import (
    CallableAction,
    InputSpec,
    RunStatus,
    StepAction,
    WorkflowBreakdown,
    WorkflowDefinition,
    WorkflowResult,
    WorkflowRun,
    WorkflowStats,
    WorkflowStep,
)
from .engine import WorkflowEngine
from .errors import (
    StepFailedError,
    StepLineError,
    WorkflowNotFoundError,
    WorkflowValidationError,
)
from .history import RunHistory, compute_stats
from .inputs import build_input_model, resolve_inputs
from .registry import DefinitionRegistry
from .steps import StepExecutor

__version__ = "0.1.0"
__all__ = [
    "CallableAction",
    "DefinitionRegistry",
    "EngineConfig",
    "InputSpec",
    "RunHistory",
    "RunStatus",
    "StepAction",
    "StepExecutor",
    "StepFailedError",
    "StepLineConfig",
    "StepLineError",
    "WorkflowBreakdown",
    "WorkflowContext",
    "WorkflowDefinition",
    "WorkflowEngine",
    "WorkflowNotFoundError",
    "WorkflowResult",
    "WorkflowRun",
    "WorkflowStats",
    "WorkflowStep",
    "WorkflowValidationError",
    "build_input_model",
    "compute_stats",
    "load_config",
    "resolve_inputs",
]
