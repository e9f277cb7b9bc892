"""Exception types raised by stepline."""

from __future__ import annotations


class StepLineError(Exception):
    """Base class for all stepline errors."""


class WorkflowValidationError(StepLineError, ValueError):
    """A workflow definition failed structural validation."""


class WorkflowNotFoundError(StepLineError, LookupError):
    """No workflow is registered under the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Workflow "{name}" not found.')


class StepFailedError(StepLineError):
    """A step exhausted its attempts and no error hook recovered it.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, step_id: str, message: str) -> None:
        self.step_id = step_id
        self.message = message
        super().__init__(message)
