"""Named workflow definitions, validated on the way in."""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from .contracts import WorkflowDefinition
from .errors import WorkflowValidationError

logger = logging.getLogger(__name__)


def coerce_definition(definition: Any) -> WorkflowDefinition:
    """Return ``definition`` as a :class:`WorkflowDefinition` model."""
    if isinstance(definition, WorkflowDefinition):
        return definition
    if isinstance(definition, Mapping):
        try:
            return WorkflowDefinition.model_validate(dict(definition))
        except ValidationError as exc:
            raise WorkflowValidationError(f"Invalid workflow definition: {exc}") from exc
    raise WorkflowValidationError(
        f"Expected a WorkflowDefinition or mapping, got {type(definition).__name__}"
    )


def validate_definition(definition: WorkflowDefinition) -> None:
    """Check the structural invariants a definition must satisfy.

    Raises:
        WorkflowValidationError: The name is blank, there are no steps, a step
            has no id, or two steps share an id.
    """
    if not definition.name or not definition.name.strip():
        raise WorkflowValidationError("Workflow must have a name.")
    if not definition.steps:
        raise WorkflowValidationError(
            f'Workflow "{definition.name}" must have at least one step.'
        )
    seen: set[str] = set()
    for step in definition.steps:
        if not step.id:
            raise WorkflowValidationError("Every step must have an id.")
        if step.id in seen:
            raise WorkflowValidationError(f'Duplicate step id: "{step.id}"')
        seen.add(step.id)


class DefinitionRegistry:
    """Registry of workflow definitions keyed by name.

    Re-registering a name replaces the stored definition in place; there is
    no versioning. Runs already in flight keep the definition they started
    with.
    """

    def __init__(self) -> None:
        self._definitions: Dict[str, WorkflowDefinition] = {}
        self._lock = threading.RLock()

    def register(self, definition: WorkflowDefinition | Mapping[str, Any]) -> None:
        model = coerce_definition(definition)
        validate_definition(model)
        with self._lock:
            replaced = model.name in self._definitions
            self._definitions[model.name] = model
        logger.info(
            f"{'Replaced' if replaced else 'Registered'} workflow {model.name} "
            f"({len(model.steps)} steps)"
        )

    def unregister(self, name: str) -> bool:
        with self._lock:
            existed = self._definitions.pop(name, None) is not None
        if existed:
            logger.info(f"Unregistered workflow {name}")
        return existed

    def get(self, name: str) -> Optional[WorkflowDefinition]:
        with self._lock:
            return self._definitions.get(name)

    def list(self) -> List[WorkflowDefinition]:
        """Return definitions in registration order."""
        with self._lock:
            return list(self._definitions.values())

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._definitions

    def __len__(self) -> int:
        with self._lock:
            return len(self._definitions)
