"""Input resolution and optional caller-side validation models."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, create_model

from .contracts import InputSpec, WorkflowDefinition

_PYTHON_TYPES: Dict[str, Any] = {
    "string": str,
    "number": float,
    "boolean": bool,
    "array": List[Any],
    "object": Dict[str, Any],
}


def resolve_inputs(
    definition: WorkflowDefinition, inputs: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Merge declared defaults into ``inputs``.

    Missing inputs without a default stay missing; ``required`` is not
    enforced here.
    """
    resolved = dict(inputs or {})
    for name, spec in definition.inputs.items():
        if name not in resolved and spec.has_default:
            resolved[name] = spec.default
    return resolved


def _field_for(spec: InputSpec) -> tuple[Any, Any]:
    annotation = _PYTHON_TYPES[spec.type]
    if spec.required:
        return annotation, Field(..., description=spec.description)
    default = spec.default if spec.has_default else None
    return Optional[annotation], Field(default=default, description=spec.description)


def build_input_model(definition: WorkflowDefinition) -> Type[BaseModel]:
    """Build a pydantic model that validates inputs for ``definition``.

    Undeclared keys are allowed through unchanged.

    Example:
        >>> Model = build_input_model(definition)
        >>> Model.model_validate({"url": "https://example.com"}).model_dump()
    """
    fields = {name: _field_for(spec) for name, spec in definition.inputs.items()}
    model_name = "".join(part.capitalize() for part in _split_name(definition.name))
    return create_model(
        f"{model_name or 'Workflow'}Inputs",
        __config__=ConfigDict(extra="allow"),
        **fields,
    )


def _split_name(name: str) -> List[str]:
    cleaned = "".join(ch if ch.isalnum() else " " for ch in name)
    return cleaned.split()
