"""Input declaration normalisation and resolution tests."""

import pytest
from pydantic import ValidationError

from stepline import InputSpec, WorkflowDefinition, WorkflowStep, build_input_model, resolve_inputs


def _definition(inputs) -> WorkflowDefinition:
    return WorkflowDefinition(
        name="seo audit",
        steps=(WorkflowStep(id="s", action=lambda ctx: None),),
        inputs=inputs,
    )


def test_bare_type_tags_are_normalised():
    definition = _definition({"url": "string", "count": {"type": "number", "default": 3}})

    assert definition.inputs["url"] == InputSpec(type="string")
    assert definition.inputs["url"].has_default is False
    assert definition.inputs["count"].default == 3
    assert definition.inputs["count"].has_default is True


def test_explicit_none_default_counts_as_declared():
    definition = _definition({"note": {"type": "string", "default": None}})
    assert resolve_inputs(definition, {}) == {"note": None}


def test_resolve_fills_only_absent_inputs():
    definition = _definition(
        {
            "url": {"type": "string", "required": True},
            "depth": {"type": "string", "default": "quick"},
            "limit": {"type": "number", "default": 10},
        }
    )

    resolved = resolve_inputs(definition, {"limit": None, "extra": True})

    assert resolved == {"depth": "quick", "limit": None, "extra": True}


def test_resolve_does_not_mutate_caller_inputs():
    definition = _definition({"depth": {"type": "string", "default": "quick"}})
    supplied = {"url": "x"}

    resolve_inputs(definition, supplied)

    assert supplied == {"url": "x"}


def test_unknown_type_tag_rejected():
    with pytest.raises(ValidationError):
        _definition({"when": "date"})


def test_build_input_model_validates_declared_inputs():
    definition = _definition(
        {
            "url": {"type": "string", "required": True, "description": "Page to audit"},
            "depth": {"type": "string", "default": "quick"},
            "pages": "array",
            "verbose": "boolean",
        }
    )
    Model = build_input_model(definition)

    assert Model.__name__ == "SeoAuditInputs"
    parsed = Model.model_validate({"url": "https://example.com", "pages": ["/"], "other": 1})
    dumped = parsed.model_dump()
    assert dumped["url"] == "https://example.com"
    assert dumped["depth"] == "quick"
    assert dumped["pages"] == ["/"]
    assert dumped["verbose"] is None
    assert dumped["other"] == 1
    assert Model.model_fields["url"].description == "Page to audit"

    with pytest.raises(ValidationError):
        Model.model_validate({})
    with pytest.raises(ValidationError):
        Model.model_validate({"url": "x", "pages": "not-a-list"})
