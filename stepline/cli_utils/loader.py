"""Load workflow definitions from a ``module:attr`` target."""

from __future__ import annotations

import sys
from importlib import import_module
from importlib.util import module_from_spec, spec_from_file_location
from pathlib import Path
from types import ModuleType
from typing import Any, Iterable, Optional

from stepline.config import StepLineConfig
from stepline.contracts import WorkflowDefinition
from stepline.engine import WorkflowEngine

DEFAULT_ATTR = "register_workflows"


def _split_target(target: str) -> tuple[str, str]:
    # Windows drive letters also contain a colon; only split on the last one.
    module_ref, sep, attr = target.rpartition(":")
    if not sep or not module_ref or "/" in attr or "\\" in attr:
        return target, DEFAULT_ATTR
    return module_ref, attr


def _import_from_path(path: Path) -> ModuleType:
    module_name = f"_stepline_target_{path.stem}"
    spec = spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import workflows from {path}")
    module = module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


def load_target(target: str) -> Any:
    """Resolve ``target`` to the object it names.

    ``target`` is ``package.module:attr`` or ``path/to/file.py:attr``; the
    attribute defaults to ``register_workflows``.
    """
    module_ref, attr = _split_target(target)
    if module_ref.endswith(".py") or Path(module_ref).is_file():
        path = Path(module_ref).expanduser().resolve()
        if not path.exists():
            raise FileNotFoundError(f"Workflow file not found: {path}")
        module = _import_from_path(path)
    else:
        module = import_module(module_ref)

    try:
        return getattr(module, attr)
    except AttributeError:
        raise AttributeError(f"{module.__name__} has no attribute {attr!r}") from None


def _register_all(engine: WorkflowEngine, definitions: Any) -> None:
    if definitions is None:
        return
    if isinstance(definitions, (WorkflowDefinition, dict)):
        engine.register(definitions)
        return
    if isinstance(definitions, Iterable):
        for definition in definitions:
            engine.register(definition)
        return
    raise TypeError(f"Cannot register workflows from {type(definitions).__name__}")


def build_engine(target: str, config: Optional[StepLineConfig] = None) -> WorkflowEngine:
    """Create an engine populated from ``target``.

    The target may be a ready :class:`WorkflowEngine`, a callable that
    receives a fresh engine (and may return definitions to register), a
    single definition, or an iterable of definitions.
    """
    obj = load_target(target)
    if isinstance(obj, WorkflowEngine):
        return obj

    engine = WorkflowEngine(config=config)
    if isinstance(obj, (WorkflowDefinition, dict)):
        _register_all(engine, obj)
    elif callable(obj):
        _register_all(engine, obj(engine))
    else:
        _register_all(engine, obj)
    return engine
