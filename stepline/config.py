from __future__ import annotations

import os
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_RETRY_DELAY_MS,
)


class EngineConfig(BaseModel):
    """Settings for a :class:`~stepline.engine.WorkflowEngine`."""

    history_limit: int = Field(default=DEFAULT_HISTORY_LIMIT, ge=1)
    default_retry_delay_ms: int = Field(default=DEFAULT_RETRY_DELAY_MS, ge=0)


class StepLineConfig(BaseModel):
    """Top-level configuration model."""

    engine: EngineConfig = EngineConfig()
    log_level: str = "INFO"


def load_config(path: Optional[str] = None) -> StepLineConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to STEPLINE_CONFIG env
            variable or 'stepline.yaml' in the current directory.
    """

    config_path = path or os.getenv("STEPLINE_CONFIG", DEFAULT_CONFIG_PATH)
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = StepLineConfig(**data)
    else:
        config = StepLineConfig()

    env_limit = os.getenv("STEPLINE_HISTORY_LIMIT")
    if env_limit:
        config.engine = EngineConfig(
            history_limit=int(env_limit),
            default_retry_delay_ms=config.engine.default_retry_delay_ms,
        )
    env_level = os.getenv("STEPLINE_LOG_LEVEL")
    if env_level:
        config.log_level = env_level.upper()
    return config
