"""Shared defaults for the workflow engine."""

DEFAULT_HISTORY_LIMIT = 200
DEFAULT_RETRY_DELAY_MS = 1000
DEFAULT_CONFIG_PATH = "stepline.yaml"
