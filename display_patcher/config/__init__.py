"""Configuration package: YAML file + pydantic models."""

from .io import CONFIG_ENV_VAR, get_config_path, load_config, save_config
from .models import (
    DEFAULT_BACKUP_SUFFIX,
    DEFAULT_MARKERS,
    DEFAULT_SCAN_WINDOW,
    DEFAULT_TARGET_NAME,
    ExtractionConfig,
    LoggingConfig,
    PatcherConfig,
    validate_config,
)

__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_BACKUP_SUFFIX",
    "DEFAULT_MARKERS",
    "DEFAULT_SCAN_WINDOW",
    "DEFAULT_TARGET_NAME",
    "ExtractionConfig",
    "LoggingConfig",
    "PatcherConfig",
    "get_config_path",
    "load_config",
    "save_config",
    "validate_config",
]
