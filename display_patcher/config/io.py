"""Config I/O utilities."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigurationError
from .models import PatcherConfig, validate_config

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "DISPLAY_PATCHER_CONFIG"
DEFAULT_CONFIG_NAME = "display_patcher.yaml"


def get_config_path(explicit: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Resolve the config file: explicit path, env var, then ./display_patcher.yaml.

    An explicit or env-provided path is returned even when missing so the
    loader can report it; the implicit local file is only used if present.
    """
    if explicit:
        return Path(explicit).expanduser()
    env_value = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if env_value:
        return Path(env_value).expanduser()
    local = Path.cwd() / DEFAULT_CONFIG_NAME
    if local.is_file():
        return local
    return None


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file: {exc}", file_path=str(config_path)) from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in config file: {exc}", file_path=str(config_path)) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a mapping", file_path=str(config_path))
    return data


def load_config(config_path: Optional[Union[str, Path]] = None) -> PatcherConfig:
    path = get_config_path(config_path)
    if path is None:
        logger.debug("No config file found, using defaults")
        return PatcherConfig()
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}", file_path=str(path))

    data = _read_yaml(path)
    try:
        config = validate_config(data)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Config validation failed: {exc.error_count()} error(s)",
            file_path=str(path),
            details={"errors": [err.get("msg") for err in exc.errors()]},
        ) from exc

    logger.debug("Loaded config from %s", path)
    return config


def save_config(config: PatcherConfig, config_path: Union[str, Path]) -> Path:
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = config.model_dump(by_alias=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(payload, handle, sort_keys=False, allow_unicode=True)
    return path
