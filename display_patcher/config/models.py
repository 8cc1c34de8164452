from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BACKUP_SUFFIX = ".display.backup"
DEFAULT_TARGET_NAME = "claude"
DEFAULT_SCAN_WINDOW = 1024 * 1024
DEFAULT_MARKERS = [
    "/$bunfs/root/color-diff.node\x00",
    "/$bunfs/root/color-diff.node",
]


class _BaseConfigModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class LoggingConfig(_BaseConfigModel):
    level: str = "WARNING"
    json_output: bool = Field(default=False, alias="json")
    log_dir: Optional[str] = None

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        normalized = str(value).strip().upper()
        if normalized not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return normalized


class ExtractionConfig(_BaseConfigModel):
    scan_window: int = Field(default=DEFAULT_SCAN_WINDOW, gt=0)
    markers: List[str] = Field(default_factory=lambda: list(DEFAULT_MARKERS))

    @field_validator("markers")
    @classmethod
    def _non_empty_markers(cls, value: List[str]) -> List[str]:
        markers = [marker for marker in value if marker]
        if not markers:
            raise ValueError("at least one payload marker is required")
        return markers

    def marker_bytes(self) -> List[bytes]:
        return [marker.encode("utf-8") for marker in self.markers]


class PatcherConfig(_BaseConfigModel):
    default_target: str = DEFAULT_TARGET_NAME
    backup_suffix: str = DEFAULT_BACKUP_SUFFIX
    enable: List[str] = Field(default_factory=list)
    disable: List[str] = Field(default_factory=list)
    allow_size_change: bool = False
    codesign_identity: Optional[str] = None
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)

    @field_validator("backup_suffix")
    @classmethod
    def _suffix_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("backup_suffix must not be empty")
        return value


def validate_config(payload: Dict[str, Any]) -> PatcherConfig:
    return PatcherConfig.model_validate(payload or {})
