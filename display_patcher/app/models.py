"""Shared dataclasses for the app controller."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional, Tuple

from ..config.models import DEFAULT_BACKUP_SUFFIX, DEFAULT_TARGET_NAME
from ..detectors.target_classifier import TargetClassification
from ..patching.base import PatchMode
from ..patching.engine import EngineRun

PatchStatus = Literal["no-changes", "dry-run", "patched"]
RestoreStatus = Literal["dry-run", "restored"]


@dataclass(frozen=True)
class PatchOptions:
    file: Optional[str] = None
    dry_run: bool = False
    enable: Tuple[str, ...] = ()
    disable: Tuple[str, ...] = ()
    allow_size_change: bool = False
    codesign_identity: Optional[str] = None
    backup_suffix: str = DEFAULT_BACKUP_SUFFIX
    default_target: str = DEFAULT_TARGET_NAME


@dataclass(frozen=True)
class TargetArtifact:
    """Bytes of one target as read from disk, plus the derived mode."""

    path: Path
    data: bytes = field(repr=False)
    classification: TargetClassification
    mode: PatchMode

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class PatchOutcome:
    status: PatchStatus
    target: TargetArtifact
    run: EngineRun
    backup_path: Path
    backup_created: bool = False
    resigned: bool = False

    @property
    def changed(self) -> bool:
        return self.run.changed


@dataclass(frozen=True)
class RestoreOutcome:
    status: RestoreStatus
    target_path: Path
    backup_path: Path
