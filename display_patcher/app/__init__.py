"""Application layer: orchestration used by the CLIs."""

from .controller import list_patches, load_target, resolve_target_path, restore_target, run_patch
from .models import PatchOptions, PatchOutcome, RestoreOutcome, TargetArtifact

__all__ = [
    "list_patches",
    "load_target",
    "resolve_target_path",
    "restore_target",
    "run_patch",
    "PatchOptions",
    "PatchOutcome",
    "RestoreOutcome",
    "TargetArtifact",
]
