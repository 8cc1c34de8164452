"""Patch management module.

Features:
- PatchModule contract (anchor + shape matching, idempotent rewrites)
- Fixed, ordered module registry
- Selection resolution from defaults plus enable/disable lists
- PatchEngine enforcing size preservation for raw binaries
"""

from .base import ModuleResult, PatchMode, PatchModule
from .engine import (
    REASON_DISABLED,
    REASON_NOT_APPLICABLE,
    REASON_SIZE_CHANGE,
    EngineRun,
    ModuleReport,
    PatchEngine,
)
from .registry import PATCH_MODULES, module_ids
from .selection import PatchSelection, format_module_listing, parse_id_list, resolve_selection

__all__ = [
    "ModuleResult",
    "PatchMode",
    "PatchModule",
    "REASON_DISABLED",
    "REASON_NOT_APPLICABLE",
    "REASON_SIZE_CHANGE",
    "EngineRun",
    "ModuleReport",
    "PatchEngine",
    "PATCH_MODULES",
    "module_ids",
    "PatchSelection",
    "format_module_listing",
    "parse_id_list",
    "resolve_selection",
]
