"""Fixed, ordered registry of patch modules.

Order matters: modules run in declaration order and a later module may rely
on an earlier one having normalized a call site.
"""

from __future__ import annotations

from typing import Dict, Iterable, Tuple

from .base import PatchModule
from .modules import (
    CollapsedReadSearchModule,
    InstallerMessageModule,
    ShebangModule,
    ThinkingTranscriptModule,
)


def _check_unique(modules: Iterable[PatchModule]) -> Tuple[PatchModule, ...]:
    seen: Dict[str, PatchModule] = {}
    for module in modules:
        if not module.module_id:
            raise ValueError(f"Patch module without id: {module!r}")
        if module.module_id in seen:
            raise ValueError(f"Duplicate patch module id: {module.module_id}")
        seen[module.module_id] = module
    return tuple(seen.values())


PATCH_MODULES: Tuple[PatchModule, ...] = _check_unique(
    (
        ShebangModule(),
        CollapsedReadSearchModule(),
        ThinkingTranscriptModule(),
        InstallerMessageModule(),
    )
)


def module_ids(modules: Iterable[PatchModule] = PATCH_MODULES) -> Tuple[str, ...]:
    return tuple(module.module_id for module in modules)
