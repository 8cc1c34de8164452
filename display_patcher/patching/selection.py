"""Patch selection: defaults plus explicit enable/disable lists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Sequence

from ..exceptions import UsageError
from .base import PatchModule

OPT_IN_MARKER = "[opt-in]"


@dataclass(frozen=True)
class PatchSelection:
    """Effective set of module ids for one run."""

    enabled: FrozenSet[str]
    enable: FrozenSet[str] = frozenset()
    disable: FrozenSet[str] = frozenset()

    def is_enabled(self, module_id: str) -> bool:
        return module_id in self.enabled


def parse_id_list(raw: Optional[str]) -> List[str]:
    """Split a comma-separated id list, dropping blanks and duplicates."""
    if not raw:
        return []
    ids: List[str] = []
    for part in raw.split(","):
        item = part.strip()
        if item and item not in ids:
            ids.append(item)
    return ids


def resolve_selection(
    modules: Sequence[PatchModule],
    enable: Iterable[str] = (),
    disable: Iterable[str] = (),
) -> PatchSelection:
    """Compute ``(defaults | enable) - disable``.

    Raises:
        UsageError: for unknown ids or ids that are both enabled and disabled.
    """
    known = {module.module_id for module in modules}
    enable_set = frozenset(enable)
    disable_set = frozenset(disable)

    unknown = (enable_set | disable_set) - known
    if unknown:
        raise UsageError(
            f"Unknown patch id(s): {', '.join(sorted(unknown))}. "
            f"Known ids: {', '.join(module.module_id for module in modules)}",
            module_ids=list(unknown),
        )

    conflicting = enable_set & disable_set
    if conflicting:
        raise UsageError(
            f"Patch id(s) both enabled and disabled: {', '.join(sorted(conflicting))}",
            module_ids=list(conflicting),
        )

    defaults = {module.module_id for module in modules if module.default_enabled}
    return PatchSelection(
        enabled=frozenset((defaults | enable_set) - disable_set),
        enable=enable_set,
        disable=disable_set,
    )


def format_module_listing(modules: Sequence[PatchModule]) -> List[str]:
    """One line per module: id, opt-in marker, description."""
    width = max((len(module.module_id) for module in modules), default=0)
    marker_width = len(OPT_IN_MARKER)
    lines = []
    for module in modules:
        marker = "" if module.default_enabled else OPT_IN_MARKER
        lines.append(f"  {module.module_id:<{width}}  {marker:<{marker_width}}  {module.description}")
    return lines
