"""Patch engine: ordered left fold of patch modules over the target bytes.

Each step consumes the previous buffer and returns a new one together with
a per-module report. The input buffer is never mutated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..exceptions import SizeInvariantViolation
from .base import PatchMode, PatchModule
from .registry import PATCH_MODULES
from .selection import PatchSelection, resolve_selection

logger = logging.getLogger(__name__)

REASON_DISABLED = "disabled"
REASON_NOT_APPLICABLE = "not applicable"
REASON_SIZE_CHANGE = "requires size change"


@dataclass(frozen=True)
class ModuleReport:
    """Per-module statistics for one engine run."""

    module_id: str
    candidates: int = 0
    patched: int = 0
    skipped: bool = False
    reason: Optional[str] = None

    def summary(self) -> str:
        if self.skipped and self.reason in (REASON_DISABLED, REASON_NOT_APPLICABLE):
            return f"{self.module_id}: skipped ({self.reason})"
        line = f"{self.module_id}: candidates: {self.candidates}, patched: {self.patched}"
        if self.skipped:
            line += f" (skipped: {self.reason})"
        return line


@dataclass(frozen=True)
class EngineRun:
    """Outcome of folding every module over the original content."""

    original: bytes
    content: bytes
    mode: PatchMode
    reports: Tuple[ModuleReport, ...] = field(default_factory=tuple)

    @property
    def changed(self) -> bool:
        return self.content != self.original

    @property
    def total_patched(self) -> int:
        return sum(report.patched for report in self.reports)

    def report_for(self, module_id: str) -> ModuleReport:
        for report in self.reports:
            if report.module_id == module_id:
                return report
        raise KeyError(module_id)


class PatchEngine:
    """Applies an ordered module list under a selection and mode."""

    def __init__(self, modules: Sequence[PatchModule] = PATCH_MODULES):
        self.modules = tuple(modules)

    def default_selection(self) -> PatchSelection:
        return resolve_selection(self.modules)

    def step(self, module: PatchModule, content: bytes, mode: PatchMode,
             selection: PatchSelection) -> Tuple[bytes, ModuleReport]:
        """Run one module; returns the next buffer and its report."""
        if not selection.is_enabled(module.module_id):
            return content, ModuleReport(module.module_id, skipped=True, reason=REASON_DISABLED)
        if not module.is_applicable(mode):
            return content, ModuleReport(module.module_id, skipped=True, reason=REASON_NOT_APPLICABLE)

        result = module.apply(content, mode)

        if mode.preserve_length and len(result.content) != len(content):
            violation = SizeInvariantViolation(
                f"Patch '{module.module_id}' would change the target size "
                f"({len(content)} -> {len(result.content)} bytes); edit discarded",
                module_id=module.module_id,
                before=len(content),
                after=len(result.content),
            )
            logger.warning("%s", violation, extra={"error": violation.to_dict()})
            return content, ModuleReport(
                module.module_id,
                candidates=result.candidates,
                patched=0,
                skipped=True,
                reason=REASON_SIZE_CHANGE,
            )

        logger.debug("Patch %s: candidates=%d patched=%d",
                     module.module_id, result.candidates, result.patched)
        return result.content, ModuleReport(
            module.module_id,
            candidates=result.candidates,
            patched=result.patched,
        )

    def run(self, content: bytes, mode: PatchMode,
            selection: Optional[PatchSelection] = None) -> EngineRun:
        if selection is None:
            selection = self.default_selection()

        original = bytes(content)
        current = original
        reports: List[ModuleReport] = []
        for module in self.modules:
            current, report = self.step(module, current, mode, selection)
            reports.append(report)

        return EngineRun(original=original, content=current, mode=mode, reports=tuple(reports))
