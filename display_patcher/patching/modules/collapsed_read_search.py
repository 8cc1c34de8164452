"""Expand collapsed read/search tool groups."""

from __future__ import annotations

import re

from ..base import IDENT, ModuleResult, PatchMode, PatchModule, rewrite_props

ANCHOR = b'case"collapsed_read_search":'
SHAPE_RE = re.compile(
    re.escape(ANCHOR)
    + rb"return (" + IDENT + rb")\.createElement\((" + IDENT + rb"),\{([^}]*)\}\)"
)


class CollapsedReadSearchModule(PatchModule):
    """Force ``verbose`` on the collapsed read/search renderer."""

    module_id = "collapsed-read-search"
    description = "Render collapsed read/search tool groups in verbose form"

    def apply(self, content: bytes, mode: PatchMode) -> ModuleResult:
        if ANCHOR not in content:
            return ModuleResult(content=content)

        candidates = 0
        patched = 0

        def _sub(match: "re.Match[bytes]") -> bytes:
            nonlocal candidates, patched
            props = match.group(3)
            if b"verbose:" not in props:
                return match.group(0)
            candidates += 1
            next_props = rewrite_props(props, b"verbose", b"!0", mode, count=1)
            if next_props == props:
                return match.group(0)
            patched += 1
            return match.group(0)[: match.start(3) - match.start(0)] + next_props + b"})"

        updated = SHAPE_RE.sub(_sub, content)
        return ModuleResult(content=updated, candidates=candidates, patched=patched)
