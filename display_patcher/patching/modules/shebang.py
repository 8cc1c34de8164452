"""Interpreter line rewrite for script bundles."""

from __future__ import annotations

import re

from ..base import ModuleResult, PatchMode, PatchModule

SHEBANG_RE = re.compile(rb"\A#!/usr/bin/env (node|bun)([^\n]*)")


class ShebangModule(PatchModule):
    """Run the bundle with bun instead of node."""

    module_id = "shebang"
    description = "Rewrite the '#!/usr/bin/env node' interpreter line to bun"
    default_enabled = False
    text_only = True

    def apply(self, content: bytes, mode: PatchMode) -> ModuleResult:
        match = SHEBANG_RE.match(content)
        if match is None:
            return ModuleResult(content=content)
        if match.group(1) == b"bun":
            return ModuleResult(content=content, candidates=1)

        rewritten = b"#!/usr/bin/env bun" + match.group(2)
        return ModuleResult(
            content=rewritten + content[match.end():],
            candidates=1,
            patched=1,
        )
