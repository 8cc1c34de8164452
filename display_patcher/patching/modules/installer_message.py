"""Silence the npm-to-native installer migration notice."""

from __future__ import annotations

from ..base import ModuleResult, PatchMode, PatchModule, fit_width

ANCHOR = b"switched from npm to native installer"
REPLACEMENT = b"(patched)"
QUOTES = frozenset(b"\"'`")
BACKSLASH = ord("\\")
# Bound on how far a literal may extend around the anchor.
WINDOW = 4096


def _is_escaped(content: bytes, pos: int) -> bool:
    """True when an odd run of backslashes precedes ``pos``."""
    run = 0
    pos -= 1
    while pos >= 0 and content[pos] == BACKSLASH:
        run += 1
        pos -= 1
    return run % 2 == 1


def _literal_start(content: bytes, anchor_pos: int) -> int:
    start = anchor_pos
    limit = max(0, anchor_pos - WINDOW)
    while start >= limit:
        if content[start] in QUOTES and not _is_escaped(content, start):
            return start
        start -= 1
    return -1


def _literal_end(content: bytes, start: int) -> int:
    quote = content[start]
    end = start + 1
    limit = min(len(content), start + 1 + WINDOW)
    while end < limit:
        byte = content[end]
        if byte == BACKSLASH:
            end += 2
            continue
        if byte == quote:
            return end
        end += 1
    return -1


class InstallerMessageModule(PatchModule):
    """Replace the migration notice string literal with a short marker."""

    module_id = "installer-message"
    description = "Replace the 'switched from npm to native installer' notice"

    def apply(self, content: bytes, mode: PatchMode) -> ModuleResult:
        output = content
        candidates = 0
        patched = 0
        idx = output.find(ANCHOR)

        while idx != -1:
            start = _literal_start(output, idx)
            end = _literal_end(output, start) if start != -1 else -1
            if start == -1 or end == -1:
                idx = output.find(ANCHOR, idx + len(ANCHOR))
                continue

            candidates += 1
            payload = output[start + 1:end]
            if payload.rstrip(b" ") != REPLACEMENT:
                replacement = fit_width(REPLACEMENT, len(payload), mode)
                output = output[: start + 1] + replacement + output[end:]
                patched += 1
                idx = output.find(ANCHOR, start + 1 + len(replacement))
                continue

            idx = output.find(ANCHOR, idx + len(ANCHOR))

        return ModuleResult(content=output, candidates=candidates, patched=patched)
