"""Show thinking blocks outside transcript mode."""

from __future__ import annotations

import re

from ..base import IDENT, ModuleResult, PatchMode, PatchModule, blank_out, rewrite_props

ANCHOR = b'case"thinking":'
NEXT_CASE = b'case"'
DEFAULT_LABEL = b"default:"
REQUIRED_SLOT = b"isTranscriptMode:"

# if(!a&&!b)return null;  /  if(!a&&!b&&!c)return null;
GUARD_RE = re.compile(rb"if\(!" + IDENT + rb"(?:&&!" + IDENT + rb"){1,2}\)return null;")
PROPS_RE = re.compile(rb"createElement\((" + IDENT + rb"),\{([^}]*)\}")


def _window_end(content: bytes, after: int) -> int:
    ends = [pos for pos in (content.find(NEXT_CASE, after), content.find(DEFAULT_LABEL, after)) if pos != -1]
    return min(ends) if ends else len(content)


class ThinkingTranscriptModule(PatchModule):
    """Drop the visibility guard and force transcript rendering for thinking blocks."""

    module_id = "thinking-transcript"
    description = "Always render thinking blocks as in transcript mode"

    def _rewrite_segment(self, segment: bytes, mode: PatchMode) -> bytes:
        guard = GUARD_RE.search(segment)
        if guard is not None:
            segment = segment[: guard.start()] + blank_out(guard.group(0), mode) + segment[guard.end():]

        def _sub(match: "re.Match[bytes]") -> bytes:
            props = match.group(2)
            next_props = rewrite_props(props, b"isTranscriptMode", b"!0", mode)
            next_props = rewrite_props(next_props, b"hideInTranscript", b"!1", mode)
            if next_props == props:
                return match.group(0)
            return b"createElement(" + match.group(1) + b",{" + next_props + b"}"

        return PROPS_RE.sub(_sub, segment)

    def apply(self, content: bytes, mode: PatchMode) -> ModuleResult:
        output = content
        candidates = 0
        patched = 0
        index = 0

        while True:
            start = output.find(ANCHOR, index)
            if start == -1:
                break
            end = _window_end(output, start + len(ANCHOR))
            segment = output[start:end]

            if REQUIRED_SLOT not in segment:
                index = start + len(ANCHOR)
                continue

            candidates += 1
            next_segment = self._rewrite_segment(segment, mode)
            if next_segment != segment:
                patched += 1
                output = output[:start] + next_segment + output[end:]
                index = start + len(next_segment)
                continue

            index = start + len(ANCHOR)

        return ModuleResult(content=output, candidates=candidates, patched=patched)
