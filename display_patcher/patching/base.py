"""Patch module contract.

A patch module is a stateless strategy object: it locates one behavior of
the target by a literal anchor, checks a structural shape in a bounded
window around it, and rewrites the matched slice. ``apply`` is a pure
function of ``(content, mode)``.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..detectors.target_classifier import TargetClassification

FILLER = b" "

# Identifier spelling changes between builds; only its shape is matched.
IDENT = rb"[A-Za-z_$][\w$]*"


@dataclass(frozen=True)
class PatchMode:
    """Operating mode handed to every module."""

    preserve_length: bool = False
    binary: bool = False

    @classmethod
    def for_target(cls, classification: TargetClassification, allow_size_change: bool = False) -> "PatchMode":
        return cls(
            preserve_length=classification.is_binary and not allow_size_change,
            binary=classification.is_binary,
        )


@dataclass(frozen=True)
class ModuleResult:
    """Output of a single module application."""

    content: bytes
    candidates: int = 0
    patched: int = 0

    def __post_init__(self) -> None:
        if self.candidates < 0 or self.patched < 0:
            raise ValueError("candidate and patch counts must be non-negative")
        if self.patched > self.candidates:
            raise ValueError(
                f"patched ({self.patched}) cannot exceed candidates ({self.candidates})"
            )


class PatchModule(ABC):
    """Base class for all patch modules."""

    module_id: str = ""
    description: str = ""
    default_enabled: bool = True
    # Text-only modules are not applicable to raw binaries.
    text_only: bool = False

    def is_applicable(self, mode: PatchMode) -> bool:
        return not (self.text_only and mode.binary)

    @abstractmethod
    def apply(self, content: bytes, mode: PatchMode) -> ModuleResult:
        """Return the rewritten content and match statistics. Never raises on zero matches."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.module_id!r}>"


def fit_width(replacement: bytes, width: int, mode: PatchMode) -> bytes:
    """Right-pad ``replacement`` to ``width`` when lengths must be preserved.

    A replacement wider than the slot is returned as-is; the engine rejects
    it later if the mode forbids size changes.
    """
    if mode.preserve_length and len(replacement) < width:
        return replacement.ljust(width, FILLER)
    return replacement


def rewrite_value(current: bytes, desired: bytes, mode: PatchMode) -> bytes:
    """Rewrite a literal slot, keeping it untouched when already ``desired``."""
    if current.rstrip(FILLER) == desired:
        return current
    return fit_width(desired, len(current), mode)


def rewrite_props(props: bytes, key: bytes, desired: bytes, mode: PatchMode, count: int = 0) -> bytes:
    """Rewrite ``key:<value>`` slots inside an object-literal body."""
    pattern = re.compile(re.escape(key) + rb":([^,}]+)")

    def _sub(match: "re.Match[bytes]") -> bytes:
        return key + b":" + rewrite_value(match.group(1), desired, mode)

    return pattern.sub(_sub, props, count=count)


def blank_out(segment: bytes, mode: PatchMode) -> bytes:
    """Remove a statement: empty in text mode, same-width whitespace otherwise."""
    if mode.preserve_length:
        return FILLER * len(segment)
    return b""
