"""Embedded payload extraction (marker scan + ELF/Mach-O size calculation)."""

from .extractor import ExtractedPayload, extract_payload, extract_to_file
from .locator import (
    DEFAULT_MAGICS,
    DEFAULT_MARKER_BYTES,
    MagicSignature,
    PayloadCandidate,
    find_marker_offsets,
    find_payload_candidates,
)
from .structural import ElfRegion, ExecutableRegion, MachORegion, SegmentExtent, payload_end

__all__ = [
    "ExtractedPayload",
    "extract_payload",
    "extract_to_file",
    "DEFAULT_MAGICS",
    "DEFAULT_MARKER_BYTES",
    "MagicSignature",
    "PayloadCandidate",
    "find_marker_offsets",
    "find_payload_candidates",
    "ElfRegion",
    "ExecutableRegion",
    "MachORegion",
    "SegmentExtent",
    "payload_end",
]
