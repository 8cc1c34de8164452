"""Payload locator: marker scan plus windowed container-magic search."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

from ..config.models import DEFAULT_MARKERS, DEFAULT_SCAN_WINDOW

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MagicSignature:
    format_tag: str
    magic: bytes


DEFAULT_MAGICS: Tuple[MagicSignature, ...] = (
    MagicSignature("elf", b"\x7fELF"),
    MagicSignature("macho", b"\xcf\xfa\xed\xfe"),
    MagicSignature("macho", b"\xfe\xed\xfa\xcf"),
    MagicSignature("macho", b"\xce\xfa\xed\xfe"),
    MagicSignature("macho", b"\xfe\xed\xfa\xce"),
)

DEFAULT_MARKER_BYTES: Tuple[bytes, ...] = tuple(marker.encode("utf-8") for marker in DEFAULT_MARKERS)


@dataclass(frozen=True)
class PayloadCandidate:
    """A container magic found after a marker occurrence."""

    format_tag: str
    start_offset: int
    distance: int
    marker_offset: int


def find_marker_offsets(buffer: bytes, marker: bytes) -> Iterator[int]:
    """Yield every occurrence of ``marker``, not just the first."""
    if not marker:
        return
    cursor = 0
    while True:
        index = buffer.find(marker, cursor)
        if index == -1:
            return
        yield index
        cursor = index + len(marker)


def find_payload_candidates(
    buffer: bytes,
    markers: Sequence[bytes] = DEFAULT_MARKER_BYTES,
    magics: Sequence[MagicSignature] = DEFAULT_MAGICS,
    window: int = DEFAULT_SCAN_WINDOW,
) -> List[PayloadCandidate]:
    """Collect candidates for every (marker occurrence, magic) pair, closest first.

    For each marker occurrence, the scan window starts right after the marker
    and spans ``window`` bytes; every occurrence of each magic
    inside it becomes a candidate. Candidates sharing a start offset collapse
    to the one with the smallest distance.
    """
    candidates: List[PayloadCandidate] = []
    for marker in markers:
        for marker_offset in find_marker_offsets(buffer, marker):
            scan_start = marker_offset + len(marker)
            scan_end = min(scan_start + window, len(buffer))
            for signature in magics:
                # The magic itself must start inside the window.
                search_end = scan_end + len(signature.magic) - 1
                found = buffer.find(signature.magic, scan_start, search_end)
                while found != -1:
                    candidates.append(
                        PayloadCandidate(
                            format_tag=signature.format_tag,
                            start_offset=found,
                            distance=found - scan_start,
                            marker_offset=marker_offset,
                        )
                    )
                    found = buffer.find(signature.magic, found + 1, search_end)

    candidates.sort(key=lambda candidate: candidate.distance)

    unique: List[PayloadCandidate] = []
    seen_starts = set()
    for candidate in candidates:
        if candidate.start_offset in seen_starts:
            continue
        seen_starts.add(candidate.start_offset)
        unique.append(candidate)

    logger.debug("Found %d payload candidate(s)", len(unique))
    return unique
