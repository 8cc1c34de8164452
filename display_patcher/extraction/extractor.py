"""Extract an embedded payload from a host executable."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from ..config.models import DEFAULT_SCAN_WINDOW
from ..exceptions import NotFoundError, StructuralParseError, UnsupportedFormatError
from .locator import (
    DEFAULT_MAGICS,
    DEFAULT_MARKER_BYTES,
    MagicSignature,
    PayloadCandidate,
    find_payload_candidates,
)
from .structural import payload_end

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractedPayload:
    """Located payload slice and the candidate it came from."""

    candidate: PayloadCandidate
    start: int
    end: int
    data: bytes

    @property
    def size(self) -> int:
        return self.end - self.start


def extract_payload(
    buffer: bytes,
    markers: Sequence[bytes] = DEFAULT_MARKER_BYTES,
    magics: Sequence[MagicSignature] = DEFAULT_MAGICS,
    window: int = DEFAULT_SCAN_WINDOW,
) -> ExtractedPayload:
    """Try candidates closest-first; the first that parses to a non-empty slice wins.

    Raises:
        UnsupportedFormatError: when no candidate exists or none parses; the
            last structural error is attached as ``last_error``.
    """
    candidates = find_payload_candidates(buffer, markers, magics, window)
    if not candidates:
        raise UnsupportedFormatError("Could not locate payload marker and container magic")

    last_error: Optional[Exception] = None
    for candidate in candidates:
        try:
            end = payload_end(buffer, candidate.start_offset, candidate.format_tag)
        except StructuralParseError as exc:
            logger.debug("Candidate %s at %#x rejected: %s",
                         candidate.format_tag, candidate.start_offset, exc)
            last_error = exc
            continue

        data = bytes(buffer[candidate.start_offset:end])
        if data:
            logger.info("Payload: %s at %#x, %d bytes (distance %d from marker)",
                        candidate.format_tag, candidate.start_offset, len(data), candidate.distance)
            return ExtractedPayload(candidate=candidate, start=candidate.start_offset, end=end, data=data)

    message = "Could not parse extracted payload from any candidate"
    if last_error is not None:
        message = f"{message}: {last_error}"
    raise UnsupportedFormatError(message, last_error=last_error)


def extract_to_file(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    markers: Sequence[bytes] = DEFAULT_MARKER_BYTES,
    window: int = DEFAULT_SCAN_WINDOW,
) -> ExtractedPayload:
    """Read the host once, locate the payload and write it verbatim."""
    source = Path(input_path)
    if not source.is_file():
        raise NotFoundError(f"Input file not found: {source}", file_path=str(source))

    payload = extract_payload(source.read_bytes(), markers=markers, window=window)

    destination = Path(output_path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(payload.data)
    logger.info("Wrote %d bytes to %s", payload.size, destination)
    return payload
