#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Target classification by magic number and binary sniffing.

The patch engine only needs a boolean out of this: whether the target is a
raw executable whose byte length must be preserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

logger = logging.getLogger(__name__)

ELF_MAGIC = b"\x7fELF"
MACHO_MAGICS: Tuple[bytes, ...] = (
    b"\xcf\xfa\xed\xfe",  # 64-bit, little-endian
    b"\xfe\xed\xfa\xcf",  # 64-bit, big-endian
    b"\xce\xfa\xed\xfe",  # 32-bit, little-endian
    b"\xfe\xed\xfa\xce",  # 32-bit, big-endian
)
FAT_MAGIC = b"\xca\xfe\xba\xbe"
DOS_MAGIC = b"MZ"

SNIFF_SIZE = 8192

FORMAT_TEXT = "text"
FORMAT_BINARY = "binary"


@dataclass(frozen=True)
class TargetClassification:
    """Result of classifying a target buffer."""

    format_tag: str
    is_binary: bool

    @property
    def is_text(self) -> bool:
        return not self.is_binary


def detect_magic(header: bytes) -> str:
    """Return the container tag for a known magic number, or '' when unknown."""
    if header[:4] == ELF_MAGIC:
        return "elf"
    if header[:4] in MACHO_MAGICS:
        return "macho"
    if header[:4] == FAT_MAGIC:
        return "macho-fat"
    if header[:2] == DOS_MAGIC:
        return "pe"
    return ""


def classify_bytes(data: bytes) -> TargetClassification:
    """Classify a target from its leading bytes."""
    format_tag = detect_magic(data[:4])
    if format_tag:
        return TargetClassification(format_tag=format_tag, is_binary=True)
    if b"\x00" in data[:SNIFF_SIZE]:
        return TargetClassification(format_tag=FORMAT_BINARY, is_binary=True)
    return TargetClassification(format_tag=FORMAT_TEXT, is_binary=False)
