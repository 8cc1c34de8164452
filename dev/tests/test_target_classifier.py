from __future__ import annotations

import pytest

from display_patcher.detectors.target_classifier import SNIFF_SIZE, classify_bytes, detect_magic
from display_patcher.patching.base import PatchMode


@pytest.mark.parametrize(
    "header, expected",
    [
        (b"\x7fELF\x02\x01\x01\x00", "elf"),
        (b"\xcf\xfa\xed\xfe", "macho"),
        (b"\xfe\xed\xfa\xce", "macho"),
        (b"\xca\xfe\xba\xbe", "macho-fat"),
        (b"MZ\x90\x00", "pe"),
        (b"#!/u", ""),
    ],
)
def test_detect_magic(header: bytes, expected: str) -> None:
    assert detect_magic(header) == expected


def test_executable_magic_is_binary(binary_bundle: bytes) -> None:
    result = classify_bytes(binary_bundle)
    assert result.is_binary
    assert result.format_tag == "elf"


def test_script_bundle_is_text(text_bundle: bytes) -> None:
    result = classify_bytes(text_bundle)
    assert result.is_text
    assert result.format_tag == "text"


def test_nul_byte_in_sniff_window_marks_binary() -> None:
    assert classify_bytes(b"abc\x00def").is_binary
    late_nul = b"a" * SNIFF_SIZE + b"\x00"
    assert classify_bytes(late_nul).is_text


def test_empty_input_is_text() -> None:
    assert classify_bytes(b"").is_text


def test_mode_follows_classification() -> None:
    binary = classify_bytes(b"\x7fELF" + b"\x00" * 16)
    text = classify_bytes(b"console.log(1)\n")

    assert PatchMode.for_target(binary) == PatchMode(preserve_length=True, binary=True)
    assert PatchMode.for_target(binary, allow_size_change=True) == PatchMode(preserve_length=False, binary=True)
    assert PatchMode.for_target(text) == PatchMode(preserve_length=False, binary=False)
