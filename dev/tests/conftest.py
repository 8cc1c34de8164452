from __future__ import annotations

import logging
import struct
from typing import Callable, Sequence, Tuple

import pytest

from display_patcher.logging_config import ROOT_LOGGER_NAME, cleanup_logging

SHEBANG = b"#!/usr/bin/env node\n"

# Slots are at least two bytes wide so every rewrite fits in place.
BUNDLE_BODY = (
    b"// bundled cli\n"
    b"function Ab(x){switch(x.type){"
    b'case"collapsed_read_search":return R.createElement(Qz,{messages:m,verbose:Kq7,width:w});'
    b'case"thinking":{if(!q&&!z)return null;'
    b"return R.createElement(Th,{param:p,isTranscriptMode:Vt,hideInTranscript:Y&&!W,verbose:K})}"
    b'case"other":return null;default:return null}}\n'
    b'var msg="Claude has switched from npm to native installer. Run claude install.";\n'
)

# verbose slot is one byte wide: "!0" cannot replace it without growing.
NARROW_BODY = (
    b'case"collapsed_read_search":return R.createElement(Qz,{verbose:K});'
    b'var msg="switched from npm to native installer";\n'
)

ELF_PREFIX = b"\x7fELF" + b"\x00" * 60


@pytest.fixture(autouse=True)
def _reset_package_logging():
    yield
    cleanup_logging()
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def text_bundle() -> bytes:
    return SHEBANG + BUNDLE_BODY


@pytest.fixture
def binary_bundle() -> bytes:
    return ELF_PREFIX + BUNDLE_BODY


@pytest.fixture
def narrow_binary_bundle() -> bytes:
    return ELF_PREFIX + NARROW_BODY


def _pad(data: bytes, size: int) -> bytes:
    assert len(data) <= size, "container header does not fit in its declared extent"
    return data + b"\x00" * (size - len(data))


def build_elf(segments: Sequence[Tuple[int, int]], *, is64: bool = True, little: bool = True,
              total_size: int = 0) -> bytes:
    """Minimal ELF image with one PT_LOAD program header per (offset, filesz)."""
    order = "<" if little else ">"
    ident = b"\x7fELF" + bytes([2 if is64 else 1, 1 if little else 2, 1, 0]) + b"\x00" * 8
    if is64:
        header = ident + struct.pack(
            order + "HHIQQQIHHHHHH",
            2, 0x3E, 1, 0, 64, 0, 0, 64, 56, len(segments), 0, 0, 0,
        )
        phdrs = b"".join(
            struct.pack(order + "IIQQQQQQ", 1, 5, offset, 0, 0, filesz, filesz, 0x1000)
            for offset, filesz in segments
        )
    else:
        header = ident + struct.pack(
            order + "HHIIIIIHHHHHH",
            2, 0x03, 1, 0, 52, 0, 0, 52, 32, len(segments), 0, 0, 0,
        )
        phdrs = b"".join(
            struct.pack(order + "IIIIIIII", 1, offset, 0, 0, filesz, filesz, 5, 0x1000)
            for offset, filesz in segments
        )
    image = header + phdrs
    return _pad(image, total_size) if total_size else image


def build_macho(segments: Sequence[Tuple[int, int]], *, is64: bool = True, little: bool = True,
                total_size: int = 0, extra_commands: int = 0) -> bytes:
    """Minimal Mach-O image with one segment command per (fileoff, filesize).

    ``extra_commands`` adds LC_UUID commands that the walker must skip.
    """
    order = "<" if little else ">"
    commands = []
    for _ in range(extra_commands):
        commands.append(struct.pack(order + "II16s", 0x1B, 24, b"\x11" * 16))
    for fileoff, filesize in segments:
        if is64:
            commands.append(struct.pack(order + "II16sQQQQiiII", 0x19, 72, b"__TEXT",
                                        0, filesize, fileoff, filesize, 5, 5, 0, 0))
        else:
            commands.append(struct.pack(order + "II16sIIIIiiII", 0x1, 56, b"__TEXT",
                                        0, filesize, fileoff, filesize, 5, 5, 0, 0))
    body = b"".join(commands)
    if is64:
        header = struct.pack(order + "IiiIIIII", 0xFEEDFACF, 0x0100000C, 0, 6, len(commands), len(body), 0, 0)
    else:
        header = struct.pack(order + "IiiIIII", 0xFEEDFACE, 7, 3, 6, len(commands), len(body), 0)
    image = header + body
    return _pad(image, total_size) if total_size else image


@pytest.fixture
def elf_builder() -> Callable[..., bytes]:
    return build_elf


@pytest.fixture
def macho_builder() -> Callable[..., bytes]:
    return build_macho
