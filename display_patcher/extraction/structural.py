"""Structural size calculator for embedded ELF and Mach-O containers.

Only the minimal structure is read: the ELF program-header table or the
Mach-O load-command list, each entry contributing a ``(file_offset,
file_size)`` extent. The payload ends at the furthest extent. All reads are
bounds-checked against the host buffer; offsets are Python ints, so full
64-bit values are exact until the final range check.
"""

from __future__ import annotations

import struct
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Type

from ..exceptions import StructuralParseError

LITTLE_ENDIAN = "<"
BIG_ENDIAN = ">"

# ELF identification
ELF_MAGIC = b"\x7fELF"
ELFCLASS32 = 1
ELFCLASS64 = 2
ELFDATA2LSB = 1
ELFDATA2MSB = 2

# Mach-O
MH_MAGIC = 0xFEEDFACE
MH_MAGIC_64 = 0xFEEDFACF
LC_SEGMENT = 0x1
LC_SEGMENT_64 = 0x19


@dataclass(frozen=True)
class SegmentExtent:
    """A contiguous file region described by one structural entry."""

    file_offset: int
    file_size: int

    @property
    def end(self) -> int:
        return self.file_offset + self.file_size


@dataclass(frozen=True)
class ElfLayout:
    header_size: int
    phoff_at: int
    phoff_fmt: str
    phentsize_at: int
    phnum_at: int
    p_offset_at: int
    p_filesz_at: int
    word_fmt: str

    @property
    def min_entry_size(self) -> int:
        return self.p_filesz_at + struct.calcsize(self.word_fmt)


ELF32_LAYOUT = ElfLayout(
    header_size=52, phoff_at=28, phoff_fmt="I", phentsize_at=42, phnum_at=44,
    p_offset_at=4, p_filesz_at=16, word_fmt="I",
)
ELF64_LAYOUT = ElfLayout(
    header_size=64, phoff_at=32, phoff_fmt="Q", phentsize_at=54, phnum_at=56,
    p_offset_at=8, p_filesz_at=32, word_fmt="Q",
)


class ExecutableRegion(ABC):
    """A container header located at ``header_start`` inside a host buffer."""

    format_tag = ""

    def __init__(self, buffer: bytes, header_start: int, is64: bool, endianness: str):
        self.buffer = buffer
        self.header_start = header_start
        self.is64 = is64
        self.endianness = endianness

    def _fail(self, message: str, offset: Optional[int] = None) -> StructuralParseError:
        return StructuralParseError(
            message,
            format_tag=self.format_tag,
            offset=self.header_start if offset is None else offset,
        )

    def _read(self, fmt: str, offset: int) -> int:
        size = struct.calcsize(fmt)
        if offset < 0 or offset + size > len(self.buffer):
            raise self._fail(f"Truncated {self.format_tag} structure at offset {offset}", offset)
        return struct.unpack_from(self.endianness + fmt, self.buffer, offset)[0]

    @classmethod
    @abstractmethod
    def parse(cls, buffer: bytes, start: int) -> "ExecutableRegion":
        """Read the fixed header and return a region ready to enumerate."""

    @abstractmethod
    def iter_extents(self) -> Iterator[SegmentExtent]:
        """Yield every file region declared by the structural entries."""

    def max_end(self) -> int:
        """Furthest ``offset + size`` relative to the container start."""
        return max((extent.end for extent in self.iter_extents()), default=0)

    def __repr__(self) -> str:
        order = "LE" if self.endianness == LITTLE_ENDIAN else "BE"
        bits = 64 if self.is64 else 32
        return f"<{type(self).__name__} {bits}-bit {order} at {self.header_start:#x}>"


class ElfRegion(ExecutableRegion):
    """ELF container; extents come from the program-header table."""

    format_tag = "elf"

    @classmethod
    def parse(cls, buffer: bytes, start: int) -> "ElfRegion":
        if start < 0 or start + 6 > len(buffer) or buffer[start:start + 4] != ELF_MAGIC:
            raise StructuralParseError("Missing ELF magic", format_tag=cls.format_tag, offset=start)

        elf_class = buffer[start + 4]
        elf_data = buffer[start + 5]
        if elf_class not in (ELFCLASS32, ELFCLASS64) or elf_data not in (ELFDATA2LSB, ELFDATA2MSB):
            raise StructuralParseError(
                f"Unsupported ELF class/endianness ({elf_class}/{elf_data})",
                format_tag=cls.format_tag,
                offset=start,
            )

        is64 = elf_class == ELFCLASS64
        layout = ELF64_LAYOUT if is64 else ELF32_LAYOUT
        if start + layout.header_size > len(buffer):
            raise StructuralParseError("Truncated ELF header", format_tag=cls.format_tag, offset=start)

        endianness = LITTLE_ENDIAN if elf_data == ELFDATA2LSB else BIG_ENDIAN
        return cls(buffer, start, is64, endianness)

    @property
    def layout(self) -> ElfLayout:
        return ELF64_LAYOUT if self.is64 else ELF32_LAYOUT

    def iter_extents(self) -> Iterator[SegmentExtent]:
        layout = self.layout
        start = self.header_start
        phoff = self._read(layout.phoff_fmt, start + layout.phoff_at)
        phentsize = self._read("H", start + layout.phentsize_at)
        phnum = self._read("H", start + layout.phnum_at)

        if phentsize == 0 or phnum == 0:
            raise self._fail("ELF has no program headers")
        if phentsize < layout.min_entry_size:
            raise self._fail(f"ELF program header entry too small ({phentsize} bytes)")

        table_start = start + phoff
        if table_start + phnum * phentsize > len(self.buffer):
            raise self._fail("Truncated ELF program header table", table_start)

        for index in range(phnum):
            entry = table_start + index * phentsize
            if entry + phentsize > len(self.buffer):
                raise self._fail("Truncated ELF program header", entry)
            yield SegmentExtent(
                file_offset=self._read(layout.word_fmt, entry + layout.p_offset_at),
                file_size=self._read(layout.word_fmt, entry + layout.p_filesz_at),
            )


class MachORegion(ExecutableRegion):
    """Mach-O container; extents come from segment load commands."""

    format_tag = "macho"

    @classmethod
    def parse(cls, buffer: bytes, start: int) -> "MachORegion":
        if start < 0 or start + 4 > len(buffer):
            raise StructuralParseError("Truncated Mach-O magic", format_tag=cls.format_tag, offset=start)

        magic_le = struct.unpack_from("<I", buffer, start)[0]
        magic_be = struct.unpack_from(">I", buffer, start)[0]
        if magic_le in (MH_MAGIC, MH_MAGIC_64):
            endianness, magic = LITTLE_ENDIAN, magic_le
        elif magic_be in (MH_MAGIC, MH_MAGIC_64):
            endianness, magic = BIG_ENDIAN, magic_be
        else:
            raise StructuralParseError("Unsupported Mach-O magic", format_tag=cls.format_tag, offset=start)

        region = cls(buffer, start, magic == MH_MAGIC_64, endianness)
        if start + region.header_size > len(buffer):
            raise StructuralParseError("Truncated Mach-O header", format_tag=cls.format_tag, offset=start)
        return region

    @property
    def header_size(self) -> int:
        return 32 if self.is64 else 28

    def iter_extents(self) -> Iterator[SegmentExtent]:
        start = self.header_start
        ncmds = self._read("I", start + 16)
        sizeofcmds = self._read("I", start + 20)

        offset = start + self.header_size
        commands_end = offset + sizeofcmds
        if commands_end > len(self.buffer):
            raise self._fail("Mach-O load commands exceed file length")

        segment_cmd = LC_SEGMENT_64 if self.is64 else LC_SEGMENT
        # segment_command(_64): fileoff/filesize follow cmd, cmdsize, segname, vmaddr, vmsize
        word_fmt, fileoff_at, filesize_at = ("Q", 40, 48) if self.is64 else ("I", 32, 36)
        min_segment_size = filesize_at + struct.calcsize(word_fmt)

        for _ in range(ncmds):
            if offset + 8 > commands_end:
                raise self._fail("Truncated Mach-O load command", offset)
            cmd = self._read("I", offset)
            cmdsize = self._read("I", offset + 4)
            if cmdsize < 8 or offset + cmdsize > commands_end:
                raise self._fail(f"Invalid Mach-O load command size {cmdsize}", offset)

            if cmd == segment_cmd and cmdsize >= min_segment_size:
                yield SegmentExtent(
                    file_offset=self._read(word_fmt, offset + fileoff_at),
                    file_size=self._read(word_fmt, offset + filesize_at),
                )
            offset += cmdsize


REGION_TYPES: Dict[str, Type[ExecutableRegion]] = {
    ElfRegion.format_tag: ElfRegion,
    MachORegion.format_tag: MachORegion,
}


def parse_region(buffer: bytes, start: int, format_tag: str) -> ExecutableRegion:
    region_type = REGION_TYPES.get(format_tag)
    if region_type is None:
        raise StructuralParseError(f"No structural parser for format '{format_tag}'", offset=start)
    return region_type.parse(buffer, start)


def payload_end(buffer: bytes, start: int, format_tag: str) -> int:
    """Absolute end offset of the container starting at ``start``.

    Raises:
        StructuralParseError: on truncated or malformed structure, when no
            region maps any file bytes, or when the end falls outside the buffer.
    """
    region = parse_region(buffer, start, format_tag)
    max_end = region.max_end()
    if max_end == 0:
        raise StructuralParseError(
            f"Could not determine {format_tag} payload size", format_tag=format_tag, offset=start
        )

    end = start + max_end
    if end > sys.maxsize or end > len(buffer):
        raise StructuralParseError(
            f"Invalid {format_tag} payload length {max_end} at offset {start} "
            f"(buffer is {len(buffer)} bytes)",
            format_tag=format_tag,
            offset=start,
        )
    return end
