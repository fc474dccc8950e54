"""ELF executable file header and program header layouts."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntFlag
from typing import ClassVar

ELF_MAGIC = 0x464C457F  # "\x7FELF" read as a little-endian word

ELF_PROG_LOAD = 1


class ProgFlag(IntFlag):
    """Permission bits of a program header."""

    EXEC = 1
    WRITE = 2
    READ = 4


class ElfFormatError(ValueError):
    """Raised when bytes do not hold a valid header."""


@dataclass
class ElfHeader:
    """The fixed-size header at the start of an ELF file."""

    magic: int = ELF_MAGIC
    ident: bytes = bytes(12)
    type: int = 0
    machine: int = 0
    version: int = 0
    entry: int = 0
    phoff: int = 0
    shoff: int = 0
    flags: int = 0
    ehsize: int = 0
    phentsize: int = 0
    phnum: int = 0
    shentsize: int = 0
    shnum: int = 0
    shstrndx: int = 0

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<I12sHHIQQQIHHHHHH")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def from_bytes(cls, data: bytes) -> ElfHeader:
        """Decode a header from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ElfFormatError(f"ELF header needs {cls.SIZE} bytes, got {len(data)}")
        header = cls(*cls._STRUCT.unpack_from(data))
        if header.magic != ELF_MAGIC:
            raise ElfFormatError(f"bad ELF magic {header.magic:#x}")
        return header

    def to_bytes(self) -> bytes:
        """Encode the header in its on-disk little-endian form."""
        return self._STRUCT.pack(
            self.magic,
            self.ident,
            self.type,
            self.machine,
            self.version,
            self.entry,
            self.phoff,
            self.shoff,
            self.flags,
            self.ehsize,
            self.phentsize,
            self.phnum,
            self.shentsize,
            self.shnum,
            self.shstrndx,
        )


@dataclass
class ProgramHeader:
    """One program section header."""

    type: int = 0
    flags: int = 0
    off: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    align: int = 0

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<IIQQQQQQ")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def from_bytes(cls, data: bytes) -> ProgramHeader:
        """Decode a program header from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ElfFormatError(
                f"program header needs {cls.SIZE} bytes, got {len(data)}"
            )
        return cls(*cls._STRUCT.unpack_from(data))

    def to_bytes(self) -> bytes:
        """Encode the program header in its on-disk form."""
        return self._STRUCT.pack(
            self.type,
            self.flags,
            self.off,
            self.vaddr,
            self.paddr,
            self.filesz,
            self.memsz,
            self.align,
        )

    def is_loadable(self) -> bool:
        """True when the segment is to be loaded into memory."""
        return self.type == ELF_PROG_LOAD