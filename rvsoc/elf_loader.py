"""Section-based loader for 64-bit little-endian ELF images."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Callable, List

EI_NIDENT = 16
ELF_MAGIC = b"\x7fELF"

SHT_NULL = 0
SHT_PROGBITS = 1
SHT_SYMTAB = 2
SHT_STRTAB = 3
SHT_RELA = 4
SHT_HASH = 5
SHT_DYNAMIC = 6
SHT_NOTE = 7
SHT_NOBITS = 8
SHT_REL = 9
SHT_SHLIB = 10
SHT_DYNSYM = 11
SHT_LOPROC = 0x70000000
SHT_HIPROC = 0x7FFFFFFF
SHT_LOUSER = 0x80000000
SHT_HIUSER = 0x8FFFFFFF

SHF_WRITE = 1 << 0
SHF_ALLOC = 1 << 1
SHF_EXECINSTR = 1 << 2
SHF_MASKPROC = 0xF0000000

_EHDR = struct.Struct("<16sHHIQQQIHHHHHH")
_SHDR = struct.Struct("<IIQQQQIIQQ")


class ElfFormatError(ValueError):
    """Raised when an image is not a well-formed 64-bit ELF file."""


@dataclass(frozen=True)
class ElfHeader:
    """The ELF file header."""

    e_ident: bytes
    e_type: int
    e_machine: int
    e_version: int
    e_entry: int
    e_phoff: int
    e_shoff: int
    e_flags: int
    e_ehsize: int
    e_phentsize: int
    e_phnum: int
    e_shentsize: int
    e_shnum: int
    e_shstrndx: int


@dataclass(frozen=True)
class SectionHeader:
    """One entry of the section header table."""

    sh_name: int
    sh_type: int
    sh_flags: int
    sh_addr: int
    sh_offset: int
    sh_size: int
    sh_link: int
    sh_info: int
    sh_addralign: int
    sh_entsize: int


def parse_elf_header(data: bytes) -> ElfHeader:
    """Decode the file header at the start of ``data``."""
    if len(data) < _EHDR.size:
        raise ElfFormatError(f"image is {len(data)} bytes, shorter than an ELF header")
    header = ElfHeader(*_EHDR.unpack_from(data, 0))
    if header.e_ident[:4] != ELF_MAGIC:
        raise ElfFormatError("missing ELF magic number")
    return header


def parse_section_headers(data: bytes, header: ElfHeader) -> List[SectionHeader]:
    """Decode the section header table described by ``header``."""
    end = header.e_shoff + header.e_shnum * _SHDR.size
    if end > len(data):
        raise ElfFormatError("section header table runs past the end of the image")
    return [
        SectionHeader(*_SHDR.unpack_from(data, header.e_shoff + n * _SHDR.size))
        for n in range(header.e_shnum)
    ]


def load_elf(data: bytes, write: Callable[[int, bytes], object]) -> int:
    """Copy every PROGBITS section with a load address through ``write``.

    ``write`` is called with the section's address and its bytes. The entry
    point is returned.
    """
    header = parse_elf_header(data)
    for section in parse_section_headers(data, header):
        if section.sh_type != SHT_PROGBITS or not section.sh_addr:
            continue
        end = section.sh_offset + section.sh_size
        if end > len(data):
            raise ElfFormatError(
                f"section at offset {section.sh_offset:#x} runs past the end of the image"
            )
        write(section.sh_addr, bytes(data[section.sh_offset:end]))
    return header.e_entry