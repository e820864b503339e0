"""Memory devices attached to the system bus: RAM, ROM and file-backed flash."""

from __future__ import annotations

import shutil
from abc import ABC, abstractmethod
from enum import Enum
from os import PathLike
from pathlib import Path
from typing import BinaryIO, Optional, Union

_U64 = (1 << 64) - 1
DEFAULT_SIZE = 0x4000

SizeSpec = Union[int, str]
PathSpec = Union[str, PathLike]


class DataType(Enum):
    """Width and signedness of a bus access."""

    DWORD = (8, False)
    WORD = (4, True)
    WORD_UNSIGNED = (4, False)
    HWORD = (2, True)
    HWORD_UNSIGNED = (2, False)
    BYTE = (1, True)
    BYTE_UNSIGNED = (1, False)

    def __init__(self, size: int, signed: bool) -> None:
        self.size = size
        self.signed = signed


class MemoryAccessError(Exception):
    """Raised when a device refuses an access."""


def _parse_size(size: SizeSpec) -> int:
    value = int(size, 0) if isinstance(size, str) else int(size)
    if value < 0:
        raise ValueError(f"device size must be non-negative, got {size!r}")
    return value


def _extend(raw: int, size: int, signed: bool) -> int:
    """Sign- or zero-extend a ``size``-byte value to an unsigned 64-bit integer."""
    bits = size * 8
    raw &= (1 << bits) - 1
    if signed and raw >> (bits - 1):
        raw -= 1 << bits
    return raw & _U64


class MemoryDevice(ABC):
    """A bus slave occupying ``size`` bytes of address space."""

    def __init__(self, size: SizeSpec = DEFAULT_SIZE) -> None:
        self.size = _parse_size(size)

    def check_bound(self, addr: int, length: int) -> bool:
        """Return whether ``length`` bytes at ``addr`` lie inside the device."""
        return addr >= 0 and addr + length <= self.size

    @abstractmethod
    def read(self, addr: int, data_type: DataType) -> int:
        """Read from ``addr``."""

    @abstractmethod
    def write(self, addr: int, data_type: DataType, wdata: int) -> None:
        """Write ``wdata`` to ``addr``."""


class _BufferDevice(MemoryDevice):
    """Device backed by an in-memory buffer padded to whole doublewords."""

    def __init__(self, size: SizeSpec) -> None:
        super().__init__(size)
        self._data = bytearray(((self.size >> 3) + 1) * 8)

    def _load(self, init_file: PathSpec) -> None:
        with open(init_file, "rb") as stream:
            content = stream.read(self.size)
        self._data[: len(content)] = content

    def _span(self, addr: int, length: int) -> slice:
        if addr < 0 or addr + length > len(self._data):
            raise MemoryAccessError(
                f"access of {length} bytes at {addr:#x} is outside the device"
            )
        return slice(addr, addr + length)

    def _read_dword(self, addr: int) -> int:
        return int.from_bytes(self._data[self._span(addr, 8)], "little")


class RAM(_BufferDevice):
    """Zero-initialised read/write memory, optionally preloaded from a file."""

    def __init__(
        self, size: SizeSpec = DEFAULT_SIZE, init_file: Optional[PathSpec] = None
    ) -> None:
        super().__init__(size)
        if init_file is not None:
            try:
                self._load(init_file)
            except OSError:
                pass

    def read(self, addr: int, data_type: DataType) -> int:
        """Return the raw doubleword stored at ``addr``, whatever ``data_type``."""
        return self._read_dword(addr)

    def write(self, addr: int, data_type: DataType, wdata: int) -> None:
        """Store the low bytes of ``wdata`` that ``data_type`` covers."""
        length = data_type.size
        self._data[self._span(addr, length)] = (wdata & ((1 << (8 * length)) - 1)).to_bytes(
            length, "little"
        )


class ROM(_BufferDevice):
    """Read-only memory loaded from an image file."""

    def __init__(self, init_file: PathSpec, size: SizeSpec = DEFAULT_SIZE) -> None:
        super().__init__(size)
        self._load(init_file)

    def read(self, addr: int, data_type: DataType) -> int:
        """Return the raw doubleword stored at ``addr``, whatever ``data_type``."""
        return self._read_dword(addr)

    def write(self, addr: int, data_type: DataType, wdata: int) -> None:
        """Always refuse: the device is read-only."""
        raise MemoryAccessError(f"write to read-only memory at {addr:#x}")


class Flash(MemoryDevice):
    """Flash memory backed by a working copy of an image file.

    The image is copied to ``workdir`` under its base name prefixed with a dot,
    so writes never change the original file.
    """

    def __init__(
        self,
        file_name: PathSpec,
        size: SizeSpec = DEFAULT_SIZE,
        workdir: Optional[PathSpec] = None,
    ) -> None:
        super().__init__(size)
        source = Path(file_name)
        if not str(file_name) or not source.name:
            raise ValueError("flash image file name must not be empty")
        directory = Path(workdir) if workdir is not None else Path.cwd()
        self.path = directory / f".{source.name}"
        shutil.copyfile(source, self.path)
        self._file: BinaryIO = open(self.path, "r+b")

    def _require_bound(self, addr: int, length: int) -> None:
        if not self.check_bound(addr, length):
            raise MemoryAccessError(
                f"access of {length} bytes at {addr:#x} is outside the flash"
            )

    def write(self, addr: int, data_type: DataType, wdata: int) -> None:
        """Store the low bytes of ``wdata`` into the working copy."""
        length = data_type.size
        self._require_bound(addr, length)
        self._file.seek(addr)
        self._file.write((wdata & _U64).to_bytes(8, "little")[:length])

    def read(self, addr: int, data_type: DataType) -> int:
        """Read and extend a value; bytes beyond the end of the file read as zero."""
        length = data_type.size
        self._require_bound(addr, length)
        end = self._file.seek(0, 2)
        if addr + length > end:
            self._file.seek(addr + length - 1)
            self._file.write(b"\x00")
            return 0
        self._file.seek(addr)
        raw = int.from_bytes(self._file.read(length), "little")
        return _extend(raw, length, data_type.signed)

    def close(self) -> None:
        """Flush and close the working copy."""
        self._file.close()

    def __enter__(self) -> "Flash":
        return self

    def __exit__(self, *args) -> None:
        self.close()