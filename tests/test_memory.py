import os

import pytest

from rvsoc.memory import (
    DataType,
    Flash,
    MemoryAccessError,
    RAM,
    ROM,
)


@pytest.mark.parametrize(
    "data_type,expected",
    [
        (DataType.DWORD, (1 << 64) - 1),
        (DataType.WORD, (1 << 32) - 1),
        (DataType.WORD_UNSIGNED, (1 << 32) - 1),
        (DataType.HWORD, (1 << 16) - 1),
        (DataType.HWORD_UNSIGNED, (1 << 16) - 1),
        (DataType.BYTE, 0xFF),
        (DataType.BYTE_UNSIGNED, 0xFF),
    ],
)
def test_data_type_sizes(data_type, expected):
    ram = RAM(0x40)
    ram.write(0, data_type, (1 << 64) - 1)
    assert ram.read(0, DataType.DWORD) == expected


def test_ram_starts_zeroed():
    ram = RAM(0x100)
    assert ram.read(0, DataType.DWORD) == 0
    assert ram.size == 0x100


def test_ram_dword_round_trip():
    ram = RAM(0x100)
    ram.write(0x10, DataType.DWORD, 0x0123456789ABCDEF)
    assert ram.read(0x10, DataType.DWORD) == 0x0123456789ABCDEF


def test_ram_byte_write_truncates_and_reads_raw_dword():
    ram = RAM(0x100)
    ram.write(3, DataType.BYTE, 0x1FF)
    assert ram.read(0, DataType.BYTE) == 0xFF << 24


def test_ram_word_write_keeps_neighbours():
    ram = RAM(0x100)
    ram.write(0, DataType.DWORD, (1 << 64) - 1)
    ram.write(0, DataType.WORD_UNSIGNED, 0)
    assert ram.read(0, DataType.DWORD) == ((1 << 32) - 1) << 32


def test_ram_size_string():
    ram = RAM("0x40")
    assert ram.size == 0x40


def test_ram_init_file(tmp_path):
    image = tmp_path / "ram.bin"
    image.write_bytes(bytes(range(1, 9)))
    ram = RAM(0x40, image)
    assert ram.read(0, DataType.DWORD) == int.from_bytes(bytes(range(1, 9)), "little")


def test_ram_missing_init_file_is_ignored(tmp_path):
    ram = RAM(0x40, tmp_path / "missing.bin")
    assert ram.read(8, DataType.DWORD) == 0


def test_ram_access_outside_buffer_raises():
    ram = RAM(0x40)
    with pytest.raises(MemoryAccessError):
        ram.read(0x1000, DataType.DWORD)
    with pytest.raises(MemoryAccessError):
        ram.write(-1, DataType.BYTE, 0)


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        RAM(-1)


def test_check_bound():
    ram = RAM(0x10)
    assert ram.check_bound(0x8, 8) is True
    assert ram.check_bound(0xC, 8) is False
    assert ram.check_bound(-1, 1) is False


def test_rom_reads_image(tmp_path):
    image = tmp_path / "boot.bin"
    payload = bytes(range(16))
    image.write_bytes(payload)
    rom = ROM(image, 0x100)
    assert rom.read(8, DataType.DWORD) == int.from_bytes(payload[8:16], "little")


def test_rom_refuses_writes(tmp_path):
    image = tmp_path / "boot.bin"
    image.write_bytes(b"\x11" * 8)
    rom = ROM(image, 0x100)
    with pytest.raises(MemoryAccessError):
        rom.write(0, DataType.BYTE, 0)
    assert rom.read(0, DataType.DWORD) == int.from_bytes(b"\x11" * 8, "little")


def test_rom_missing_image_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        ROM(tmp_path / "missing.bin")


@pytest.fixture
def flash_image(tmp_path):
    image = tmp_path / "flash.bin"
    image.write_bytes(bytes([0xFF, 0x7F, 0x00, 0x80]) + bytes(12))
    return image


def test_flash_uses_dot_prefixed_copy(tmp_path, flash_image):
    workdir = tmp_path / "work"
    workdir.mkdir()
    with Flash(flash_image, 0x100, workdir) as flash:
        assert flash.path == workdir / ".flash.bin"
        flash.write(0, DataType.DWORD, 0)
        assert flash.read(0, DataType.DWORD) == 0
    assert flash_image.read_bytes()[:4] == bytes([0xFF, 0x7F, 0x00, 0x80])


def test_flash_signed_and_unsigned_reads(tmp_path, flash_image):
    with Flash(flash_image, 0x100, tmp_path) as flash:
        assert flash.read(0, DataType.BYTE_UNSIGNED) == 0xFF
        assert flash.read(0, DataType.BYTE) == (1 << 64) - 1
        assert flash.read(1, DataType.BYTE) == 0x7F


def test_flash_write_read_round_trip(tmp_path, flash_image):
    with Flash(flash_image, 0x100, tmp_path) as flash:
        flash.write(4, DataType.HWORD, 0x12345)
        assert flash.read(4, DataType.HWORD_UNSIGNED) == 0x2345
        flash.write(8, DataType.WORD, 0xDEADBEEF)
        assert flash.read(8, DataType.WORD_UNSIGNED) == 0xDEADBEEF
        assert flash.read(8, DataType.WORD) == 0xDEADBEEF | (0xFFFFFFFF << 32)


def test_flash_read_past_end_of_file_extends(tmp_path, flash_image):
    with Flash(flash_image, 0x100, tmp_path) as flash:
        assert flash.read(0x20, DataType.WORD) == 0
        flash.close()
        assert os.path.getsize(flash.path) == 0x20 + 4


def test_flash_out_of_bounds_raises(tmp_path, flash_image):
    with Flash(flash_image, 0x10, tmp_path) as flash:
        with pytest.raises(MemoryAccessError):
            flash.write(0xC, DataType.DWORD, 1)
        with pytest.raises(MemoryAccessError):
            flash.read(0x10, DataType.BYTE)


def test_flash_empty_name_rejected(tmp_path):
    with pytest.raises(ValueError):
        Flash("", 0x10, tmp_path)