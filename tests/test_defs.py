import pytest

from rvsoc import defs
from rvsoc.defs import Cause, Privilege, TrapFrame, get_field, set_field


def test_privilege_levels():
    assert Privilege.U == 0x0
    assert Privilege.M == 0x3
    assert Privilege(1) is Privilege.S


def test_cause_codes():
    assert Cause.STORE_PAGE_FAULT == 0xF
    assert Cause.USER_ECALL == 0x8
    assert Cause(0xD) is Cause.LOAD_PAGE_FAULT


def test_csr_addresses():
    assert get_field(defs.CSR_ADDRESSES["mhpmcounter31h"], 0xF00) == 0xB
    assert get_field(defs.CSR_ADDRESSES["mhpmcounter31h"], 0xFF) == 0x9F
    assert get_field(defs.CSR_ADDRESSES["hpmcounter3"], 0xFFF) == 0xC03
    assert get_field(defs.CSR_ADDRESSES["mhpmevent31"], 0xFFF) == 0x33F
    assert get_field(defs.CSR_ADDRESSES["pmpaddr15"], 0xFFF) == 0x3BF
    assert get_field(defs.CSR_ADDRESSES["satp"], 0xF00) == 0x1


def test_csr_addresses_unique():
    addresses = list(defs.CSR_ADDRESSES.values())
    assert len(addresses) == len(set(addresses))


def test_memory_map_registers():
    assert get_field(defs.HTIF_RG_FROMHOST, 0xFFF) == 0x040
    assert get_field(defs.HTIF_RG_FROMHOST, 0xFFFF_F000) == 0x10002
    assert get_field(defs.CLINT_RG_TIME, 0xFFFF) == 0xBFF8
    assert get_field(defs.CLST_0_RG_CPU_PC[7], 0xFF) == 0x2C
    assert get_field(defs.CLST_0_RG_CPU_MIP[0], 0xFFFFF) == 0x40030


def test_sstatus_mask_is_subset_of_fields():
    assert get_field(defs.SSTATUS_MASK, defs.MSTATUS_MIE) == 0
    assert get_field(defs.SSTATUS_MASK, defs.MSTATUS_SUM) == 1
    assert get_field(defs.SSTATUS_MASK, defs.MSTATUS_FS) == 0x3


@pytest.mark.parametrize(
    "mask,value",
    [
        (defs.SATP_MODE, defs.SATP_MODE_SV39),
        (defs.MSTATUS_MPP, Privilege.S),
        (defs.PMP_A, defs.PMP_NAPOT),
        (defs.SATP_ASID, 0x1234),
    ],
)
def test_set_then_get_field_round_trip(mask, value):
    x = set_field(0xFFFF_FFFF_FFFF_FFFF, mask, value)
    assert get_field(x, mask) == value
    assert x & ~mask == 0xFFFF_FFFF_FFFF_FFFF & ~mask


def test_set_field_leaves_other_bits_clear():
    x = set_field(0, defs.SATP_MODE, defs.SATP_MODE_SV39)
    assert x & ~defs.SATP_MODE == 0
    assert get_field(x, defs.SATP_MODE) == defs.SATP_MODE_SV39


def test_set_field_truncates_to_mask():
    x = set_field(0, defs.MSTATUS_MPP, 0x7)
    assert x & ~defs.MSTATUS_MPP == 0
    assert get_field(x, defs.MSTATUS_MPP) == Privilege.M


def test_field_with_zero_mask_raises():
    with pytest.raises(ValueError):
        get_field(5, 0)
    with pytest.raises(ValueError):
        set_field(5, 0, 1)


def test_trapframe_size():
    assert len(TrapFrame().to_bytes()) == defs.TRAPFRAME_SIZE


def test_trapframe_round_trip():
    frame = TrapFrame(ra=1, a0=0xDEAD, epc=0x80000000, cause=Cause.USER_ECALL)
    assert TrapFrame.from_bytes(frame.to_bytes()) == frame


def test_trapframe_field_offsets():
    frame = TrapFrame(a0=0x0102030405060708, cause=0xFF)
    raw = frame.to_bytes()
    assert raw[9 * 8 : 10 * 8] == bytes([8, 7, 6, 5, 4, 3, 2, 1])
    assert raw[34 * 8] == 0xFF


def test_trapframe_rejects_wrong_length():
    with pytest.raises(ValueError):
        TrapFrame.from_bytes(b"\x00" * 8)


def test_trapframe_rejects_oversized_value():
    with pytest.raises(ValueError):
        TrapFrame(sp=1 << 64).to_bytes()
    with pytest.raises(ValueError):
        TrapFrame(sp=-1).to_bytes()