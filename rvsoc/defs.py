"""Architectural constants, memory map and trap frame layout of the SoC."""

from __future__ import annotations

import struct
from dataclasses import astuple, dataclass, fields
from enum import IntEnum

EXIT_CODE_PASS = 0x1
EXIT_CODE_ERROR = 0x3

PGSIZE = 4096
PAGE_SHIFT = 12

SYSCALL_PUTCHAR = 0x0101
SYSCALL_SYS = 0x0000

_U64 = (1 << 64) - 1


class Privilege(IntEnum):
    """Privilege levels."""

    U = 0x0
    S = 0x1
    H = 0x2
    M = 0x3


class Cause(IntEnum):
    """Synchronous exception cause codes."""

    MISALIGNED_FETCH = 0x0
    INSTRUCTION_ACCESS = 0x1
    ILLEGAL_INSTRUCTION = 0x2
    BREAKPOINT = 0x3
    MISALIGNED_LOAD = 0x4
    LOAD_ACCESS = 0x5
    MISALIGNED_STORE = 0x6
    STORE_ACCESS = 0x7
    USER_ECALL = 0x8
    SUPERVISOR_ECALL = 0x9
    HYPERVISOR_ECALL = 0xA
    MACHINE_ECALL = 0xB
    INSTRUCTION_PAGE_FAULT = 0xC
    LOAD_PAGE_FAULT = 0xD
    STORE_PAGE_FAULT = 0xF


def _counter_block(prefix: str, base: int, suffix: str = "") -> dict[str, int]:
    return {f"{prefix}{n}{suffix}": base + n for n in range(3, 32)}


CSR_ADDRESSES: dict[str, int] = {
    "ustatus": 0x000,
    "uie": 0x004,
    "utvec": 0x005,
    "uscratch": 0x040,
    "uepc": 0x041,
    "ucause": 0x042,
    "utval": 0x043,
    "uip": 0x044,
    "fflags": 0x001,
    "frm": 0x002,
    "fcsr": 0x003,
    "cycle": 0xC00,
    "time": 0xC01,
    "instret": 0xC02,
    **_counter_block("hpmcounter", 0xC00),
    "cycleh": 0xC80,
    "timeh": 0xC81,
    "instreth": 0xC82,
    **_counter_block("hpmcounter", 0xC80, "h"),
    "sstatus": 0x100,
    "sedeleg": 0x102,
    "sideleg": 0x103,
    "sie": 0x104,
    "stvec": 0x105,
    "scounteren": 0x106,
    "sscratch": 0x140,
    "sepc": 0x141,
    "scause": 0x142,
    "stval": 0x143,
    "sip": 0x144,
    "satp": 0x180,
    "mvendorid": 0xF11,
    "marchid": 0xF12,
    "mimpid": 0xF13,
    "mhartid": 0xF14,
    "mstatus": 0x300,
    "misa": 0x301,
    "medeleg": 0x302,
    "mideleg": 0x303,
    "mie": 0x304,
    "mtvec": 0x305,
    "mcounteren": 0x306,
    "mscratch": 0x340,
    "mepc": 0x341,
    "mcause": 0x342,
    "mtval": 0x343,
    "mip": 0x344,
    **{f"pmpcfg{n}": 0x3A0 + n for n in range(4)},
    **{f"pmpaddr{n}": 0x3B0 + n for n in range(16)},
    "mcycle": 0xB00,
    "minstret": 0xB02,
    **_counter_block("mhpmcounter", 0xB00),
    "mcycleh": 0xB80,
    "minstreth": 0xB82,
    **_counter_block("mhpmcounter", 0xB80, "h"),
    **_counter_block("mhpmevent", 0x320),
    "tselect": 0x7A0,
    "tdata1": 0x7A1,
    "tdata2": 0x7A2,
    "tdata3": 0x7A3,
    "dcsr": 0x7B0,
    "dpc": 0x7B1,
    "dscratch": 0x7B2,
}

# Page table entry bits.
PTE_V = 1 << 0
PTE_R = 1 << 1
PTE_W = 1 << 2
PTE_X = 1 << 3
PTE_U = 1 << 4
PTE_G = 1 << 5
PTE_A = 1 << 6
PTE_D = 1 << 7
PTE_RSW = 3 << 8
PTE_PPN_SHIFT = 10

SATP_MODE_NONE = 0
SATP_MODE_SV39 = 8
SATP_MODE_SV48 = 9
SATP_MODE_SV57 = 10
SATP_MODE_SV64 = 11

SATP_MODE = 0xF << 60
SATP_ASID = 0xFFFF << 44
SATP_PPN = (1 << 44) - 1

MSTATUS_SIE = 0x1 << 1
MSTATUS_MIE = 0x1 << 3
MSTATUS_SPIE = 0x1 << 5
MSTATUS_MPIE = 0x1 << 7
MSTATUS_SPP = 0x1 << 8
MSTATUS_MPP = 0x3 << 11
MSTATUS_FS = 0x3 << 13
MSTATUS_XS = 0x3 << 15
MSTATUS_MPRV = 0x1 << 17
MSTATUS_SUM = 0x1 << 18
MSTATUS_MXR = 0x1 << 19
MSTATUS_TVM = 0x1 << 20
MSTATUS_TW = 0x1 << 21
MSTATUS_TSR = 0x1 << 22
MSTATUS_UXL = 0x3 << 32
MSTATUS_SXL = 0x3 << 34

SSTATUS_MASK = (
    MSTATUS_SIE
    | MSTATUS_SPIE
    | MSTATUS_SPP
    | MSTATUS_FS
    | MSTATUS_XS
    | MSTATUS_SUM
    | MSTATUS_MXR
    | MSTATUS_UXL
)

MIP_SSIP = 0x1 << 1
MIP_MSIP = 0x1 << 3
MIP_STIP = 0x1 << 5
MIP_MTIP = 0x1 << 7
MIP_SEIP = 0x1 << 9
MIP_MEIP = 0x1 << 11

PMP_R = 0x1 << 0
PMP_W = 0x1 << 1
PMP_X = 0x1 << 2
PMP_A = 0x3 << 3
PMP_L = 0x1 << 7

PMP_TOR = 1
PMP_NA4 = 2
PMP_NAPOT = 3

FCSR_FFLAGS_SHIFT = 0
FCSR_FRM_SHIFT = 5
FFLAGS_MASK = 0x1F
FRM_MASK = 0x7

PMPADDR_MASK = (0x1 << 54) - 1

IRQ_NONSTANDARD = 12

# Memory map.
BROM_BASE = 0x00000000
SRAM_0_BASE = 0x00010000
SRAM_1_BASE = 0x00020000

CLST_0_BASE = 0x00040000
CLST_0_RG_PWR_REQ = CLST_0_BASE + 0x00
CLST_0_RG_CPU_PC = tuple(CLST_0_BASE + 0x10 + 4 * n for n in range(8))
CLST_0_RG_CPU_MIP = tuple(CLST_0_BASE + 0x30 + 4 * n for n in range(8))

BRIDGE_0_BASE = 0x10000000

FINISHER_BASE = 0x10000000
FINISHER_RG_FINISH = FINISHER_BASE + 0x0

UART_BASE = 0x10001000
UART_RG_TXFIFO = UART_BASE + 0x00
UART_RG_RXFIFO = UART_BASE + 0x04
UART_RG_TXCTRL = UART_BASE + 0x08
UART_RG_RXCTRL = UART_BASE + 0x0C
UART_RG_IE = UART_BASE + 0x10
UART_RG_IP = UART_BASE + 0x14
UART_RG_DIV = UART_BASE + 0x18

HTIF_BASE = 0x10002000
HTIF_RG_TOHOST = HTIF_BASE + 0x00
HTIF_RG_FROMHOST = HTIF_BASE + 0x40

CLINT_BASE = 0x10010000
CLINT_RG_MSIP = CLINT_BASE + 0x0000
CLINT_RG_TIMECMP = CLINT_BASE + 0x4000
CLINT_RG_TIME = CLINT_BASE + 0xBFF8

PLIC_BASE = 0x14000000
PLIC_RG_PRIOR = PLIC_BASE + 0x000000
PLIC_RG_PEND = PLIC_BASE + 0x001000
PLIC_RG_ENABLE = PLIC_BASE + 0x002000
PLIC_RG_PRIOR_TH = PLIC_BASE + 0x200000
PLIC_RG_INTID = PLIC_BASE + 0x200004

DDR_0_BASE = 0x20000000
DDR_1_BASE = 0x80000000
FLASH_BASE = 0x100000000


def _field_unit(mask: int) -> int:
    if mask <= 0:
        raise ValueError(f"mask must be positive, got {mask}")
    return mask & ~(mask << 1)


def get_field(x: int, mask: int) -> int:
    """Extract the field selected by ``mask`` from ``x``."""
    return (x & mask) // _field_unit(mask)


def set_field(x: int, mask: int, value: int) -> int:
    """Return ``x`` with the field selected by ``mask`` replaced by ``value``."""
    return (x & ~mask) | ((value * _field_unit(mask)) & mask)


@dataclass
class TrapFrame:
    """Saved register state on trap entry, laid out as 35 little-endian doublewords."""

    ra: int = 0
    sp: int = 0
    gp: int = 0
    tp: int = 0
    t0: int = 0
    t1: int = 0
    t2: int = 0
    s0: int = 0
    s1: int = 0
    a0: int = 0
    a1: int = 0
    a2: int = 0
    a3: int = 0
    a4: int = 0
    a5: int = 0
    a6: int = 0
    a7: int = 0
    s2: int = 0
    s3: int = 0
    s4: int = 0
    s5: int = 0
    s6: int = 0
    s7: int = 0
    s8: int = 0
    s9: int = 0
    s10: int = 0
    s11: int = 0
    t3: int = 0
    t4: int = 0
    t5: int = 0
    t6: int = 0
    status: int = 0
    epc: int = 0
    tval: int = 0
    cause: int = 0

    def to_bytes(self) -> bytes:
        """Serialise the frame into its in-memory layout."""
        values = astuple(self)
        for field, value in zip(fields(self), values):
            if not 0 <= value <= _U64:
                raise ValueError(f"{field.name} does not fit in 64 bits: {value}")
        return _FRAME_STRUCT.pack(*values)

    @classmethod
    def from_bytes(cls, data: bytes) -> "TrapFrame":
        """Build a frame from its in-memory layout."""
        if len(data) != _FRAME_STRUCT.size:
            raise ValueError(
                f"trap frame needs {_FRAME_STRUCT.size} bytes, got {len(data)}"
            )
        return cls(*_FRAME_STRUCT.unpack(data))


_FRAME_STRUCT = struct.Struct(f"<{len(fields(TrapFrame))}Q")

TRAPFRAME_SIZE = 35 * 8