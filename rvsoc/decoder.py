"""Instruction decoder for RV64IMAFDC encodings.

``decode`` maps a raw instruction word to its mnemonic.
Encodings that fall outside the supported set decode to ``UNKNOWN``.
"""

from __future__ import annotations

UNKNOWN = "unknown"

_MASK32 = 0xFFFF_FFFF

# Low two bits of every 32-bit (uncompressed) instruction.
_FULL_LENGTH_MARK = 0x3

# Major opcodes of 32-bit instructions.
OPCODE_LOAD = 0x03
OPCODE_LOAD_FP = 0x07
OPCODE_MISC_MEM = 0x0F
OPCODE_OP_IMM = 0x13
OPCODE_AUIPC = 0x17
OPCODE_OP_IMM_32 = 0x1B
OPCODE_STORE = 0x23
OPCODE_STORE_FP = 0x27
OPCODE_AMO = 0x2F
OPCODE_OP = 0x33
OPCODE_LUI = 0x37
OPCODE_OP_32 = 0x3B
OPCODE_FMADD = 0x43
OPCODE_FMSUB = 0x47
OPCODE_FNMSUB = 0x4B
OPCODE_FNMADD = 0x4F
OPCODE_OP_FP = 0x53
OPCODE_BRANCH = 0x63
OPCODE_JALR = 0x67
OPCODE_JAL = 0x6F
OPCODE_SYSTEM = 0x73

# Quadrants of 16-bit instructions.
OPCODE_C0 = 0
OPCODE_C1 = 1
OPCODE_C2 = 2

REG_SP = 2


def _opcode(insn: int) -> int:
    return insn & 0x7F


def _rd(insn: int) -> int:
    return (insn >> 7) & 0x1F


def _funct3(insn: int) -> int:
    return (insn >> 12) & 0x7


def _rs2(insn: int) -> int:
    return (insn >> 20) & 0x1F


def _funct5(insn: int) -> int:
    return (insn >> 27) & 0x1F


def _funct7(insn: int) -> int:
    return (insn >> 25) & 0x7F


def _funct12(insn: int) -> int:
    return (insn >> 20) & 0xFFF


_BRANCH = {0: "beq", 1: "bne", 4: "blt", 5: "bge", 6: "bltu", 7: "bgeu"}
_LOAD = {0: "lb", 1: "lh", 2: "lw", 3: "ld", 4: "lbu", 5: "lhu", 6: "lwu"}
_STORE = {0: "sb", 1: "sh", 2: "sw", 3: "sd"}
_OP_IMM = {0: "addi", 1: "slli", 2: "slti", 3: "sltiu", 4: "xori", 6: "ori", 7: "andi"}
_OP_IMM_SHIFT_RIGHT = {0x00: "srli", 0x20: "srai"}
_OP_BASE = {0: "add", 1: "sll", 2: "slt", 3: "sltu", 4: "xor", 5: "srl", 6: "or", 7: "and"}
_OP_ALT = {0: "sub", 5: "sra"}
_OP_MULDIV = {
    0: "mul", 1: "mulh", 2: "mulhsu", 3: "mulhu",
    4: "div", 5: "divu", 6: "rem", 7: "remu",
}
_OP = {0x00: _OP_BASE, 0x20: _OP_ALT, 0x01: _OP_MULDIV}
_MISC_MEM = {0: "fence", 1: "fence.i"}
_PRIV = {0x000: "ecall", 0x001: "ebreak", 0x105: "wfi", 0x302: "mret", 0x102: "sret"}
_FUNCT7_SFENCE_VMA = 0x09
_CSR = {1: "csrrw", 2: "csrrs", 3: "csrrc", 5: "csrrwi", 6: "csrrsi", 7: "csrrci"}
_OP_IMM_32 = {0: "addiw", 1: "slliw"}
_OP_IMM_32_SHIFT_RIGHT = {0x00: "srliw", 0x20: "sraiw"}
_OP_32_ADD = {0x00: "addw", 0x20: "subw", 0x01: "mulw"}
_OP_32_SHIFT_RIGHT = {0x00: "srlw", 0x20: "sraw", 0x01: "divuw"}
_OP_32 = {1: "sllw", 4: "divw", 6: "remw", 7: "remuw"}
_AMO_OPS = {
    0x02: "lr", 0x03: "sc", 0x01: "amoswap", 0x00: "amoadd", 0x04: "amoxor",
    0x0C: "amoand", 0x08: "amoor", 0x10: "amomin", 0x14: "amomax",
    0x18: "amominu", 0x1C: "amomaxu",
}
_AMO_WIDTH = {2: "w", 3: "d"}
_LOAD_FP = {2: "flw", 3: "fld"}
_STORE_FP = {2: "fsw", 3: "fsd"}
_FUSED = {
    OPCODE_FMADD: "fmadd",
    OPCODE_FNMADD: "fnmadd",
    OPCODE_FMSUB: "fmsub",
    OPCODE_FNMSUB: "fnmsub",
}
_FP_FORMAT = {0: "s", 1: "d"}

_OP_FP_SIMPLE = {
    0x00: "fadd.s", 0x04: "fsub.s", 0x08: "fmul.s", 0x0C: "fdiv.s", 0x2C: "fsqrt.s",
    0x01: "fadd.d", 0x05: "fsub.d", 0x09: "fmul.d", 0x0D: "fdiv.d", 0x2D: "fsqrt.d",
    0x78: "fmv.w.x", 0x79: "fmv.d.x",
}
# Variants selected by funct3.
_OP_FP_BY_FUNCT3 = {
    0x10: {0: "fsgnj.s", 1: "fsgnjn.s", 2: "fsgnjx.s"},
    0x11: {0: "fsgnj.d", 1: "fsgnjn.d", 2: "fsgnjx.d"},
    0x14: {0: "fmin.s", 1: "fmax.s"},
    0x15: {0: "fmin.d", 1: "fmax.d"},
    0x70: {0: "fmv.x.w", 1: "fclass.s"},
    0x71: {0: "fmv.x.d", 1: "fclass.d"},
    0x50: {2: "feq.s", 1: "flt.s", 0: "fle.s"},
    0x51: {2: "feq.d", 1: "flt.d", 0: "fle.d"},
}
# Conversions selected by the rs2 field.
_OP_FP_BY_RS2 = {
    0x20: {1: "fcvt.s.d"},
    0x21: {0: "fcvt.d.s"},
    0x68: {0: "fcvt.s.w", 1: "fcvt.s.wu", 2: "fcvt.s.l", 3: "fcvt.s.lu"},
    0x69: {0: "fcvt.d.w", 1: "fcvt.d.wu", 2: "fcvt.d.l", 3: "fcvt.d.lu"},
    0x60: {0: "fcvt.w.s", 1: "fcvt.wu.s", 2: "fcvt.l.s", 3: "fcvt.lu.s"},
    0x61: {0: "fcvt.w.d", 1: "fcvt.wu.d", 2: "fcvt.l.d", 3: "fcvt.lu.d"},
}

_C0 = {
    0: "c.addi4spn", 1: "c.fld", 2: "c.lw", 3: "c.ld",
    5: "c.fsd", 6: "c.sw", 7: "c.sd",
}
_C1 = {0: "c.addi", 1: "c.addiw", 2: "c.li", 5: "c.j", 6: "c.beqz", 7: "c.bnez"}
_C1_SUB = {0: "c.sub", 1: "c.xor", 2: "c.or", 3: "c.and"}
_C1_SUBW = {0: "c.subw", 1: "c.addw"}
_C1_IMM_ALU = {0: "c.srli", 1: "c.srai", 2: "c.andi"}
_FUNCT6_C_SUB = 0x23
_FUNCT6_C_SUBW = 0x27
_C2 = {0: "c.slli", 1: "c.fldsp", 2: "c.lwsp", 3: "c.ldsp", 5: "c.fsdsp", 6: "c.swsp", 7: "c.sdsp"}
_FUNCT4_C_JR = 0x8
_FUNCT4_C_JALR = 0x9


def _check(insn: int) -> int:
    if not isinstance(insn, int) or isinstance(insn, bool):
        raise TypeError(f"instruction must be an int, not {type(insn).__name__}")
    if insn < 0:
        raise ValueError(f"instruction must be non-negative, got {insn}")
    return insn & _MASK32


def insn_length(insn: int) -> int:
    """Return the byte length of the instruction whose low bits are ``insn``."""
    word = _check(insn)
    low_bits = word & _FULL_LENGTH_MARK
    if low_bits == _FULL_LENGTH_MARK:
        length = 4
    else:
        length = 2
    return length


def _decode_op_imm(insn: int) -> str:
    funct3 = _funct3(insn)
    if funct3 == 5:
        return _OP_IMM_SHIFT_RIGHT.get(_funct7(insn) & 0x3E, UNKNOWN)
    return _OP_IMM.get(funct3, UNKNOWN)


def _decode_op(insn: int) -> str:
    table = _OP.get(_funct7(insn))
    if table is None:
        return UNKNOWN
    return table.get(_funct3(insn), UNKNOWN)


def _decode_system(insn: int) -> str:
    funct3 = _funct3(insn)
    if funct3 == 0:
        name = _PRIV.get(_funct12(insn))
        if name is not None:
            return name
        return "sfence.vma" if _funct7(insn) == _FUNCT7_SFENCE_VMA else UNKNOWN
    return _CSR.get(funct3, UNKNOWN)


def _decode_op_imm_32(insn: int) -> str:
    funct3 = _funct3(insn)
    if funct3 == 5:
        return _OP_IMM_32_SHIFT_RIGHT.get(_funct7(insn), UNKNOWN)
    return _OP_IMM_32.get(funct3, UNKNOWN)


def _decode_op_32(insn: int) -> str:
    funct3 = _funct3(insn)
    if funct3 == 0:
        return _OP_32_ADD.get(_funct7(insn), UNKNOWN)
    if funct3 == 5:
        return _OP_32_SHIFT_RIGHT.get(_funct7(insn), UNKNOWN)
    return _OP_32.get(funct3, UNKNOWN)


def _decode_amo(insn: int) -> str:
    width = _AMO_WIDTH.get(_funct3(insn))
    op = _AMO_OPS.get(_funct5(insn))
    if width is None or op is None:
        return UNKNOWN
    return f"{op}.{width}"


def _decode_fused(insn: int) -> str:
    fmt = _FP_FORMAT.get(_funct7(insn) & 0x3)
    if fmt is None:
        return UNKNOWN
    return f"{_FUSED[_opcode(insn)]}.{fmt}"


def _decode_op_fp(insn: int) -> str:
    funct7 = _funct7(insn)
    if funct7 in _OP_FP_SIMPLE:
        return _OP_FP_SIMPLE[funct7]
    if funct7 in _OP_FP_BY_FUNCT3:
        return _OP_FP_BY_FUNCT3[funct7].get(_funct3(insn), UNKNOWN)
    if funct7 in _OP_FP_BY_RS2:
        return _OP_FP_BY_RS2[funct7].get(_rs2(insn), UNKNOWN)
    return UNKNOWN


def _by_funct3(table: dict[int, str]):
    return lambda insn: table.get(_funct3(insn), UNKNOWN)


_DECODERS32 = {
    OPCODE_LUI: lambda insn: "lui",
    OPCODE_AUIPC: lambda insn: "auipc",
    OPCODE_JAL: lambda insn: "jal",
    OPCODE_JALR: lambda insn: "jalr",
    OPCODE_BRANCH: _by_funct3(_BRANCH),
    OPCODE_LOAD: _by_funct3(_LOAD),
    OPCODE_STORE: _by_funct3(_STORE),
    OPCODE_OP_IMM: _decode_op_imm,
    OPCODE_OP: _decode_op,
    OPCODE_MISC_MEM: _by_funct3(_MISC_MEM),
    OPCODE_SYSTEM: _decode_system,
    OPCODE_OP_IMM_32: _decode_op_imm_32,
    OPCODE_OP_32: _decode_op_32,
    OPCODE_AMO: _decode_amo,
    OPCODE_LOAD_FP: _by_funct3(_LOAD_FP),
    OPCODE_STORE_FP: _by_funct3(_STORE_FP),
    OPCODE_FMADD: _decode_fused,
    OPCODE_FNMADD: _decode_fused,
    OPCODE_FMSUB: _decode_fused,
    OPCODE_FNMSUB: _decode_fused,
    OPCODE_OP_FP: _decode_op_fp,
}


def _decode32(insn: int) -> str:
    decoder = _DECODERS32.get(_opcode(insn))
    return decoder(insn) if decoder is not None else UNKNOWN


def _decode_c1(insn: int, funct3: int) -> str:
    if funct3 == 3:
        return "c.addi16sp" if _rd(insn) == REG_SP else "c.lui"
    if funct3 == 4:
        funct6 = (insn >> 10) & 0x3F
        funct2 = (insn >> 5) & 0x3
        if funct6 == _FUNCT6_C_SUB:
            return _C1_SUB.get(funct2, UNKNOWN)
        if funct6 == _FUNCT6_C_SUBW:
            return _C1_SUBW.get(funct2, UNKNOWN)
        return _C1_IMM_ALU.get((insn >> 10) & 0x3, UNKNOWN)
    return _C1.get(funct3, UNKNOWN)


def _decode_c2(insn: int, funct3: int) -> str:
    if funct3 != 4:
        return _C2.get(funct3, UNKNOWN)
    funct4 = (insn >> 12) & 0xF
    c_rs2 = (insn >> 2) & 0x1F
    if funct4 == _FUNCT4_C_JR:
        return "c.jr" if c_rs2 == 0 else "c.mv"
    if funct4 == _FUNCT4_C_JALR:
        if c_rs2 != 0:
            return "c.add"
        return "c.ebreak" if _rd(insn) == 0 else "c.jalr"
    return UNKNOWN


def _decode16(insn: int) -> str:
    quadrant = insn & 0x3
    funct3 = (insn >> 13) & 0x7
    if quadrant == OPCODE_C0:
        return _C0.get(funct3, UNKNOWN)
    if quadrant == OPCODE_C1:
        return _decode_c1(insn, funct3)
    if quadrant == OPCODE_C2:
        return _decode_c2(insn, funct3)
    return UNKNOWN


def decode(insn: int) -> str:
    """Return the mnemonic of ``insn``, or ``UNKNOWN`` for unsupported encodings.

    Words whose two low bits are not ``0b11`` are treated as 16-bit compressed
    instructions and only their low half-word is examined.
    """
    insn = _check(insn)
    if insn_length(insn) == 4:
        return _decode32(insn)
    return _decode16(insn & 0xFFFF)