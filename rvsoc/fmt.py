"""Console formatting helpers used by the bare-metal programs.

These follow the firmware's own number formatting: a small ``printf`` that
knows ``%c %s %x %d %f %%``, an integer-to-text routine with padding, and a
float formatter built on an approximate base-10 logarithm.
"""

from __future__ import annotations

import math
import struct
from typing import Iterator, List, Optional

_U64 = (1 << 64) - 1
_DIGITS = "0123456789abcdef"
_POWERS_OF_TEN = (1e1, 1e2, 1e4, 1e8, 1e16, 1e32, 1e64, 1e128, 1e256)
_LOG2_10 = 3.3219280948873626

# fclass result bits.
_NEG_INF = 1 << 0
_NEG_NORMAL = 1 << 1
_NEG_SUBNORMAL = 1 << 2
_NEG_ZERO = 1 << 3
_POS_ZERO = 1 << 4
_POS_SUBNORMAL = 1 << 5
_POS_NORMAL = 1 << 6
_POS_INF = 1 << 7
_SIGNALING_NAN = 1 << 8
_QUIET_NAN = 1 << 9
_POSITIVE_FINITE_NONZERO = _POS_SUBNORMAL | _POS_NORMAL


class FormatAssertionError(ValueError):
    """Raised when a format string breaks the formatter's rules."""


def _to_bits(x: float) -> int:
    return struct.unpack("<Q", struct.pack("<d", x))[0]


def _from_bits(bits: int) -> float:
    return struct.unpack("<d", struct.pack("<Q", bits & _U64))[0]


def encode_syscall(sys_id: int, arg: int) -> int:
    """Pack a system call number and its argument into one register value."""
    return ((sys_id << 48) | arg) & _U64


def fclass(x: float) -> int:
    """Classify ``x`` as the ``fclass.d`` instruction does: one bit set in 10."""
    bits = _to_bits(x)
    negative = bits >> 63
    exponent = (bits >> 52) & 0x7FF
    fraction = bits & ((1 << 52) - 1)
    if exponent == 0x7FF:
        if fraction == 0:
            return _NEG_INF if negative else _POS_INF
        return _QUIET_NAN if fraction >> 51 else _SIGNALING_NAN
    if exponent == 0:
        if fraction == 0:
            return _NEG_ZERO if negative else _POS_ZERO
        return _NEG_SUBNORMAL if negative else _POS_SUBNORMAL
    return _NEG_NORMAL if negative else _POS_NORMAL


def log_2(x: float) -> float:
    """Approximate base-2 logarithm; NaN unless ``x`` is positive and finite."""
    cls = fclass(x)
    if not cls & _POSITIVE_FINITE_NONZERO:
        return math.nan
    bits = _to_bits(x)
    result = 0.0
    if cls == _POS_SUBNORMAL:
        result -= 1022 + 52
        bits = _to_bits(float(bits))
    result += float(((bits >> 52) & 0x7FF) - 0x400)
    mantissa = _from_bits((bits & ~(0x7FF << 52)) | (0x3FF << 52))
    result += ((-0.3358287811) * mantissa + 2.0) * mantissa - 0.65871759316667
    return result


def log10(x: float) -> float:
    """Approximate base-10 logarithm; NaN unless ``x`` is positive and finite."""
    if not fclass(x) & _POSITIVE_FINITE_NONZERO:
        return math.nan
    return log_2(x) / _LOG2_10


def itoa(value: int, base: int = 10, min_len: int = 0, fill_char: str = "0") -> str:
    """Render an unsigned 64-bit ``value`` in ``base``, padded to ``min_len``.

    Positions left of the most significant digit are filled with ``fill_char``;
    a zero value renders as fill characters only.
    """
    if not 2 <= base <= 16:
        raise ValueError(f"base must be between 2 and 16, got {base}")
    value &= _U64
    digits: List[str] = []
    while True:
        digits.append(_DIGITS[value % base] if value else fill_char)
        value //= base
        min_len -= 1
        if min_len <= 0 and not value:
            break
    return "".join(reversed(digits))


def _fixed(value: float) -> str:
    sign = ""
    if value < 0.0:
        sign = "-"
        value = -value
    whole = int(value)
    seventh = int((value - whole) * 1e7)
    scaled = whole * 10**6 + seventh // 10 + (1 if seventh % 10 >= 5 else 0)
    return f"{sign}{itoa(scaled // 10**6)}.{scaled % 10**6:06d}"


def _power_of_ten(exp: int) -> float:
    scale = 1.0
    for bit, power in enumerate(_POWERS_OF_TEN):
        if (exp >> bit) & 1:
            scale *= power
    return scale


def ftoa(value: float) -> str:
    """Render ``value`` with six decimals, switching to ``e`` notation out of range.

    Zero, which has no logarithm, is rendered in fixed notation.
    """
    cls = fclass(value)
    if cls & _NEG_INF:
        return "-inf"
    if cls & _POS_INF:
        return "inf"
    if cls & _SIGNALING_NAN:
        return "snan"
    if cls & _QUIET_NAN:
        return "qnan"

    magnitude = log10(abs(value))
    exp = 0 if math.isnan(magnitude) else int(magnitude)
    if -2 <= exp < 6:
        return _fixed(value)
    if exp >= 0:
        return f"{ftoa(value / _power_of_ten(exp))}e+{itoa(exp)}"
    exp = -exp + 1
    return f"{ftoa(value * _power_of_ten(exp))}e-{itoa(exp)}"


def _require(condition: bool, spec: str) -> None:
    if not condition:
        raise FormatAssertionError(f"invalid conversion specification {spec!r}")


def _next_arg(args: Iterator[object]) -> object:
    try:
        return next(args)
    except StopIteration:
        raise TypeError("not enough arguments for format string") from None


def format_printf(fmt: str, *args: object) -> str:
    """Format ``args`` as the firmware's ``printf`` would and return the text.

    A conversion may carry a fill character followed by a width, as in
    ``%08x`` or ``% 5d``; a width without a fill character is rejected.
    """
    out: List[str] = []
    values = iter(args)
    chars = iter(fmt)
    for ch in chars:
        if ch != "%":
            out.append(ch)
            continue
        min_len = 0
        fill_char: Optional[str] = None
        spec = "%"
        while True:
            conv = next(chars, None)
            if conv is None:
                raise FormatAssertionError(f"incomplete conversion specification {spec!r}")
            spec += conv
            if conv in "123456789":
                _require(fill_char is not None, spec)
                min_len = min_len * 10 + int(conv)
                continue
            if conv in "cs%":
                if conv == "%":
                    out.append("%")
                    break
                _require(not (min_len or fill_char is not None), spec)
                arg = _next_arg(values)
                if conv == "c":
                    out.append(chr(arg) if isinstance(arg, int) else str(arg))
                else:
                    out.append(str(arg))
                break
            if conv in "xdf":
                _require((fill_char is None) == (min_len == 0), spec)
                arg = _next_arg(values)
                fill = fill_char if min_len else "0"
                if conv == "x":
                    out.append(itoa(int(arg), 16, min_len, fill))
                elif conv == "d":
                    number = int(arg) & _U64
                    if number >> 63:
                        out.append("-")
                        number = (1 << 64) - number
                    out.append(itoa(number, 10, min_len, fill))
                else:
                    out.append(ftoa(float(arg)))
                break
            _require(not min_len, spec)
            fill_char = conv
    return "".join(out)