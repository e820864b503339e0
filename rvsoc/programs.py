"""Sample programs run on the SoC, written against the host console."""

from __future__ import annotations

import argparse
import heapq
import struct
import sys
from typing import List, MutableSequence, Optional, Sequence

from .fmt import format_printf, log10


def merge(values: MutableSequence[int], a: int, b: int, b_end: int) -> None:
    """Merge the sorted runs ``values[a:b]`` and ``values[b:b_end]`` in place."""
    values[a:b_end] = list(heapq.merge(values[a:b], values[b:b_end]))


def merge_sort(values: MutableSequence[int], left: int, right: int) -> None:
    """Sort ``values[left..right]`` (both ends inclusive) in place."""
    if left >= right:
        return
    mid = (left + right) >> 1
    merge_sort(values, left, mid)
    merge_sort(values, mid + 1, right)
    merge(values, left, mid + 1, right + 1)


def hello_program() -> str:
    """Return the console output of the root file system's greeting program."""
    return format_printf("Hello world\n")


def float_demo_program() -> str:
    """Return the console output of the floating-point formatting demo."""
    a, b = 0, 1
    x = 1.1
    bits = struct.unpack("<Q", struct.pack("<d", x))[0]
    b += 1
    return "".join(
        [
            format_printf("hello world!!!\n"),
            format_printf("a = %d, b = %d\n", a, b),
            format_printf("x = %016x\n", bits),
            format_printf("log10(x) = %f\n", log10(x)),
            format_printf("log10(x) = %f\n", x),
        ]
    )


def _pi_program() -> str:
    pi = struct.unpack("<f", struct.pack("<f", 3.1415926))[0]
    return format_printf("hello world!!\npi = %f\n", pi) + format_printf(
        "MTIP TEST PASS\n"
    )


def _sort_program(values: Sequence[int]) -> str:
    array: List[int] = list(values)
    merge_sort(array, 0, len(array) - 1)
    return " ".join(str(v) for v in array) + "\n"


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one of the sample programs and print its output."""
    parser = argparse.ArgumentParser(prog="rvsoc-programs")
    commands = parser.add_subparsers(dest="program", required=True)
    commands.add_parser("hello", help="print a greeting")
    commands.add_parser("float", help="floating-point formatting demo")
    commands.add_parser("pi", help="print pi in single precision")
    sort = commands.add_parser("sort", help="merge-sort integers")
    sort.add_argument("values", nargs="*", type=int)
    args = parser.parse_args(argv)

    if args.program == "hello":
        output = hello_program()
    elif args.program == "float":
        output = float_demo_program()
    elif args.program == "pi":
        output = _pi_program()
    else:
        output = _sort_program(args.values)
    sys.stdout.write(output)
    return 0