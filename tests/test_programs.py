import random
import struct

import pytest

from rvsoc.fmt import format_printf, log10
from rvsoc.programs import (
    float_demo_program,
    hello_program,
    main,
    merge,
    merge_sort,
)


def test_merge_two_runs():
    values = [9, 1, 4, 7, 2, 3, 8, 0]
    merge(values, 1, 4, 7)
    assert values[1:7] == sorted([1, 4, 7, 2, 3, 8])
    assert values[0] == 9 and values[7] == 0


@pytest.mark.parametrize("seed", range(5))
def test_merge_sort_matches_sorted(seed):
    rng = random.Random(seed)
    values = [rng.randint(-1000, 1000) for _ in range(rng.randint(0, 60))]
    expected = sorted(values)
    merge_sort(values, 0, len(values) - 1)
    assert values == expected


def test_merge_sort_partial_range():
    values = [5, 4, 3, 2, 1]
    merge_sort(values, 1, 3)
    assert values == [5, 2, 3, 4, 1]


def test_hello_program():
    assert hello_program() == "Hello world\n"


def test_float_demo_output():
    lines = float_demo_program().splitlines(keepends=True)
    assert len(lines) == 5
    assert lines[0] == "hello world!!!\n"
    assert lines[1] == "a = 0, b = 2\n"
    bits = struct.unpack("<Q", struct.pack("<d", 1.1))[0]
    assert lines[2] == format_printf("x = %016x\n", bits)
    assert lines[3] == format_printf("log10(x) = %f\n", log10(1.1))
    assert lines[4] == format_printf("log10(x) = %f\n", 1.1)


def test_main_hello(capsys):
    assert main(["hello"]) == 0
    assert capsys.readouterr().out == hello_program()


def test_main_float(capsys):
    assert main(["float"]) == 0
    assert capsys.readouterr().out == float_demo_program()


def test_main_pi(capsys):
    assert main(["pi"]) == 0
    out = capsys.readouterr().out
    assert "pi = 3.14159" in out
    assert out.endswith("MTIP TEST PASS\n")


def test_main_sort(capsys):
    inputs = [5, -3, 12, 0, 5]
    assert main(["sort", *map(str, inputs)]) == 0
    assert capsys.readouterr().out == " ".join(map(str, sorted(inputs))) + "\n"


def test_main_requires_program():
    with pytest.raises(SystemExit):
        main([])