# rvsoc

`rvsoc` holds the pieces of a small 64-bit RISC-V system-on-chip model, written in pure Python. It needs nothing outside the standard library.

## What it contains

### `rvsoc.decoder`

- `insn_length(insn)` returns 4 when the two low bits of the word are `0b11`. Otherwise it returns 2.
- `decode(insn)` returns the mnemonic of an instruction word as a string, such as `"addi"`, `"amoadd.w"`, `"fcvt.d.l"` or `"c.addi16sp"`.
  - It covers RV64I, M, A, F and D, the privileged instructions, and the compressed (C) encodings.
  - Encodings it does not support decode to `rvsoc.decoder.UNKNOWN`, which is the string `"unknown"`.

### `rvsoc.defs`

- Constants for the architecture: CSR addresses in `CSR_ADDRESSES`, and the PTE, SATP, MSTATUS, MIP and PMP bits.
- Constants for the memory map: BROM, SRAM, UART, HTIF, CLINT, PLIC, DDR and flash bases and registers.
- The enumerations `Privilege` and `Cause`.
- The bit-field helpers `get_field(x, mask)` and `set_field(x, mask, value)`.
- `TrapFrame`, a dataclass of 35 registers.
  - `to_bytes()` packs it as 35 little-endian doublewords.
  - `TrapFrame.from_bytes(data)` unpacks that layout.

### `rvsoc.memory`

The memory devices share the `MemoryDevice` base class. Every device has a `size` and a `check_bound(addr, length)` method. Each access gives its width and signedness with a `DataType`.

- `RAM(size, init_file=None)` is zero-filled memory.
  - It is preloaded from `init_file` when that file can be opened.
  - `write` stores the bytes that the `DataType` covers.
  - `read` returns the raw doubleword at the address, whatever the `DataType`.
- `ROM(init_file, size)` is loaded from a file.
  - `read` works as it does for `RAM`.
  - `write` always raises `MemoryAccessError`.
- `Flash(file_name, size, workdir=None)` copies the image to `.<name>` in `workdir`, or in the current directory when `workdir` is not given. All accesses then go to that copy.
  - `read` sign- or zero-extends the value.
  - Bytes past the end of the file read as zero.
  - Accesses outside `size` raise `MemoryAccessError`.
  - It can be used as a context manager, or closed with `close()`.

Sizes may be given as integers or as strings such as `"0x4000"`.

### `rvsoc.elf_loader`

- `parse_elf_header(data)` reads the header of an ELF64 little-endian image and returns an `ElfHeader`.
- `parse_section_headers(data, header)` reads the section header table and returns `SectionHeader` entries.
- `load_elf(data, write)` passes every `SHT_PROGBITS` section with a nonzero address to `write(addr, bytes)`. It returns the entry point.
- A malformed image raises `ElfFormatError`.

### `rvsoc.fmt`

These are the formatting helpers of the guest firmware:

- `itoa(value, base, min_len, fill_char)`
- `ftoa(value)`: six decimals, with `e` notation outside the fixed range
- `fclass(x)`
- the approximate `log_2(x)` and `log10(x)`
- `format_printf(fmt, *args)`: supports `%c %s %x %d %f %%` and fill/width such as `%08x`. A bad specification raises `FormatAssertionError`.
- `encode_syscall(sys_id, arg)`

### `rvsoc.vm`

- `make_pte(paddr, flags)`, `satp_value(root_pt_addr)` for Sv39, and `delegated_exceptions()`.
- `UserPageTable(free_page_base, n_pages)` is a leaf table.
  - Its `fault_handle(addr, cause)` maps a fresh page from the free list and returns its physical address.
  - On a store fault it marks an existing mapping dirty.
  - A fault it cannot serve raises `VmError`.

### `rvsoc.programs`

- `merge` and `merge_sort`, which sort a list in place over an inclusive range.
- `hello_program()` and `float_demo_program()`, which return the console text of the sample guest programs.
- `main(argv=None)`, the command line entry point.

## Install

```
pip install .
```

## Example

```python
from rvsoc.decoder import decode, insn_length
from rvsoc.memory import RAM, DataType

word = 0x00000013          # addi x0, x0, 0
print(insn_length(word), decode(word))   # 4 addi

ram = RAM(0x1000)
ram.write(0x10, DataType.WORD, 0xDEADBEEF)
print(hex(ram.read(0x10, DataType.WORD_UNSIGNED)))   # 0xdeadbeef
```

## Command line

`rvsoc-demo` runs one of the sample programs and prints what it writes:

```
rvsoc-demo hello
rvsoc-demo float
rvsoc-demo pi
rvsoc-demo sort 5 3 9 1
```

## What it does not do

The package has no CPU that executes instructions, no bus joining the devices, and no simulation loop. The decoder only names instructions. The memory devices, ELF loader and page-table helpers are parts to build a simulator from. They do not run guest programs themselves.

## Tests

```
pip install .[test]
pytest
```