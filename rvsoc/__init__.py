"""Building blocks for a small RV64 system-on-chip model: decoding, memories, ELF loading and guest helpers."""

__version__ = "0.1.0"

__all__ = ["decoder", "defs", "memory", "elf_loader", "fmt", "vm", "programs"]