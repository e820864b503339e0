"""Sv39 page-table setup and demand paging for a single user address space."""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Optional

from .defs import (
    PAGE_SHIFT,
    PGSIZE,
    PTE_A,
    PTE_D,
    PTE_PPN_SHIFT,
    PTE_R,
    PTE_U,
    PTE_V,
    PTE_W,
    PTE_X,
    SATP_MODE,
    SATP_MODE_SV39,
    Cause,
    set_field,
)

N_PAGE = 32
FREE_PAGE_BASE = 0x10000
N_PTE = 1 << 9
MEGAPAGE = PGSIZE << 9

_DELEGATED_CAUSES = (
    Cause.MISALIGNED_FETCH,
    Cause.USER_ECALL,
    Cause.BREAKPOINT,
    Cause.INSTRUCTION_PAGE_FAULT,
    Cause.LOAD_PAGE_FAULT,
    Cause.STORE_PAGE_FAULT,
)

_USER_PAGE_FLAGS = PTE_A | PTE_U | PTE_R | PTE_W | PTE_X | PTE_V


class VmError(RuntimeError):
    """Raised when a page fault cannot be serviced."""


def make_pte(paddr: int, flags: int) -> int:
    """Build a page table entry mapping the page at ``paddr`` with ``flags``."""
    return (paddr >> PAGE_SHIFT << PTE_PPN_SHIFT) | flags


def satp_value(root_pt_addr: int) -> int:
    """Return the ``satp`` value selecting Sv39 with the given root table."""
    return set_field(root_pt_addr >> PAGE_SHIFT, SATP_MODE, SATP_MODE_SV39)


def delegated_exceptions() -> int:
    """Return the ``medeleg`` mask of exceptions handed to supervisor mode."""
    mask = 0
    for cause in _DELEGATED_CAUSES:
        mask |= 1 << cause
    return mask


class UserPageTable:
    """Leaf page table of the user space, filled on demand from a free list."""

    def __init__(
        self, free_page_base: int = FREE_PAGE_BASE, n_pages: int = N_PAGE
    ) -> None:
        self.entries: List[int] = [0] * N_PTE
        self._free: Deque[int] = deque(
            free_page_base + n * PGSIZE for n in range(n_pages)
        )

    @property
    def free_pages(self) -> int:
        """Number of physical pages still available."""
        return len(self._free)

    @staticmethod
    def _index(addr: int) -> int:
        return (addr >> PAGE_SHIFT) & (N_PTE - 1)

    def entry(self, addr: int) -> int:
        """Return the entry that maps virtual address ``addr``."""
        return self.entries[self._index(addr)]

    def fault_handle(self, addr: int, cause: int) -> Optional[int]:
        """Service a page fault at ``addr``.

        A missing page is given a fresh physical page, whose address is
        returned so its contents can be copied in. An existing mapping is
        only marked dirty on a store fault, and ``None`` is returned.
        """
        index = self._index(addr)
        pte = self.entries[index]
        if pte & PTE_V:
            if not pte & PTE_A:
                raise VmError(f"valid page at {addr:#x} was never accessed")
            if not pte & PTE_D:
                if cause != Cause.STORE_PAGE_FAULT:
                    raise VmError(
                        f"unexpected fault {cause} on mapped page at {addr:#x}"
                    )
                self.entries[index] = pte | PTE_D
            return None

        if not self._free:
            raise VmError("no free physical pages left")
        paddr = self._free.popleft()
        pte = make_pte(paddr, _USER_PAGE_FLAGS)
        if cause == Cause.STORE_PAGE_FAULT:
            pte |= PTE_D
        self.entries[index] = pte
        return paddr