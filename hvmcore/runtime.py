"""A runtime bundling a heap, a program and the threads that reduce on it."""

from __future__ import annotations

import os
from typing import Optional

import psutil

from .body import Core, alloc_closed_core
from .debug import show_at
from .heap import Heap
from .program import Program
from .reducer import reduce

CELLS_PER_KB = 0x80
CELLS_PER_MB = 0x20000
CELLS_PER_GB = 0x8000000

_U64_MAX = 0xFFFF_FFFF_FFFF_FFFF


def default_heap_size() -> int:
    """Cells to allocate by default: 75% of free memory, at most 16 GB worth."""
    available = psutil.virtual_memory().free
    heap_size = (available * 3 // 4) // 8
    return min(heap_size, 16 * CELLS_PER_GB)


def default_heap_tids() -> int:
    """Threads to use by default: one per available core."""
    if hasattr(os, "sched_getaffinity"):
        return len(os.sched_getaffinity(0)) or 1
    return os.cpu_count() or 1


class Runtime:
    """A heap, the program reduced on it, and the thread ids of its workers."""

    def __init__(self, size: Optional[int] = None, tids: Optional[int] = None,
                 dbug: bool = False) -> None:
        size = default_heap_size() if size is None else size
        tids = default_heap_tids() if tids is None else tids
        self.heap = Heap(size, tids)
        self.prog = Program()
        self.tids = list(range(tids))
        self.dbug = dbug

    def alloc_core(self, core: Core) -> int:
        """Allocate a closed term and return the location holding it."""
        return alloc_closed_core(self.heap, 0, core)

    def load_ptr(self, host: int) -> int:
        return self.heap.load_ptr(host)

    def reduce(self, host: int) -> None:
        """Evaluate the term at ``host`` to weak head normal form."""
        reduce(self.heap, self.prog, self.tids, host, False, self.dbug)

    def normalize(self, host: int) -> None:
        """Evaluate the term at ``host`` to full normal form."""
        reduce(self.heap, self.prog, self.tids, host, True, self.dbug)

    def normalize_core(self, core: Core) -> int:
        """Allocate and fully evaluate a term; return its location."""
        host = self.alloc_core(core)
        self.normalize(host)
        return host

    def show(self, host: int) -> str:
        """Render the term stored at ``host``."""
        return show_at(self.heap, self.prog, host, ())

    def get_rewrites(self) -> int:
        """Total number of graph rewrites performed."""
        return self.heap.cost

    def get_name(self, id: int) -> str:
        return self.prog.nams.get(id, "?")

    def get_arity(self, id: int) -> int:
        return self.prog.aris.get(id, _U64_MAX)

    def link(self, loc: int, lnk: int) -> int:
        return self.heap.link(loc, lnk)

    def alloc(self, size: int) -> int:
        return self.heap.alloc(0, size)

    def free(self, loc: int, size: int) -> None:
        self.heap.free(0, loc, size)

    def collect(self, term: int) -> None:
        self.heap.collect(self.prog.aris, 0, term)