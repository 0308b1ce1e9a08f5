"""The node heap: a flat array of tagged pointers with allocation, linking and collection."""

import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass

from .pointer import Tag, arity_of, era, get_loc, get_tag
from .pointer import arg as _arg_ptr
from .pointer import var as _var_ptr
from .queues import RedexBag, VisitQueue

LOCK_OPEN = 0xFF


@dataclass
class LocalVars:
    """Per-thread allocation cursor and statistics."""

    tid: int
    next: int
    amin: int
    amax: int
    dups: int
    used: int = 0
    cost: int = 0


class Heap:
    """Shared memory of pointer cells, split into one allocation area per thread."""

    def __init__(self, size: int, tids: int) -> None:
        if tids < 1:
            raise ValueError("a heap needs at least one thread")
        if size < 0:
            raise ValueError("heap size must not be negative")
        self.tids = tids
        self.node = [0] * size
        self.lock = bytearray([LOCK_OPEN]) * size
        self.lvar = [
            LocalVars(
                tid=tid,
                next=size // tids * tid,
                amin=size // tids * tid,
                amax=size // tids * (tid + 1),
                dups=(1 << 28) // tids * tid,
            )
            for tid in range(tids)
        ]
        self.vstk = [VisitQueue() for _ in range(tids)]
        self.rbag = RedexBag(tids)
        self._mutex = threading.Lock()

    @property
    def cost(self) -> int:
        """Total number of rewrites performed by all threads."""
        return sum(lvar.cost for lvar in self.lvar)

    @property
    def used(self) -> int:
        """Total number of cells counted as used by all threads."""
        return sum(lvar.used for lvar in self.lvar)

    # Pointers

    def load_ptr(self, loc: int) -> int:
        return self.node[loc]

    def take_ptr(self, loc: int) -> int:
        """Read the pointer at ``loc`` and clear the cell."""
        with self._mutex:
            ptr = self.node[loc]
            self.node[loc] = 0
        return ptr

    def load_arg(self, term: int, arg: int) -> int:
        return self.node[get_loc(term, arg)]

    def take_arg(self, term: int, arg: int) -> int:
        return self.take_ptr(get_loc(term, arg))

    def move_ptr(self, old_loc: int, new_loc: int) -> int:
        return self.link(new_loc, self.take_ptr(old_loc))

    def _bind(self, loc: int, ptr: int) -> None:
        tag = get_tag(ptr)
        if tag <= Tag.VAR:
            self.node[get_loc(ptr, tag & 0x01)] = _arg_ptr(loc)

    def link(self, loc: int, ptr: int) -> int:
        """Write ``ptr`` at ``loc``, pointing its binder back at ``loc`` for variables."""
        self.node[loc] = ptr
        self._bind(loc, ptr)
        return ptr

    # Allocator

    def alloc(self, tid: int, arity: int) -> int:
        """Find ``arity`` consecutive empty cells in the thread's area and return the first."""
        if arity == 0:
            return 0
        lvar = self.lvar[tid]
        limit = 2 * (lvar.amax - lvar.amin) + arity
        length = 0
        for _ in range(limit + 1):
            length = length + 1 if self.node[lvar.next] == 0 else 0
            lvar.next += 1
            if lvar.next >= lvar.amax:
                length = 0
                lvar.next = lvar.amin
            if length == arity:
                return lvar.next - length
        raise MemoryError(f"no room for {arity} cells in the area of thread {tid}")

    def free(self, tid: int, loc: int, arity: int) -> None:
        self.node[loc:loc + arity] = [0] * arity

    def inc_cost(self, tid: int) -> None:
        self.lvar[tid].cost += 1

    def gen_dup(self, tid: int) -> int:
        """Return a fresh duplication label for this thread."""
        lvar = self.lvar[tid]
        label = lvar.dups & 0xFFF_FFFF
        lvar.dups += 1
        return label

    # Substitution

    def atomic_relink(self, loc: int, old: int, neo: int) -> bool:
        """Replace ``old`` by ``neo`` at ``loc`` if it is still there; report success."""
        with self._mutex:
            if self.node[loc] != old:
                return False
            self.node[loc] = neo
            self._bind(loc, neo)
        return True

    def atomic_subst(self, arit: Mapping[int, int], tid: int, var: int, val: int) -> None:
        """Substitute the variable ``var`` by ``val``, collecting ``val`` if unused."""
        while True:
            arg_ptr = self.load_ptr(get_loc(var, get_tag(var) & 0x01))
            tag = get_tag(arg_ptr)
            if tag == Tag.ARG:
                if self.tids == 1:
                    self.link(get_loc(arg_ptr, 0), val)
                    return
                if self.atomic_relink(get_loc(arg_ptr, 0), var, val):
                    return
                continue
            if tag == Tag.ERA:
                self.collect(arit, tid, val)
                return
            if self.tids == 1:
                raise RuntimeError(
                    f"binder of variable {var:#x} holds neither an argument nor an eraser"
                )
            time.sleep(0)

    # Locks

    def acquire_lock(self, tid: int, term: int) -> bool:
        """Try to lock the node of ``term`` for this thread."""
        loc = get_loc(term, 0)
        with self._mutex:
            if self.lock[loc] != LOCK_OPEN:
                return False
            self.lock[loc] = tid & 0xFF
        return True

    def release_lock(self, tid: int, term: int) -> None:
        self.lock[get_loc(term, 0)] = LOCK_OPEN

    # Garbage collection

    def collect(self, arit: Mapping[int, int], tid: int, term: int) -> None:
        """Free an unreachable term and everything it owns."""
        pending: list[int] = []
        nxt = term
        while True:
            term = nxt
            tag = get_tag(term)
            if tag == Tag.DP0:
                self.link(get_loc(term, 0), era())
                if self.acquire_lock(tid, term):
                    if get_tag(self.load_arg(term, 1)) == Tag.ERA:
                        pending.append(self.take_arg(term, 2))
                        self.free(tid, get_loc(term, 0), 3)
                    self.release_lock(tid, term)
            elif tag == Tag.DP1:
                self.link(get_loc(term, 1), era())
                if self.acquire_lock(tid, term):
                    if get_tag(self.load_arg(term, 0)) == Tag.ERA:
                        pending.append(self.take_arg(term, 2))
                        self.free(tid, get_loc(term, 0), 3)
                    self.release_lock(tid, term)
            elif tag == Tag.VAR:
                self.link(get_loc(term, 0), era())
            elif tag == Tag.LAM:
                self.atomic_subst(arit, tid, _var_ptr(get_loc(term, 0)), era())
                nxt = self.take_arg(term, 1)
                self.free(tid, get_loc(term, 0), 2)
                continue
            elif tag in (Tag.APP, Tag.SUP, Tag.OP2):
                pending.append(self.take_arg(term, 0))
                nxt = self.take_arg(term, 1)
                self.free(tid, get_loc(term, 0), 2)
                continue
            elif tag in (Tag.CTR, Tag.FUN):
                arity = arity_of(arit, term)
                if arity > 0:
                    pending.extend(self.take_arg(term, i) for i in range(arity - 1))
                    nxt = self.take_arg(term, arity - 1)
                    self.free(tid, get_loc(term, 0), arity)
                    continue
            if not pending:
                break
            nxt = pending.pop()