"""The redex bag and the work-stealing visit queue used by the reducer."""

import threading
from typing import Optional, Tuple

REDEX_BAG_SIZE = 1 << 26
REDEX_CONT_RET = 0x3FFFFFF  # signals to return
VISIT_QUEUE_SIZE = 1 << 24

_U64 = 0xFFFF_FFFF_FFFF_FFFF


# A redex packs 32 bits of host, 26 bits of continuation and 6 bits of pending count.
def new_redex(host: int, cont: int, left: int) -> int:
    return (host << 32) | (cont << 6) | left


def get_redex_host(redex: int) -> int:
    return redex >> 32


def get_redex_cont(redex: int) -> int:
    return (redex >> 6) & 0x3FFFFFF


def get_redex_left(redex: int) -> int:
    return redex & 0x3F


class RedexBag:
    """Shared bag of pending redexes: insert, and complete when all children are done."""

    def __init__(self, tids: int) -> None:
        self.tids = tids
        self._next = [0] * tids
        self._data: dict[int, int] = {}
        self._lock = threading.Lock()

    def insert(self, tid: int, redex: int) -> int:
        """Store a redex in the first free slot at or after this thread's cursor."""
        with self._lock:
            while True:
                index = self._next[tid]
                self._next[tid] += 1
                if index + 2 >= REDEX_BAG_SIZE:
                    self._next[tid] = 0
                if self._data.get(index, 0) == 0:
                    self._data[index] = redex
                    return index

    def complete(self, index: int) -> Optional[Tuple[int, int]]:
        """Mark one child done; return ``(cont, host)`` once none are left."""
        with self._lock:
            redex = self._data.get(index, 0)
            self._data[index] = (redex - 1) & _U64
            if get_redex_left(redex) == 1:
                del self._data[index]
                return get_redex_cont(redex), get_redex_host(redex)
            return None


# A visit packs 32 bits of host, a hold bit, and the continuation.
def new_visit(host: int, hold: bool, cont: int) -> int:
    return (host << 32) | (0x80000000 if hold else 0) | cont


def get_visit_host(visit: int) -> int:
    return visit >> 32


def get_visit_hold(visit: int) -> bool:
    return (visit >> 31) & 1 == 1


def get_visit_cont(visit: int) -> int:
    return visit & 0x3FFFFFF


class VisitQueue:
    """Work queue: the owner pushes and pops at the back, others steal from the front."""

    def __init__(self) -> None:
        self.init = 0
        self.last = 0
        self._data: dict[int, int] = {}
        self._lock = threading.Lock()

    def push(self, value: int) -> None:
        with self._lock:
            index = self.last
            self.last += 1
            self._data[index] = value

    def pop(self) -> Optional[Tuple[int, int]]:
        """Take the most recent visit as ``(cont, host)``, or None if empty."""
        with self._lock:
            while self.last > 0:
                last = self.last
                self.last -= 1
                self.init = min(self.init, last - 1)
                visit = self._data.pop(last - 1, 0)
                if visit != 0:
                    return get_visit_cont(visit), get_visit_host(visit)
            return None

    def steal(self) -> Optional[Tuple[int, int]]:
        """Take the oldest visit unless it is held, as ``(cont, host)``."""
        with self._lock:
            index = self.init
            visit = self._data.get(index, 0)
            if visit != 0 and not get_visit_hold(visit):
                del self._data[index]
                self.init += 1
                return get_visit_cont(visit), get_visit_host(visit)
            return None