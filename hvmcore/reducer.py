"""The reduction machine: visits, applies rewrite rules and steals work across threads."""

from __future__ import annotations

import threading
import time
from collections.abc import Sequence

from .context import ReduceCtx
from .debug import show_at
from .heap import Heap
from .pointer import Tag, arity_of, get_ext, get_loc, get_tag
from .program import CompiledFunction, InterpretedFunction
from .queues import REDEX_CONT_RET, new_visit
from .rules import app as app_rule
from .rules import dup as dup_rule
from .rules import fun as fun_rule
from .rules import op2 as op2_rule

_NO_HOST = 0xFFFF_FFFF_FFFF_FFFF

_VISIT = "visit"
_APPLY = "apply"
_RETURN = "return"
_BLINK = "blink"
_STEAL = "steal"


class _Halt:
    """Shared count of pending roots; reduction stops when it reaches zero."""

    def __init__(self, value: int) -> None:
        self._value = value
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def add(self, amount: int) -> None:
        with self._lock:
            self._value += amount

    def sub(self, amount: int) -> None:
        with self._lock:
            self._value -= amount

    def abort(self) -> None:
        with self._lock:
            self._value = 0


class _Barrier:
    """A reusable barrier that lets waiters go as soon as reduction has halted."""

    def __init__(self, parties: int) -> None:
        self._parties = parties
        self._done = 0
        self._passes = 0
        self._cond = threading.Condition()

    def wait(self, halt: _Halt) -> None:
        with self._cond:
            current = self._passes
            self._done += 1
            if self._done == self._parties:
                self._done = 0
                self._passes += 1
                self._cond.notify_all()
                return
            while halt.value != 0 and self._passes == current:
                self._cond.wait(0.01)


def _worker(heap: Heap, prog, tids: Sequence[int], halt: _Halt, barrier: _Barrier,
            locs: list[int], root: int, tid: int, full: bool, debug: bool) -> None:
    redex = heap.rbag
    visit = heap.vstk[tid]
    hold = len(tids) <= 1
    seen: set[int] = set()

    if tid == tids[0]:
        cont, host = REDEX_CONT_RET, root
    else:
        cont, host = 0, _NO_HOST

    def show(at: int) -> None:
        barrier.wait(halt)
        locs[tid] = at
        barrier.wait(halt)
        if tid == tids[0]:
            print(f"{show_at(heap, prog, root, locs)}\n----------------")
        barrier.wait(halt)

    def fire(rule, term: int, *extra) -> bool:
        nonlocal cont, host
        ctx = ReduceCtx(heap, prog, tid, hold, term, visit, redex, cont, host)
        result = rule(ctx, *extra)
        cont, host = ctx.cont, ctx.host
        return result

    def enqueue(locations) -> None:
        locations = list(locations)
        if locations:
            halt.add(len(locations))
            for loc in locations:
                visit.push(new_visit(loc, hold, cont))

    state = _VISIT if host != _NO_HOST else _STEAL
    while True:
        if state == _VISIT:
            term = heap.load_ptr(host)
            if debug:
                show(host)
            tag = get_tag(term)
            if tag == Tag.APP:
                state = _VISIT if fire(app_rule.visit, term) else _BLINK
            elif tag in (Tag.DP0, Tag.DP1):
                if not heap.acquire_lock(tid, term):
                    time.sleep(0)
                elif term != heap.load_ptr(host):
                    heap.release_lock(tid, term)
                else:
                    state = _VISIT if fire(dup_rule.visit, term) else _BLINK
            elif tag == Tag.OP2:
                state = _VISIT if fire(op2_rule.visit, term) else _BLINK
            elif tag in (Tag.FUN, Tag.CTR):
                function = prog.funs.get(get_ext(term))
                if isinstance(function, InterpretedFunction):
                    moved = fire(fun_rule.visit, term, function.visit.strict_idx)
                elif isinstance(function, CompiledFunction):
                    moved = fire(function.visit, term)
                else:
                    moved = False
                state = _VISIT if moved else _APPLY
            else:
                state = _APPLY

        elif state == _APPLY:
            term = heap.load_ptr(host)
            if debug:
                show(host)
            tag = get_tag(term)
            if tag == Tag.APP:
                done = fire(app_rule.apply, term)
            elif tag in (Tag.DP0, Tag.DP1):
                done = fire(dup_rule.apply, term)
                heap.release_lock(tid, term)
            elif tag == Tag.OP2:
                done = fire(op2_rule.apply, term)
            elif tag in (Tag.FUN, Tag.CTR):
                fid = get_ext(term)
                function = prog.funs.get(fid)
                if isinstance(function, InterpretedFunction):
                    done = fire(fun_rule.apply, term, fid, function.visit, function.apply)
                elif isinstance(function, CompiledFunction):
                    done = fire(function.apply, term)
                else:
                    done = False
            else:
                done = False
            state = _VISIT if done else _RETURN

        elif state == _RETURN:
            if cont == REDEX_CONT_RET:
                halt.sub(1)
                if full and host not in seen:
                    seen.add(host)
                    term = heap.load_ptr(host)
                    tag = get_tag(term)
                    if tag == Tag.LAM:
                        enqueue([get_loc(term, 1)])
                    elif tag in (Tag.APP, Tag.SUP):
                        enqueue([get_loc(term, 0), get_loc(term, 1)])
                    elif tag in (Tag.DP0, Tag.DP1):
                        enqueue([get_loc(term, 2)])
                    elif tag in (Tag.CTR, Tag.FUN):
                        enqueue(get_loc(term, i) for i in range(arity_of(prog.aris, term)))
                state = _BLINK
            else:
                parent = redex.complete(cont)
                if parent is not None:
                    cont, host = parent
                    state = _APPLY
                else:
                    state = _BLINK

        elif state == _BLINK:
            popped = visit.pop()
            if popped is not None:
                cont, host = popped
                state = _VISIT
            else:
                state = _STEAL

        else:
            if debug:
                show(_NO_HOST)
            if halt.value == 0:
                return
            for victim in tids:
                if victim == tid:
                    continue
                stolen = heap.vstk[victim].steal()
                if stolen is not None:
                    cont, host = stolen
                    state = _VISIT
                    break
            else:
                time.sleep(0)


def reduce(heap: Heap, prog, tids: Sequence[int], root: int,
           full: bool = False, debug: bool = False) -> int:
    """Reduce the term at ``root`` to weak head normal form (or further, if ``full``).

    One worker runs per thread id in ``tids``; returns the pointer left at ``root``.
    """
    tids = list(tids)
    if not tids:
        raise ValueError("reduction needs at least one thread id")
    halt = _Halt(1)
    barrier = _Barrier(len(tids))
    locs = [_NO_HOST] * (max(tids) + 1)

    if len(tids) == 1:
        _worker(heap, prog, tids, halt, barrier, locs, root, tids[0], full, debug)
        return heap.load_ptr(root)

    errors: list[BaseException] = []

    def run(tid: int) -> None:
        try:
            _worker(heap, prog, tids, halt, barrier, locs, root, tid, full, debug)
        except BaseException as exc:  # re-raised in the calling thread
            errors.append(exc)
            halt.abort()

    threads = [threading.Thread(target=run, args=(tid,), daemon=True) for tid in tids]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    if errors:
        raise errors[0]
    return heap.load_ptr(root)


def normalize(heap: Heap, prog, tids: Sequence[int], host: int, debug: bool = False) -> int:
    """Fully reduce the term at ``host``, repeating until no rewrite happens."""
    cost = heap.cost
    while True:
        reduce(heap, prog, tids, host, True, debug)
        new_cost = heap.cost
        if new_cost == cost:
            break
        cost = new_cost
    return heap.load_ptr(host)