"""Built-in symbols known to every program, and the native rules of the compiled ones."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Callable, Optional

from .body import make_string
from .context import ReduceCtx, is_whnf
from .pointer import Tag, app, ctr, get_loc, get_num, get_tag
from .queues import new_redex
from .rules.fun import superpose

RuleFn = Callable[[ReduceCtx], bool]

STRING_NIL = 0
STRING_CONS = 1
BOTH = 2
KIND_TERM_CT0 = 3
KIND_TERM_CTG = 19
KIND_TERM_U60 = 20
KIND_TERM_F60 = 21
U60_IF = 22
U60_SWAP = 23
HVM_LOG = 24
HVM_QUERY = 25
HVM_PRINT = 26
HVM_SLEEP = 27
HVM_STORE = 28
HVM_LOAD = 29


@dataclass(frozen=True)
class Precomp:
    """A built-in symbol: its id, name, strictness map and, if compiled, its rules."""

    id: int
    name: str
    smap: tuple[bool, ...]
    visit: Optional[RuleFn] = None
    apply: Optional[RuleFn] = None

    @property
    def arity(self) -> int:
        return len(self.smap)

    @property
    def compiled(self) -> bool:
        return self.visit is not None and self.apply is not None


def no_visit(ctx: ReduceCtx) -> bool:
    """A visit that never descends into arguments."""
    return False


def _visit_condition(ctx: ReduceCtx) -> bool:
    if is_whnf(ctx.heap.load_arg(ctx.term, 0)):
        return False
    ctx.cont = ctx.redex.insert(ctx.tid, new_redex(ctx.host, ctx.cont, 1))
    ctx.host = get_loc(ctx.term, 0)
    return True


# Data.U60.if (cond) (if_t) (if_f)


def u60_if_visit(ctx: ReduceCtx) -> bool:
    """Reduce the condition first."""
    return _visit_condition(ctx)


def u60_if_apply(ctx: ReduceCtx) -> bool:
    """Select the second argument on a non-zero condition, the third on zero."""
    heap = ctx.heap
    tid = ctx.tid
    term = ctx.term
    arg0 = heap.load_arg(term, 0)
    arg1 = heap.load_arg(term, 1)
    arg2 = heap.load_arg(term, 2)
    if get_tag(arg0) == Tag.SUP:
        superpose(heap, ctx.prog.aris, tid, ctx.host, term, arg0, 0)
    if get_tag(arg0) != Tag.U60:
        return False
    heap.inc_cost(tid)
    done, dropped = (arg2, arg1) if get_num(arg0) == 0 else (arg1, arg2)
    heap.link(ctx.host, done)
    heap.collect(ctx.prog.aris, tid, dropped)
    heap.free(tid, get_loc(term, 0), 3)
    return True


# Data.U60.swap (cond) (a) (b)


def u60_swap_visit(ctx: ReduceCtx) -> bool:
    """Reduce the condition first."""
    return _visit_condition(ctx)


def u60_swap_apply(ctx: ReduceCtx) -> bool:
    """Build ``(Both a b)`` on a zero condition and ``(Both b a)`` otherwise."""
    heap = ctx.heap
    tid = ctx.tid
    term = ctx.term
    arg0 = heap.load_arg(term, 0)
    arg1 = heap.load_arg(term, 1)
    arg2 = heap.load_arg(term, 2)
    if get_tag(arg0) == Tag.SUP:
        superpose(heap, ctx.prog.aris, tid, ctx.host, term, arg0, 0)
    if get_tag(arg0) != Tag.U60:
        return False
    heap.inc_cost(tid)
    first, second = (arg1, arg2) if get_num(arg0) == 0 else (arg2, arg1)
    node = heap.alloc(tid, 2)
    heap.link(node, first)
    heap.link(node + 1, second)
    heap.link(ctx.host, ctr(BOTH, node))
    heap.free(tid, get_loc(term, 0), 3)
    return True


# Apps.HVM.query (cont: String -> Term)


def _read_input() -> str:
    line = sys.stdin.readline()
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def hvm_query_apply(ctx: ReduceCtx) -> bool:
    """Read a line from standard input and apply the continuation to it as a string."""
    heap = ctx.heap
    cont = heap.load_arg(ctx.term, 0)
    text = make_string(heap, ctx.tid, _read_input())
    node = heap.alloc(ctx.tid, 2)
    heap.link(node, cont)
    heap.link(node + 1, text)
    heap.free(0, get_loc(ctx.term, 0), 1)
    heap.link(ctx.host, app(node))
    return True


def _lazy(count: int) -> tuple[bool, ...]:
    return (False,) * count


_KIND_CTRS = tuple(
    Precomp(KIND_TERM_CT0 + i, f"Apps.Kind.Term.ct{suffix}", _lazy(i + 2))
    for i, suffix in enumerate("0123456789ABCDEFG")
)

# The remaining I/O built-ins are plain symbols in this runtime.
PRECOMP: tuple[Precomp, ...] = (
    Precomp(STRING_NIL, "Data.String.nil", _lazy(0)),
    Precomp(STRING_CONS, "Data.String.cons", _lazy(2)),
    Precomp(BOTH, "Both", _lazy(2)),
    *_KIND_CTRS,
    Precomp(KIND_TERM_U60, "Apps.Kind.Term.u60", _lazy(2)),
    Precomp(KIND_TERM_F60, "Apps.Kind.Term.f60", _lazy(2)),
    Precomp(U60_IF, "Data.U60.if", (True, False, False), u60_if_visit, u60_if_apply),
    Precomp(U60_SWAP, "Data.U60.swap", (True, False, False), u60_swap_visit, u60_swap_apply),
    Precomp(HVM_LOG, "Apps.HVM.log", _lazy(2)),
    Precomp(HVM_QUERY, "Apps.HVM.query", _lazy(1), no_visit, hvm_query_apply),
    Precomp(HVM_PRINT, "Apps.HVM.print", _lazy(2)),
    Precomp(HVM_SLEEP, "Apps.HVM.sleep", _lazy(2)),
    Precomp(HVM_STORE, "Apps.HVM.store", _lazy(3)),
    Precomp(HVM_LOAD, "Apps.HVM.load", _lazy(2)),
)

PRECOMP_COUNT = len(PRECOMP)