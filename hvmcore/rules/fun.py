"""Rewrite rules for user and built-in functions: strict visits, rule matching, superposition."""

from collections.abc import Mapping, Sequence

from ..body import alloc_body, get_var
from ..context import ReduceCtx, is_whnf
from ..heap import Heap
from ..pointer import (
    Tag,
    arity_of,
    dp0,
    dp1,
    fun,
    get_ext,
    get_loc,
    get_num,
    get_tag,
    sup,
)
from ..queues import new_redex, new_visit

# Range of the built-in HOAS term constructors (Apps.Kind.Term.ct0 .. Apps.Kind.Term.f60).
_KIND_TERM_CT0 = 3
_KIND_TERM_F60 = 21


def visit(ctx: ReduceCtx, sidxs: Sequence[int]) -> bool:
    """Visit the strict arguments that are not yet in weak head normal form."""
    heap = ctx.heap
    pending = [
        get_loc(ctx.term, sidx)
        for sidx in sidxs
        if not is_whnf(heap.load_arg(ctx.term, sidx))
    ]
    if not pending:
        return False
    goup = ctx.redex.insert(ctx.tid, new_redex(ctx.host, ctx.cont, len(pending)))
    for loc in pending[:-1]:
        ctx.visit.push(new_visit(loc, ctx.hold, goup))
    ctx.cont = goup
    ctx.host = pending[-1]
    return True


def _matches(heap: Heap, aris: Mapping[int, int], term: int, i: int, cond: int,
             strict: Sequence[bool], hoas_default: bool) -> bool:
    argi = heap.load_arg(term, i)
    atag = get_tag(argi)
    ctag = get_tag(cond)
    if ctag in (Tag.U60, Tag.F60):
        return atag == ctag and get_num(argi) == get_num(cond)
    if ctag == Tag.CTR:
        return atag in (Tag.CTR, Tag.FUN) and get_ext(argi) == get_ext(cond)
    if ctag == Tag.VAR and strict[i]:
        # A strict argument matched by a variable is a default case.
        if hoas_default:
            is_num = atag in (Tag.U60, Tag.F60)
            is_ctr = atag == Tag.CTR and arity_of(aris, argi) == 0
            is_hoas = atag == Tag.CTR and _KIND_TERM_CT0 <= get_ext(argi) <= _KIND_TERM_F60
            return is_num or is_ctr or is_hoas
        return atag in (Tag.CTR, Tag.U60, Tag.F60)
    return True


def apply(ctx: ReduceCtx, fid: int, visit_obj, apply_obj) -> bool:
    """Apply the first matching rule of function ``fid``; True when something was rewritten.

    ``visit_obj`` provides ``strict_map``; ``apply_obj`` provides ``rules``.
    """
    heap = ctx.heap
    aris = ctx.prog.aris
    tid = ctx.tid
    term = ctx.term
    strict = visit_obj.strict_map

    for n, is_strict in enumerate(strict):
        argn = heap.load_arg(term, n)
        if is_strict and get_tag(argn) == Tag.SUP:
            superpose(heap, aris, tid, ctx.host, term, argn, n)
            return True

    last = len(apply_obj.rules) - 1
    for r, rule in enumerate(apply_obj.rules):
        hoas_default = rule.hoas and r != last
        if not all(
            _matches(heap, aris, term, i, cond, strict, hoas_default)
            for i, cond in enumerate(rule.cond)
        ):
            continue
        heap.inc_cost(tid)
        done = alloc_body(heap, tid, term, rule.vars, rule.body)
        heap.link(ctx.host, done)
        for var_ in rule.vars:
            if var_.erase:
                heap.collect(aris, tid, get_var(heap, term, var_))
        for i, arity in rule.free:
            heap.free(tid, get_loc(heap.load_arg(term, i), 0), arity)
        heap.free(tid, get_loc(term, 0), arity_of(aris, term))
        return True

    return False


def superpose(heap: Heap, aris: Mapping[int, int], tid: int, host: int,
              term: int, argn: int, n: int) -> int:
    """Split a call whose ``n``-th argument is a superposition into a superposition of calls."""
    heap.inc_cost(tid)
    arit = arity_of(aris, term)
    func = get_ext(term)
    col = get_ext(argn)
    fun0 = get_loc(term, 0)
    fun1 = heap.alloc(tid, arit)
    par0 = get_loc(argn, 0)
    for i in range(arit):
        if i != n:
            leti = heap.alloc(tid, 3)
            argi = heap.take_arg(term, i)
            heap.link(fun0 + i, dp0(col, leti))
            heap.link(fun1 + i, dp1(col, leti))
            heap.link(leti + 2, argi)
        else:
            heap.link(fun0 + i, heap.take_arg(argn, 0))
            heap.link(fun1 + i, heap.take_arg(argn, 1))
    heap.link(par0 + 0, fun(func, fun0))
    heap.link(par0 + 1, fun(func, fun1))
    done = sup(col, par0)
    heap.link(host, done)
    return done