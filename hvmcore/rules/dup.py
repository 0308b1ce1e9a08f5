"""Rewrite rules for duplications: DUP-LAM, DUP-SUP, DUP-U60, DUP-F60, DUP-CTR, DUP-ERA."""

from ..context import ReduceCtx
from ..pointer import (
    Tag,
    arity_of,
    ctr,
    dp0,
    dp1,
    era,
    get_ext,
    get_loc,
    get_tag,
    lam,
    sup,
    var,
)
from ..queues import new_redex


def visit(ctx: ReduceCtx) -> bool:
    """Descend into the duplicated expression, remembering the duplication as a redex."""
    ctx.cont = ctx.redex.insert(ctx.tid, new_redex(ctx.host, ctx.cont, 1))
    ctx.host = get_loc(ctx.term, 2)
    return True


def apply(ctx: ReduceCtx) -> bool:
    """Rewrite the duplication reached through ``ctx.term``; True when it fired."""
    heap = ctx.heap
    aris = ctx.prog.aris
    tid = ctx.tid
    term = ctx.term
    node = get_loc(term, 0)
    arg0 = heap.load_arg(term, 2)
    tcol = get_ext(term)
    tag = get_tag(arg0)

    # dup r s = λx(f)  ~>  dup f0 f1 = f; r <- λx0(f0); s <- λx1(f1); x <- {x0 x1}
    if tag == Tag.LAM:
        heap.inc_cost(tid)
        let0 = heap.alloc(tid, 3)
        par0 = heap.alloc(tid, 2)
        lam0 = heap.alloc(tid, 2)
        lam1 = heap.alloc(tid, 2)
        heap.link(let0 + 2, heap.take_arg(arg0, 1))
        heap.link(par0 + 1, var(lam1))
        heap.link(par0 + 0, var(lam0))
        heap.link(lam0 + 1, dp0(tcol, let0))
        heap.link(lam1 + 1, dp1(tcol, let0))
        heap.atomic_subst(aris, tid, var(get_loc(arg0, 0)), sup(tcol, par0))
        heap.atomic_subst(aris, tid, dp0(tcol, node), lam(lam0))
        heap.atomic_subst(aris, tid, dp1(tcol, node), lam(lam1))
        heap.link(ctx.host, lam(lam0 if get_tag(term) == Tag.DP0 else lam1))
        heap.free(tid, node, 3)
        heap.free(tid, get_loc(arg0, 0), 2)
        return True

    # dup x y = {a b}
    if tag == Tag.SUP:
        heap.inc_cost(tid)
        if tcol == get_ext(arg0):
            # same label: x <- a; y <- b
            heap.atomic_subst(aris, tid, dp0(tcol, node), heap.take_arg(arg0, 0))
            heap.atomic_subst(aris, tid, dp1(tcol, node), heap.take_arg(arg0, 1))
            heap.free(tid, node, 3)
            heap.free(tid, get_loc(arg0, 0), 2)
            return True
        # other label: x <- {xA xB}; y <- {yA yB}; dup xA yA = a; dup xB yB = b
        par0 = heap.alloc(tid, 2)
        let0 = heap.alloc(tid, 3)
        par1 = get_loc(arg0, 0)
        let1 = heap.alloc(tid, 3)
        heap.link(let0 + 2, heap.take_arg(arg0, 0))
        heap.link(let1 + 2, heap.take_arg(arg0, 1))
        heap.link(par1 + 0, dp1(tcol, let0))
        heap.link(par1 + 1, dp1(tcol, let1))
        heap.link(par0 + 0, dp0(tcol, let0))
        heap.link(par0 + 1, dp0(tcol, let1))
        heap.atomic_subst(aris, tid, dp0(tcol, node), sup(get_ext(arg0), par0))
        heap.atomic_subst(aris, tid, dp1(tcol, node), sup(get_ext(arg0), par1))
        heap.free(tid, node, 3)
        return True

    # dup x y = N  ~>  x <- N; y <- N
    if tag in (Tag.U60, Tag.F60):
        heap.inc_cost(tid)
        heap.atomic_subst(aris, tid, dp0(tcol, node), arg0)
        heap.atomic_subst(aris, tid, dp1(tcol, node), arg0)
        heap.free(tid, node, 3)
        return True

    # dup x y = (K a b ...)  ~>  dup a0 a1 = a; ...; x <- (K a0 ...); y <- (K a1 ...)
    if tag == Tag.CTR:
        heap.inc_cost(tid)
        fnum = get_ext(arg0)
        fari = arity_of(aris, arg0)
        if fari == 0:
            heap.atomic_subst(aris, tid, dp0(tcol, node), ctr(fnum, 0))
            heap.atomic_subst(aris, tid, dp1(tcol, node), ctr(fnum, 0))
            heap.link(ctx.host, ctr(fnum, 0))
            heap.free(tid, node, 3)
        else:
            ctr0 = get_loc(arg0, 0)
            ctr1 = heap.alloc(tid, fari)
            for i in range(fari):
                leti = heap.alloc(tid, 3)
                heap.link(leti + 2, heap.take_arg(arg0, i))
                heap.link(ctr0 + i, dp0(tcol, leti))
                heap.link(ctr1 + i, dp1(tcol, leti))
            heap.atomic_subst(aris, tid, dp0(tcol, node), ctr(fnum, ctr0))
            heap.atomic_subst(aris, tid, dp1(tcol, node), ctr(fnum, ctr1))
            heap.free(tid, node, 3)
        return True

    # dup x y = *  ~>  x <- *; y <- *
    if tag == Tag.ERA:
        heap.inc_cost(tid)
        heap.atomic_subst(aris, tid, dp0(tcol, node), era())
        heap.atomic_subst(aris, tid, dp1(tcol, node), era())
        heap.link(ctx.host, era())
        heap.free(tid, node, 3)
        return True

    return False