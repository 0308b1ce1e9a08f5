"""Rewrite rules for applications: APP-LAM and APP-SUP."""

from ..context import ReduceCtx
from ..pointer import Tag, app, dp0, dp1, get_ext, get_loc, get_tag, sup, var
from ..queues import new_redex


def visit(ctx: ReduceCtx) -> bool:
    """Descend into the function position, remembering the application as a redex."""
    ctx.cont = ctx.redex.insert(ctx.tid, new_redex(ctx.host, ctx.cont, 1))
    ctx.host = get_loc(ctx.term, 0)
    return True


def apply(ctx: ReduceCtx) -> bool:
    """Rewrite the application at ``ctx.host``; True when the result must be revisited."""
    heap = ctx.heap
    term = ctx.term
    arg0 = heap.load_arg(term, 0)
    tag = get_tag(arg0)

    # (λx(body) a)  ~>  x <- a; body
    if tag == Tag.LAM:
        heap.inc_cost(ctx.tid)
        heap.atomic_subst(ctx.prog.aris, ctx.tid, var(get_loc(arg0, 0)), heap.take_arg(term, 1))
        heap.link(ctx.host, heap.take_arg(arg0, 1))
        heap.free(ctx.tid, get_loc(term, 0), 2)
        heap.free(ctx.tid, get_loc(arg0, 0), 2)
        return True

    # ({a b} c)  ~>  dup x0 x1 = c; {(a x0) (b x1)}
    if tag == Tag.SUP:
        heap.inc_cost(ctx.tid)
        col = get_ext(arg0)
        app0 = get_loc(term, 0)
        app1 = get_loc(arg0, 0)
        let0 = heap.alloc(ctx.tid, 3)
        par0 = heap.alloc(ctx.tid, 2)
        heap.link(let0 + 2, heap.take_arg(term, 1))
        heap.link(app0 + 1, dp0(col, let0))
        heap.link(app0 + 0, heap.take_arg(arg0, 0))
        heap.link(app1 + 0, heap.take_arg(arg0, 1))
        heap.link(app1 + 1, dp1(col, let0))
        heap.link(par0 + 0, app(app0))
        heap.link(par0 + 1, app(app1))
        heap.link(ctx.host, sup(col, par0))
        return False

    return False