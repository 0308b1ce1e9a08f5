"""Rewrite rules for numeric operations: OP2-U60, OP2-F60, OP2-SUP-0 and OP2-SUP-1."""

from .. import f60, u60
from ..context import ReduceCtx
from ..pointer import (
    Oper,
    Tag,
    dp0,
    dp1,
    f6o,
    get_ext,
    get_loc,
    get_num,
    get_tag,
    op2,
    sup,
    u6o,
)
from ..queues import new_redex, new_visit

_U60_OPS = {
    Oper.ADD: u60.add,
    Oper.SUB: u60.sub,
    Oper.MUL: u60.mul,
    Oper.DIV: u60.div,
    Oper.MOD: u60.mod,
    Oper.AND: u60.and_,
    Oper.OR: u60.or_,
    Oper.XOR: u60.xor,
    Oper.SHL: u60.shl,
    Oper.SHR: u60.shr,
    Oper.LTN: u60.ltn,
    Oper.LTE: u60.lte,
    Oper.EQL: u60.eql,
    Oper.GTE: u60.gte,
    Oper.GTN: u60.gtn,
    Oper.NEQ: u60.neq,
}

_F60_OPS = {
    Oper.ADD: f60.add,
    Oper.SUB: f60.sub,
    Oper.MUL: f60.mul,
    Oper.DIV: f60.div,
    Oper.MOD: f60.mod,
    Oper.AND: f60.and_,
    Oper.OR: f60.or_,
    Oper.XOR: f60.xor,
    Oper.SHL: f60.shl,
    Oper.SHR: f60.shr,
    Oper.LTN: f60.ltn,
    Oper.LTE: f60.lte,
    Oper.EQL: f60.eql,
    Oper.GTE: f60.gte,
    Oper.GTN: f60.gtn,
    Oper.NEQ: f60.neq,
}


def visit(ctx: ReduceCtx) -> bool:
    """Queue the second operand and descend into the first."""
    goup = ctx.redex.insert(ctx.tid, new_redex(ctx.host, ctx.cont, 2))
    ctx.visit.push(new_visit(get_loc(ctx.term, 1), ctx.hold, goup))
    ctx.cont = goup
    ctx.host = get_loc(ctx.term, 0)
    return True


def _compute(table, oper: int, a: int, b: int) -> int:
    operation = table.get(oper)
    return operation(a, b) if operation is not None else 0


def apply(ctx: ReduceCtx) -> bool:
    """Rewrite the operation at ``ctx.host``; always False, as results need no revisit."""
    heap = ctx.heap
    tid = ctx.tid
    term = ctx.term
    oper = get_ext(term)
    arg0 = heap.load_arg(term, 0)
    arg1 = heap.load_arg(term, 1)
    tag0 = get_tag(arg0)
    tag1 = get_tag(arg1)

    if tag0 == Tag.U60 and tag1 == Tag.U60:
        heap.inc_cost(tid)
        result = _compute(_U60_OPS, oper, get_num(arg0), get_num(arg1))
        heap.link(ctx.host, u6o(result))
        heap.free(tid, get_loc(term, 0), 2)
        return False

    if tag0 == Tag.F60 and tag1 == Tag.F60:
        heap.inc_cost(tid)
        result = _compute(_F60_OPS, oper, get_num(arg0), get_num(arg1))
        heap.link(ctx.host, f6o(result))
        heap.free(tid, get_loc(term, 0), 2)
        return False

    # (+ {a0 a1} b)  ~>  dup b0 b1 = b; {(+ a0 b0) (+ a1 b1)}
    if tag0 == Tag.SUP:
        heap.inc_cost(tid)
        col = get_ext(arg0)
        op20 = get_loc(term, 0)
        op21 = get_loc(arg0, 0)
        let0 = heap.alloc(tid, 3)
        par0 = heap.alloc(tid, 2)
        heap.link(let0 + 2, arg1)
        heap.link(op20 + 1, dp0(col, let0))
        heap.link(op20 + 0, heap.take_arg(arg0, 0))
        heap.link(op21 + 0, heap.take_arg(arg0, 1))
        heap.link(op21 + 1, dp1(col, let0))
        heap.link(par0 + 0, op2(oper, op20))
        heap.link(par0 + 1, op2(oper, op21))
        heap.link(ctx.host, sup(col, par0))
        return False

    # (+ a {b0 b1})  ~>  dup a0 a1 = a; {(+ a0 b0) (+ a1 b1)}
    if tag1 == Tag.SUP:
        heap.inc_cost(tid)
        col = get_ext(arg1)
        op20 = get_loc(term, 0)
        op21 = get_loc(arg1, 0)
        let0 = heap.alloc(tid, 3)
        par0 = heap.alloc(tid, 2)
        heap.link(let0 + 2, arg0)
        heap.link(op20 + 0, dp0(col, let0))
        heap.link(op20 + 1, heap.take_arg(arg1, 0))
        heap.link(op21 + 1, heap.take_arg(arg1, 1))
        heap.link(op21 + 0, dp1(col, let0))
        heap.link(par0 + 0, op2(oper, op20))
        heap.link(par0 + 1, op2(oper, op21))
        heap.link(ctx.host, sup(col, par0))
        return False

    return False