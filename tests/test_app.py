from types import SimpleNamespace

from hvmcore.body import CoreApp, CoreLam, CoreSup, CoreU60, CoreVar, alloc_closed_core
from hvmcore.context import ReduceCtx
from hvmcore.debug import validate_heap
from hvmcore.heap import Heap
from hvmcore.pointer import Tag, get_ext, get_loc, get_tag, u6o
from hvmcore.queues import REDEX_CONT_RET
from hvmcore.rules import app


def make_ctx(heap, prog, host, cont=REDEX_CONT_RET):
    return ReduceCtx(
        heap=heap, prog=prog, tid=0, hold=True, term=heap.load_ptr(host),
        visit=heap.vstk[0], redex=heap.rbag, cont=cont, host=host,
    )


def setup(core):
    heap = Heap(64, 1)
    prog = SimpleNamespace(aris={}, nams={})
    host = alloc_closed_core(heap, 0, core)
    return heap, prog, host


def live(heap):
    return [cell for cell in heap.node if cell]


def test_app_lam_substitutes_argument():
    heap, prog, host = setup(CoreApp(CoreLam(False, 0, CoreVar(0)), CoreU60(5)))
    assert app.apply(make_ctx(heap, prog, host)) is True
    assert heap.load_ptr(host) == u6o(5)
    assert live(heap) == [u6o(5)]
    assert heap.cost == 1


def test_app_lam_with_erased_variable_discards_argument():
    heap, prog, host = setup(CoreApp(CoreLam(True, 0, CoreU60(7)), CoreU60(3)))
    assert app.apply(make_ctx(heap, prog, host)) is True
    assert heap.load_ptr(host) == u6o(7)
    assert live(heap) == [u6o(7)]


def test_app_sup_distributes_over_superposition():
    core = CoreApp(
        CoreSup(CoreLam(False, 0, CoreVar(0)), CoreLam(False, 0, CoreVar(0))),
        CoreU60(1),
    )
    heap, prog, host = setup(core)
    sup_ptr = heap.load_arg(heap.load_ptr(host), 0)
    assert app.apply(make_ctx(heap, prog, host)) is False
    root = heap.load_ptr(host)
    assert get_tag(root) == Tag.SUP
    assert get_ext(root) == get_ext(sup_ptr)
    left = heap.load_arg(root, 0)
    right = heap.load_arg(root, 1)
    assert get_tag(left) == Tag.APP and get_tag(right) == Tag.APP
    assert get_tag(heap.load_arg(left, 1)) == Tag.DP0
    assert get_tag(heap.load_arg(right, 1)) == Tag.DP1
    assert get_loc(heap.load_arg(left, 1), 0) == get_loc(heap.load_arg(right, 1), 0)
    validate_heap(heap)
    assert heap.cost == 1


def test_app_on_non_function_is_left_alone():
    heap, prog, host = setup(CoreApp(CoreU60(2), CoreU60(3)))
    before = list(heap.node)
    assert app.apply(make_ctx(heap, prog, host)) is False
    assert heap.node == before
    assert heap.cost == 0


def test_visit_descends_into_function_and_registers_redex():
    heap, prog, host = setup(CoreApp(CoreLam(False, 0, CoreVar(0)), CoreU60(5)))
    ctx = make_ctx(heap, prog, host)
    term = ctx.term
    assert app.visit(ctx) is True
    assert ctx.host == get_loc(term, 0)
    assert heap.rbag.complete(ctx.cont) == (REDEX_CONT_RET, host)